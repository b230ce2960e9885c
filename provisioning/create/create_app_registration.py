"""
Azure App Registration creation using Microsoft Graph SDK
"""

from uuid import uuid4

from kiota_abstractions.api_error import APIError
from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph.generated.applications.applications_request_builder import ApplicationsRequestBuilder
from msgraph.generated.models.app_role import AppRole
from msgraph.generated.models.application import Application
from msgraph.generated.models.implicit_grant_settings import ImplicitGrantSettings
from msgraph.generated.models.web_application import WebApplication

from provisioning.context import AppRegistration
from provisioning.errors import AppCreationError, ExitCode
from provisioning.retry import poll_until

ADMINISTRATOR_ROLE = "Administrator"
SIGN_IN_AUDIENCE = "AzureADMyOrg"


def display_name_filter(display_name: str) -> str:
    # OData string literals escape a single quote by doubling it
    escaped = display_name.replace("'", "''")
    return f"displayName eq '{escaped}'"


async def find_app_registration(graph_client, display_name: str):
    """Return the application whose display name matches exactly, or None"""

    query_params = ApplicationsRequestBuilder.ApplicationsRequestBuilderGetQueryParameters(
        filter=display_name_filter(display_name),
    )
    request_configuration = RequestConfiguration(query_parameters=query_params)

    applications = await graph_client.applications.get(request_configuration=request_configuration)
    for app in applications.value or []:
        if app.display_name == display_name:
            return app
    return None


async def get_application_by_client_id(graph_client, client_id: str):
    """
    Read an application by its client ID. Returns None while Graph still
    answers 404 for a registration that has not propagated yet.
    """

    try:
        return await graph_client.applications_with_app_id(app_id=client_id).get()
    except APIError as e:
        if e.response_status_code == 404:
            return None
        raise


def build_application(display_name: str, host_uri: str, local_uri: str) -> Application:
    """
    Single-tenant web application with an assignable Administrator role,
    redirects for the deployed host and local development, and ID tokens
    """

    administrator = AppRole()
    administrator.id = uuid4()
    administrator.allowed_member_types = ["User"]
    administrator.description = "Relecloud Administrator"
    administrator.display_name = "Relecloud Administrator"
    administrator.is_enabled = True
    administrator.value = ADMINISTRATOR_ROLE

    web = WebApplication()
    web.redirect_uris = [f"{host_uri}/signin-oidc", f"{local_uri}/signin-oidc"]
    web.logout_url = f"{host_uri}/signout-oidc"
    web.implicit_grant_settings = ImplicitGrantSettings()
    web.implicit_grant_settings.enable_id_token_issuance = True

    application = Application()
    application.display_name = display_name
    application.sign_in_audience = SIGN_IN_AUDIENCE
    application.app_roles = [administrator]
    application.web = web
    return application


async def create_app_registration_async(ctx, graph_client, display_name: str, host_uri: str, local_uri: str) -> AppRegistration:
    """
    Create an Azure AD app registration using Microsoft Graph SDK, or reuse
    the one that already carries this display name
    """

    try:
        # Check if app registration already exists
        print(f"   Checking if app registration '{display_name}' already exists...")
        existing = await find_app_registration(graph_client, display_name)

        if existing:
            print(f"   App registration '{display_name}' already exists")
            print(f"   Existing App ID: {existing.app_id}")
            print(f"   Existing Object ID: {existing.id}")
            print(f"   Delete '{display_name}' manually to have it recreated and a new secret issued")
            return AppRegistration(
                display_name=display_name,
                object_id=existing.id,
                client_id=existing.app_id,
            )

        print(f"   App registration '{display_name}' not found, creating new one...")
        application = build_application(display_name, host_uri, local_uri)

        print(f"   Submitting app registration to Microsoft Graph...")
        created_app = await graph_client.applications.post(application)
        client_id = created_app.app_id if created_app else None

        # Creation is never retried, a second POST could leave a duplicate
        if not client_id:
            raise AppCreationError(f"Creating app registration '{display_name}' returned no client ID")
        print(f"   New App ID: {client_id}")

        print(f"   Waiting for the new application to be readable...")
        app = await poll_until(
            lambda: get_application_by_client_id(graph_client, client_id),
            lambda found: found is not None and bool(found.id),
            description=f"object ID of '{display_name}'",
            exit_code=ExitCode.OBJECT_ID_NOT_FOUND,
            **ctx.retry_options(),
        )

        print(f"   App registration created successfully")
        print(f"   New Object ID: {app.id}")
        return AppRegistration(
            display_name=display_name,
            object_id=app.id,
            client_id=client_id,
            created=True,
        )

    except Exception as e:
        print(f"   Failed to create app registration: {str(e)}")
        print(f"   Error type: {type(e).__name__}")
        raise
