"""
Expose the Relecloud API scope on the API app registration
"""

from uuid import UUID

from msgraph.generated.models.api_application import ApiApplication
from msgraph.generated.models.application import Application
from msgraph.generated.models.permission_scope import PermissionScope

from provisioning.errors import ExitCode
from provisioning.retry import poll_until

SCOPE_NAME = "relecloud.api"
SCOPE_ID = UUID("2b8d1e5c-7f3a-4c6e-9a41-0d5f8b3c6e27")


def identifier_uri(client_id: str) -> str:
    return f"api://{client_id}"


def attendee_scope(client_id: str) -> str:
    """Fully qualified scope the front-end requests tokens for"""
    return f"{identifier_uri(client_id)}/{SCOPE_NAME}"


def build_scope_patch(client_id: str) -> Application:
    scope = PermissionScope()
    scope.id = SCOPE_ID
    scope.value = SCOPE_NAME
    scope.type = "Admin"
    scope.is_enabled = True
    scope.admin_consent_display_name = "Access the Relecloud API"
    scope.admin_consent_description = "Allows the front-end to call the Relecloud API on behalf of the signed-in user"

    api = ApiApplication()
    api.oauth2_permission_scopes = [scope]

    application = Application()
    application.identifier_uris = [identifier_uri(client_id)]
    application.api = api
    return application


def find_scope(app, value: str = SCOPE_NAME):
    if app is None or app.api is None:
        return None
    for scope in app.api.oauth2_permission_scopes or []:
        if scope.value == value:
            return scope
    return None


async def expose_api_scope_async(ctx, graph_client, app_object_id: str, client_id: str) -> str:
    """
    PATCH the identifier URI and scope onto the API application, then wait
    for Graph to report them. Returns the scope's permission ID.
    """

    try:
        app_item = graph_client.applications.by_application_id(app_object_id)

        print(f"   Setting identifier URI '{identifier_uri(client_id)}' and scope '{SCOPE_NAME}'...")
        await app_item.patch(build_scope_patch(client_id))

        print(f"   Waiting for scope '{SCOPE_NAME}' to be visible...")
        await poll_until(
            app_item.get,
            lambda app: find_scope(app) is not None,
            description=f"scope '{SCOPE_NAME}'",
            exit_code=ExitCode.SCOPE_NOT_EXPOSED,
            **ctx.retry_options(),
        )

        print(f"   Reading permission ID of scope '{SCOPE_NAME}'...")
        app = await poll_until(
            app_item.get,
            lambda app: find_scope(app) is not None and bool(find_scope(app).id),
            description=f"permission ID of '{SCOPE_NAME}'",
            exit_code=ExitCode.PERMISSION_ID_NOT_FOUND,
            **ctx.retry_options(),
        )
        permission_id = str(find_scope(app).id)

        print(f"   Scope exposed, permission ID: {permission_id}")
        return permission_id

    except Exception as e:
        print(f"   Failed to expose API scope: {str(e)}")
        print(f"   Error type: {type(e).__name__}")
        raise
