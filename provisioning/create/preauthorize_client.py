"""
Pre-authorize the front-end client for the API scope so users are not
prompted for consent
"""

from msgraph.generated.models.api_application import ApiApplication
from msgraph.generated.models.application import Application
from msgraph.generated.models.pre_authorized_application import PreAuthorizedApplication

from provisioning.errors import ExitCode
from provisioning.retry import poll_until


def build_pre_authorization_patch(client_app_id: str, permission_id: str) -> Application:
    pre_authorized = PreAuthorizedApplication()
    pre_authorized.app_id = client_app_id
    pre_authorized.delegated_permission_ids = [permission_id]

    api = ApiApplication()
    api.pre_authorized_applications = [pre_authorized]

    application = Application()
    application.api = api
    return application


def pre_authorized_app_ids(app) -> list:
    if app is None or app.api is None:
        return []
    return [entry.app_id for entry in app.api.pre_authorized_applications or []]


async def preauthorize_client_async(ctx, graph_client, api_object_id: str, client_app_id: str, permission_id: str):
    try:
        app_item = graph_client.applications.by_application_id(api_object_id)

        print(f"   Pre-authorizing client '{client_app_id}' for permission '{permission_id}'...")
        await app_item.patch(build_pre_authorization_patch(client_app_id, permission_id))

        await poll_until(
            app_item.get,
            lambda app: len(pre_authorized_app_ids(app)) > 0,
            description="pre-authorized applications",
            exit_code=ExitCode.CLIENT_NOT_PRE_AUTHORIZED,
            **ctx.retry_options(),
        )
        print(f"   Client pre-authorized")

    except Exception as e:
        print(f"   Failed to pre-authorize client: {str(e)}")
        print(f"   Error type: {type(e).__name__}")
        raise
