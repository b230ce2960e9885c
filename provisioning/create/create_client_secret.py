"""
Azure client secret creation using Microsoft Graph SDK
"""

from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta
from kiota_abstractions.api_error import APIError
from msgraph.generated.applications.item.add_password.add_password_post_request_body import AddPasswordPostRequestBody
from msgraph.generated.models.password_credential import PasswordCredential

from provisioning.errors import ExitCode
from provisioning.retry import poll_until


def secret_end_date(expiry_config: dict, now: datetime = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + relativedelta(
        years=expiry_config.get('EXPIRY_YEARS', 2),
        months=expiry_config.get('EXPIRY_MONTHS', 0),
        days=expiry_config.get('EXPIRY_DAYS', 0)
    )


async def add_password_once(graph_client, app_object_id: str, secret_name: str, end_date: datetime):
    """
    Single addPassword call. Returns the secret text, or None when Graph
    rejects the call because the new application has not propagated yet.
    """

    password_credential = PasswordCredential()
    password_credential.display_name = secret_name
    password_credential.end_date_time = end_date

    body = AddPasswordPostRequestBody()
    body.password_credential = password_credential

    try:
        created_secret = await graph_client.applications.by_application_id(app_object_id).add_password.post(body)
    except APIError as e:
        print(f"   addPassword not accepted yet: {e.response_status_code}")
        return None

    return created_secret.secret_text if created_secret else None


async def create_client_secret_async(ctx, graph_client, app_object_id: str) -> str:
    """
    Issue a client secret for a newly created app registration

    Args:
        ctx: ProvisioningContext carrying the secret name, expiry and retry budget
        graph_client: Microsoft Graph client instance
        app_object_id: Object ID of the app registration

    Returns:
        The client secret value
    """

    try:
        print(f"   Creating client secret '{ctx.secret_name}' for object ID '{app_object_id}'...")

        end_date = secret_end_date(ctx.secret_expiry)
        print(f"   Secret expiration date: {end_date.isoformat()}")

        client_secret_value = await poll_until(
            lambda: add_password_once(graph_client, app_object_id, ctx.secret_name, end_date),
            description="client secret",
            exit_code=ExitCode.CLIENT_SECRET_NOT_ISSUED,
            **ctx.retry_options(),
        )

        print("   Client secret created successfully")
        print(f"   Secret name: {ctx.secret_name}")
        return client_secret_value

    except Exception as e:
        print(f"   Failed to create client secret: {str(e)}")
        print(f"   Error type: {type(e).__name__}")
        raise
