"""
Write the app registration identifiers to App Configuration and the
front-end secret to Key Vault
"""

from azure.appconfiguration import ConfigurationSetting

from provisioning.create.expose_api_scope import attendee_scope

FRONT_END_TENANT_ID_KEY = "AzureAd:TenantId"
FRONT_END_CLIENT_ID_KEY = "AzureAd:ClientId"
FRONT_END_SECRET_NAME = "AzureAd--ClientSecret"
ATTENDEE_SCOPE_KEY = "App:RelecloudApi:AttendeeScope"
API_CLIENT_ID_KEY = "Api:AzureAd:ClientId"
API_TENANT_ID_KEY = "Api:AzureAd:TenantId"


def front_end_settings(ctx, front_end) -> dict:
    return {
        FRONT_END_TENANT_ID_KEY: ctx.tenant_id,
        FRONT_END_CLIENT_ID_KEY: front_end.client_id,
    }


def api_settings(ctx, api) -> dict:
    return {
        ATTENDEE_SCOPE_KEY: attendee_scope(api.client_id),
        API_CLIENT_ID_KEY: api.client_id,
        API_TENANT_ID_KEY: ctx.tenant_id,
    }


def write_configuration(ctx, clients, settings: dict):
    settings_client = clients.settings_client(ctx.app_config_endpoint)
    for key, value in settings.items():
        print(f"   Writing '{key}' to App Configuration '{ctx.app_config_name}'")
        settings_client.set_configuration_setting(ConfigurationSetting(key=key, value=value))


def write_front_end_settings(ctx, clients, front_end):
    write_configuration(ctx, clients, front_end_settings(ctx, front_end))

    if not front_end.client_secret:
        print("   No new client secret issued, Key Vault left unchanged")
        return

    print(f"   Writing '{FRONT_END_SECRET_NAME}' to Key Vault '{ctx.key_vault_name}'")
    clients.secret_client(ctx.key_vault_uri).set_secret(FRONT_END_SECRET_NAME, front_end.client_secret)


def write_api_settings(ctx, clients, api):
    write_configuration(ctx, clients, api_settings(ctx, api))
