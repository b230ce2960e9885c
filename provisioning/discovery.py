"""
Look up the resources an azd deployment left in the resource group
"""

from typing import Optional

from provisioning.azd_env import resolve_is_prod
from provisioning.context import ProvisioningContext
from provisioning.errors import ResourceMissingError
from provisioning.retry import DEFAULT_INTERVAL_SECONDS, DEFAULT_MAX_ATTEMPTS

KEY_VAULT_TYPE = "Microsoft.KeyVault/vaults"
APP_CONFIG_TYPE = "Microsoft.AppConfiguration/configurationStores"
SQL_SERVER_TYPE = "Microsoft.Sql/servers"
SERVICE_NAME_TAG = "azd-service-name"


def first_of_type(resources, resource_type: str, prefix: str = "") -> Optional[str]:
    for resource in resources:
        if (resource.type or "").lower() == resource_type.lower() and resource.name.startswith(prefix):
            return resource.name
    return None


def first_tagged(resources, tag_value: str) -> Optional[str]:
    for resource in resources:
        if (resource.tags or {}).get(SERVICE_NAME_TAG) == tag_value:
            return resource.name
    return None


def resolve_tenant_id(clients, subscription_id: str, config: dict) -> str:
    if config.get("TENANT_ID"):
        return config["TENANT_ID"]
    subscription = clients.subscriptions.subscriptions.get(subscription_id)
    return subscription.tenant_id


def discover_environment(
    resource_group: str,
    subscription_id: str,
    clients,
    config: dict,
    azd_values: dict,
    debug: bool = False,
) -> ProvisioningContext:
    """
    Build the provisioning context from what is deployed in the resource group.

    Raises ResourceMissingError when the Key Vault, App Configuration store or
    either web app is absent, since that means the environment was not
    provisioned correctly.
    """

    print(f"   Listing resources in '{resource_group}'...")
    resources = list(clients.resources.resources.list_by_resource_group(resource_group))
    print(f"   Found {len(resources)} resources")

    key_vault_name = first_of_type(resources, KEY_VAULT_TYPE, config.get("KEY_VAULT_PREFIX", "rc-"))
    if not key_vault_name:
        raise ResourceMissingError(
            f"Could not find a Key Vault in '{resource_group}'; the environment was not provisioned correctly"
        )
    key_vault_uri = clients.key_vaults.vaults.get(resource_group, key_vault_name).properties.vault_uri
    print(f"   Key Vault: {key_vault_name}")

    app_config_name = first_of_type(resources, APP_CONFIG_TYPE)
    if not app_config_name:
        raise ResourceMissingError(f"Could not find an App Configuration store in '{resource_group}'")
    app_config_endpoint = clients.app_configs.configuration_stores.get(resource_group, app_config_name).endpoint
    print(f"   App Configuration: {app_config_name}")

    front_end_web_app_name = first_tagged(resources, config.get("FRONT_END_SERVICE_TAG", "web"))
    api_web_app_name = first_tagged(resources, config.get("API_SERVICE_TAG", "api"))
    if not front_end_web_app_name or not api_web_app_name:
        raise ResourceMissingError(f"Could not find the front-end and API web apps in '{resource_group}'")
    print(f"   Front-end web app: {front_end_web_app_name}")
    print(f"   API web app: {api_web_app_name}")

    sql_server_name = first_of_type(resources, SQL_SERVER_TYPE)
    print(f"   SQL server: {sql_server_name or 'Not found'}")

    tenant_id = resolve_tenant_id(clients, subscription_id, config)
    is_prod = resolve_is_prod(config, azd_values)
    print(f"   Tenant ID: {tenant_id}")
    print(f"   Production environment: {is_prod}")

    return ProvisioningContext(
        resource_group=resource_group,
        subscription_id=subscription_id,
        tenant_id=tenant_id,
        is_prod=is_prod,
        key_vault_name=key_vault_name,
        key_vault_uri=key_vault_uri,
        app_config_name=app_config_name,
        app_config_endpoint=app_config_endpoint,
        front_end_web_app_name=front_end_web_app_name,
        front_end_uri=config.get("FRONT_END_URI") or f"https://{front_end_web_app_name}.azurewebsites.net",
        front_end_local_uri=config.get("FRONT_END_LOCAL_URI", "https://localhost:7227"),
        api_web_app_name=api_web_app_name,
        api_uri=config.get("API_URI") or f"https://{api_web_app_name}.azurewebsites.net",
        api_local_uri=config.get("API_LOCAL_URI", "https://localhost:7242"),
        sql_server_name=sql_server_name,
        secret_name=config.get("SECRET_NAME", "Relecloud front-end"),
        secret_expiry={
            "EXPIRY_YEARS": config.get("EXPIRY_YEARS", 2),
            "EXPIRY_MONTHS": config.get("EXPIRY_MONTHS", 0),
            "EXPIRY_DAYS": config.get("EXPIRY_DAYS", 0),
        },
        max_attempts=int(config.get("MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)),
        retry_interval=float(config.get("RETRY_INTERVAL_SECONDS", DEFAULT_INTERVAL_SECONDS)),
        debug=debug,
    )
