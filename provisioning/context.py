"""
State threaded through the provisioning phases and the Azure clients they use
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from azure.appconfiguration import AzureAppConfigurationClient
from azure.keyvault.secrets import SecretClient
from azure.mgmt.appconfiguration import AppConfigurationManagementClient
from azure.mgmt.keyvault import KeyVaultManagementClient
from azure.mgmt.resource import ResourceManagementClient, SubscriptionClient
from azure.mgmt.sql import SqlManagementClient
from msgraph import GraphServiceClient

from provisioning.retry import DEFAULT_INTERVAL_SECONDS, DEFAULT_MAX_ATTEMPTS


@dataclass
class ProvisioningContext:
    resource_group: str
    subscription_id: str
    tenant_id: str
    is_prod: bool
    key_vault_name: str
    key_vault_uri: str
    app_config_name: str
    app_config_endpoint: str
    front_end_web_app_name: str
    front_end_uri: str
    front_end_local_uri: str
    api_web_app_name: str
    api_uri: str
    api_local_uri: str
    sql_server_name: Optional[str] = None
    secret_name: str = "Relecloud front-end"
    secret_expiry: dict = field(default_factory=dict)
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_interval: float = DEFAULT_INTERVAL_SECONDS
    debug: bool = False

    def retry_options(self) -> dict:
        """Keyword arguments for poll_until shared by every phase"""
        return {
            "max_attempts": self.max_attempts,
            "interval": self.retry_interval,
            "verbose": self.debug,
        }


@dataclass
class AppRegistration:
    display_name: str
    object_id: str
    client_id: str
    client_secret: Optional[str] = None
    created: bool = False


@dataclass
class AzureClients:
    credential: Any
    graph: Any
    resources: Any
    subscriptions: Any
    key_vaults: Any
    app_configs: Any
    sql: Any
    secret_client_factory: Optional[Callable[[str], Any]] = None
    settings_client_factory: Optional[Callable[[str], Any]] = None

    def secret_client(self, vault_url: str):
        if self.secret_client_factory is None:
            raise RuntimeError("AzureClients was built without a Key Vault secret client factory")
        return self.secret_client_factory(vault_url)

    def settings_client(self, endpoint: str):
        if self.settings_client_factory is None:
            raise RuntimeError("AzureClients was built without an App Configuration client factory")
        return self.settings_client_factory(endpoint)


def build_clients(credential, subscription_id: str) -> AzureClients:
    """Create every SDK client the workflow needs from one credential"""

    print("   Initializing Microsoft Graph and Azure management clients...")
    clients = AzureClients(
        credential=credential,
        graph=GraphServiceClient(credentials=credential),
        resources=ResourceManagementClient(credential, subscription_id),
        subscriptions=SubscriptionClient(credential),
        key_vaults=KeyVaultManagementClient(credential, subscription_id),
        app_configs=AppConfigurationManagementClient(credential, subscription_id),
        sql=SqlManagementClient(credential, subscription_id),
        secret_client_factory=lambda vault_url: SecretClient(vault_url=vault_url, credential=credential),
        settings_client_factory=lambda endpoint: AzureAppConfigurationClient(base_url=endpoint, credential=credential),
    )
    print("   Clients initialized")
    return clients
