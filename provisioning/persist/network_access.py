"""
Public network access toggles for the production App Configuration store,
Key Vault and SQL server
"""

from contextlib import contextmanager

from azure.mgmt.appconfiguration.models import ConfigurationStoreUpdateParameters
from azure.mgmt.keyvault.models import VaultPatchParameters, VaultPatchProperties
from azure.mgmt.sql.models import ServerUpdate

ENABLED = "Enabled"
DISABLED = "Disabled"


def set_app_config_access(ctx, clients, access: str):
    print(f"   Setting public network access on App Configuration '{ctx.app_config_name}' to {access}...")
    clients.app_configs.configuration_stores.begin_update(
        ctx.resource_group,
        ctx.app_config_name,
        ConfigurationStoreUpdateParameters(public_network_access=access),
    ).result()


def set_key_vault_access(ctx, clients, access: str):
    print(f"   Setting public network access on Key Vault '{ctx.key_vault_name}' to {access}...")
    clients.key_vaults.vaults.update(
        ctx.resource_group,
        ctx.key_vault_name,
        VaultPatchParameters(properties=VaultPatchProperties(public_network_access=access)),
    )


def lock_down(ctx, clients) -> list:
    """Disable public access on both stores, returning the names that could not be locked"""

    failed = []
    for name, setter in ((ctx.app_config_name, set_app_config_access), (ctx.key_vault_name, set_key_vault_access)):
        try:
            setter(ctx, clients, DISABLED)
        except Exception as e:
            print(f"   WARNING: could not disable public network access on '{name}': {str(e)}")
            failed.append(name)
    return failed


@contextmanager
def relaxed_network_access(ctx, clients):
    """
    Open the App Configuration store and Key Vault to public traffic for the
    duration of the block when running against production.

    Both resources are locked again when the block exits, including when it
    raises. If locking fails the resources stay open and a warning is printed.
    """

    if not ctx.is_prod:
        yield
        return

    body_failed = False
    try:
        set_app_config_access(ctx, clients, ENABLED)
        set_key_vault_access(ctx, clients, ENABLED)
        yield
    except BaseException:
        body_failed = True
        raise
    finally:
        failed = lock_down(ctx, clients)
        if failed and not body_failed:
            raise RuntimeError(f"Public network access is still enabled on: {', '.join(failed)}")


def disable_sql_public_access(ctx, clients):
    if not ctx.sql_server_name:
        print("   No SQL server in resource group, nothing to lock down")
        return

    print(f"   Disabling public network access on SQL server '{ctx.sql_server_name}'...")
    clients.sql.servers.begin_update(
        ctx.resource_group,
        ctx.sql_server_name,
        ServerUpdate(public_network_access=DISABLED),
    ).result()
    print(f"   SQL server public network access disabled")
