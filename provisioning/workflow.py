"""
The provisioning phases in the order they have to run
"""

from provisioning.create import create_app_registration, create_client_secret, expose_api_scope, preauthorize_client
from provisioning.discovery import discover_environment
from provisioning.persist import network_access, write_settings
from provisioning.preflight import ensure_resource_group_exists


def print_status(message, level="info"):
    """Simple console output with different levels"""
    if level == "header":
        print(f"\n{message}")
        print("=" * len(message))
    elif level == "section":
        print(f"\n{message}")
    else:
        print(message)


def print_context(ctx):
    print_status("Discovered environment", "section")
    for key, value in vars(ctx).items():
        print_status(f"{key}: {value if value is not None else 'Not found'}")


async def provision_front_end(ctx, graph_client):
    front_end = await create_app_registration.create_app_registration_async(
        ctx,
        graph_client,
        display_name=ctx.front_end_web_app_name,
        host_uri=ctx.front_end_uri,
        local_uri=ctx.front_end_local_uri,
    )

    if front_end.created:
        front_end.client_secret = await create_client_secret.create_client_secret_async(
            ctx, graph_client, front_end.object_id
        )
    return front_end


async def provision_api(ctx, graph_client, front_end):
    api = await create_app_registration.create_app_registration_async(
        ctx,
        graph_client,
        display_name=ctx.api_web_app_name,
        host_uri=ctx.api_uri,
        local_uri=ctx.api_local_uri,
    )

    if api.created:
        permission_id = await expose_api_scope.expose_api_scope_async(ctx, graph_client, api.object_id, api.client_id)
        await preauthorize_client.preauthorize_client_async(
            ctx, graph_client, api.object_id, front_end.client_id, permission_id
        )
    return api


async def run_workflow(resource_group: str, subscription_id: str, clients, config: dict, azd_values: dict, debug: bool = False) -> dict:
    """
    Provision both app registrations for one resource group and persist
    their identifiers. Returns a summary of what was written.
    """

    print_status("Resource Group Validation", "section")
    ensure_resource_group_exists(clients.resources, resource_group)

    print_status("Resource Discovery", "section")
    ctx = discover_environment(resource_group, subscription_id, clients, config, azd_values, debug=debug)

    if debug:
        print_context(ctx)
        input("Press Enter to continue...")

    print_status("Front-end App Registration", "section")
    front_end = await provision_front_end(ctx, clients.graph)

    print_status("Front-end Configuration", "section")
    with network_access.relaxed_network_access(ctx, clients):
        write_settings.write_front_end_settings(ctx, clients, front_end)

    print_status("API App Registration", "section")
    api = await provision_api(ctx, clients.graph, front_end)

    print_status("API Configuration", "section")
    with network_access.relaxed_network_access(ctx, clients):
        write_settings.write_api_settings(ctx, clients, api)

    if ctx.is_prod:
        print_status("SQL Server Lockdown", "section")
        network_access.disable_sql_public_access(ctx, clients)

    return {
        "tenant_id": ctx.tenant_id,
        "front_end": front_end,
        "api": api,
        "attendee_scope": expose_api_scope.attendee_scope(api.client_id),
        "is_prod": ctx.is_prod,
    }
