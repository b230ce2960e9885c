#!/usr/bin/env python3
"""
Relecloud App Registration Setup Script

Creates the Azure AD app registrations a deployed Relecloud environment
signs users in with:
- Front-end app registration with a client secret
- API app registration exposing the relecloud.api scope
- Pre-authorization of the front-end for that scope
- Writes the identifiers to App Configuration and the secret to Key Vault

Run this once after `azd provision`. Registrations that already exist are
reused; delete them manually to start over.
"""

import sys, os, yaml, asyncio, argparse
import traceback
from provisioning import az_login
from provisioning.azd_env import load_azd_values
from provisioning.context import build_clients
from provisioning.errors import ExitCode, InvalidInputError, ProvisioningError
from provisioning.preflight import validate_resource_group_name
from provisioning.workflow import print_status, run_workflow

DEFAULT_CONFIG_FILE = "az_app_reg_config.yaml"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create the Relecloud front-end and API app registrations")
    parser.add_argument("-g", "--resource-group", required=True, help="Resource group the environment was deployed to")
    parser.add_argument("-d", "--debug", action="store_true", help="Print diagnostics and pause before making changes")
    parser.add_argument("-c", "--config", default=None, help=f"YAML configuration file (default: {DEFAULT_CONFIG_FILE})")
    return parser.parse_args(argv)


def load_config(config_file_path: str = None) -> dict:
    """Load configuration from YAML file; the default file is optional"""

    if config_file_path is None:
        config_file_path = DEFAULT_CONFIG_FILE
        if not os.path.exists(config_file_path):
            return {}

    if not os.path.exists(config_file_path):
        raise FileNotFoundError(f"Configuration file not found: {config_file_path}")

    with open(config_file_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    return config


def resolve_subscription(config: dict, azd_values: dict) -> str:
    subscription_id = (
        config.get("SUBSCRIPTION")
        or azd_values.get("AZURE_SUBSCRIPTION_ID")
        or os.environ.get("AZURE_SUBSCRIPTION_ID")
    )
    if not subscription_id:
        raise InvalidInputError(
            "No subscription configured: set SUBSCRIPTION in the config file or AZURE_SUBSCRIPTION_ID"
        )
    return subscription_id


def print_summary(summary: dict):
    print_status("SETUP PROCESS COMPLETED", "header")
    print("-" * 50)
    print_status(f"Tenant ID: {summary['tenant_id']}")
    print_status(f"Front-end Client ID: {summary['front_end'].client_id}")
    print_status(f"Front-end secret stored: {'yes' if summary['front_end'].client_secret else 'no (registration reused)'}")
    print_status(f"API Client ID: {summary['api'].client_id}")
    print_status(f"Attendee scope: {summary['attendee_scope']}")
    print("-" * 50)


async def async_main(args) -> int:
    """Main async orchestration function"""

    print_status("Relecloud App Registration Setup Process", "header")

    try:
        validate_resource_group_name(args.resource_group)

        print_status("Loading configuration...", "section")
        config = load_config(args.config)
        azd_values = load_azd_values()
        subscription_id = resolve_subscription(config, azd_values)
        print_status("Configuration loaded successfully")
        if args.debug:
            for key, value in config.items():
                print_status(f"{key}: {value if value is not None else 'Not configured'}")

        print_status("Azure Authentication", "section")
        credential = az_login.azure_login(config.get("TENANT_ID"))
        clients = build_clients(credential, subscription_id)

        summary = await run_workflow(
            args.resource_group,
            subscription_id,
            clients,
            config,
            azd_values,
            debug=args.debug,
        )
        print_summary(summary)
        return ExitCode.SUCCESS

    except ProvisioningError as e:
        print_status(f"FATAL ERROR: {str(e)}", "section")
        print_status(f"   Exit code: {int(e.exit_code)}")
        return e.exit_code

    except Exception as e:
        print_status(f"ERROR: Setup process failed!", "section")
        print_status(f"   Error details: {str(e)}")
        print_status(f"   Error type: {type(e).__name__}")

        print_status(f"Full traceback:", "section")

        tb_str = traceback.format_exc()
        for line in tb_str.split('\n'):
            if line.strip():
                print_status(line)

        return ExitCode.UNEXPECTED_ERROR


def main(argv=None):
    """Synchronous main function that runs the async orchestration"""
    args = parse_args(argv)
    sys.exit(int(asyncio.run(async_main(args))))


if __name__ == "__main__":
    main()
