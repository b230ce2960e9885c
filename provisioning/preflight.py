"""
Resource group validation run before anything is created
"""

import re

from provisioning.errors import InvalidInputError, ResourceGroupNotFoundError

RESOURCE_GROUP_NAME = re.compile(r"^[-\w._()]{1,90}$")


def validate_resource_group_name(name: str) -> str:
    """Check the name against Azure's resource group naming rules"""

    if not name or not name.strip():
        raise InvalidInputError("Missing required parameter --resource-group")

    if not RESOURCE_GROUP_NAME.match(name) or name.endswith("."):
        raise InvalidInputError(f"'{name}' is not a valid resource group name")

    return name


def ensure_resource_group_exists(resource_client, name: str):
    """Fail fast when the resource group is not in the subscription"""

    validate_resource_group_name(name)

    print(f"   Checking that resource group '{name}' exists...")
    if not resource_client.resource_groups.check_existence(name):
        raise ResourceGroupNotFoundError(f"Resource group '{name}' could not be found")
    print(f"   Resource group found")
