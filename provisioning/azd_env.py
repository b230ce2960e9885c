"""
Read values persisted by the Azure Developer CLI for the selected environment
"""

import io
import subprocess

from dotenv import dotenv_values

TRUTHY = {"true", "1", "yes"}


def load_azd_values(command=("azd", "env", "get-values")) -> dict:
    """
    Return the azd environment as a dict. An empty dict is returned when
    azd is not installed or has no environment selected.
    """

    try:
        result = subprocess.run(list(command), capture_output=True, text=True)
    except FileNotFoundError:
        print("   WARNING: azd is not installed, environment values are unavailable")
        return {}

    if result.returncode != 0:
        print(f"   WARNING: could not read azd environment values: {result.stderr.strip()}")
        return {}

    return dict(dotenv_values(stream=io.StringIO(result.stdout)))


def is_truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY


def resolve_is_prod(config: dict, azd_values: dict) -> bool:
    """IS_PROD from the config file wins over the azd environment"""
    if config.get("IS_PROD") is not None:
        return is_truthy(config["IS_PROD"])
    return is_truthy(azd_values.get("IS_PROD"))
