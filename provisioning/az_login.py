"""
Azure authentication with automatic fallback from CLI to interactive browser login
"""

from azure.identity import AzureCliCredential, InteractiveBrowserCredential
from azure.core.exceptions import ClientAuthenticationError

MANAGEMENT_SCOPE = "https://management.azure.com/.default"


def azure_login(az_tenant_id: str = None):
    """
    Reuse the Azure CLI login when there is one, otherwise authenticate
    with an interactive browser.
    Returns credential for use with other Azure services.
    """

    try:
        credential = AzureCliCredential(tenant_id=az_tenant_id) if az_tenant_id else AzureCliCredential()
        credential.get_token(MANAGEMENT_SCOPE)
        print("   Using Azure CLI credential")
        return credential
    except ClientAuthenticationError as e:
        print(f"   Azure CLI login not available: {e}")

    try:
        credential = InteractiveBrowserCredential(tenant_id=az_tenant_id) if az_tenant_id else InteractiveBrowserCredential()

        print("   Interactive browser credential created")
        return credential
    except ClientAuthenticationError as e:
        print(f"   Authentication failed: {e}")
        raise
