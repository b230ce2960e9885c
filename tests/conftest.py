import re
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from kiota_abstractions.api_error import APIError
from msgraph.generated.models.api_application import ApiApplication

from provisioning.context import AzureClients, ProvisioningContext

TENANT_ID = "11111111-2222-3333-4444-555555555555"
SUBSCRIPTION_ID = "99999999-8888-7777-6666-555555555555"


class FakeAppItem:
    def __init__(self, graph, object_id):
        self.graph = graph
        self.object_id = object_id
        self.add_password = FakeAddPassword(graph, object_id)

    async def get(self):
        self.graph.calls.append(("get", self.object_id))
        self.graph.settle(self.object_id)
        return self.graph.apps[self.object_id]

    async def patch(self, body):
        self.graph.calls.append(("patch", self.object_id))
        self.graph.pending_patches.append([self.object_id, body, self.graph.patch_lag])


class FakeAddPassword:
    def __init__(self, graph, object_id):
        self.graph = graph
        self.object_id = object_id

    async def post(self, body):
        self.graph.calls.append(("add_password", self.object_id))
        self.graph.password_bodies.append(body)
        if self.graph.secret_responses:
            response = self.graph.secret_responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return SimpleNamespace(secret_text=response)
        return SimpleNamespace(secret_text="s3cr3t")


DISPLAY_NAME_FILTER = re.compile(r"^displayName eq '(.*)'$")


class FakeAppByClientId:
    def __init__(self, graph, client_id):
        self.graph = graph
        self.client_id = client_id

    async def get(self):
        self.graph.calls.append(("get_by_client_id", self.client_id))
        for object_id, app in self.graph.apps.items():
            if app.app_id == self.client_id:
                if self.graph.hidden_reads.get(object_id, 0) > 0:
                    self.graph.hidden_reads[object_id] -= 1
                    break
                return app
        raise APIError(message="Resource does not exist", response_status_code=404)


class FakeApplications:
    def __init__(self, graph):
        self.graph = graph

    async def get(self, request_configuration=None):
        self.graph.calls.append(("list",))
        name_filter = None
        if request_configuration is not None and request_configuration.query_parameters is not None:
            name_filter = request_configuration.query_parameters.filter
        if name_filter is not None:
            match = DISPLAY_NAME_FILTER.match(name_filter)
            wanted = match.group(1).replace("''", "'")
        visible = []
        for object_id, app in self.graph.apps.items():
            if name_filter is not None and app.display_name != wanted:
                continue
            if self.graph.hidden_reads.get(object_id, 0) > 0:
                self.graph.hidden_reads[object_id] -= 1
                continue
            visible.append(app)
        # Graph never returns more than one page without following the next link
        page = visible[:self.graph.page_size]
        next_link = "https://graph.microsoft.com/v1.0/applications?$skiptoken=x" if len(visible) > len(page) else None
        return SimpleNamespace(value=page, odata_next_link=next_link)

    async def post(self, application):
        self.graph.calls.append(("post", application.display_name))
        if self.graph.empty_client_id:
            return SimpleNamespace(id=None, app_id=None)
        self.graph.add(application, hidden_reads=self.graph.creation_lag)
        return application

    def by_application_id(self, object_id):
        return FakeAppItem(self.graph, object_id)


class FakeGraph:
    """
    In-memory stand-in for GraphServiceClient.applications.

    creation_lag hides new applications from that many reads, patch_lag
    keeps a PATCH invisible for that many item reads, and page_size caps
    how many applications one list call returns.
    """

    def __init__(self, creation_lag=0, patch_lag=0, page_size=100):
        self.apps = {}
        self.calls = []
        self.hidden_reads = {}
        self.pending_patches = []
        self.password_bodies = []
        self.secret_responses = []
        self.creation_lag = creation_lag
        self.patch_lag = patch_lag
        self.empty_client_id = False
        self.page_size = page_size
        self.applications = FakeApplications(self)

    def applications_with_app_id(self, app_id):
        return FakeAppByClientId(self, app_id)

    def add(self, application, hidden_reads=0):
        application.id = str(uuid4())
        application.app_id = str(uuid4())
        self.apps[application.id] = application
        self.hidden_reads[application.id] = hidden_reads
        return application

    def settle(self, object_id):
        remaining = []
        for pending in self.pending_patches:
            target, body, lag = pending
            if target != object_id:
                remaining.append(pending)
            elif lag > 0:
                pending[2] -= 1
                remaining.append(pending)
            else:
                self.apply(target, body)
        self.pending_patches = remaining

    def apply(self, object_id, body):
        app = self.apps[object_id]
        if body.identifier_uris is not None:
            app.identifier_uris = body.identifier_uris
        if body.api is not None:
            if app.api is None:
                app.api = ApiApplication()
            if body.api.oauth2_permission_scopes is not None:
                app.api.oauth2_permission_scopes = body.api.oauth2_permission_scopes
            if body.api.pre_authorized_applications is not None:
                app.api.pre_authorized_applications = body.api.pre_authorized_applications

    def mutating_calls(self):
        return [c for c in self.calls if c[0] in ("post", "patch", "add_password")]


def resource(name, type_, tags=None):
    return SimpleNamespace(name=name, type=type_, tags=tags)


DEPLOYED_RESOURCES = [
    resource("rc-kv-abc123", "Microsoft.KeyVault/vaults"),
    resource("rc-appconfig-abc123", "Microsoft.AppConfiguration/configurationStores"),
    resource("rc-web-abc123", "Microsoft.Web/sites", {"azd-service-name": "web"}),
    resource("rc-api-abc123", "Microsoft.Web/sites", {"azd-service-name": "api"}),
    resource("rc-sql-abc123", "Microsoft.Sql/servers"),
    resource("rc-plan-abc123", "Microsoft.Web/serverFarms"),
]


def make_azure(resources=None, group_exists=True):
    azure = MagicMock()
    azure.resources.resource_groups.check_existence.return_value = group_exists
    azure.resources.resources.list_by_resource_group.return_value = list(
        DEPLOYED_RESOURCES if resources is None else resources
    )
    azure.key_vaults.vaults.get.return_value.properties.vault_uri = "https://rc-kv-abc123.vault.azure.net/"
    azure.app_configs.configuration_stores.get.return_value.endpoint = "https://rc-appconfig-abc123.azconfig.io"
    azure.subscriptions.subscriptions.get.return_value.tenant_id = TENANT_ID
    return azure


def make_clients(azure, graph):
    return AzureClients(
        credential=None,
        graph=graph,
        resources=azure.resources,
        subscriptions=azure.subscriptions,
        key_vaults=azure.key_vaults,
        app_configs=azure.app_configs,
        sql=azure.sql,
        secret_client_factory=lambda vault_url: azure.secret_client,
        settings_client_factory=lambda endpoint: azure.settings_client,
    )


@pytest.fixture
def graph():
    return FakeGraph()


@pytest.fixture
def azure():
    return make_azure()


@pytest.fixture
def clients(azure, graph):
    return make_clients(azure, graph)


@pytest.fixture
def ctx():
    return ProvisioningContext(
        resource_group="rg-relecloud",
        subscription_id=SUBSCRIPTION_ID,
        tenant_id=TENANT_ID,
        is_prod=False,
        key_vault_name="rc-kv-abc123",
        key_vault_uri="https://rc-kv-abc123.vault.azure.net/",
        app_config_name="rc-appconfig-abc123",
        app_config_endpoint="https://rc-appconfig-abc123.azconfig.io",
        front_end_web_app_name="rc-web-abc123",
        front_end_uri="https://rc-web-abc123.azurewebsites.net",
        front_end_local_uri="https://localhost:7227",
        api_web_app_name="rc-api-abc123",
        api_uri="https://rc-api-abc123.azurewebsites.net",
        api_local_uri="https://localhost:7242",
        sql_server_name="rc-sql-abc123",
        max_attempts=20,
        retry_interval=0,
    )
