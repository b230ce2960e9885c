import asyncio

import pytest

from provisioning.create.create_app_registration import build_application
from provisioning.create.expose_api_scope import (
    SCOPE_ID,
    SCOPE_NAME,
    attendee_scope,
    build_scope_patch,
    expose_api_scope_async,
    find_scope,
)
from provisioning.errors import ExitCode, RetryExhaustedError

from conftest import FakeGraph


def api_app(graph):
    return graph.add(build_application("rc-api-abc123", "https://rc-api-abc123.azurewebsites.net", "https://localhost:7242"))


def test_attendee_scope_format():
    assert attendee_scope("abc") == "api://abc/relecloud.api"


def test_scope_patch_body():
    body = build_scope_patch("client-1")

    assert body.identifier_uris == ["api://client-1"]
    [scope] = body.api.oauth2_permission_scopes
    assert scope.value == SCOPE_NAME == "relecloud.api"
    assert scope.id == SCOPE_ID
    assert scope.type == "Admin"
    assert scope.is_enabled is True


def test_exposes_scope_and_returns_permission_id(ctx, graph):
    app = api_app(graph)

    permission_id = asyncio.run(expose_api_scope_async(ctx, graph, app.id, app.app_id))

    assert permission_id == str(SCOPE_ID)
    assert graph.apps[app.id].identifier_uris == [f"api://{app.app_id}"]
    assert find_scope(graph.apps[app.id]).value == "relecloud.api"
    assert [c for c in graph.calls if c[0] == "patch"] == [("patch", app.id)]


def test_polls_until_patch_is_visible(ctx):
    graph = FakeGraph(patch_lag=4)
    app = api_app(graph)

    permission_id = asyncio.run(expose_api_scope_async(ctx, graph, app.id, app.app_id))

    assert permission_id == str(SCOPE_ID)
    # four stale reads, one confirming the scope, one reading its id
    assert graph.calls.count(("get", app.id)) == 6


def test_scope_never_visible_is_fatal(ctx):
    graph = FakeGraph(patch_lag=100)
    app = api_app(graph)
    ctx.max_attempts = 3

    with pytest.raises(RetryExhaustedError) as excinfo:
        asyncio.run(expose_api_scope_async(ctx, graph, app.id, app.app_id))

    assert excinfo.value.exit_code == ExitCode.SCOPE_NOT_EXPOSED == 15


def test_missing_permission_id_is_fatal(ctx, graph, monkeypatch):
    app = api_app(graph)
    body = build_scope_patch(app.app_id)
    body.api.oauth2_permission_scopes[0].id = None
    monkeypatch.setattr("provisioning.create.expose_api_scope.build_scope_patch", lambda client_id: body)
    ctx.max_attempts = 3

    with pytest.raises(RetryExhaustedError) as excinfo:
        asyncio.run(expose_api_scope_async(ctx, graph, app.id, app.app_id))

    assert excinfo.value.exit_code == ExitCode.PERMISSION_ID_NOT_FOUND == 16


def test_find_scope_handles_missing_api():
    assert find_scope(None) is None
    assert find_scope(build_application("x", "https://x", "https://localhost")) is None
