"""Tests for the authenticated backend GET."""
import json

import httpx
import pytest

from todo_suite import api_probe
from todo_suite.mock_todo_app import MOCK_USER, issue_token, seed_todos, write_mock_target
from todo_suite.settings_file import SettingsFile

pytestmark = pytest.mark.asyncio


def _write_openapi(tmp_path, paths):
    path = tmp_path / "openapi.txt"
    path.write_text(json.dumps({"openapi": "3.0.3", "paths": paths}), encoding="utf-8")
    return path


async def test_probe_against_mock_backend(mock_todo_server, tmp_path):
    seed_todos(MOCK_USER, 3)
    settings_path, openapi_path = write_mock_target(tmp_path, mock_todo_server, token=issue_token(MOCK_USER))

    result = await api_probe.probe_backend(SettingsFile(settings_path), openapi_path)

    assert result.status_ok
    assert result.has_data
    assert result.params == {"userId": MOCK_USER}
    assert result.url == f"{mock_todo_server.backend_url}/todos?userId={MOCK_USER}"
    assert len(json.loads(result.body)) == 3


async def test_probe_reports_empty_payload(mock_todo_server, tmp_path):
    settings_path, openapi_path = write_mock_target(tmp_path, mock_todo_server, token=issue_token(MOCK_USER))

    result = await api_probe.probe_backend(SettingsFile(settings_path), openapi_path)

    assert result.status_ok
    assert result.body == "[]"
    assert not result.has_data


async def test_probe_with_stale_token(mock_todo_server, tmp_path):
    settings_path, openapi_path = write_mock_target(tmp_path, mock_todo_server, token="stale")

    result = await api_probe.probe_backend(SettingsFile(settings_path), openapi_path)

    assert result.status == 401
    assert not result.status_ok


async def test_probe_with_path_override(mock_todo_server, tmp_path):
    seed_todos(MOCK_USER, 2)
    settings_path, openapi_path = write_mock_target(tmp_path, mock_todo_server, token=issue_token(MOCK_USER))

    result = await api_probe.probe_backend(SettingsFile(settings_path), openapi_path, path_override="/todos/count")

    assert result.status_ok
    assert json.loads(result.body) == {"owner": MOCK_USER, "count": 2}


async def test_request_headers_and_url(settings_path, settings_data, tmp_path):
    settings_data.update(token="abc.def", backendUrl="https://api.test/v1")
    settings_path.write_text(json.dumps(settings_data), encoding="utf-8")
    openapi_path = _write_openapi(tmp_path, {"/todos": {"get": {"parameters": [{"name": "userId"}]}}})
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"title": "Title_1", "details": "Detail_1"}])

    result = await api_probe.probe_backend(
        SettingsFile(settings_path), openapi_path, transport=httpx.MockTransport(handler)
    )

    request = seen[0]
    assert request.method == "GET"
    assert str(request.url) == "https://api.test/v1/todos?userId=alice"
    assert request.headers["Authorization"] == "Bearer abc.def"
    assert request.headers["Accept"] == "application/json, text/plain, */*"
    assert result.status_ok and result.has_data


@pytest.mark.parametrize("body, has_data", [("", False), ("{}", False), ("[]", False), ("[1]", True)])
async def test_body_length_threshold(settings_file, tmp_path, body, has_data):
    openapi_path = _write_openapi(tmp_path, {"/todos": {"get": {"parameters": [{"name": "userId"}]}}})
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=body))

    result = await api_probe.probe_backend(settings_file, openapi_path, transport=transport)

    assert result.has_data is has_data


async def test_missing_token_key_fails_before_any_request(settings_path, settings_data, tmp_path):
    del settings_data["token"]
    settings_path.write_text(json.dumps(settings_data), encoding="utf-8")
    openapi_path = _write_openapi(tmp_path, {"/todos": {"get": {"parameters": [{"name": "userId"}]}}})
    transport = httpx.MockTransport(lambda request: pytest.fail("request should not be sent"))

    with pytest.raises(KeyError, match="token"):
        await api_probe.probe_backend(SettingsFile(settings_path), openapi_path, transport=transport)


async def test_auth_headers():
    assert api_probe.auth_headers("t") == {
        "Authorization": "Bearer t",
        "Accept": "application/json, text/plain, */*",
    }
