"""Shared fixtures for the offline helper tests.

Nothing here launches a browser: workflows are driven through FakeBrowser,
which records every call and answers the way a Browser would.
"""
from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from todo_suite.browser import ToolError
from todo_suite.mock_todo_app import MockTodoServer, reset_mock_state
from todo_suite.settings_file import SettingsFile

ID_TOKEN_KEY = "CognitoIdentityServiceProvider.client.alice.idToken"


class FakeResponse:
    def __init__(self, status: int = 200, url: str = "https://app.test/api/login", method: str = "POST"):
        self.status = status
        self.url = url
        self.request = SimpleNamespace(method=method)


class FakeBrowser:
    """Stand-in for todo_suite.browser.Browser."""

    def __init__(
        self,
        login_status: int = 200,
        response_url: str = "https://app.test/api/login",
        todo_response_url: str = "https://app.test/api/todos",
        card_visible: bool = True,
        storage: dict | None = None,
        fail_on_fill: int | None = None,
        todo_count: int = 0,
        visible_text: bool = False,
        silent_submits: tuple = (),
    ):
        self.login_status = login_status
        self.response_url = response_url
        self.todo_response_url = todo_response_url
        self.card_visible = card_visible
        self.storage = {ID_TOKEN_KEY: "token-from-browser"} if storage is None else storage
        self.fail_on_fill = fail_on_fill
        self.todo_count = todo_count
        self.visible_text = visible_text
        # 1-based submit numbers that draw no network response at all
        self.silent_submits = set(silent_submits)
        self.submit_waits: list[tuple] = []
        self.calls: list[tuple] = []
        self._fills = 0

    async def goto(self, url, wait_until="networkidle"):
        self.calls.append(("goto", url))
        return {"url": url, "status": 200}

    async def fill(self, selector, value):
        self._fills += 1
        if self.fail_on_fill is not None and self._fills == self.fail_on_fill:
            raise ToolError(name="fill", payload={"selector": selector, "value": value}, message="element not found")
        self.calls.append(("fill", selector, value))
        return {"selector": selector, "value": value}

    async def fill_by_label(self, label, value):
        self.calls.append(("fill_by_label", label, value))
        return {"label": label, "value": value}

    async def click_and_wait_for_response(self, selector, predicate, timeout=None, optional=False):
        self.calls.append(("submit", selector))
        self.submit_waits.append((timeout, optional))
        if len(self.submit_waits) in self.silent_submits:
            candidates = []
        else:
            candidates = [
                FakeResponse(status=self.login_status, url=self.response_url),
                FakeResponse(status=201, url=self.todo_response_url),
            ]
        response = next((candidate for candidate in candidates if predicate(candidate)), None)
        if response is None:
            if optional:
                return None
            raise ToolError(name="click_and_wait_for_response", payload={"selector": selector}, message="Timeout 30000ms exceeded")
        return response

    async def wait_for_visible(self, selector, timeout=5000):
        self.calls.append(("wait_for_visible", selector))
        return self.card_visible

    async def count(self, selector):
        self.calls.append(("count", selector))
        return self.todo_count

    async def is_text_visible_in(self, selector, index, text):
        self.calls.append(("is_text_visible_in", selector, index, text))
        return self.visible_text

    async def local_storage_keys(self):
        return list(self.storage)

    async def local_storage_item(self, key):
        return self.storage.get(key)

    def filled(self, selector):
        return [call[2] for call in self.calls if call[0] == "fill" and call[1] == selector]


@pytest.fixture
def fake_browser():
    """Factory for FakeBrowser instances."""
    return FakeBrowser


@pytest.fixture
def settings_data():
    return {
        "baseUrl": "https://app.test",
        "loginUrl": "/api/login",
        "user": "alice",
        "email": "alice@example.test",
        "password": "pw1",
        "token": "",
        "backendUrl": "https://api.test",
    }


@pytest.fixture
def settings_path(tmp_path, settings_data):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(settings_data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def settings_file(settings_path):
    return SettingsFile(settings_path)


@pytest.fixture(scope='function')
def mock_todo_server():
    """Running mock todo app with clean state."""
    reset_mock_state()
    server = MockTodoServer().start()

    yield server

    server.stop()
    reset_mock_state()
