"""
Fixtures for the ordered todo scenarios.

With TODO_SUITE_TARGET=mock the whole session runs against the bundled mock
app: a settings file and OpenAPI document pointing at it are generated into a
temporary directory. Browser-bound tests are skipped there when Playwright
has no browser installed. With TODO_SUITE_TARGET=live a missing or broken
settings file errors every scenario up front.
"""
import pytest
import pytest_asyncio
from playwright.async_api import Error as PlaywrightError

from todo_suite import workflows
from todo_suite.browser import Browser
from todo_suite.config import configure_logging, suite
from todo_suite.mock_todo_app import MockTodoServer, reset_mock_state, write_mock_target
from todo_suite.playwright_client import PlaywrightClient
from todo_suite.settings_file import TOKEN_KEY, SettingsFile


@pytest.fixture(scope="session", autouse=True)
def suite_target(tmp_path_factory):
    """Provide the application under test for the whole session."""
    configure_logging()

    if not suite.is_mock:
        SettingsFile(suite.settings_path).load()
        yield None
        return

    reset_mock_state()
    with MockTodoServer() as server:
        settings_path, openapi_path = write_mock_target(tmp_path_factory.mktemp("mock-target"), server)
        with suite.override(settings_path=settings_path, openapi_path=openapi_path):
            yield server
    reset_mock_state()


async def _connect_client() -> PlaywrightClient:
    client = PlaywrightClient(
        browser_type=suite.browser_type,
        headless=suite.playwright_headless,
        timeout=suite.timeout_ms,
    )
    try:
        await client.connect()
    except PlaywrightError as exc:
        await client.close()
        if suite.is_mock:
            pytest.skip(f"No Playwright browser available for the mock target: {exc}")
        raise
    return client


@pytest_asyncio.fixture()
async def playwright_client():
    """Launch a browser for one scenario."""
    client = await _connect_client()
    try:
        yield client
    finally:
        await client.close()


@pytest_asyncio.fixture()
async def browser(playwright_client):
    """Create a Browser instance with the Playwright page."""
    return Browser(playwright_client.page)


@pytest.fixture()
def settings_file():
    return SettingsFile(suite.settings_path)


@pytest_asyncio.fixture()
async def session_token(settings_file):
    """Token persisted by a previous login; logs in first when none is stored.

    Makes the backend scenario's dependency on the frontend login explicit
    instead of relying on test order alone.
    """
    token = settings_file.load().get(TOKEN_KEY)
    if token:
        return token

    client = await _connect_client()
    try:
        return await workflows.login(Browser(client.page), settings_file)
    finally:
        await client.close()
