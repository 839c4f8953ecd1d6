"""Reusable workflows for the todo frontend: login and list filling."""
from __future__ import annotations

import enum
import logging
import random
from typing import Optional

from todo_suite.browser import Browser, ToolError
from todo_suite.settings_file import FRONTEND_KEYS, SettingsFile

logger = logging.getLogger(__name__)

USERNAME_LABEL = "username"
PASSWORD_SELECTOR = "[name='password']"
SUBMIT_SELECTOR = "[type='submit']"
HOME_CARD_SELECTOR = "[class='card']"
TITLE_SELECTOR = "#title"
DETAILS_SELECTOR = "#details"
TODO_SELECTOR = "[class='todo']"
TODO_DETAILS_SELECTOR = "[class='todo-details']"

ID_TOKEN_MARKER = "idToken"

# Attempt one more todo than the application should accept.
TODO_CAPACITY_PROBE = 31
# What the list must show afterwards (the probe minus the rejected one).
EXPECTED_TODO_LIMIT = 30

TITLE_PREFIX = "Title_"
DETAIL_PREFIX = "Detail_"

# Substring of the URL the todo form posts to.
DEFAULT_CREATE_URL = "/todos"
# How long a submit past the limit may go without a response.
DEFAULT_REJECTION_TIMEOUT_MS = 5000


class LoginState(enum.Enum):
    NOT_STARTED = "not_started"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    AWAITING_LOGIN_RESPONSE = "awaiting_login_response"
    LOGGED_IN = "logged_in"
    FAILED = "failed"


class LoginError(AssertionError):
    """Login did not reach the home page; reported as a test failure."""


class LoginFlow:
    """Single login attempt that ends by persisting the browser's id token.

    NOT_STARTED -> CREDENTIALS_SUBMITTED -> AWAITING_LOGIN_RESPONSE -> LOGGED_IN | FAILED
    """

    def __init__(self, browser: Browser, settings_file: SettingsFile, card_timeout: float = 5000) -> None:
        self.browser = browser
        self.settings_file = settings_file
        self.card_timeout = card_timeout
        self.state = LoginState.NOT_STARTED
        self.token: Optional[str] = None

    def _fail(self, message: str) -> LoginError:
        self.state = LoginState.FAILED
        logger.error(message)
        return LoginError(message)

    async def run(self) -> str:
        """Log in and return the id token that was written to the settings file."""
        url, login_url, user, password = self.settings_file.require(*FRONTEND_KEYS)
        login_url = login_url.replace("*", user)

        logger.info("Access link %s", url)
        await self.browser.goto(url)

        logger.info("    Fill username: %s", user)
        await self.browser.fill_by_label(USERNAME_LABEL, user)
        logger.info("    Fill password")
        await self.browser.fill(PASSWORD_SELECTOR, password)

        self.state = LoginState.CREDENTIALS_SUBMITTED
        try:
            self.state = LoginState.AWAITING_LOGIN_RESPONSE
            response = await self.browser.click_and_wait_for_response(
                SUBMIT_SELECTOR, lambda r: login_url in r.url
            )
        except ToolError as exc:
            raise self._fail(f"Access nOK, no response from {login_url}: {exc.message}") from exc

        if response.status != 200:
            raise self._fail(f"Access nOK due to API error: {response.status}")

        if not await self.browser.wait_for_visible(HOME_CARD_SELECTOR, timeout=self.card_timeout):
            raise self._fail("Access nOK due to Frontend error Home Page Card not visible")

        self.state = LoginState.LOGGED_IN
        logger.info("Access OK.")

        self.token = await self._persist_id_token()
        return self.token

    async def _persist_id_token(self) -> str:
        keys = await self.browser.local_storage_keys()
        id_token_key = next((key for key in keys if ID_TOKEN_MARKER in key), None)
        if id_token_key is None:
            raise self._fail(f"No local storage entry containing '{ID_TOKEN_MARKER}' after login")

        token = await self.browser.local_storage_item(id_token_key)
        if not token:
            raise self._fail(f"Local storage entry '{id_token_key}' is empty")

        self.settings_file.update_token(token)
        return token


async def login(browser: Browser, settings_file: SettingsFile) -> str:
    """Log in through the UI; see ``LoginFlow``."""
    return await LoginFlow(browser, settings_file).run()


async def count_todos(browser: Browser) -> int:
    return await browser.count(TODO_SELECTOR)


def _is_creation(create_url: str):
    def predicate(response) -> bool:
        return response.request.method != "GET" and create_url in response.url
    return predicate


async def generate_todos(
    browser: Browser,
    current_count: int,
    capacity: int = TODO_CAPACITY_PROBE,
    rng: random.Random | None = None,
    create_url: str = DEFAULT_CREATE_URL,
    limit: int = EXPECTED_TODO_LIMIT,
    rejection_timeout: float = DEFAULT_REJECTION_TIMEOUT_MS,
) -> str:
    """Create todos until ``capacity`` have been attempted.

    Each submit waits for the non-GET response whose URL contains
    ``create_url``. Submits made once ``limit`` todos exist may be blocked in
    the page without any request, so those wait only ``rejection_timeout``
    ms and carry on when nothing arrives.

    Returns the detail text of the last todo submitted, or "" when the list
    was already full. Any failing fill or click aborts the whole run.
    """
    rng = rng or random.Random()
    remaining = capacity - current_count
    last_inserted = ""
    is_creation = _is_creation(create_url)

    for i in range(remaining):
        num = rng.randint(1, 1999)
        title = f"{TITLE_PREFIX}{num}"
        detail = f"{DETAIL_PREFIX}{num}"

        logger.info("Create a todo:")
        logger.info("    Fill title: %s", title)
        await browser.fill(TITLE_SELECTOR, title)

        logger.info("    Fill detail: %s", detail)
        await browser.fill(DETAILS_SELECTOR, detail)

        if current_count + i >= limit:
            response = await browser.click_and_wait_for_response(
                SUBMIT_SELECTOR, is_creation, timeout=rejection_timeout, optional=True
            )
            if response is None:
                logger.info("    No request sent for %s, submission blocked by the page", detail)
        else:
            await browser.click_and_wait_for_response(SUBMIT_SELECTOR, is_creation)
        last_inserted = detail

    return last_inserted


async def last_todo_hidden(browser: Browser, last_inserted: str, limit: int = EXPECTED_TODO_LIMIT) -> bool:
    """True when ``last_inserted`` is not shown in the details of the ``limit``-th todo."""
    if not last_inserted:
        logger.info("No todo was submitted, nothing to look for in todo %s", limit)
        return True
    return not await browser.is_text_visible_in(TODO_DETAILS_SELECTOR, limit - 1, last_inserted)
