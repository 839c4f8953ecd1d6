"""Thin wrapper around direct Playwright for ergonomic assertions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from playwright.async_api import Page, Response, TimeoutError as PlaywrightTimeout


@dataclass
class ToolError(Exception):
    """Raised when a browser operation fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


class Browser:
    """Convenience wrapper over direct Playwright with ergonomic API."""

    def __init__(self, page: Page) -> None:
        self._page = page
        self.current_url: str | None = None

    def _update_state(self) -> None:
        self.current_url = self._page.url

    async def goto(self, url: str, wait_until: str = "networkidle") -> Dict[str, Any]:
        """Navigate to URL and return response with status.

        Note: "networkidle" can timeout with long-polling/WebSocket connections;
              in that case the navigation is retried with "domcontentloaded".
        """
        try:
            response = await self._page.goto(url, wait_until=wait_until)
            self._update_state()
            return {"url": self.current_url, "status": response.status if response else None}
        except PlaywrightTimeout as exc:
            if wait_until == "networkidle":
                try:
                    response = await self._page.goto(url, wait_until="domcontentloaded")
                    self._update_state()
                    return {"url": self.current_url, "status": response.status if response else None}
                except PlaywrightTimeout:
                    pass  # Fall through to original error
            raise ToolError(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc))
        except Exception as exc:
            raise ToolError(name="goto", payload={"url": url}, message=str(exc))

    async def fill(self, selector: str, value: str) -> Dict[str, Any]:
        """Fill input field."""
        try:
            await self._page.locator(selector).fill(value)
            return {"selector": selector, "value": value}
        except Exception as exc:
            raise ToolError(name="fill", payload={"selector": selector, "value": value}, message=str(exc))

    async def fill_by_label(self, label: str, value: str) -> Dict[str, Any]:
        """Fill the input associated with a visible label."""
        try:
            await self._page.get_by_label(label).fill(value)
            return {"label": label, "value": value}
        except Exception as exc:
            raise ToolError(name="fill_by_label", payload={"label": label}, message=str(exc))

    async def click_and_wait_for_response(
        self,
        selector: str,
        predicate: Callable[[Response], bool],
        timeout: float | None = None,
        optional: bool = False,
    ) -> Response | None:
        """Click element and wait for the first network response matching ``predicate``.

        The listener is armed before the click so a fast response is not missed.
        ``timeout`` is in milliseconds; None keeps the context default.
        With ``optional``, a click that draws no matching response within
        ``timeout`` returns None; a failing click still raises.
        """
        clicked = False
        try:
            async with self._page.expect_response(predicate, timeout=timeout) as response_info:
                await self._page.locator(selector).click()
                clicked = True
            response = await response_info.value
        except PlaywrightTimeout as exc:
            if clicked and optional:
                self._update_state()
                return None
            raise ToolError(name="click_and_wait_for_response", payload={"selector": selector}, message=str(exc))
        except Exception as exc:
            raise ToolError(name="click_and_wait_for_response", payload={"selector": selector}, message=str(exc))
        self._update_state()
        return response

    async def count(self, selector: str) -> int:
        """Number of elements currently matching selector."""
        try:
            return await self._page.locator(selector).count()
        except Exception as exc:
            raise ToolError(name="count", payload={"selector": selector}, message=str(exc))

    async def wait_for_visible(self, selector: str, timeout: float = 5000) -> bool:
        """Wait up to ``timeout`` ms for selector to be visible; False if it never is."""
        try:
            await self._page.locator(selector).first.wait_for(state="visible", timeout=timeout)
            return True
        except PlaywrightTimeout:
            return False
        except Exception as exc:
            raise ToolError(name="wait_for_visible", payload={"selector": selector}, message=str(exc))

    async def is_text_visible_in(self, selector: str, index: int, text: str) -> bool:
        """Whether ``text`` is visible inside the ``index``-th match of selector."""
        try:
            return await self._page.locator(selector).nth(index).get_by_text(text, exact=True).is_visible()
        except Exception as exc:
            raise ToolError(
                name="is_text_visible_in",
                payload={"selector": selector, "index": index, "text": text},
                message=str(exc),
            )

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Execute JavaScript in the page context."""
        try:
            return await self._page.evaluate(script, arg)
        except Exception as exc:
            raise ToolError(name="evaluate", payload={"script": script}, message=str(exc))

    async def local_storage_keys(self) -> List[str]:
        return await self.evaluate("() => Object.keys(localStorage)")

    async def local_storage_item(self, key: str) -> str | None:
        return await self.evaluate("key => localStorage.getItem(key)", key)
