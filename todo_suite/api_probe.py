"""Authenticated GET against the backend endpoint named by the OpenAPI document."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

import httpx

from todo_suite.openapi_probe import ProbeTarget, load_openapi_document, probe_first_get_parameter
from todo_suite.settings_file import BACKEND_KEYS, SettingsFile

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/json, text/plain, */*"


@dataclass
class ApiProbeResult:
    status: int
    body: str
    url: str
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def status_ok(self) -> bool:
        return self.status == 200

    @property
    def has_data(self) -> bool:
        # "[]" and "{}" are the empty payloads
        return len(self.body) > 2


def auth_headers(token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": ACCEPT_HEADER,
    }


def build_client(backend_url: str, token: str, timeout: float = 30.0, **kwargs) -> httpx.AsyncClient:
    """httpx client rooted at ``backend_url`` that sends the bearer token on every call."""
    return httpx.AsyncClient(base_url=backend_url, headers=auth_headers(token), timeout=timeout, **kwargs)


async def probe_backend(
    settings_file: SettingsFile,
    openapi_path: Union[str, Path],
    path_override: Optional[str] = None,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ApiProbeResult:
    """Send ``GET <backendUrl><first path>?<first parameter>=<user>`` and capture the reply."""
    token, backend_url, user = settings_file.require(*BACKEND_KEYS)

    target: ProbeTarget = probe_first_get_parameter(load_openapi_document(openapi_path), path=path_override)
    params = {target.parameter: user}

    async with build_client(backend_url, token, timeout=timeout, transport=transport) as client:
        response = await client.get(target.path, params=params)

    body = response.text
    logger.info("Api Status '%s' (%s)", response.status_code, response.status_code == 200)
    logger.info("API response contains data (%s)", len(body) > 2)
    return ApiProbeResult(status=response.status_code, body=body, url=str(response.url), params=params)
