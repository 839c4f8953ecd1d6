"""Pick the endpoint under test out of an OpenAPI document.

Only ``paths.<first path>.get.parameters[0].name`` is consumed. "First" means
first in document order: ``json.load`` keeps object keys in the order they
appear, so the same document always yields the same target. Formats that do
not guarantee key order should pass an explicit path instead.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class OpenApiProbeError(ValueError):
    """Raised when the document has no usable GET endpoint."""


@dataclass(frozen=True)
class ProbeTarget:
    path: str
    parameter: str


def load_openapi_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read an OpenAPI document (JSON, whatever the file extension)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"OpenAPI document not found: {path}")

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise OpenApiProbeError(f"OpenAPI document {path} is not valid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise OpenApiProbeError(f"OpenAPI document {path} must hold a JSON object")
    return document


def probe_first_get_parameter(document: Dict[str, Any], path: Optional[str] = None) -> ProbeTarget:
    """Return the first declared path and the name of its first GET parameter.

    Args:
        document: Parsed OpenAPI document
        path: Use this path instead of the first declared one

    Raises:
        OpenApiProbeError: If paths, get, parameters or the name is missing
    """
    paths = document.get("paths")
    if not isinstance(paths, dict) or not paths:
        raise OpenApiProbeError("OpenAPI document declares no paths")

    if path is None:
        path = next(iter(paths))
    elif path not in paths:
        raise OpenApiProbeError(f"OpenAPI document does not declare path '{path}'")

    logger.info("OpenAPI: Endpoint/Path under test: %s", path)

    operation = paths[path].get("get") if isinstance(paths[path], dict) else None
    if not isinstance(operation, dict):
        raise OpenApiProbeError(f"Path '{path}' has no GET operation")

    parameters = operation.get("parameters")
    if not isinstance(parameters, list) or not parameters:
        raise OpenApiProbeError(f"GET {path} declares no parameters")

    first = parameters[0]
    name = first.get("name") if isinstance(first, dict) else None
    if not isinstance(name, str) or not name:
        raise OpenApiProbeError(f"First parameter of GET {path} has no name")

    return ProbeTarget(path=path, parameter=name)
