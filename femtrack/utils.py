"""HTTP helpers shared by the request handlers."""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any

from werkzeug.wrappers import Request, Response

Envelope = dict[str, Any]

URL_PARAMS_KEY = "femtrack.url_params"

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_DECIMAL = re.compile(r"[+-]?[0-9]+")


class InvalidIDError(ValueError):
    """The ``id`` path parameter is missing or not a 64-bit integer."""


def _json_default(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serialisable")


def write_json(status: int, data: Envelope) -> Response:
    """Build a JSON response with one-space indentation and a trailing newline."""
    body = json.dumps(dict(sorted(data.items())), indent=1, default=_json_default)
    return Response(body + "\n", status=status, content_type="application/json")


def read_id_param(request: Request) -> int:
    """Return the ``id`` URL parameter of ``request`` as an integer."""
    params = request.environ.get(URL_PARAMS_KEY) or {}
    id_param = params.get("id", "")
    if id_param == "":
        raise InvalidIDError("invalid id parameter")
    if not _DECIMAL.fullmatch(id_param):
        raise InvalidIDError("invalid id parameter type ")
    value = int(id_param)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise InvalidIDError("invalid id parameter type ")
    return value