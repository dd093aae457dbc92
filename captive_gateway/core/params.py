"""Request parameter extraction and validation."""

import json
import logging
from collections.abc import Mapping
from typing import Any

from fastapi import Request
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from captive_gateway.core.errors import ErrorKind, ParamError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def collect_params(request: Request) -> dict[str, Any]:
    """Merge query string, form and JSON body parameters (body wins).

    Raises ParamError(PARAMS_UNREADABLE) for a body that cannot be parsed.
    """
    params: dict[str, Any] = dict(request.query_params)
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    # Starlette reports a malformed form body inside an app as HTTPException(400)
    try:
        if content_type in FORM_CONTENT_TYPES:
            form = await request.form()
            params.update(form.items())
        elif content_type == "application/json":
            body = await request.body()
            if body:
                data = json.loads(body)
                if not isinstance(data, dict):
                    raise ValueError("JSON body must be an object")
                params.update(data)
    except (ValueError, MultiPartException, HTTPException) as e:
        logger.error("Getting request params failed: %s", e)
        raise ParamError(ErrorKind.PARAMS_UNREADABLE) from e

    return params


def require_str(params: Mapping[str, Any], name: str) -> str:
    """Return a required string parameter.

    Raises ParamError(PARAM_MISSING) or ParamError(PARAM_TYPE_MISMATCH).
    """
    if name not in params:
        logger.error("'%s' not found in request params", name)
        raise ParamError(ErrorKind.PARAM_MISSING, name)
    value = params[name]
    if not isinstance(value, str):
        logger.error("Unexpected type for '%s': %s", name, type(value).__name__)
        raise ParamError(ErrorKind.PARAM_TYPE_MISMATCH, name)
    return value
