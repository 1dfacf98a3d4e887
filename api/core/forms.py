"""
Request payload parsing for write endpoints that accept uploads.

Create/update endpoints take either a JSON body or a multipart form where
text parts are model fields and file parts are uploads.
"""

from __future__ import annotations

import json
from typing import TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

ModelT = TypeVar("ModelT", bound=BaseModel)

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_payload(
    request: Request,
    schema: type[ModelT],
) -> tuple[ModelT, dict[str, list[UploadFile]]]:
    """
    Return (validated model, uploads grouped by field name).
    """
    content_type = request.headers.get("content-type", "").lower()
    files: dict[str, list[UploadFile]] = {}

    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        data: dict = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                # Browsers send an empty part for untouched file inputs.
                if value.filename:
                    files.setdefault(key, []).append(value)
                continue
            data[key] = value
    else:
        body = await request.body()
        try:
            data = json.loads(body) if body else {}
        except json.JSONDecodeError as exc:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON body.", "input": None}]
            ) from exc

    if not isinstance(data, dict):
        raise RequestValidationError(
            [{"type": "dict_type", "loc": ("body",), "msg": "Body must be an object.", "input": None}]
        )

    try:
        payload = schema.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc
    return payload, files
