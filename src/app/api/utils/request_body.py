"""Parsing of create/update request bodies.

Book writes accept JSON, URL-encoded forms, or multipart forms carrying one
optional file part named ``image``.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from src.app.core.errors import InvalidRequestShape

IMAGE_FIELD = "image"
FORM_MEDIA_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


@dataclass
class BookRequest:
    fields: dict[str, Any] = field(default_factory=dict)
    image: UploadFile | None = None


def media_type_of(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


async def read_book_request(request: Request) -> BookRequest:
    """Split a request body into plain fields and the optional image part.

    Raises:
        InvalidRequestShape: for malformed JSON or multipart bodies, a JSON
            body that is not an object, an unsupported content type, or a
            file part under any name other than ``image``.
    """
    media_type = media_type_of(request)
    if media_type in FORM_MEDIA_TYPES:
        return await _read_form(request)

    body = await request.body()
    if not body.strip():
        return BookRequest()
    if media_type != "application/json" and not media_type.endswith("+json"):
        raise InvalidRequestShape(f"Unsupported content type: {media_type or 'none'}")

    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise InvalidRequestShape("Malformed JSON body") from None
    if not isinstance(payload, dict):
        raise InvalidRequestShape("Request body must be a JSON object")
    return BookRequest(fields=payload)


async def _read_form(request: Request) -> BookRequest:
    try:
        form = await request.form()
    except (MultiPartException, StarletteHTTPException) as exc:
        detail = getattr(exc, "message", None) or getattr(exc, "detail", None)
        raise InvalidRequestShape(f"Malformed form body: {detail}") from exc

    parsed = BookRequest()
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key != IMAGE_FIELD:
                raise InvalidRequestShape(f"Unexpected field: {key}")
            # browsers send an empty, unnamed part when no file was picked
            if not value.filename:
                continue
            if parsed.image is not None:
                raise InvalidRequestShape(f"Unexpected field: {key}")
            parsed.image = value
        else:
            parsed.fields[key] = value
    return parsed
