"""Request body classification and parsing."""

from typing import Any
from urllib.parse import parse_qs

import orjson
from pydantic import BaseModel, ValidationError

from http_message.core.exceptions import InvalidInputError
from http_message.models.core import BodyType

_FORM_TYPES = frozenset(["application/x-www-form-urlencoded", "multipart/form-data"])


def detect_body_type(content_type: str | None) -> BodyType:
    """Classify a Content-Type header value."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()

    match media_type:
        case "application/json":
            return BodyType.JSON
        case _ if media_type.endswith("+json"):
            return BodyType.JSON
        case _ if media_type in _FORM_TYPES:
            return BodyType.FORM
        case _:
            return BodyType.RAW


def parse_body(raw: bytes | str, content_type: str | None, model: type[BaseModel] | None = None) -> Any:
    """Parse a raw body into the structure stored as a request's parsed body.

    Returns ``None`` for empty or unstructured bodies. Multipart bodies are
    left to the transport, which hands over fields and files already split.
    """
    if not raw:
        return None

    match detect_body_type(content_type):
        case BodyType.JSON if model is not None:
            try:
                return model.model_validate_json(raw)
            except ValidationError as ex:
                raise InvalidInputError(f"Request body does not match {model.__name__}: {ex}") from ex
        case BodyType.JSON:
            try:
                parsed = orjson.loads(raw)
            except orjson.JSONDecodeError as ex:
                raise InvalidInputError(f"Request body is not valid JSON: {ex}") from ex
            if not isinstance(parsed, (dict, list)):
                raise InvalidInputError("Request body must be a JSON object or array")
            return parsed
        case BodyType.FORM if "multipart/" not in (content_type or ""):
            text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
            return parse_qs(text, keep_blank_values=True)
        case _:
            return None
