"""Format codec -- converts raw bytes to and from typed values.

The declared :class:`~resourcecache.models.FormatTag` is authoritative:
unlike a content sniffer, :func:`decode` never falls back from JSON to YAML
or the other way round.  Reserved tags fail with
:class:`~resourcecache.exceptions.UnsupportedFormatError`.

When a Pydantic model is supplied, the decoded document is validated into
it and validation errors are reported as
:class:`~resourcecache.exceptions.ParseError`.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ValidationError

from resourcecache.exceptions import ParseError, UnsupportedFormatError
from resourcecache.models import FormatTag


def decode(
    data: bytes,
    format_tag: FormatTag,
    model: Optional[type[BaseModel]] = None,
) -> Any:
    """Decode *data* according to *format_tag*.

    Args:
        data: Raw bytes, expected to be UTF-8 text.
        format_tag: The declared format.
        model: Optional Pydantic model the document is validated into.

    Returns:
        The decoded object, or a *model* instance.

    Raises:
        ParseError: If the bytes are malformed for the format or fail model
            validation.
        UnsupportedFormatError: If *format_tag* is reserved.
    """
    format_tag = FormatTag(format_tag)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"Content is not valid UTF-8 {format_tag.value}", cause=exc) from exc

    if format_tag is FormatTag.JSON:
        try:
            document = json.loads(text)
        except (ValueError, RecursionError) as exc:
            # JSONDecodeError is a ValueError; so is the integer digit limit
            raise ParseError("Invalid JSON", cause=exc) from exc
    elif format_tag is FormatTag.YAML:
        try:
            document = yaml.safe_load(text)
        except (yaml.YAMLError, ValueError, RecursionError) as exc:
            raise ParseError("Invalid YAML", cause=exc) from exc
    else:
        raise UnsupportedFormatError(f"Format '{format_tag.value}' is not supported yet")

    if model is None:
        return document
    try:
        return model.model_validate(document)
    except ValidationError as exc:
        raise ParseError(
            f"{format_tag.value.upper()} document does not match {model.__name__}", cause=exc
        ) from exc


def encode(value: Any, format_tag: FormatTag) -> bytes:
    """Encode *value* according to *format_tag*.

    Pydantic models are dumped in JSON mode first so that the output only
    contains plain JSON/YAML types.

    Raises:
        ParseError: If the value cannot be represented in the format.
        UnsupportedFormatError: If *format_tag* is reserved.
    """
    format_tag = FormatTag(format_tag)
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")

    if format_tag is FormatTag.JSON:
        try:
            return json.dumps(value, indent=2).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ParseError("Value is not JSON serialisable", cause=exc) from exc
    if format_tag is FormatTag.YAML:
        try:
            return yaml.safe_dump(value, sort_keys=False, allow_unicode=True).encode("utf-8")
        except yaml.YAMLError as exc:
            raise ParseError("Value is not YAML serialisable", cause=exc) from exc
    raise UnsupportedFormatError(f"Format '{format_tag.value}' is not supported yet")
