"""Encode and decode shareable report links (``?share=<base64>``)."""

import base64
import binascii
from urllib.parse import unquote, urlencode, urlsplit

import structlog

logger = structlog.get_logger(__name__)

SHARE_PARAM = "share"


def encode_share_link(text: str, base_url: str) -> str:
    """Return ``base_url`` with the report text embedded as a base64 query parameter."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    separator = "&" if urlsplit(base_url).query else "?"
    return f"{base_url}{separator}{urlencode({SHARE_PARAM: encoded})}"


def _share_value(query: str) -> str | None:
    """Return the raw ``share`` value, percent-decoded but with ``+`` kept literal.

    Links pasted from a browser often carry unescaped base64, where ``+`` is
    part of the payload rather than an encoded space.
    """
    for pair in query.split("&"):
        name, _, value = pair.partition("=")
        if unquote(name) == SHARE_PARAM and value:
            return unquote(value)
    return None


def decode_share_link(url: str) -> str | None:
    """Return the shared report text, or None when the link carries none or is corrupt."""
    value = _share_value(urlsplit(url).query)
    if value is None:
        return None
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        logger.warning("share.decode_failed", exc_info=True)
        return None


__all__ = ["SHARE_PARAM", "decode_share_link", "encode_share_link"]
