"""Base64 input sniffing.

Inputs arrive as text. When the text is base64, the decoded bytes are handed
to libmagic (python-magic) to decide whether the input is an image.
"""
from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Optional

import magic

log = logging.getLogger(__name__)

VALID_TYPES = [
    "text/plain",
    "application/json",
    "image/jpeg",
    "image/png",
]

_WHITESPACE = re.compile(r"\s+")


def _decode(value: str) -> Optional[bytes]:
    compact = _WHITESPACE.sub("", value or "")
    if not compact or len(compact) % 4:
        return None
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        return None


def is_base64(value: str) -> bool:
    return _decode(value) is not None


def detect_mime(data: bytes) -> str:
    """MIME type of raw bytes as reported by libmagic."""
    try:
        return magic.from_buffer(data, mime=True)
    except magic.MagicException as e:
        log.debug(f"MIME detection failed: {e}")
        return "application/octet-stream"


def infer_type(value: str) -> Optional[str]:
    """MIME type of base64 encoded ``value``, or None when it is not base64."""
    data = _decode(value)
    if data is None:
        return None
    mime = detect_mime(data)
    log.debug(f"Inferred {mime} from {len(data)} decoded bytes")
    return mime


def is_image_type(mime: Optional[str]) -> bool:
    return bool(mime and mime.startswith("image/"))


def resolve_input_type(value: str, declared: Optional[str] = None) -> str:
    """Declared type if any, the sniffed image type for base64 images, else text.

    Short plain text is often also valid base64, so anything that does not
    decode to an image is treated as text.
    """
    if declared:
        return declared
    inferred = infer_type(value)
    if is_image_type(inferred):
        return inferred
    return "text/plain"
