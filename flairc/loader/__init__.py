# flairc/loader/__init__.py
"""
flairc.loader
=============

Extraction Loader: the last hop of extraction.  An earlier step encodes a
hook's literal CSS as base64 into the `css` query parameter of a synthetic
resource request; this hands the decoded bytes back to the host pipeline's
CSS loaders.  The text is neither parsed nor validated.

Missing or malformed payloads decode to empty content: style data must never
break an otherwise working build.
"""

from __future__ import annotations

import base64
import binascii
from urllib.parse import parse_qs

from flairc.logger import get_logger

logger = get_logger(__name__)

PARAM = "css"


def _query(resource: str) -> str:
    """`/a/b.css?css=…` → `css=…`; a bare query is returned as-is."""
    if "?" in resource:
        return resource.split("?", 1)[1]
    return resource


def load(resource: str) -> bytes:
    values = parse_qs(_query(resource)).get(PARAM)
    if not values or not values[0]:
        logger.debug(f"loader: no {PARAM!r} parameter in {resource[:80]!r}")
        return b""

    # `+` arrives as a space after query decoding; stripped padding is restored.
    payload = values[0].replace(" ", "+")
    altchars = None
    if "-" in payload or "_" in payload:
        if "+" in payload or "/" in payload:
            logger.debug(f"loader: {PARAM!r} payload mixes base64 alphabets")
            return b""
        altchars = b"-_"
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(payload, altchars=altchars, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.debug(f"loader: undecodable {PARAM!r} payload ({e})")
        return b""
