"""Segment-wise base64url helpers for inspecting compact JOSE envelopes.

These work outside the regular compact serialization path, e.g. to look at a
header before choosing a key or to rebuild an envelope after editing one of
its segments.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Union

from jwcrypto.common import base64url_decode, base64url_encode

SEGMENT_SEPARATOR = "."


def split_segments(envelope: str) -> List[bytes]:
    """Decode every dot-separated segment of ``envelope`` into raw bytes."""
    return [base64url_decode(part) for part in envelope.split(SEGMENT_SEPARATOR)]


def join_segments(parts: Iterable[Union[bytes, str]]) -> str:
    """Encode raw segments and join them back into a compact envelope."""
    encoded = []
    for part in parts:
        if isinstance(part, str):
            part = part.encode("utf-8")
        encoded.append(base64url_encode(part))
    return SEGMENT_SEPARATOR.join(encoded)


def decode_header(envelope: str) -> Dict[str, Any]:
    """Return the (unverified) protected header of a compact envelope."""
    header_segment = envelope.split(SEGMENT_SEPARATOR, 1)[0]
    header = json.loads(base64url_decode(header_segment))
    if not isinstance(header, dict):
        raise ValueError("Envelope header is not a JSON object")
    return header
