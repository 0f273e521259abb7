"""Structural checks and unverified decoding for compact JWS tokens.

Everything here runs before (or instead of) signature verification, so it
only bounds sizes and shapes and never trusts what it decodes.
"""

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Final

from src.onboarding.core.exceptions import TokenMalformed

MAX_JWT_CHARS: Final = 4096
MAX_HEADER_BYTES: Final = 8 * 1024
MAX_PAYLOAD_BYTES: Final = 64 * 1024
MAX_SIGNATURE_BYTES: Final = 512

# base64url alphabet plus the segment separator; padding is not allowed
_TOKEN_ALPHABET: Final = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_."
)


def prefilter_compact_jwt(token: str) -> tuple[str, str, str]:
    """Split ``header.payload.signature`` or raise TokenMalformed.

    Rejects oversized tokens, characters outside base64url, anything but
    exactly three segments, and empty segments.
    """
    if not isinstance(token, str) or not token or len(token) > MAX_JWT_CHARS:
        raise TokenMalformed(detail="Invalid JWT size")
    if not _TOKEN_ALPHABET.issuperset(token):
        raise TokenMalformed(detail="Invalid JWT characters")

    segments = token.split(".")
    if len(segments) != 3 or not all(segments):
        raise TokenMalformed(detail="Invalid JWT format")

    header, payload, signature = segments
    return header, payload, signature


def b64url_decode(segment: str, what: str, max_bytes: int) -> bytes:
    # decoded size is at most 3/4 of the encoded length
    if len(segment) * 3 // 4 > max_bytes:
        raise TokenMalformed(detail=f"{what} too large")
    try:
        return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
    except (binascii.Error, ValueError) as e:
        raise TokenMalformed(detail=f"Invalid base64url in {what}") from e


def is_canonical_b64url(segment: str, raw: bytes) -> bool:
    """True when ``segment`` is the one unpadded encoding of ``raw``.

    The final character of a segment carries unused bits that decoders
    ignore, so several encodings decode to the same bytes.
    """
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") == segment


def decode_json_object(raw: bytes, what: str) -> dict[str, Any]:
    """Parse ``raw`` as a UTF-8 JSON object."""
    try:
        obj = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise TokenMalformed(detail=f"Non-UTF8 {what}") from e
    except json.JSONDecodeError as e:
        raise TokenMalformed(detail=f"Invalid JSON in {what}") from e

    if not isinstance(obj, dict):
        raise TokenMalformed(detail=f"{what} must be a JSON object")
    return obj


@dataclass(frozen=True)
class JwtPreview:
    header: dict[str, Any]
    claims: dict[str, Any]

    @property
    def alg(self) -> str | None:
        return self.header.get("alg")


def preview_jwt(token: str) -> JwtPreview:
    """Decode header and claims WITHOUT verifying the signature.

    For diagnostics only; nothing returned here may be trusted.
    """
    header_seg, payload_seg, _ = prefilter_compact_jwt(token)
    header = decode_json_object(
        b64url_decode(header_seg, "JWT header", MAX_HEADER_BYTES),
        "JWT header",
    )
    claims = decode_json_object(
        b64url_decode(payload_seg, "JWT payload", MAX_PAYLOAD_BYTES),
        "JWT payload",
    )
    return JwtPreview(header=header, claims=claims)
