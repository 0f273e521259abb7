import base64
import json


def b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def token_claims(token: str) -> dict:
    """Decode the payload segment without verifying anything."""
    return json.loads(b64url_decode(token.split(".")[1]))


def tamper_payload(token: str, **changes) -> str:
    """Re-encode the payload with ``changes`` applied, keeping the old signature."""
    header, _, signature = token.split(".")
    claims = token_claims(token)
    claims.update(changes)
    payload = b64url_encode(json.dumps(claims, separators=(",", ":")).encode())
    return f"{header}.{payload}.{signature}"


def tamper_signature(token: str) -> str:
    """Change the first signature character so the decoded bytes differ."""
    header, payload, signature = token.split(".")
    first = "A" if signature[0] != "A" else "B"
    return f"{header}.{payload}.{first}{signature[1:]}"
