"""Stateless issuance and validation of signed claim sets."""

import hashlib
import hmac
import time
from collections.abc import Callable, Mapping
from typing import Any

from authlib.jose import JsonWebSignature, JsonWebToken, JWTClaims
from authlib.jose.errors import BadSignatureError, ExpiredTokenError, JoseError
from loguru import logger

from src.onboarding.core.exceptions import (
    ConfigurationError,
    TokenExpired,
    TokenMalformed,
    TokenSignatureInvalid,
)
from src.onboarding.core.services.jwt.jwt_utils import (
    MAX_HEADER_BYTES,
    MAX_PAYLOAD_BYTES,
    MAX_SIGNATURE_BYTES,
    b64url_decode,
    decode_json_object,
    is_canonical_b64url,
    prefilter_compact_jwt,
)
from src.onboarding.runtime.config.config_data import TokenConfig

_HMAC_DIGESTS = {
    "HS256": hashlib.sha256,
    "HS384": hashlib.sha384,
    "HS512": hashlib.sha512,
}


class TokenCodec:
    """Issue and validate HS-signed JWTs carrying caller-supplied claims.

    Only ``exp`` is added to the issued claim set, so a token validated before
    its expiry yields exactly the claims it was issued with plus ``exp``.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        clock_skew: int = 0,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ConfigurationError("JWT signing secret not configured")
        if algorithm not in _HMAC_DIGESTS:
            raise ConfigurationError(f"Unsupported signing algorithm: {algorithm}")

        self._secret = secret
        self._algorithm = algorithm
        self._clock_skew = clock_skew
        self._clock = clock
        self._jwt = JsonWebToken([algorithm])
        self._jws = JsonWebSignature([algorithm])

    @classmethod
    def from_config(
        cls, config: TokenConfig, clock: Callable[[], float] = time.time
    ) -> "TokenCodec":
        return cls(
            secret=config.signing_secret,
            algorithm=config.algorithm,
            clock_skew=config.clock_skew,
            clock=clock,
        )

    def now(self) -> int:
        return int(self._clock())

    def issue(self, claims: Mapping[str, Any], ttl: int) -> str:
        """Sign ``claims`` with an expiry of now + ``ttl`` seconds.

        Args:
            claims: Claim set to embed
            ttl: Token lifetime in seconds

        Returns:
            Compact-serialized signed token
        """
        token, _ = self.issue_with_expiry(claims, ttl)
        return token

    def issue_with_expiry(
        self, claims: Mapping[str, Any], ttl: int
    ) -> tuple[str, int]:
        """Like :meth:`issue`, also returning the ``exp`` embedded in the token."""
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        payload = dict(claims)
        expires_at = self.now() + ttl
        payload["exp"] = expires_at

        header = {"alg": self._algorithm, "typ": "JWT"}
        # Natural keys are tax ids, which authlib's sensitive-value scan flags
        token = self._jwt.encode(header, payload, self._secret, check=False)

        # authlib returns bytes, decode to string
        token = token.decode() if isinstance(token, bytes) else token
        return token, expires_at

    def _verify_signature(
        self, header_seg: str, payload_seg: str, signature_seg: str
    ) -> None:
        # runs over the raw segments, before any header field is trusted
        signature = b64url_decode(signature_seg, "JWT signature", MAX_SIGNATURE_BYTES)
        expected = hmac.new(
            self._secret.encode("utf-8"),
            f"{header_seg}.{payload_seg}".encode("ascii"),
            _HMAC_DIGESTS[self._algorithm],
        ).digest()
        if not is_canonical_b64url(signature_seg, signature) or not hmac.compare_digest(
            expected, signature
        ):
            logger.debug("JWT signature mismatch")
            raise TokenSignatureInvalid(detail="signature mismatch")

    def validate(self, token: str) -> dict[str, Any]:
        """Verify ``token`` and return its claims.

        The HMAC is checked over the raw header and payload segments before
        either is decoded, so any altered character fails as a signature
        mismatch. Then ``exp`` is checked against the current time.

        Raises:
            TokenMalformed: Structurally invalid token or missing/invalid claims
            TokenSignatureInvalid: Signature does not match
            TokenExpired: ``exp`` is in the past
        """
        header_seg, payload_seg, signature_seg = prefilter_compact_jwt(token)
        self._verify_signature(header_seg, payload_seg, signature_seg)

        for segment, what, max_bytes in (
            (header_seg, "JWT header", MAX_HEADER_BYTES),
            (payload_seg, "JWT payload", MAX_PAYLOAD_BYTES),
        ):
            if not is_canonical_b64url(segment, b64url_decode(segment, what, max_bytes)):
                raise TokenMalformed(detail=f"Non-canonical base64url in {what}")

        try:
            jws_object = self._jws.deserialize_compact(token, self._secret)
        except BadSignatureError as exc:
            raise TokenSignatureInvalid(detail="signature mismatch") from exc
        except (JoseError, ValueError) as exc:
            raise TokenMalformed(detail=f"JWT error: {exc}") from exc

        payload_claims = decode_json_object(jws_object["payload"], "JWT payload")

        claims = JWTClaims(
            payload_claims,
            jws_object["header"],
            options={"exp": {"essential": True}},
        )
        try:
            claims.validate(now=self.now(), leeway=self._clock_skew)
        except ExpiredTokenError as exc:
            raise TokenExpired(detail=f"expired at {claims.get('exp')}") from exc
        except JoseError as exc:
            raise TokenMalformed(detail=f"JWT error: {exc}") from exc

        return dict(claims)
