"""Read URL signers for stored media objects."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Protocol
from urllib.parse import quote

from botocore.signers import CloudFrontSigner
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from ..config import CdnSettings
from ..exceptions import SeverityLevel, SigningError
from .media_models import SignedUrl


class UrlSigner(Protocol):
    """Produces a time-limited read URL for an object key."""

    def presign_read(self, key: str) -> SignedUrl: ...


def _rsa_sha1_signer(private_key: RSAPrivateKey) -> Callable[[bytes], bytes]:
    # CloudFront canned policies are verified with RSA-SHA1.
    def sign(message: bytes) -> bytes:
        return private_key.sign(message, padding.PKCS1v15(), hashes.SHA1())

    return sign


@dataclass(slots=True)
class CloudFrontUrlSigner:
    """Signs CDN URLs with a canned policy expiring after ``ttl_seconds``."""

    domain: str
    key_pair_id: str
    private_key_pem: bytes
    ttl_seconds: int = 3600
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    _signer: CloudFrontSigner = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            private_key = serialization.load_pem_private_key(self.private_key_pem, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SigningError(
                "CloudFront private key could not be loaded",
                url=self.domain,
                severity=SeverityLevel.CRITICAL,
            ) from exc
        if not isinstance(private_key, RSAPrivateKey):
            raise SigningError(
                "CloudFront private key must be an RSA key",
                url=self.domain,
                severity=SeverityLevel.CRITICAL,
            )
        self._signer = CloudFrontSigner(self.key_pair_id, _rsa_sha1_signer(private_key))

    @classmethod
    def from_settings(cls, settings: CdnSettings, *, ttl_seconds: int) -> "CloudFrontUrlSigner":
        return cls(
            domain=settings.domain,
            key_pair_id=settings.key_pair_id,
            private_key_pem=settings.private_key_path.read_bytes(),
            ttl_seconds=ttl_seconds,
        )

    def resource_url(self, key: str) -> str:
        base = self.domain if self.domain.startswith(("http://", "https://")) else f"https://{self.domain}"
        return f"{base.rstrip('/')}/{quote(key)}"

    def presign_read(self, key: str) -> SignedUrl:
        url = self.resource_url(key)
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.ttl_seconds)
        try:
            signed = self._signer.generate_presigned_url(url, date_less_than=expires_at)
        except (ValueError, TypeError) as exc:
            self.log.error("media.cdn.sign_failed", extra={"key": key, "error": str(exc)})
            raise SigningError(f"Failed to sign CDN URL for '{key}'", url=url) from exc
        return SignedUrl(url=signed, expires_at=expires_at)
