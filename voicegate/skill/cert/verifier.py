"""Request signature and signing certificate verification.

Steps, each failing fast with a specific AuthenticationError:
1. Certificate chain URL is on the platform's published host/path
2. Chain is fetched (or taken from cache) and validated: validity interval,
   certificate signature algorithm, signing domain, chain of trust
3. Detached signature verifies over the exact request body bytes
4. Claimed request timestamp lies within the allowed skew
"""

import base64
import binascii
import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError

from voicegate.core.config import VerifierConfig
from ..exceptions import AuthenticationError
from .cache import CertificateCache
from .fetch import CertificateFetcher, HttpCertificateFetcher
from .models import TrustedCertificate
from .url import validate_cert_url

log = logging.getLogger(__name__)


# Request signature algorithm name → hash used with RSA PKCS#1 v1.5
SIGNATURE_HASHES = {
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
}


class CertificateVerifier:
    """Authenticates a request against the platform's signing certificate.

    Args:
        config: Verifier configuration (trust roots, URL policy, skew).
        fetcher: Certificate chain fetcher. Defaults to HttpCertificateFetcher.
        cache: Optional certificate cache shared across requests.
    """

    def __init__(
        self,
        config: VerifierConfig,
        fetcher: Optional[CertificateFetcher] = None,
        cache: Optional[CertificateCache] = None,
    ):
        self._config = config
        self._fetcher = fetcher or HttpCertificateFetcher(
            timeout=config.cert_fetch_timeout_seconds,
            max_size_bytes=config.cert_max_size_bytes,
        )
        self._cache = cache
        self._store = Store(list(config.trusted_roots))

    async def verify(
        self,
        raw_body: bytes,
        signature: Union[str, bytes, None],
        cert_chain_url: str,
        claimed_timestamp: Optional[datetime],
        now: Optional[datetime] = None,
    ) -> TrustedCertificate:
        """Authenticate a request.

        Args:
            raw_body: Exact request body bytes as received.
            signature: Base64-encoded signature header value.
            cert_chain_url: Certificate chain URL header value.
            claimed_timestamp: Timestamp read from the (untrusted) body.
            now: Current time, injectable for tests (defaults to UTC now).

        Returns:
            The TrustedCertificate that signed the request.

        Raises:
            AuthenticationError: With the code of the first failing step.
        """
        now = _as_utc(now) if now is not None else datetime.now(timezone.utc)

        validate_cert_url(cert_chain_url, self._config)
        certificate = await self.resolve_certificate(cert_chain_url, now)
        verify_body_signature(raw_body, signature, certificate.public_key, self._config)
        check_timestamp(claimed_timestamp, now, self._config.timestamp_skew_seconds)

        log.info(
            f"request authenticated: cert={certificate.fingerprint[:16]}... "
            f"chain_depth={certificate.chain_depth}"
        )
        return certificate

    async def resolve_certificate(self, cert_chain_url: str, now: datetime) -> TrustedCertificate:
        """Return a verified certificate for the URL, from cache or network.

        Cached entries are re-checked against ``now`` and evicted when
        outside their validity interval.
        """
        if self._cache is not None:
            cached = await self._cache.get(cert_chain_url)
            if cached is not None:
                if not cached.is_valid_at(now):
                    await self._cache.invalidate(cached.fingerprint)
                    raise AuthenticationError.invalid_certificate(
                        f"cached certificate not valid at {now.isoformat()} "
                        f"(valid {cached.not_valid_before.isoformat()} to "
                        f"{cached.not_valid_after.isoformat()})"
                    )
                log.debug(f"certificate cache hit for {cert_chain_url}")
                return cached

        pem = await self._fetcher.fetch(cert_chain_url)
        certificate = self.validate_chain(pem, cert_chain_url, now)

        if self._cache is not None:
            await self._cache.put(certificate)
        return certificate

    def validate_chain(self, pem: bytes, cert_chain_url: str, now: datetime) -> TrustedCertificate:
        """Parse and validate a PEM chain (leaf first).

        Raises:
            AuthenticationError: INVALID_CERTIFICATE with the failing check.
        """
        try:
            certs = x509.load_pem_x509_certificates(pem)
        except ValueError as e:
            raise AuthenticationError.invalid_certificate(f"unparseable PEM chain: {e}")
        if not certs:
            raise AuthenticationError.invalid_certificate("PEM chain holds no certificates")

        leaf, intermediates = certs[0], certs[1:]

        not_before = leaf.not_valid_before_utc
        not_after = leaf.not_valid_after_utc
        if now < not_before:
            raise AuthenticationError.invalid_certificate(
                f"certificate not yet valid (not before {not_before.isoformat()})"
            )
        if now > not_after:
            raise AuthenticationError.invalid_certificate(
                f"certificate expired (not after {not_after.isoformat()})"
            )

        try:
            hash_algorithm = leaf.signature_hash_algorithm
        except UnsupportedAlgorithm as e:
            raise AuthenticationError.invalid_certificate(f"unsupported signature algorithm: {e}")
        if hash_algorithm is None or hash_algorithm.name not in self._config.cert_signature_hash_allowlist:
            name = hash_algorithm.name if hash_algorithm is not None else "none"
            raise AuthenticationError.invalid_certificate(
                f"certificate signature hash {name} not allowed"
            )

        public_key = leaf.public_key()
        if not isinstance(public_key, RSAPublicKey):
            raise AuthenticationError.invalid_certificate(
                f"unsupported public key type {type(public_key).__name__}"
            )

        if not covers_domain(leaf, self._config.signing_domain):
            raise AuthenticationError.invalid_certificate(
                f"subject alternative names do not cover {self._config.signing_domain}"
            )

        chain = self._build_chain(leaf, intermediates, now)

        return TrustedCertificate(
            certificate=leaf,
            public_key=public_key,
            not_valid_before=not_before,
            not_valid_after=not_after,
            chain_trusted=True,
            chain_depth=len(chain) - 1,
            domain_covered=True,
            fingerprint=leaf.fingerprint(hashes.SHA256()).hex(),
            chain_url=cert_chain_url,
        )

    def _build_chain(
        self,
        leaf: x509.Certificate,
        intermediates: List[x509.Certificate],
        now: datetime,
    ) -> List[x509.Certificate]:
        verifier = (
            PolicyBuilder()
            .store(self._store)
            .time(now)
            .max_chain_depth(self._config.max_chain_depth)
            .build_server_verifier(x509.DNSName(self._config.signing_domain))
        )
        try:
            return verifier.verify(leaf, intermediates)
        except VerificationError as e:
            raise AuthenticationError.invalid_certificate(f"chain of trust: {e}")


def covers_domain(certificate: x509.Certificate, domain: str) -> bool:
    """True if a SAN DNS name equals ``domain`` (case-insensitive)."""
    try:
        san = certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return False
    names = san.value.get_values_for_type(x509.DNSName)
    return domain.lower() in {name.lower() for name in names}


def verify_body_signature(
    raw_body: bytes,
    signature: Union[str, bytes, None],
    public_key: RSAPublicKey,
    config: VerifierConfig,
) -> None:
    """Verify a base64 detached signature over the exact body bytes.

    Raises:
        AuthenticationError: SIGNATURE_MISMATCH on a disallowed algorithm,
            undecodable signature or verification failure.
    """
    algorithm = config.signature_algorithm.upper()
    if algorithm not in config.allowed_signature_algorithms or algorithm not in SIGNATURE_HASHES:
        raise AuthenticationError.signature_mismatch(f"algorithm {algorithm} not allowed")

    if not signature:
        raise AuthenticationError.signature_mismatch("signature is missing")

    try:
        signature_bytes = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AuthenticationError.signature_mismatch(f"signature is not valid base64: {e}")

    try:
        public_key.verify(
            signature_bytes,
            raw_body,
            padding.PKCS1v15(),
            SIGNATURE_HASHES[algorithm](),
        )
    except InvalidSignature:
        raise AuthenticationError.signature_mismatch("signature does not match request body")


def check_timestamp(
    claimed_timestamp: Optional[datetime],
    now: datetime,
    skew_seconds: int,
) -> None:
    """Accept timestamps with ``|now - claimed| <= skew_seconds``.

    Raises:
        AuthenticationError: TIMESTAMP_OUT_OF_RANGE when missing or outside.
    """
    if claimed_timestamp is None:
        raise AuthenticationError.timestamp_out_of_range("request timestamp is missing")

    drift = abs((_as_utc(now) - _as_utc(claimed_timestamp)).total_seconds())
    if drift > skew_seconds:
        raise AuthenticationError.timestamp_out_of_range(
            f"drift {drift:.0f}s exceeds {skew_seconds}s "
            f"(timestamp={claimed_timestamp.isoformat()}, now={now.isoformat()})"
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
