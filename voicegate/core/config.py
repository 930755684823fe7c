"""
voicegate configuration constants.

Constants are organized into:
- PLATFORM: Fixed by the voice platform's request-signing scheme
- CONFIGURABLE: Defaults that a deployment may override
- POLICY: Implementation choices (timeouts, cache sizes)
- OPERATIONAL: Deployment-specific settings (env vars)

Nothing here is read implicitly by the verifier. Callers build a
VerifierConfig (directly or via VerifierConfig.from_env()) and pass it in.
"""

import os
import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from cryptography import x509

# =============================================================================
# PLATFORM CONSTANTS (fixed by the request-signing scheme)
# =============================================================================

# Signing certificate chains are only ever published on this host/port
SIGNING_CERT_URL_SCHEME: str = "https"
SIGNING_CERT_URL_HOST: str = "s3.amazonaws.com"
SIGNING_CERT_URL_PORT: int = 443

# Path prefix is compared case-sensitively after dot-segment normalization
SIGNING_CERT_URL_PATH_PREFIX: str = "/echo.api/"

# The leaf certificate's SAN must cover this DNS name
SIGNING_DOMAIN: str = "echo-api.amazon.com"

# Request signature algorithms (hash names as sent in the signature header family)
# "SHA256" corresponds to the Signature-256 header; SHA-1 signatures are not accepted
SIGNATURE_ALGORITHM: str = "SHA256"
ALLOWED_SIGNATURE_ALGORITHMS: frozenset[str] = frozenset({"SHA256"})

# Hash algorithms accepted in the signing certificate's own signature
CERT_SIGNATURE_HASH_ALLOWLIST: frozenset[str] = frozenset({"sha256", "sha384", "sha512"})

# =============================================================================
# CONFIGURABLE DEFAULTS
# =============================================================================

# Allowed difference between request timestamp and verifier clock (inclusive)
TIMESTAMP_SKEW_SECONDS: int = 150

# Maximum number of intermediates between leaf and trust root
MAX_CHAIN_DEPTH: int = 5

# =============================================================================
# POLICY CONSTANTS
# =============================================================================

CERT_FETCH_TIMEOUT_SECONDS: float = 5.0
CERT_MAX_SIZE_BYTES: int = 65_536  # 64 KB, a PEM chain is a few KB

CERT_CACHE_TTL_SECONDS: int = 3600
CERT_CACHE_MAX_ENTRIES: int = 32

# =============================================================================
# OPERATIONAL SETTINGS (deployment-specific, via environment variables)
# =============================================================================


def _parse_application_ids() -> frozenset[str]:
    """Parse comma-separated expected application IDs from environment.

    Environment variable format:
        VOICEGATE_APPLICATION_IDS=amzn1.ask.skill.1234,amzn1.ask.skill.5678

    Returns:
        frozenset of application ID strings (empty if unset).
    """
    env_value = os.getenv("VOICEGATE_APPLICATION_IDS", "")
    return frozenset(a.strip() for a in env_value.split(",") if a.strip())


def load_trusted_roots(path: str) -> Tuple[x509.Certificate, ...]:
    """Load every certificate from a PEM bundle.

    Raises:
        ValueError: If the file holds no certificates.
    """
    data = Path(path).read_bytes()
    roots = tuple(x509.load_pem_x509_certificates(data))
    if not roots:
        raise ValueError(f"no certificates found in trust bundle {path}")
    return roots


def _default_roots_file() -> Optional[str]:
    explicit = os.getenv("VOICEGATE_TRUSTED_ROOTS_FILE")
    if explicit:
        return explicit
    # Fall back to the interpreter's CA bundle
    return ssl.get_default_verify_paths().cafile


@dataclass(frozen=True)
class VerifierConfig:
    """Explicit configuration threaded into the verifier and pipeline.

    Attributes:
        application_ids: Expected application identifiers (exact match).
        trusted_roots: Trust anchors for the signing certificate chain.
        timestamp_skew_seconds: Allowed clock skew, inclusive.
        signature_algorithm: Algorithm the platform signs requests with.
        allowed_signature_algorithms: Allow-list for signature_algorithm.
        cert_url_host / cert_url_port / cert_url_path_prefix: Where signing
            certificates may be fetched from.
        signing_domain: DNS name the leaf certificate SAN must cover.
        max_chain_depth: Maximum intermediates between leaf and root.
        cert_fetch_timeout_seconds / cert_max_size_bytes: Fetch limits.
    """
    application_ids: frozenset[str]
    trusted_roots: Tuple[x509.Certificate, ...]
    timestamp_skew_seconds: int = TIMESTAMP_SKEW_SECONDS
    signature_algorithm: str = SIGNATURE_ALGORITHM
    allowed_signature_algorithms: frozenset[str] = ALLOWED_SIGNATURE_ALGORITHMS
    cert_signature_hash_allowlist: frozenset[str] = CERT_SIGNATURE_HASH_ALLOWLIST
    cert_url_scheme: str = SIGNING_CERT_URL_SCHEME
    cert_url_host: str = SIGNING_CERT_URL_HOST
    cert_url_port: int = SIGNING_CERT_URL_PORT
    cert_url_path_prefix: str = SIGNING_CERT_URL_PATH_PREFIX
    signing_domain: str = SIGNING_DOMAIN
    max_chain_depth: int = MAX_CHAIN_DEPTH
    cert_fetch_timeout_seconds: float = CERT_FETCH_TIMEOUT_SECONDS
    cert_max_size_bytes: int = CERT_MAX_SIZE_BYTES
    cache_ttl_seconds: int = CERT_CACHE_TTL_SECONDS
    cache_max_entries: int = CERT_CACHE_MAX_ENTRIES

    def __post_init__(self):
        if not self.trusted_roots:
            raise ValueError("VerifierConfig requires at least one trusted root")
        if self.timestamp_skew_seconds < 0:
            raise ValueError("timestamp_skew_seconds must not be negative")

    @classmethod
    def from_env(cls) -> "VerifierConfig":
        """Build a config from VOICEGATE_* environment variables.

        Raises:
            ValueError: If no trust bundle can be located.
        """
        roots_file = _default_roots_file()
        if not roots_file:
            raise ValueError(
                "set VOICEGATE_TRUSTED_ROOTS_FILE to a PEM bundle of trusted roots"
            )
        return cls(
            application_ids=_parse_application_ids(),
            trusted_roots=load_trusted_roots(roots_file),
            timestamp_skew_seconds=int(
                os.getenv("VOICEGATE_TIMESTAMP_SKEW", str(TIMESTAMP_SKEW_SECONDS))
            ),
            cert_fetch_timeout_seconds=float(
                os.getenv("VOICEGATE_CERT_FETCH_TIMEOUT", str(CERT_FETCH_TIMEOUT_SECONDS))
            ),
        )
