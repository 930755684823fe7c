"""Signing certificate verification.

Components:
- url: certificate chain URL policy
- fetch: HTTP retrieval of PEM chains
- cache: verified certificate cache
- verifier: chain, signature and timestamp verification
"""

from .cache import CacheConfig, CertificateCache
from .fetch import CertificateFetcher, HttpCertificateFetcher
from .models import TrustedCertificate
from .url import validate_cert_url
from .verifier import (
    CertificateVerifier,
    check_timestamp,
    covers_domain,
    verify_body_signature,
)

__all__ = [
    "CacheConfig",
    "CertificateCache",
    "CertificateFetcher",
    "CertificateVerifier",
    "HttpCertificateFetcher",
    "TrustedCertificate",
    "check_timestamp",
    "covers_domain",
    "validate_cert_url",
    "verify_body_signature",
]
