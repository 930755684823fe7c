"""Verified signing certificate model."""

from dataclasses import dataclass
from datetime import datetime

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey


@dataclass(frozen=True)
class TrustedCertificate:
    """Signing certificate that passed chain, domain and validity checks.

    Attributes:
        certificate: The leaf certificate.
        public_key: Leaf public key used for request signatures.
        not_valid_before: Start of the validity interval (UTC).
        not_valid_after: End of the validity interval (UTC).
        chain_trusted: Whether the chain reached a configured trust root.
        chain_depth: Number of certificates above the leaf in the built chain.
        domain_covered: Whether the SAN covers the signing domain.
        fingerprint: Hex SHA-256 fingerprint of the leaf (DER).
        chain_url: URL the chain was fetched from.
    """
    certificate: x509.Certificate
    public_key: RSAPublicKey
    not_valid_before: datetime
    not_valid_after: datetime
    chain_trusted: bool
    chain_depth: int
    domain_covered: bool
    fingerprint: str
    chain_url: str

    def is_valid_at(self, now: datetime) -> bool:
        """True if ``now`` lies inside the validity interval (inclusive)."""
        return self.not_valid_before <= now <= self.not_valid_after
