"""Shared fixtures: a throwaway PKI, signed request bodies and test doubles."""

import base64
import json
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from voicegate.core.config import VerifierConfig
from voicegate.skill.cert import CertificateVerifier
from voicegate.skill.exceptions import AuthenticationError

SIGNING_DOMAIN = "echo-api.amazon.com"
CERT_URL = "https://s3.amazonaws.com/echo.api/echo-api-cert.pem"
APP_ID = "amzn1.ask.skill.00000000-1111-2222-3333-444444444444"
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Certificate helpers
# =============================================================================

def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def build_ca(
    common_name: str,
    key: rsa.RSAPrivateKey,
    issuer: Optional[x509.Certificate] = None,
    issuer_key: Optional[rsa.RSAPrivateKey] = None,
) -> x509.Certificate:
    """Build a CA certificate, self-signed unless an issuer is given."""
    ski = x509.SubjectKeyIdentifier.from_public_key(key.public_key())
    if issuer is None:
        issuer_name, signing_key, aki = _name(common_name), key, ski
    else:
        issuer_name = issuer.subject
        signing_key = issuer_key
        aki = issuer.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value

    return (
        x509.CertificateBuilder()
        .subject_name(_name(common_name))
        .issuer_name(issuer_name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(NOW - timedelta(days=365))
        .not_valid_after(NOW + timedelta(days=3650))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=False,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(ski, critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(aki),
            critical=False,
        )
        .sign(signing_key, hashes.SHA256())
    )


def build_leaf(
    issuer: x509.Certificate,
    issuer_key: rsa.RSAPrivateKey,
    key: rsa.RSAPrivateKey,
    dns_names: Sequence[str] = (SIGNING_DOMAIN,),
    not_before: datetime = NOW - timedelta(days=30),
    not_after: datetime = NOW + timedelta(days=300),
) -> x509.Certificate:
    """Build a signing (end-entity) certificate."""
    issuer_ski = issuer.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value
    builder = (
        x509.CertificateBuilder()
        .subject_name(_name(dns_names[0] if dns_names else "no-san.example.com"))
        .issuer_name(issuer.subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=True,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=False,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_subject_key_identifier(issuer_ski),
            critical=False,
        )
    )
    if dns_names:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(n) for n in dns_names]),
            critical=False,
        )
    return builder.sign(issuer_key, hashes.SHA256())


def to_pem(*certs: x509.Certificate) -> bytes:
    return b"".join(c.public_bytes(serialization.Encoding.PEM) for c in certs)


def sign_body(key: rsa.RSAPrivateKey, body: bytes, algorithm=hashes.SHA256) -> str:
    """Base64 RSA PKCS#1 v1.5 signature over body, as the platform sends it."""
    signature = key.sign(body, padding.PKCS1v15(), algorithm())
    return base64.b64encode(signature).decode("ascii")


# =============================================================================
# Request body helpers
# =============================================================================

def make_request_dict(
    request_type: str = "IntentRequest",
    timestamp: datetime = NOW,
    application_id: Optional[str] = APP_ID,
    intent: Optional[dict] = None,
    **request_fields,
) -> dict:
    """Build a decoded platform request."""
    request = {
        "type": request_type,
        "requestId": "amzn1.echo-api.request.0001",
        "timestamp": timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "locale": "en-US",
    }
    if request_type == "IntentRequest":
        request["intent"] = intent if intent is not None else {
            "name": "GetWeather",
            "slots": [
                {"name": "city", "value": "Seattle"},
                {"name": "unit"},
            ],
        }
    request.update(request_fields)

    session = {
        "new": True,
        "sessionId": "amzn1.echo-api.session.0001",
        "attributes": {"turn": 1},
        "user": {"userId": "amzn1.ask.account.0001"},
    }
    if application_id is not None:
        session["application"] = {"applicationId": application_id}

    return {"version": "1.0", "session": session, "request": request}


def encode(data: dict) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode("utf-8")


# =============================================================================
# Test doubles
# =============================================================================

class StaticFetcher:
    """CertificateFetcher returning fixed PEM documents and counting calls."""

    def __init__(self, documents: Dict[str, bytes], error: Optional[Exception] = None):
        self.documents = documents
        self.error = error
        self.calls: List[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        if url not in self.documents:
            raise AuthenticationError.fetch_failed(f"HTTP 404 from {url}")
        return self.documents[url]


class RecordingSanitizer:
    """Sanitizer that strips angle brackets and records every input."""

    def __init__(self):
        self.seen: List[str] = []

    def sanitize(self, text: str) -> str:
        self.seen.append(text)
        return text.replace("<", "").replace(">", "")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def root_key():
    return _key()


@pytest.fixture(scope="session")
def root_cert(root_key):
    return build_ca("Test Signing Root", root_key)


@pytest.fixture(scope="session")
def leaf_key():
    return _key()


@pytest.fixture(scope="session")
def leaf_cert(root_cert, root_key, leaf_key):
    return build_leaf(root_cert, root_key, leaf_key)


@pytest.fixture(scope="session")
def chain_pem(leaf_cert):
    return to_pem(leaf_cert)


@pytest.fixture(scope="session")
def other_key():
    return _key()


@pytest.fixture
def config(root_cert):
    return VerifierConfig(
        application_ids=frozenset({APP_ID}),
        trusted_roots=(root_cert,),
    )


@pytest.fixture
def fetcher(chain_pem):
    return StaticFetcher({CERT_URL: chain_pem})


@pytest.fixture
def trusted_certificate(config, chain_pem):
    verifier = CertificateVerifier(config, fetcher=StaticFetcher({}))
    return verifier.validate_chain(chain_pem, CERT_URL, NOW)


@pytest.fixture
def sanitizer():
    return RecordingSanitizer()
