"""Request authentication pipeline.

Wires together the verification steps:
1. Decode the body leniently, just far enough to read the claimed timestamp
2. CertificateVerifier: URL policy, chain, signature, timestamp
3. Application match
4. Variant parsing with sanitization

No request field other than the timestamp is read before step 2 succeeds,
and a body that is not JSON is only reported as MALFORMED_JSON after it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from voicegate.core.config import VerifierConfig
from .api_models import (
    AUTHENTICATION_CODES,
    VALIDATION_CODES,
    ERROR_RECOVERABILITY,
    PUBLIC_MESSAGES,
    ErrorCode,
    ErrorDetail,
)
from .application import match_application
from .cert import CacheConfig, CertificateCache, CertificateFetcher, CertificateVerifier
from .document import Document, parse_timestamp
from .exceptions import AuthenticationError, ValidationError, VoiceGateError
from .request import SkillRequest, parse_request
from .sanitizer import MarkupSanitizer, Sanitizer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawRequestEnvelope:
    """Request as received, before any trust is established.

    Attributes:
        body: Exact body bytes. Signatures are checked against these only.
        signature: Base64 signature header value.
        cert_chain_url: Signing certificate chain URL header value.
        claimed_timestamp: request.timestamp read from the body, or None.
        document: Decoded body, only for use after authentication. None when
            the body is not a JSON object.
    """
    body: bytes
    signature: Union[str, bytes, None]
    cert_chain_url: str
    claimed_timestamp: Optional[datetime]
    document: Optional[Document]

    @classmethod
    def from_http(
        cls,
        body: bytes,
        signature: Union[str, bytes, None],
        cert_chain_url: str,
    ) -> "RawRequestEnvelope":
        """Build an envelope from the raw body and headers.

        Never raises on body content: an undecodable body yields
        ``document=None`` and fails authentication on its own.
        """
        try:
            document = Document.loads(body)
        except ValidationError:
            document = None
        return cls(
            body=body,
            signature=signature,
            cert_chain_url=cert_chain_url,
            claimed_timestamp=_claimed_timestamp(document),
            document=document,
        )


def _lenient_get(document: Optional[Document], *keys: str) -> Any:
    # Unauthenticated or unvalidated shape: any non-object segment reads as absent
    node: Any = document.data if document is not None else None
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _claimed_timestamp(document: Optional[Document]) -> Optional[datetime]:
    # A missing or malformed timestamp fails authentication
    return parse_timestamp(_lenient_get(document, "request", "timestamp"))


def application_id_of(document: Optional[Document]) -> Optional[str]:
    """Declared target application, from session or request context."""
    for path in (
        ("session", "application", "applicationId"),
        ("context", "System", "application", "applicationId"),
    ):
        value = _lenient_get(document, *path)
        if isinstance(value, str):
            return value
    return None


class RequestAuthenticator:
    """Authenticates raw requests and returns typed request objects.

    Args:
        config: Verifier configuration.
        fetcher: Certificate chain fetcher (defaults to HTTP).
        cache: Certificate cache. Defaults to a private cache sized from
            config; pass one explicitly to share it.
        sanitizer: Sanitizer for request text (defaults to MarkupSanitizer).
    """

    def __init__(
        self,
        config: VerifierConfig,
        fetcher: Optional[CertificateFetcher] = None,
        cache: Optional[CertificateCache] = None,
        sanitizer: Optional[Sanitizer] = None,
    ):
        self._config = config
        if cache is None:
            cache = CertificateCache(
                CacheConfig(
                    ttl_seconds=config.cache_ttl_seconds,
                    max_entries=config.cache_max_entries,
                )
            )
        self._cache = cache
        self._verifier = CertificateVerifier(config, fetcher=fetcher, cache=self._cache)
        self._sanitizer = sanitizer or MarkupSanitizer()

    @property
    def cache(self) -> CertificateCache:
        return self._cache

    async def authenticate(
        self,
        body: bytes,
        signature: Union[str, bytes, None],
        cert_chain_url: str,
        now: Optional[datetime] = None,
    ) -> SkillRequest:
        """Authenticate and parse a request.

        Args:
            body: Exact request body bytes.
            signature: Base64 signature header value.
            cert_chain_url: Signing certificate chain URL header value.
            now: Current time, injectable for tests.

        Returns:
            The typed, sanitized request variant.

        Raises:
            AuthenticationError: If the request is not authentic or not
                addressed to this application.
            ValidationError: If the authenticated payload is malformed.
        """
        envelope = RawRequestEnvelope.from_http(body, signature, cert_chain_url)
        return await self.authenticate_envelope(envelope, now=now)

    async def authenticate_envelope(
        self,
        envelope: RawRequestEnvelope,
        now: Optional[datetime] = None,
    ) -> SkillRequest:
        """Run verification, application match and parsing for an envelope."""
        try:
            certificate = await self._verifier.verify(
                envelope.body,
                envelope.signature,
                envelope.cert_chain_url,
                envelope.claimed_timestamp,
                now=now,
            )
        except AuthenticationError as e:
            log.warning(f"authentication failed: {e.code}: {e.message}")
            raise

        document = envelope.document
        if document is None:
            # Signed by the platform but not a JSON object; re-decode for the reason
            document = Document.loads(envelope.body)

        try:
            application_id = match_application(
                application_id_of(document),
                self._config.application_ids,
            )
        except AuthenticationError as e:
            log.warning(f"authentication failed: {e.code}: {e.message}")
            raise

        request = parse_request(document, application_id, certificate, self._sanitizer)
        log.info(
            f"accepted {request.request_type.value}",
            extra={"request_id": request.request_id, "application_id": application_id},
        )
        return request


def to_error_detail(exc: Exception) -> ErrorDetail:
    """Convert a domain exception to ErrorDetail for a response body.

    Authentication failures carry a generic public message; the detailed
    reason stays on the exception for logs.
    """
    if isinstance(exc, VoiceGateError):
        code = exc.code
        message = exc.message
    else:
        code = ErrorCode.INTERNAL_ERROR
        message = PUBLIC_MESSAGES[ErrorCode.INTERNAL_ERROR]

    if code in AUTHENTICATION_CODES:
        message = PUBLIC_MESSAGES[code]
    elif code not in VALIDATION_CODES:
        code = ErrorCode.INTERNAL_ERROR
        message = PUBLIC_MESSAGES[ErrorCode.INTERNAL_ERROR]

    recoverable = ERROR_RECOVERABILITY.get(code, True)
    return ErrorDetail(code=code, message=message, recoverable=recoverable)
