"""Request variant selection and construction.

parse_request() reads request.type, looks the builder up in REQUEST_TYPES
and builds the variant eagerly: a missing mandatory field fails here, never
later on attribute access.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..cert.models import TrustedCertificate
from ..document import Document, parse_timestamp
from ..exceptions import ValidationError
from ..sanitizer import Sanitizer
from .intent import extract_intent
from .models import (
    IntentRequest,
    LaunchRequest,
    RequestType,
    SessionEndedRequest,
    SessionStartedRequest,
    SkillRequest,
)

log = logging.getLogger(__name__)


def _clean(sanitizer: Sanitizer, value: Optional[str]) -> Optional[str]:
    return sanitizer.sanitize(value) if value is not None else None


def _sanitize_tree(sanitizer: Sanitizer, value: Any) -> Any:
    # Session attributes are arbitrary JSON: clean every string key and leaf
    if isinstance(value, str):
        return sanitizer.sanitize(value)
    if isinstance(value, dict):
        return {
            _sanitize_tree(sanitizer, key): _sanitize_tree(sanitizer, item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_sanitize_tree(sanitizer, item) for item in value]
    return value


def _base_fields(
    document: Document,
    application_id: str,
    certificate: TrustedCertificate,
    sanitizer: Sanitizer,
) -> dict:
    """Fields shared by every variant."""
    raw_timestamp = document.require_str("request", "timestamp")
    timestamp = parse_timestamp(raw_timestamp)
    if timestamp is None:
        raise ValidationError.type_mismatch(
            "request.timestamp", "an ISO 8601 timestamp", raw_timestamp
        )

    return {
        "request_id": sanitizer.sanitize(document.require_str("request", "requestId")),
        "timestamp": timestamp,
        "application_id": sanitizer.sanitize(application_id),
        "locale": _clean(sanitizer, document.optional_str("request", "locale")),
        "session_id": _clean(sanitizer, document.optional_str("session", "sessionId")),
        "user_id": _clean(sanitizer, document.optional_str("session", "user", "userId")),
        "new_session": bool(document.optional_bool("session", "new")),
        "session_attributes": _sanitize_tree(
            sanitizer, document.optional_dict("session", "attributes") or {}
        ),
        "raw_data": document,
        "sanitizer": sanitizer,
        "certificate": certificate,
    }


def _build_launch(document, base, sanitizer) -> LaunchRequest:
    return LaunchRequest(**base)


def _build_session_started(document, base, sanitizer) -> SessionStartedRequest:
    return SessionStartedRequest(**base)


def _build_session_ended(document, base, sanitizer) -> SessionEndedRequest:
    return SessionEndedRequest(
        **base,
        reason=_clean(sanitizer, document.optional_str("request", "reason")),
        error_type=_clean(sanitizer, document.optional_str("request", "error", "type")),
        error_message=_clean(sanitizer, document.optional_str("request", "error", "message")),
    )


def _build_intent(document, base, sanitizer) -> IntentRequest:
    intent_name, slots = extract_intent(document.get("request", "intent"), sanitizer)
    return IntentRequest(
        **base,
        intent_name=intent_name,
        slots=slots,
        dialog_state=_clean(sanitizer, document.optional_str("request", "dialogState")),
        confirmation_status=_clean(
            sanitizer, document.optional_str("request", "intent", "confirmationStatus")
        ),
    )


# Registry of variant builders keyed by discriminator
REQUEST_TYPES: Dict[RequestType, Callable[..., SkillRequest]] = {
    RequestType.LAUNCH: _build_launch,
    RequestType.INTENT: _build_intent,
    RequestType.SESSION_STARTED: _build_session_started,
    RequestType.SESSION_ENDED: _build_session_ended,
}


def request_type_of(document: Document) -> RequestType:
    """Read and validate the request.type discriminator.

    Raises:
        ValidationError: MISSING_REQUIRED_FIELD, TYPE_MISMATCH or
            UNSUPPORTED_REQUEST_TYPE.
    """
    raw_type = document.require_str("request", "type")
    try:
        return RequestType(raw_type)
    except ValueError:
        raise ValidationError.unsupported_type(raw_type)


def parse_request(
    document: Document,
    application_id: str,
    certificate: TrustedCertificate,
    sanitizer: Sanitizer,
) -> SkillRequest:
    """Build the typed request variant for an authenticated document.

    Args:
        document: Decoded request body.
        application_id: Application identifier already matched by the caller.
        certificate: Certificate that authenticated the request.
        sanitizer: Sanitizer applied to every text field.

    Returns:
        One of LaunchRequest, IntentRequest, SessionStartedRequest,
        SessionEndedRequest.

    Raises:
        ValidationError: If the document is structurally invalid.
    """
    request_type = request_type_of(document)
    base = _base_fields(document, application_id, certificate, sanitizer)
    request = REQUEST_TYPES[request_type](document, base, sanitizer)
    log.debug(f"parsed {request_type.value} request_id={request.request_id}")
    return request
