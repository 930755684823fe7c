"""
voicegate API models.

Error code registry and the serializable error detail handed back to callers.
"""

from typing import Dict

from pydantic import BaseModel


# =============================================================================
# Error Models
# =============================================================================

class ErrorDetail(BaseModel):
    """Classified error returned to callers.

    The code alone is sufficient for an accept/reject decision. The message
    is safe to expose to untrusted callers.
    """
    code: str
    message: str
    recoverable: bool


class ErrorCode:
    """Error code registry"""
    # Authentication layer
    UNTRUSTED_SOURCE = "UNTRUSTED_SOURCE"
    INVALID_CERTIFICATE = "INVALID_CERTIFICATE"
    SIGNATURE_MISMATCH = "SIGNATURE_MISMATCH"
    TIMESTAMP_OUT_OF_RANGE = "TIMESTAMP_OUT_OF_RANGE"
    APPLICATION_MISMATCH = "APPLICATION_MISMATCH"
    CERTIFICATE_FETCH_FAILED = "CERTIFICATE_FETCH_FAILED"

    # Validation layer
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    MISSING_INTENT_NAME = "MISSING_INTENT_NAME"
    MISSING_SLOTS = "MISSING_SLOTS"
    MALFORMED_JSON = "MALFORMED_JSON"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    UNSUPPORTED_REQUEST_TYPE = "UNSUPPORTED_REQUEST_TYPE"

    # Verifier layer
    INTERNAL_ERROR = "INTERNAL_ERROR"


AUTHENTICATION_CODES = frozenset({
    ErrorCode.UNTRUSTED_SOURCE,
    ErrorCode.INVALID_CERTIFICATE,
    ErrorCode.SIGNATURE_MISMATCH,
    ErrorCode.TIMESTAMP_OUT_OF_RANGE,
    ErrorCode.APPLICATION_MISMATCH,
    ErrorCode.CERTIFICATE_FETCH_FAILED,
})

VALIDATION_CODES = frozenset({
    ErrorCode.MISSING_REQUIRED_FIELD,
    ErrorCode.MISSING_INTENT_NAME,
    ErrorCode.MISSING_SLOTS,
    ErrorCode.MALFORMED_JSON,
    ErrorCode.TYPE_MISMATCH,
    ErrorCode.UNSUPPORTED_REQUEST_TYPE,
})


# Recoverability mapping: the caller may retry the whole pipeline
ERROR_RECOVERABILITY: Dict[str, bool] = {
    ErrorCode.UNTRUSTED_SOURCE: False,
    ErrorCode.INVALID_CERTIFICATE: False,
    ErrorCode.SIGNATURE_MISMATCH: False,
    ErrorCode.TIMESTAMP_OUT_OF_RANGE: False,
    ErrorCode.APPLICATION_MISMATCH: False,
    ErrorCode.CERTIFICATE_FETCH_FAILED: True,   # Recoverable
    ErrorCode.MISSING_REQUIRED_FIELD: False,
    ErrorCode.MISSING_INTENT_NAME: False,
    ErrorCode.MISSING_SLOTS: False,
    ErrorCode.MALFORMED_JSON: False,
    ErrorCode.TYPE_MISMATCH: False,
    ErrorCode.UNSUPPORTED_REQUEST_TYPE: False,
    ErrorCode.INTERNAL_ERROR: True,            # Recoverable
}


# Messages exposed for authentication failures. Detailed reasons stay on the
# exception for logging.
PUBLIC_MESSAGES: Dict[str, str] = {
    ErrorCode.UNTRUSTED_SOURCE: "Signing certificate URL is not trusted",
    ErrorCode.INVALID_CERTIFICATE: "Signing certificate is invalid",
    ErrorCode.SIGNATURE_MISMATCH: "Request signature is invalid",
    ErrorCode.TIMESTAMP_OUT_OF_RANGE: "Request timestamp is out of range",
    ErrorCode.APPLICATION_MISMATCH: "Request is not addressed to this application",
    ErrorCode.CERTIFICATE_FETCH_FAILED: "Signing certificate could not be retrieved",
    ErrorCode.INTERNAL_ERROR: "Internal error",
}
