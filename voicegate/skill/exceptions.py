"""
voicegate exceptions.

Every failure carries an error code from ErrorCode. The code is the
contract; the message is diagnostic detail for logs.
"""

from voicegate.skill.api_models import ErrorCode


class VoiceGateError(Exception):
    """Base exception for request authentication and parsing errors."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class AuthenticationError(VoiceGateError):
    """Request could not be proven to come from the platform.

    Terminal for the request. Only CERTIFICATE_FETCH_FAILED is worth a retry
    of the whole pipeline.
    """

    @classmethod
    def untrusted_source(cls, reason: str) -> "AuthenticationError":
        """Factory for UNTRUSTED_SOURCE error."""
        return cls(
            code=ErrorCode.UNTRUSTED_SOURCE,
            message=f"Untrusted certificate URL: {reason}"
        )

    @classmethod
    def invalid_certificate(cls, reason: str) -> "AuthenticationError":
        """Factory for INVALID_CERTIFICATE error.

        Used for:
        - Unparseable PEM chain
        - Certificate outside its validity interval
        - Disallowed certificate signature algorithm
        - Signing domain not covered by SAN
        - Chain does not reach a trusted root
        """
        return cls(
            code=ErrorCode.INVALID_CERTIFICATE,
            message=f"Invalid signing certificate: {reason}"
        )

    @classmethod
    def signature_mismatch(cls, reason: str) -> "AuthenticationError":
        """Factory for SIGNATURE_MISMATCH error."""
        return cls(
            code=ErrorCode.SIGNATURE_MISMATCH,
            message=f"Signature verification failed: {reason}"
        )

    @classmethod
    def timestamp_out_of_range(cls, reason: str) -> "AuthenticationError":
        """Factory for TIMESTAMP_OUT_OF_RANGE error."""
        return cls(
            code=ErrorCode.TIMESTAMP_OUT_OF_RANGE,
            message=f"Request timestamp rejected: {reason}"
        )

    @classmethod
    def application_mismatch(cls, reason: str) -> "AuthenticationError":
        """Factory for APPLICATION_MISMATCH error."""
        return cls(
            code=ErrorCode.APPLICATION_MISMATCH,
            message=f"Application mismatch: {reason}"
        )

    @classmethod
    def fetch_failed(cls, reason: str) -> "AuthenticationError":
        """Factory for CERTIFICATE_FETCH_FAILED error (recoverable)."""
        return cls(
            code=ErrorCode.CERTIFICATE_FETCH_FAILED,
            message=f"Certificate fetch failed: {reason}"
        )


class ValidationError(VoiceGateError):
    """Authenticated payload is structurally invalid.

    Never defaulted away: a malformed authenticated request is still unsafe
    to act on.
    """

    @classmethod
    def malformed_json(cls, reason: str) -> "ValidationError":
        """Factory for MALFORMED_JSON error."""
        return cls(
            code=ErrorCode.MALFORMED_JSON,
            message=f"Request body is not valid JSON: {reason}"
        )

    @classmethod
    def missing_field(cls, path: str) -> "ValidationError":
        """Factory for MISSING_REQUIRED_FIELD error."""
        return cls(
            code=ErrorCode.MISSING_REQUIRED_FIELD,
            message=f"Missing required field: {path}"
        )

    @classmethod
    def type_mismatch(cls, path: str, expected: str, actual: object) -> "ValidationError":
        """Factory for TYPE_MISMATCH error."""
        return cls(
            code=ErrorCode.TYPE_MISMATCH,
            message=f"Field {path} must be {expected}, got {type(actual).__name__}"
        )

    @classmethod
    def missing_intent_name(cls) -> "ValidationError":
        """Factory for MISSING_INTENT_NAME error."""
        return cls(
            code=ErrorCode.MISSING_INTENT_NAME,
            message="The intent name was not set in the request"
        )

    @classmethod
    def missing_slots(cls) -> "ValidationError":
        """Factory for MISSING_SLOTS error."""
        return cls(
            code=ErrorCode.MISSING_SLOTS,
            message="The slots array was not present in the request"
        )

    @classmethod
    def unsupported_type(cls, request_type: str) -> "ValidationError":
        """Factory for UNSUPPORTED_REQUEST_TYPE error."""
        return cls(
            code=ErrorCode.UNSUPPORTED_REQUEST_TYPE,
            message=f"Unsupported request type: {request_type!r}"
        )
