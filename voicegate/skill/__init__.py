"""Request authentication and extraction pipeline.

Usage:
    from voicegate.skill import RequestAuthenticator, to_error_detail

    authenticator = RequestAuthenticator(VerifierConfig.from_env())
    try:
        request = await authenticator.authenticate(body, signature, cert_url)
    except VoiceGateError as e:
        detail = to_error_detail(e)
"""

from .api_models import ErrorCode, ErrorDetail
from .application import match_application
from .exceptions import AuthenticationError, ValidationError, VoiceGateError
from .request import (
    IntentRequest,
    LaunchRequest,
    RequestType,
    SessionEndedRequest,
    SessionStartedRequest,
    SkillRequest,
)
from .response import ResponseBuilder, SkillResponse
from .sanitizer import MarkupSanitizer, PassthroughSanitizer, Sanitizer
from .verify import RawRequestEnvelope, RequestAuthenticator, to_error_detail

__all__ = [
    # Errors
    "AuthenticationError",
    "ErrorCode",
    "ErrorDetail",
    "ValidationError",
    "VoiceGateError",
    "to_error_detail",
    # Pipeline
    "RawRequestEnvelope",
    "RequestAuthenticator",
    "match_application",
    # Requests
    "IntentRequest",
    "LaunchRequest",
    "RequestType",
    "SessionEndedRequest",
    "SessionStartedRequest",
    "SkillRequest",
    # Responses
    "ResponseBuilder",
    "SkillResponse",
    # Sanitizers
    "MarkupSanitizer",
    "PassthroughSanitizer",
    "Sanitizer",
]
