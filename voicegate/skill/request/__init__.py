"""Typed request variants and their parser.

Usage:
    from voicegate.skill.request import (
        IntentRequest,
        RequestType,
        SkillRequest,
        parse_request,
    )
"""

from .intent import extract_intent, extract_slots
from .models import (
    BaseRequest,
    IntentRequest,
    LaunchRequest,
    RequestType,
    SessionEndedRequest,
    SessionStartedRequest,
    SkillRequest,
)
from .parser import REQUEST_TYPES, parse_request, request_type_of

__all__ = [
    # Models
    "BaseRequest",
    "IntentRequest",
    "LaunchRequest",
    "RequestType",
    "SessionEndedRequest",
    "SessionStartedRequest",
    "SkillRequest",
    # Parsing
    "REQUEST_TYPES",
    "extract_intent",
    "extract_slots",
    "parse_request",
    "request_type_of",
]
