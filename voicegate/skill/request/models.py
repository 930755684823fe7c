"""Typed request variants.

The variant set is closed: one dataclass per RequestType, all sharing the
fields of BaseRequest. Instances are built by the parser after
authentication and application matching have succeeded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..cert.models import TrustedCertificate
from ..document import Document
from ..exceptions import ValidationError
from ..sanitizer import Sanitizer


class RequestType(str, Enum):
    """Platform request.type discriminator values."""
    LAUNCH = "LaunchRequest"
    INTENT = "IntentRequest"
    SESSION_STARTED = "SessionStartedRequest"
    SESSION_ENDED = "SessionEndedRequest"


@dataclass
class BaseRequest:
    """Fields common to every authenticated request.

    Attributes:
        request_id: Platform request identifier (sanitized).
        timestamp: Request timestamp (aware UTC).
        application_id: Matched application identifier.
        locale: Request locale, e.g. "en-US" (sanitized).
        session_id: Session identifier (sanitized).
        user_id: Platform user identifier (sanitized).
        new_session: True when this request opened the session.
        session_attributes: Attributes the application stored on the session.
        raw_data: The decoded request body, for lazy lookups.
        sanitizer: Sanitizer used for every text field.
        certificate: Certificate that authenticated the request.
    """
    request_id: str
    timestamp: datetime
    application_id: str
    raw_data: Document
    sanitizer: Sanitizer
    certificate: TrustedCertificate
    locale: Optional[str] = None
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    new_session: bool = False
    session_attributes: Dict[str, Any] = field(default_factory=dict)

    request_type = None  # set per variant

    def get_raw(self, *keys: str, default: Any = None) -> Any:
        """Look up an unparsed field from the request body.

        Values are returned as decoded from JSON, without sanitization.
        """
        return self.raw_data.get(*keys, default=default)


@dataclass
class LaunchRequest(BaseRequest):
    """User opened the application without a specific intent."""
    request_type = RequestType.LAUNCH


@dataclass
class SessionStartedRequest(BaseRequest):
    """A new session began."""
    request_type = RequestType.SESSION_STARTED


@dataclass
class SessionEndedRequest(BaseRequest):
    """The session ended.

    Attributes:
        reason: Why the session ended, e.g. "USER_INITIATED" (sanitized).
        error_type / error_message: Present when reason is "ERROR".
    """
    reason: Optional[str] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    request_type = RequestType.SESSION_ENDED


@dataclass
class IntentRequest(BaseRequest):
    """User invoked a named intent, optionally with slot values.

    intent_name and slots are populated at construction; slots is always
    a dict (possibly empty).
    """
    intent_name: str = ""
    slots: Dict[str, str] = field(default_factory=dict)
    dialog_state: Optional[str] = None
    confirmation_status: Optional[str] = None

    request_type = RequestType.INTENT

    def __post_init__(self):
        if not isinstance(self.intent_name, str) or not self.intent_name.strip():
            raise ValidationError.missing_intent_name()

    def get_slot(self, name: str, default: Any = None) -> Any:
        """Return the value of slot ``name`` or ``default`` if not filled."""
        if name in self.slots:
            return self.slots[name]
        return default

    def set_slots(self, slots: Dict[str, str]) -> None:
        """Replace the slot mapping (test/override use)."""
        self.slots = dict(slots)


SkillRequest = Union[LaunchRequest, IntentRequest, SessionStartedRequest, SessionEndedRequest]
