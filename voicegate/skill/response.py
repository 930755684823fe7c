"""
Platform response document models.

Builds the JSON body returned to the voice platform: output speech, an
optional card, an optional reprompt and the session flag.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


RESPONSE_VERSION = "1.0"


class SpeechType(str, Enum):
    PLAIN_TEXT = "PlainText"
    SSML = "SSML"


class OutputSpeech(BaseModel):
    """Speech rendered by the device"""
    type: SpeechType
    text: Optional[str] = None
    ssml: Optional[str] = None

    @classmethod
    def plain(cls, text: str) -> "OutputSpeech":
        return cls(type=SpeechType.PLAIN_TEXT, text=text)

    @classmethod
    def from_ssml(cls, ssml: str) -> "OutputSpeech":
        if not ssml.lstrip().startswith("<speak>"):
            ssml = f"<speak>{ssml}</speak>"
        return cls(type=SpeechType.SSML, ssml=ssml)


class Card(BaseModel):
    """Simple card shown in the companion app"""
    type: str = "Simple"
    title: str
    content: str


class Reprompt(BaseModel):
    output_speech: OutputSpeech = Field(alias="outputSpeech")

    model_config = ConfigDict(populate_by_name=True)


class ResponseBody(BaseModel):
    output_speech: Optional[OutputSpeech] = Field(default=None, alias="outputSpeech")
    card: Optional[Card] = None
    reprompt: Optional[Reprompt] = None
    should_end_session: bool = Field(default=True, alias="shouldEndSession")

    model_config = ConfigDict(populate_by_name=True)


class SkillResponse(BaseModel):
    """Top-level response document"""
    version: str = RESPONSE_VERSION
    session_attributes: Dict[str, Any] = Field(default_factory=dict, alias="sessionAttributes")
    response: ResponseBody = Field(default_factory=ResponseBody)

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with platform field names, omitting unset parts."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ResponseBuilder:
    """Fluent builder for SkillResponse.

    Usage:
        body = (
            ResponseBuilder()
            .speak("Hello")
            .reprompt("Anything else?")
            .end_session(False)
            .build()
            .to_dict()
        )
    """

    def __init__(self):
        self._body = ResponseBody()
        self._attributes: Dict[str, Any] = {}

    def speak(self, text: str) -> "ResponseBuilder":
        self._body.output_speech = OutputSpeech.plain(text)
        return self

    def speak_ssml(self, ssml: str) -> "ResponseBuilder":
        self._body.output_speech = OutputSpeech.from_ssml(ssml)
        return self

    def card(self, title: str, content: str) -> "ResponseBuilder":
        self._body.card = Card(title=title, content=content)
        return self

    def reprompt(self, text: str) -> "ResponseBuilder":
        self._body.reprompt = Reprompt(output_speech=OutputSpeech.plain(text))
        return self

    def end_session(self, should_end: bool = True) -> "ResponseBuilder":
        self._body.should_end_session = should_end
        return self

    def with_attribute(self, key: str, value: Any) -> "ResponseBuilder":
        self._attributes[key] = value
        return self

    def with_attributes(self, attributes: Dict[str, Any]) -> "ResponseBuilder":
        self._attributes.update(attributes)
        return self

    def build(self) -> SkillResponse:
        return SkillResponse(
            session_attributes=dict(self._attributes),
            response=self._body.model_copy(deep=True),
        )
