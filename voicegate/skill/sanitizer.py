"""Sanitizer capability for untrusted text.

Every component that stores text taken from a request receives a Sanitizer
through its constructor or factory arguments. There is no module-level
default instance.
"""

from typing import Protocol, runtime_checkable

import nh3


@runtime_checkable
class Sanitizer(Protocol):
    """Strips unsafe markup and script content from a string."""

    def sanitize(self, text: str) -> str:
        ...


class MarkupSanitizer:
    """Sanitizer backed by nh3 that removes every HTML tag.

    Content of script and style elements is dropped entirely, other tags are
    unwrapped to their text.
    """

    def sanitize(self, text: str) -> str:
        return nh3.clean(text, tags=set(), attributes={})


class PassthroughSanitizer:
    """No-op sanitizer for contexts where text is already trusted."""

    def sanitize(self, text: str) -> str:
        return text
