"""voicegate: authentication and typed parsing of signed voice-platform requests."""

__version__ = "0.1.0"
