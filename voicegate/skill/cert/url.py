"""Signing certificate URL policy.

The certificate chain URL arrives in a request header, so it is attacker
controlled until proven otherwise. Only URLs on the platform's published
certificate host and path are fetched.
"""

import posixpath
from urllib.parse import urlsplit

from voicegate.core.config import VerifierConfig
from ..exceptions import AuthenticationError


def validate_cert_url(url: str, config: VerifierConfig) -> str:
    """Validate a signing certificate chain URL.

    Rules:
    - scheme equals config.cert_url_scheme (case-insensitive)
    - host equals config.cert_url_host (case-insensitive)
    - port absent or equal to config.cert_url_port
    - path, after resolving dot segments, starts with
      config.cert_url_path_prefix (case-sensitive)

    Args:
        url: Value of the certificate chain URL header.
        config: Verifier configuration.

    Returns:
        The URL unchanged, for chaining.

    Raises:
        AuthenticationError: UNTRUSTED_SOURCE on any rule violation.
    """
    if not url or not isinstance(url, str):
        raise AuthenticationError.untrusted_source("certificate URL is missing")

    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError as e:
        raise AuthenticationError.untrusted_source(f"unparseable URL: {e}")

    if parts.scheme.lower() != config.cert_url_scheme:
        raise AuthenticationError.untrusted_source(f"scheme {parts.scheme!r} not allowed")

    if (parts.hostname or "").lower() != config.cert_url_host.lower():
        raise AuthenticationError.untrusted_source(f"host {parts.hostname!r} not allowed")

    if port is not None and port != config.cert_url_port:
        raise AuthenticationError.untrusted_source(f"port {port} not allowed")

    path = posixpath.normpath(parts.path) if parts.path else ""
    # normpath drops trailing slashes, so the bare prefix directory never matches
    if not path.startswith(config.cert_url_path_prefix):
        raise AuthenticationError.untrusted_source(f"path {parts.path!r} not allowed")

    return url
