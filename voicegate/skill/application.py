"""Application identifier matching.

Application identifiers are opaque platform-issued tokens: compared
byte-exact, never normalized.
"""

import logging
from typing import Iterable, Optional, Union

from .exceptions import AuthenticationError

log = logging.getLogger(__name__)


def match_application(
    request_application_id: Optional[str],
    expected: Union[str, Iterable[str]],
) -> str:
    """Check that the request targets one of the expected applications.

    Args:
        request_application_id: Identifier declared in the request.
        expected: A single identifier or a collection of accepted ones.

    Returns:
        The matched identifier.

    Raises:
        AuthenticationError: APPLICATION_MISMATCH when absent or not accepted.
    """
    accepted = frozenset({expected}) if isinstance(expected, str) else frozenset(expected)

    if not isinstance(request_application_id, str) or not request_application_id:
        raise AuthenticationError.application_mismatch("request has no application id")

    if request_application_id not in accepted:
        log.warning(f"application id mismatch: {request_application_id[:40]}")
        raise AuthenticationError.application_mismatch(
            f"{request_application_id!r} is not an expected application"
        )

    return request_application_id
