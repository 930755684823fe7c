"""HTTP retrieval of signing certificate chains.

Implements the CertificateFetcher collaborator with:
- Configurable timeout
- Response size limit
- No redirects (the URL host was validated, a redirect target was not)
"""

import logging
from typing import Protocol

import httpx

from ..exceptions import AuthenticationError

log = logging.getLogger(__name__)


class CertificateFetcher(Protocol):
    """Resolves a certificate chain URL to PEM bytes."""

    async def fetch(self, url: str) -> bytes:
        ...


class HttpCertificateFetcher:
    """CertificateFetcher backed by httpx.AsyncClient."""

    def __init__(self, timeout: float = 5.0, max_size_bytes: int = 65_536):
        self._timeout = timeout
        self._max_size_bytes = max_size_bytes

    async def fetch(self, url: str) -> bytes:
        """Fetch the PEM chain at ``url``.

        Raises:
            AuthenticationError: CERTIFICATE_FETCH_FAILED on network, timeout,
                HTTP status or size errors.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=False,
            ) as client:
                response = await client.get(url)

                if response.status_code != 200:
                    raise AuthenticationError.fetch_failed(
                        f"HTTP {response.status_code} from {url}"
                    )

                content = response.content
                if not content:
                    raise AuthenticationError.fetch_failed(f"empty response from {url}")
                if len(content) > self._max_size_bytes:
                    raise AuthenticationError.fetch_failed(
                        f"response size {len(content)} bytes exceeds limit "
                        f"of {self._max_size_bytes} bytes"
                    )

                log.debug(f"fetched certificate chain ({len(content)} bytes) from {url}")
                return content

        except AuthenticationError:
            raise
        except httpx.TimeoutException:
            raise AuthenticationError.fetch_failed(
                f"timeout after {self._timeout}s fetching {url}"
            )
        except httpx.RequestError as e:
            raise AuthenticationError.fetch_failed(f"request failed: {e}")
