"""
HTTP client shared by every bin.

Wraps one aiohttp session and turns transport failures, non-2xx answers
and malformed JSON into BackendError so bins never leak aiohttp types.
"""
import asyncio
import json
from typing import Any, Dict, Optional, Sequence, Tuple

import aiohttp

from ..core.exceptions import BackendError
from ..core.logging import get_logger

DEFAULT_TIMEOUT = 30.0
USER_AGENT = 'bins/2.0.0'


class HttpClient:
    """
    Lazily-opened aiohttp session with error translation.

    Requests are awaited one at a time by the dispatcher; the session is
    closed by whoever owns the client (normally ``Bins.main``).

    Example:
        >>> async with HttpClient(timeout=10) as http:
        ...     text = await http.get_text('https://sprunge.us/abcd')
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Total timeout per request in seconds
            user_agent: User-Agent header value
            session: Optional pre-built session (not closed by this client)
        """
        self._timeout = timeout
        self._user_agent = user_agent
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger('bins.http')

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={'User-Agent': self._user_agent},
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close session if we own it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> 'HttpClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def request(self, method: str, url: str, **kwargs) -> str:
        """
        Send a request and return the response body as text.

        Raises:
            BackendError: On network errors, timeouts or non-2xx statuses
        """
        session = await self._get_session()
        self._logger.debug(f"{method} {url}")
        try:
            async with session.request(method, url, **kwargs) as response:
                body = await response.text()
                if response.status >= 400:
                    raise BackendError(
                        f"{method} {url} returned HTTP {response.status}",
                        causes=[body.strip()[:500]] if body.strip() else [],
                        status=response.status
                    )
                return body
        except asyncio.TimeoutError as e:
            raise BackendError(f"{method} {url} timed out", causes=[f"no answer after {self._timeout}s"]) from e
        except aiohttp.ClientError as e:
            raise BackendError.wrap(e, f"{method} {url} failed") from e

    async def request_json(self, method: str, url: str, **kwargs) -> Any:
        """
        Send a request and decode the response body as JSON.

        Raises:
            BackendError: As ``request``, or if the body is not valid JSON
        """
        body = await self.request(method, url, **kwargs)
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise BackendError.wrap(e, f"{method} {url} did not return valid JSON") from e

    async def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        return await self.request('GET', url, headers=headers)

    async def get_json(self, url: str, headers: Optional[Dict[str, str]] = None, params: Optional[Dict[str, str]] = None) -> Any:
        return await self.request_json('GET', url, headers=headers, params=params)

    async def post_form(self, url: str, form: Dict[str, str], headers: Optional[Dict[str, str]] = None) -> str:
        """POST url-encoded form fields, returning the text body."""
        return await self.request('POST', url, data=form, headers=headers)

    async def post_data(self, url: str, data: bytes, headers: Optional[Dict[str, str]] = None) -> Any:
        """POST a raw body, returning the decoded JSON answer."""
        return await self.request_json('POST', url, data=data, headers=headers)

    async def post_json(self, url: str, payload: Any, headers: Optional[Dict[str, str]] = None) -> Any:
        """POST a JSON body, returning the decoded JSON answer."""
        return await self.request_json('POST', url, json=payload, headers=headers)

    async def post_multipart(
        self,
        url: str,
        fields: Dict[str, str],
        files: Sequence[Tuple[str, str, str]],
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        POST a multipart form, returning the decoded JSON answer.

        Args:
            url: Target URL
            fields: Plain form fields
            files: ``(field name, file name, text content)`` parts
            headers: Extra request headers
        """
        form = aiohttp.FormData()
        for name, value in fields.items():
            form.add_field(name, value)
        for field_name, file_name, content in files:
            form.add_field(field_name, content.encode('utf-8'), filename=file_name, content_type='text/plain')
        return await self.request_json('POST', url, data=form, headers=headers)


def basic_auth(username: str, password: str) -> str:
    """``Authorization`` header value for HTTP basic auth."""
    return aiohttp.BasicAuth(username, password).encode()
