"""
HTTP client for the Roles Anywhere session endpoint

This module sends signed session-creation requests and maps the JSON
response into temporary credentials. Transport failures, rejected requests
and malformed responses raise distinct errors. No retries are performed.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from .config import DEFAULT_TIMEOUT
from .exceptions import AuthenticationError, NetworkError, ProtocolError
from .signing.types import SignableRequest
from .signing.utils import parse_rfc3339_timestamp
from .version import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f'aws-signing-helper-python/{__version__}'

# Response bodies quoted in error messages are cut to this many characters
MAX_ERROR_BODY_LENGTH = 2048


@dataclass(frozen=True)
class Credentials:
    """Temporary credentials returned by a successful session exchange."""
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)
    expiration: datetime


def _require_string(container: Dict[str, Any], key: str, where: str) -> str:
    value = container.get(key)
    if not isinstance(value, str) or not value:
        raise ProtocolError(
            f"Session response is missing '{key}' in {where}",
            "MALFORMED_RESPONSE",
            {"field": key}
        )
    return value


def parse_create_session_response(data: Any) -> Credentials:
    """
    Map a session-creation response body to credentials.

    Only the first entry of ``credentialSet`` is used.

    Args:
        data: Decoded JSON body

    Returns:
        Credentials: Credentials of the first credential set

    Raises:
        ProtocolError: If required fields are missing or malformed
    """
    if not isinstance(data, dict):
        raise ProtocolError("Session response is not a JSON object", "MALFORMED_RESPONSE")

    credential_set = data.get('credentialSet')
    if not isinstance(credential_set, list) or not credential_set:
        raise ProtocolError(
            "Session response has no credentialSet entries",
            "MALFORMED_RESPONSE",
            {"field": "credentialSet"}
        )

    first = credential_set[0]
    credentials = first.get('credentials') if isinstance(first, dict) else None
    if not isinstance(credentials, dict):
        raise ProtocolError(
            "Session response credentialSet entry has no credentials",
            "MALFORMED_RESPONSE",
            {"field": "credentials"}
        )

    expiration_value = _require_string(credentials, 'expiration', 'credentials')
    try:
        expiration = parse_rfc3339_timestamp(expiration_value)
    except ValueError as e:
        raise ProtocolError(
            f"Session response has an invalid expiration: {expiration_value}",
            "MALFORMED_RESPONSE",
            {"field": "expiration", "original_error": str(e)}
        ) from e

    if 'subjectArn' in data:
        logger.debug(f"Session issued for subject {data['subjectArn']}")

    return Credentials(
        access_key_id=_require_string(credentials, 'accessKeyId', 'credentials'),
        secret_access_key=_require_string(credentials, 'secretAccessKey', 'credentials'),
        session_token=_require_string(credentials, 'sessionToken', 'credentials'),
        expiration=expiration
    )


class SessionClient:
    """
    HTTP client for the session-creation endpoint.

    A session passed in by the caller is used as-is and left open; otherwise
    the client creates its own and closes it in ``close()``.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the session client.

        Args:
            timeout: Connect and read timeout in seconds
            verify_ssl: Verify the endpoint's TLS certificate
            session: Optional requests session to send through
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._owns_session = session is None
        self.session = session if session is not None else self._create_session()

    def _create_session(self) -> requests.Session:
        """Create HTTP session without retries."""
        session = requests.Session()

        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Accept': 'application/json',
            'User-Agent': USER_AGENT
        })

        return session

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> 'SessionClient':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def create_session(self, request: SignableRequest) -> Credentials:
        """
        Send a signed session-creation request.

        Args:
            request: Request already carrying its signing headers

        Returns:
            Credentials: Credentials from the response

        Raises:
            NetworkError: On DNS, connection or timeout failures
            AuthenticationError: On a non-2xx response
            ProtocolError: On a 2xx response that cannot be decoded
        """
        url = request.url
        logger.debug(f"Making {request.method.value} request to {url}")

        try:
            response = self.session.request(
                request.method.value,
                url,
                headers=request.headers,
                data=request.body_bytes,
                timeout=self.timeout,
                verify=self.verify_ssl,
                allow_redirects=False
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(
                f"Request timeout after {self.timeout} seconds",
                "TIMEOUT",
                {"url": url, "original_error": str(e)}
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Connection error: {e}", "CONNECTION_ERROR", {"url": url}) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request failed: {e}", "REQUEST_FAILED", {"url": url}) from e

        with response:
            if not 200 <= response.status_code < 300:
                raise self._authentication_error(response)

            try:
                data = response.json()
            except ValueError as e:
                raise ProtocolError(
                    f"Invalid JSON response: {e}",
                    "INVALID_JSON",
                    {"status_code": response.status_code}
                ) from e

        credentials = parse_create_session_response(data)
        logger.info(f"Created session with access key {credentials.access_key_id}, "
                    f"expiring {credentials.expiration.isoformat()}")
        return credentials

    @staticmethod
    def _authentication_error(response: requests.Response) -> AuthenticationError:
        body = response.text[:MAX_ERROR_BODY_LENGTH]
        message = f'HTTP {response.status_code}: {response.reason}'
        code = 'HTTP_ERROR'

        try:
            error_data = json.loads(body) if body else None
        except json.JSONDecodeError:
            error_data = None

        if isinstance(error_data, dict):
            message = error_data.get('message') or error_data.get('Message') or message
            code = error_data.get('__type') or error_data.get('code') or code

        logger.warning(f"Session request rejected with HTTP {response.status_code}: {message}")
        return AuthenticationError(
            f"Session request failed: {message}",
            http_status=response.status_code,
            response_body=body,
            details={'status_code': response.status_code, 'code': code}
        )
