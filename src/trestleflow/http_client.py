"""
http_client.py
--------------
Authenticated HTTP execution for executors. Resolves the named credential,
lets its credential type sign the request, performs the call and maps every
failure to RemoteServiceError.
"""
import logging
from typing import Any, Optional

import requests

from .config import settings
from .credentials import CredentialStore, SettingsCredentialStore, get_credential_type
from .errors import NodeError, UnknownCredentialError
from .schemas import CredentialTestResult, HttpRequest

logger = logging.getLogger(__name__)


class RemoteServiceError(NodeError):
    def __init__(self, code: str, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(code, message, status_code, body)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.body = body

    def __str__(self):
        return self.message


class HttpClient:
    def __init__(self, store: Optional[CredentialStore] = None, session: Optional[requests.Session] = None):
        self.store = store or SettingsCredentialStore()
        self.session = session or requests.Session()
        self.timeout = (settings.HTTP_CONNECT_TIMEOUT_S, settings.HTTP_READ_TIMEOUT_S)

    def _sign(self, request: HttpRequest, credential_type: str, credential_name: Optional[str] = None) -> HttpRequest:
        # secrets are stored under the credential name, which defaults to the type name
        secret = self.store.get_secret(credential_name or credential_type)
        return get_credential_type(credential_type).authenticate(request, secret)

    def _parse_error(self, resp: requests.Response) -> RemoteServiceError:
        try:
            body = resp.json()
        except ValueError:
            body = resp.text or None

        message = f"Service returned HTTP {resp.status_code}"
        if isinstance(body, dict):
            detail = body.get("message") or body.get("error")
            if isinstance(detail, str) and detail:
                message = f"{message}: {detail}"
        return RemoteServiceError("SERVICE_HTTP_ERROR", message, resp.status_code, body)

    def _send(self, request: HttpRequest) -> requests.Response:
        logger.debug("%s %s", request.method, request.url)
        try:
            return self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                json=request.body,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise RemoteServiceError("SERVICE_TIMEOUT", str(e)) from e
        except requests.RequestException as e:
            raise RemoteServiceError("SERVICE_UNREACHABLE", str(e)) from e

    def request_with_authentication(self, credential_type: str, request: HttpRequest,
                                    credential_name: Optional[str] = None) -> Any:
        """
        Perform request signed by credential_type with the secret stored as
        credential_name, and return the parsed JSON body.
        """
        resp = self._send(self._sign(request, credential_type, credential_name))

        if resp.status_code < 200 or resp.status_code >= 300:
            raise self._parse_error(resp)

        try:
            return resp.json()
        except ValueError as e:
            raise RemoteServiceError("BAD_RESPONSE", "Service returned non-JSON", resp.status_code, resp.text) from e

    def test_credential(self, credential_type: str, credential_name: Optional[str] = None) -> CredentialTestResult:
        request = get_credential_type(credential_type).test_request()
        try:
            resp = self._send(self._sign(request, credential_type, credential_name))
        except (RemoteServiceError, UnknownCredentialError) as e:
            return CredentialTestResult(ok=False, message=str(e))

        if 200 <= resp.status_code < 300:
            return CredentialTestResult(ok=True, status_code=resp.status_code, message="Connection tested successfully")
        return CredentialTestResult(ok=False, status_code=resp.status_code, message=str(self._parse_error(resp)))
