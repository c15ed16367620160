"""
credentials.py
--------------
Credential types describe how a stored secret becomes request authentication,
and which request proves a secret is valid. Credential stores resolve a
credential name to the stored secret.
"""
from typing import Dict, List, Optional

from .config import settings
from .errors import UnknownCredentialError
from .schemas import HttpRequest


class CredentialType:
    name: str = ""
    display_name: str = ""
    documentation_url: Optional[str] = None
    properties: List[dict] = []

    def authenticate(self, request: HttpRequest, secret: str) -> HttpRequest:
        raise NotImplementedError

    def test_request(self) -> HttpRequest:
        raise NotImplementedError


class TrestleApiCredential(CredentialType):
    name = "trestleApi"
    display_name = "Trestle API"
    documentation_url = "https://trestle-api.redoc.ly/Current/tag/Phone-Validation-API"
    properties = [
        {
            "name": "apiKey",
            "display_name": "API Key",
            "type": "string",
            "password": True,
            "default": "",
            "required": True,
            "description": "Your Trestle API Key",
        },
    ]

    header_name = "x-api-key"
    test_phone = "2069735100"

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or settings.TRESTLE_BASE_URL).rstrip("/")

    def authenticate(self, request: HttpRequest, secret: str) -> HttpRequest:
        headers = {**request.headers, self.header_name: secret}
        return request.model_copy(update={"headers": headers})

    def test_request(self) -> HttpRequest:
        return HttpRequest(method="GET", url=f"{self.base_url}/3.0/phone_intel?phone={self.test_phone}")


CREDENTIAL_TYPES: Dict[str, CredentialType] = {}


def register_credential_type(credential_type: CredentialType):
    CREDENTIAL_TYPES[credential_type.name] = credential_type


def get_credential_type(name: str) -> CredentialType:
    if name in CREDENTIAL_TYPES:
        return CREDENTIAL_TYPES[name]
    raise UnknownCredentialError(f"Unknown credential type: {name}")


register_credential_type(TrestleApiCredential())


class CredentialStore:
    def get_secret(self, name: str) -> str:
        raise NotImplementedError


class InMemoryCredentialStore(CredentialStore):
    def __init__(self, secrets: Optional[Dict[str, str]] = None):
        self._secrets = dict(secrets or {})

    def set_secret(self, name: str, secret: str):
        self._secrets[name] = secret

    def get_secret(self, name: str) -> str:
        secret = self._secrets.get(name)
        if not secret:
            raise UnknownCredentialError(f"No secret stored for credential '{name}'")
        return secret


class SettingsCredentialStore(InMemoryCredentialStore):
    """Secrets taken from the environment via settings."""

    def __init__(self):
        super().__init__({TrestleApiCredential.name: settings.TRESTLE_API_KEY})
