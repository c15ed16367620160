import pytest
from unittest.mock import MagicMock

from trestleflow.credentials import InMemoryCredentialStore
from trestleflow.executors.base import ExecutionContext
from trestleflow.executors.trestle_exec import TrestleExecutor
from trestleflow.http_client import HttpClient
from trestleflow.parameters import ItemParameterResolver

BASE_URL = "https://api.trestleiq.com"


@pytest.fixture
def store():
    return InMemoryCredentialStore({"trestleApi": "test-key"})


@pytest.fixture
def http_client(store):
    return HttpClient(store=store)


@pytest.fixture
def fake_http():
    """Echoes the request it was given, so results show what was sent."""
    http = MagicMock()

    def respond(credential_type, request, credential_name=None):
        return {"url": request.url, "method": request.method, "body": request.body}

    http.request_with_authentication.side_effect = respond
    return http


@pytest.fixture
def executor():
    return TrestleExecutor(base_url=BASE_URL)


@pytest.fixture
def make_context(executor, fake_http):
    def _make(items, parameters=None, continue_on_fail=False, http=None):
        return ExecutionContext(
            items=items,
            get_parameter=ItemParameterResolver(parameters or {}, items, executor.properties),
            http=http or fake_http,
            continue_on_fail=continue_on_fail,
        )
    return _make


@pytest.fixture
def client(http_client):
    from fastapi.testclient import TestClient
    from trestleflow.app import app, get_http_client

    app.dependency_overrides[get_http_client] = lambda: http_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
