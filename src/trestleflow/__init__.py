# Re-export main modules and objects for easier imports
from .config import settings
from .credentials import TrestleApiCredential, InMemoryCredentialStore, SettingsCredentialStore
from .errors import NodeError, NodeOperationError, MissingFieldError, UnknownCredentialError
from .http_client import HttpClient, RemoteServiceError
from .orchestrator import run_node
from .results import NodeExecutionData, Ok, Err
