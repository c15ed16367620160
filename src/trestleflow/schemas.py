"""
schemas.py
----------
Pydantic schemas shared by executors, the HTTP client and the REST API.
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class HttpRequest(BaseModel):
    method: str = "GET"
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None


class CredentialTestResult(BaseModel):
    ok: bool
    status_code: Optional[int] = None
    message: str = ""


# API schemas

class NodeExecuteRequest(BaseModel):
    items: List[Dict[str, Any]] = Field(default_factory=list)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    continue_on_fail: bool = False
    credential: Optional[str] = None


class NodeExecuteResponse(BaseModel):
    items: List[Dict[str, Any]]


class NodeOut(BaseModel):
    name: str
    display_name: str
    version: int
    group: str = ""
    description: str
    credentials: List[str] = []
    properties: List[Dict[str, Any]] = []
