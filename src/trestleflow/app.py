"""
app.py
--------
Main FastAPI application entrypoint. Exposes the registered nodes, synchronous
and worker-backed node execution, and credential testing.
"""
from fastapi import FastAPI, Depends, HTTPException
from typing import List, Optional
from trestleflow.config import configure_logging
from trestleflow.credentials import get_credential_type
from trestleflow.errors import NodeOperationError, UnknownCredentialError
from trestleflow.http_client import HttpClient, RemoteServiceError
from trestleflow.orchestrator import run_node
from trestleflow.celery_worker import EXECUTOR_REGISTRY, get_executor, run_node_task
from trestleflow.schemas import CredentialTestResult, NodeExecuteRequest, NodeExecuteResponse, NodeOut

configure_logging()

app = FastAPI(title="Trestle Workflow Node API")


# -------------------------------
# Dependency: HTTP client
# -------------------------------
def get_http_client():
    return HttpClient()


def _require_node(name: str):
    if name not in EXECUTOR_REGISTRY:
        raise HTTPException(status_code=404, detail="Node not found")


@app.get("/health")
def health():
    return {"ok": True}


# -------------------------------
# Nodes
# -------------------------------
@app.get("/nodes/", response_model=List[NodeOut])
def list_nodes():
    return [get_executor(name).describe() for name in sorted(EXECUTOR_REGISTRY)]


@app.get("/nodes/{name}", response_model=NodeOut)
def get_node(name: str):
    _require_node(name)
    return get_executor(name).describe()


@app.post("/nodes/{name}/execute", response_model=NodeExecuteResponse)
def execute_node(name: str, req: NodeExecuteRequest, http: HttpClient = Depends(get_http_client)):
    _require_node(name)
    try:
        results = run_node(
            name,
            req.items,
            req.parameters,
            continue_on_fail=req.continue_on_fail,
            credential=req.credential,
            http=http,
        )
    except NodeOperationError as e:
        status = 502 if isinstance(e.__cause__, RemoteServiceError) else 400
        raise HTTPException(status_code=status, detail=e.to_dict())
    return {"items": [r.to_dict() for r in results]}


@app.post("/nodes/{name}/run")
def enqueue_node(name: str, req: NodeExecuteRequest):
    _require_node(name)
    async_result = run_node_task.apply_async(
        args=[name, req.items, req.parameters],
        kwargs={"continue_on_fail": req.continue_on_fail, "credential": req.credential},
    )
    return {"celery_id": async_result.id}


# -------------------------------
# Credentials
# -------------------------------
@app.post("/credentials/{name}/test", response_model=CredentialTestResult)
def test_credential(name: str, credential: Optional[str] = None, http: HttpClient = Depends(get_http_client)):
    # name is the credential type; credential picks a secret stored under another name
    try:
        get_credential_type(name)
    except UnknownCredentialError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return http.test_credential(name, credential_name=credential)
