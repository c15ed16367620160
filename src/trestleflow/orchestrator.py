"""
orchestrator.py
--------------
Runs one node over a batch of workflow items: looks up the executor, wires the
per-item parameter resolver and the authenticated HTTP client into an
execution context, and returns the executor's output records.
"""
import logging
from typing import Any, Dict, List, Optional

from .http_client import HttpClient
from .parameters import ItemParameterResolver
from .results import NodeExecutionData
from .executors.base import ExecutionContext

logger = logging.getLogger(__name__)


def run_node(
    executor_name: str,
    items: List[Dict[str, Any]],
    parameters: Dict[str, Any],
    continue_on_fail: bool = False,
    credential: Optional[str] = None,
    http: Optional[HttpClient] = None,
) -> List[NodeExecutionData]:
    """
    Executes the named node once for this workflow run.
    Raises NodeOperationError (annotated with the item index) on the first
    failing item unless continue_on_fail is set.
    """
    # Import here to break circular import
    from .celery_worker import get_executor

    executor = get_executor(executor_name)
    context = ExecutionContext(
        items=items,
        get_parameter=ItemParameterResolver(parameters, items, executor.properties),
        http=http or HttpClient(),
        continue_on_fail=continue_on_fail,
        credential=credential,
    )
    logger.info("Running node %s over %d items (continue_on_fail=%s)", executor_name, len(items), continue_on_fail)
    return executor.execute(context)
