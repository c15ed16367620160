"""
base.py
-------
Defines the BaseExecutor interface for all node executors, and the per-item
loop every executor runs its items through.

An executor receives the batch of input items once per workflow run. Each item
is processed on its own: the item's outcome is captured as Ok/Err at the item
boundary, so one failing item never touches the result of another. With
continue_on_fail the error becomes an output record; otherwise the first error
aborts the batch, annotated with the failing item's index.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import NodeOperationError
from ..parameters import NodeProperty, ParameterResolver
from ..results import Err, NodeExecutionData, Ok, Outcome

logger = logging.getLogger(__name__)

# Returned by process_item for items no branch of the executor applies to
SKIP = object()


@dataclass
class ExecutionContext:
    items: List[Dict[str, Any]]
    get_parameter: ParameterResolver
    http: Any  # anything with request_with_authentication(credential_type, request, credential_name)
    continue_on_fail: bool = False
    credential: Optional[str] = None  # stored credential name, when not the type name


class BaseExecutor:
    name: str = ""
    display_name: str = ""
    version: int = 1
    group: str = ""
    description: str = ""
    credentials: List[str] = []
    properties: List[NodeProperty] = []

    def process_item(self, item: Dict[str, Any], index: int, context: ExecutionContext) -> Any:
        """
        item: the input record at index
        context: items, parameter resolver and HTTP client for this run
        Returns: JSON for the output record, or SKIP to emit nothing
        """
        raise NotImplementedError

    def credential_type(self) -> Optional[str]:
        return self.credentials[0] if self.credentials else None

    def describe(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "version": self.version,
            "group": self.group,
            "description": self.description,
            "credentials": list(self.credentials),
            "properties": [p.to_dict() for p in self.properties],
        }

    def _run_item(self, item: Dict[str, Any], index: int, context: ExecutionContext) -> Optional[Outcome]:
        try:
            data = self.process_item(item, index, context)
        except Exception as e:
            return Err(e)
        if data is SKIP:
            return None
        return Ok(data)

    def _annotate(self, error: Exception, index: int, collected: List[NodeExecutionData]) -> NodeOperationError:
        if isinstance(error, NodeOperationError):
            error.item_index = index
            annotated = error
        else:
            annotated = NodeOperationError(str(error), item_index=index)
            annotated.__cause__ = error
        annotated.partial_results = list(collected)
        return annotated

    def execute(self, context: ExecutionContext) -> List[NodeExecutionData]:
        results: List[NodeExecutionData] = []

        for i, item in enumerate(context.items):
            outcome = self._run_item(item, i, context)

            if outcome is None:
                continue

            if isinstance(outcome, Ok):
                results.append(NodeExecutionData(json=outcome.data, paired_item={"item": i}))
                continue

            if context.continue_on_fail:
                logger.warning("%s: item %d failed: %s", self.name, i, outcome.error)
                results.append(NodeExecutionData(
                    json={"error": str(outcome.error)},
                    paired_item={"item": i},
                    error=outcome.error,
                ))
                continue

            logger.error("%s: aborting at item %d: %s", self.name, i, outcome.error)
            raise self._annotate(outcome.error, i, results)

        logger.info("%s: %d items in, %d items out", self.name, len(context.items), len(results))
        return results
