"""
results.py
----------
Per-item outcomes and the records an executor emits into the workflow.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class Ok:
    data: Any


@dataclass(frozen=True)
class Err:
    error: Exception


Outcome = Union[Ok, Err]


@dataclass
class NodeExecutionData:
    json: Any
    paired_item: Dict[str, int] = field(default_factory=dict)
    error: Optional[Exception] = None

    @property
    def item_index(self) -> Optional[int]:
        return self.paired_item.get("item")

    def to_dict(self) -> dict:
        out = {"json": self.json, "paired_item": dict(self.paired_item)}
        if self.error is not None:
            out["error"] = {"type": type(self.error).__name__, "message": str(self.error)}
        return out
