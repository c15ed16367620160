"""
errors.py
---------
Exception hierarchy raised by executors and the HTTP collaborator.

Every error keeps its constructor arguments in ``args`` so it can be rebuilt
after crossing a process boundary (pickle, or the Celery result backend,
which recreates exceptions as ``cls(*args)``).
"""
from typing import List, Optional


class NodeError(Exception):
    pass


class NodeOperationError(NodeError):
    """
    An executor failed while processing one item of a batch.
    item_index points at the offending input item once the batch loop has
    annotated the error. partial_results holds whatever the loop had already
    collected when it aborted.
    """

    def __init__(self, message: str, item_index: Optional[int] = None, description: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.description = description
        self.partial_results: List = []
        self.item_index = item_index

    @property
    def item_index(self) -> Optional[int]:
        return self._item_index

    @item_index.setter
    def item_index(self, value: Optional[int]):
        self._item_index = value
        self.args = self._init_args()

    def _init_args(self) -> tuple:
        return (self.message, self.item_index, self.description)

    def __str__(self):
        return self.message

    def to_dict(self) -> dict:
        return {"message": self.message, "item_index": self.item_index, "description": self.description}


class MissingFieldError(NodeOperationError):
    def __init__(self, label: str, field_name: str, item_index: Optional[int] = None):
        self.label = label
        self.field_name = field_name
        super().__init__(f"{label} not found in field '{field_name}'", item_index=item_index)

    def _init_args(self) -> tuple:
        return (self.label, self.field_name, self.item_index)


class UnknownCredentialError(NodeError):
    pass
