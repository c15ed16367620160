"""
parameters.py
-------------
Per-item parameter resolution.

Executors never read their configuration directly: they call an injected
resolver ``(name, index) -> value`` once per item, because a parameter may be
an expression whose value differs from item to item.

Supported expression syntax, on string values starting with ``=``:

    ={{ $json.phone }}            value of key "phone" in the item
    ={{ $json["phone number"] }}  same, for keys that are not identifiers
    =+1 {{ $json.phone }}         template, placeholders rendered as text

A value without the leading ``=`` is used as-is.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import NodeOperationError

ParameterResolver = Callable[[str, int], Any]

_PLACEHOLDER = re.compile(r"\{\{\s*(.*?)\s*\}\}")
_JSON_REF = re.compile(r"""^\$json(?:\.([A-Za-z_]\w*)|\[\s*(['"])(.+?)\2\s*\])$""")


@dataclass(frozen=True)
class NodeProperty:
    name: str
    default: Any
    display_name: str = ""
    type: str = "string"
    description: str = ""
    required: bool = False
    show_for_resources: Optional[Sequence[str]] = None  # None: always shown
    options: Optional[Sequence[str]] = None

    def applies_to(self, resource: Optional[str]) -> bool:
        return self.show_for_resources is None or resource in self.show_for_resources

    def to_dict(self) -> dict:
        out = {
            "name": self.name,
            "display_name": self.display_name,
            "type": self.type,
            "default": self.default,
            "required": self.required,
            "description": self.description,
        }
        if self.show_for_resources is not None:
            out["show"] = {"resource": list(self.show_for_resources)}
        if self.options is not None:
            out["options"] = list(self.options)
        return out


def _evaluate(expr: str, item: Dict[str, Any], index: int) -> Any:
    m = _JSON_REF.match(expr)
    if not m:
        raise NodeOperationError(f"Unsupported expression: {{{{ {expr} }}}}", item_index=index)
    key = m.group(1) or m.group(3)
    return item.get(key)


def evaluate_parameter(value: Any, item: Dict[str, Any], index: int) -> Any:
    if not isinstance(value, str) or not value.startswith("="):
        return value
    template = value[1:]
    whole = _PLACEHOLDER.fullmatch(template.strip())
    if whole:
        return _evaluate(whole.group(1), item, index)

    def render(m):
        result = _evaluate(m.group(1), item, index)
        return "" if result is None else str(result)

    return _PLACEHOLDER.sub(render, template)


class ItemParameterResolver:
    """
    Resolves configured parameters against the input items, falling back to
    the executor's property defaults. Defaults that depend on the resource are
    picked using the resource resolved for the same item.
    """

    def __init__(self, parameters: Dict[str, Any], items: List[Dict[str, Any]],
                 properties: Sequence[NodeProperty] = ()):
        self.parameters = dict(parameters)
        self.items = items
        self.properties = list(properties)

    def _default(self, name: str, index: int) -> Any:
        candidates = [p for p in self.properties if p.name == name]
        if not candidates:
            raise NodeOperationError(f"Could not get parameter '{name}'", item_index=index)
        if name == "resource" or all(p.show_for_resources is None for p in candidates):
            return candidates[0].default
        resource = self("resource", index)
        for prop in candidates:
            if prop.applies_to(resource):
                return prop.default
        raise NodeOperationError(f"Could not get parameter '{name}'", item_index=index)

    def __call__(self, name: str, index: int) -> Any:
        if name not in self.parameters:
            return self._default(name, index)
        return evaluate_parameter(self.parameters[name], self.items[index], index)


def static_resolver(parameters: Dict[str, Any]) -> ParameterResolver:
    """Resolver for parameters that never vary by item."""
    def resolve(name: str, index: int) -> Any:
        if name not in parameters:
            raise NodeOperationError(f"Could not get parameter '{name}'", item_index=index)
        return parameters[name]
    return resolve
