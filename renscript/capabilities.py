"""RenScript capability table.

The capability table maps script-visible function names to members of the
host `api` object. It decides which calls are legal and how they are bound
in generated code. Order is significant: bindings are emitted in table order.

The default table ships as package data (data/capabilities.yml). Projects can
supply their own table as YAML or JSON, either a mapping or a list of
[script_name, host_name] pairs.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Iterable, Iterator, Optional

import yaml

logger = logging.getLogger(__name__)


# Always available without a capability entry.
MATH_FUNCTIONS = (
    "sin", "cos", "tan", "sqrt", "abs", "floor", "ceil", "round",
    "min", "max", "atan2", "log", "exp", "pow",
)
MATH_CONSTANTS = ("PI", "E")
BUILTIN_FUNCTIONS = ("String", "Number", "Boolean", "Array", "Object")

DEFAULT_CAPABILITIES_PATH = os.path.join(os.path.dirname(__file__), "data", "capabilities.yml")


class CapabilityTable:
    """Ordered (script_name, host_name) pairs with name lookup."""

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()):
        self._pairs: list[tuple[str, str]] = []
        self._index: dict[str, str] = {}
        for script_name, host_name in pairs:
            script_name, host_name = str(script_name), str(host_name)
            if script_name in self._index:
                logger.warning(
                    "Ignoring duplicate capability '%s' -> '%s' (already bound to '%s')",
                    script_name, host_name, self._index[script_name],
                )
                continue
            self._index[script_name] = host_name
            self._pairs.append((script_name, host_name))

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __repr__(self) -> str:
        return f"CapabilityTable({len(self._pairs)} entries)"

    def names(self) -> list[str]:
        return [s for s, _ in self._pairs]

    def host_name(self, name: str) -> Optional[str]:
        return self._index.get(name)

    def pairs(self) -> list[tuple[str, str]]:
        return list(self._pairs)


def _pairs_from_data(data: object, source: str) -> list[tuple[str, str]]:
    if data is None:
        return []
    if isinstance(data, dict):
        return [(str(k), str(v)) for k, v in data.items()]
    if isinstance(data, list):
        pairs = []
        for item in data:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ValueError(f"{source}: capability entries must be [script_name, host_name] pairs")
            pairs.append((str(item[0]), str(item[1])))
        return pairs
    raise ValueError(f"{source}: capability table must be a mapping or a list of pairs")


def load_capabilities(path: str) -> CapabilityTable:
    """Load a capability table from a YAML or JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    if path.endswith(".json"):
        data = json.loads(content)
    else:
        data = yaml.safe_load(content)
    return CapabilityTable(_pairs_from_data(data, path))


_default_table: Optional[CapabilityTable] = None


def default_capabilities() -> CapabilityTable:
    global _default_table
    if _default_table is None:
        _default_table = load_capabilities(DEFAULT_CAPABILITIES_PATH)
    return _default_table


def list_capabilities() -> list[tuple[str, str]]:
    """The bundled (script_name, host_name) pairs, in table order."""
    return default_capabilities().pairs()


def as_capability_table(capabilities: Optional[Iterable[tuple[str, str]]]) -> CapabilityTable:
    """Accept None (bundled table), a CapabilityTable, or any iterable of pairs."""
    if capabilities is None:
        return default_capabilities()
    if isinstance(capabilities, CapabilityTable):
        return capabilities
    return CapabilityTable(capabilities)
