"""
Tool Catalog - the tools available to one agent for one cycle.

The catalog is a read-only lookup built from ToolDefinitions supplied by
the configuration subsystem. It is treated as immutable for the lifetime of
one generate+execute cycle, so it can be shared between concurrent plans
without locking.

Pattern: Service Registry (read-only variant)
"""

from collections.abc import Iterable, Iterator
from types import MappingProxyType
from typing import Any, Mapping

from toolplan.models.domain import ToolDefinition


# =============================================================================
# Exceptions
# =============================================================================


class ToolNotFoundError(KeyError):
    """Raised when a requested tool is not in the catalog."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool not found: {tool_name}")

    def __str__(self) -> str:
        return f"Tool not found: {self.tool_name}"


class DuplicateToolError(ValueError):
    """Raised when two definitions share a name."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Duplicate tool name in catalog: {tool_name}")


# =============================================================================
# ToolCatalog
# =============================================================================


class ToolCatalog:
    """
    Immutable collection of tool definitions keyed by name.

    Example:
        >>> catalog = ToolCatalog([orders_tool, customer_tool])
        >>> catalog.has("getOrders")
        True
        >>> catalog.get("getOrders").invocation_url
        'https://tools.example.com/orders'
    """

    def __init__(self, tools: Iterable[ToolDefinition] = ()) -> None:
        by_name: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in by_name:
                raise DuplicateToolError(tool.name)
            by_name[tool.name] = tool
        self._tools: Mapping[str, ToolDefinition] = MappingProxyType(by_name)

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __repr__(self) -> str:
        return f"ToolCatalog({list(self._tools)!r})"

    def get(self, name: str) -> ToolDefinition:
        """
        Get a tool by name.

        Raises:
            ToolNotFoundError: If the tool is not in the catalog.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> set[str]:
        """Names of all tools, active or not."""
        return set(self._tools)

    def list(self) -> list[ToolDefinition]:
        """All tool definitions in registration order."""
        return list(self._tools.values())

    def active(self) -> "ToolCatalog":
        """A catalog containing only tools flagged active."""
        return ToolCatalog(tool for tool in self._tools.values() if tool.active)

    # =========================================================================
    # Construction helpers
    # =========================================================================

    @classmethod
    def from_dicts(cls, items: Iterable[Mapping[str, Any]]) -> "ToolCatalog":
        """Build a catalog from plain dicts (e.g. an API payload)."""
        return cls(ToolDefinition.model_validate(item) for item in items)

