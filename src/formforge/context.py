"""Capabilities a field needs from its enclosing form.

The enclosing form is split into separate capabilities so a field depends
only on what it uses:
- RuleSource: form-level rules by field name (validation only)
- FieldRegistrar: join/leave bookkeeping (lifecycle only)

Layout options live in ``formforge.config.LayoutOptions`` and are never
consulted by validation.
"""

from typing import TYPE_CHECKING, Protocol

from formforge.validation.types import Rule

if TYPE_CHECKING:
    from formforge.field import FieldController


class RuleSource(Protocol):
    """Read-only source of form-level rules."""

    def rules_for(self, name: str | None) -> tuple[Rule, ...] | None:
        """Rules configured at form level for a field name, or None."""
        ...


class FieldRegistrar(Protocol):
    """Registry operations a field calls when it mounts and unmounts."""

    def add_field(self, field: "FieldController") -> None:
        ...

    def remove_field(self, field: "FieldController") -> None:
        ...
