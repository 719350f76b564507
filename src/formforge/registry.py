"""Field registry for formforge forms.

Tracks which field controllers are currently mounted in a form. Membership
is keyed by controller identity, not by name: several fields may share a
name or have none.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from formforge.field import FieldController


class FieldRegistry:
    """Identity-keyed, insertion-ordered set of mounted fields.

    Example:
        registry = FieldRegistry()
        registry.add(field)
        for f in registry.fields():
            f.reset()
    """

    def __init__(self) -> None:
        self._fields: dict[int, "FieldController"] = {}

    def add(self, field: "FieldController") -> None:
        """Add a field.

        Idempotent - adding the same field twice is a no-op.
        """
        self._fields.setdefault(id(field), field)

    def remove(self, field: "FieldController") -> None:
        """Remove a field. Removing a field that was never added is a no-op."""
        if self._fields.get(id(field)) is field:
            del self._fields[id(field)]

    def fields(self) -> list["FieldController"]:
        """Snapshot of mounted fields in mount order.

        The snapshot is safe to iterate while fields mount or unmount.
        """
        return list(self._fields.values())

    def named(self, name: str) -> list["FieldController"]:
        """List mounted fields with the given name."""
        return [f for f in self._fields.values() if f.name == name]

    def __contains__(self, field: object) -> bool:
        return self._fields.get(id(field)) is field

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator["FieldController"]:
        return iter(self.fields())

    def clear(self) -> None:
        """Remove every field. Primarily for testing."""
        self._fields.clear()
