"""Tests for FieldRegistry."""

from formforge.config import FieldConfig
from formforge.field import FieldController
from formforge.registry import FieldRegistry


def make_field(name: str | None = "field") -> FieldController:
    return FieldController(FieldConfig(name=name))


class TestFieldRegistry:
    def test_add_and_enumerate(self):
        registry = FieldRegistry()
        a, b = make_field("a"), make_field("b")
        registry.add(a)
        registry.add(b)
        assert registry.fields() == [a, b]
        assert len(registry) == 2

    def test_add_is_idempotent(self):
        registry = FieldRegistry()
        field = make_field()
        registry.add(field)
        registry.add(field)
        assert registry.fields() == [field]

    def test_membership_is_by_identity(self):
        registry = FieldRegistry()
        first, second = make_field("same"), make_field("same")
        registry.add(first)
        registry.add(second)
        assert len(registry) == 2
        assert registry.named("same") == [first, second]

    def test_remove(self):
        registry = FieldRegistry()
        field = make_field()
        registry.add(field)
        registry.remove(field)
        assert field not in registry
        assert registry.fields() == []

    def test_remove_unknown_is_noop(self):
        registry = FieldRegistry()
        kept = make_field("kept")
        registry.add(kept)
        registry.remove(make_field("other"))
        registry.remove(kept)
        registry.remove(kept)
        assert len(registry) == 0

    def test_enumeration_tolerates_changes(self):
        registry = FieldRegistry()
        fields = [make_field(str(i)) for i in range(3)]
        for f in fields:
            registry.add(f)

        for f in registry:
            registry.remove(f)
            registry.add(make_field("late"))

        assert len(registry) == 3
        assert all(f.name == "late" for f in registry.fields())

    def test_clear(self):
        registry = FieldRegistry()
        registry.add(make_field())
        registry.clear()
        assert len(registry) == 0
