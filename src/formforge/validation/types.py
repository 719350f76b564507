"""Core types for the formforge validation pipeline.

This module defines the types shared by every stage of a field validation run:
- Rules and triggers (what to check, and when)
- Field errors and the exceptions that carry them
- Field state snapshots consumed by the rendering layer
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class Trigger(Enum):
    """The UI event class that decides which rules currently apply."""

    CHANGE = "change"
    BLUR = "blur"

    @classmethod
    def parse(cls, value: "Trigger | str") -> "Trigger":
        """Convert a trigger name into a Trigger.

        Raises:
            ConfigurationError: If the name is not a known trigger
        """
        if isinstance(value, Trigger):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            known = ", ".join(t.value for t in cls)
            raise ConfigurationError(
                f"Unknown trigger '{value}'. Expected one of: {known}"
            ) from None


class FieldStatus(Enum):
    """Lifecycle status of a single field."""

    PRISTINE = "pristine"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"


# Keys a rule mapping may carry that the core itself interprets.
# Everything else is passed through to the engine untouched.
_CORE_KEYS = frozenset({"required", "message", "trigger"})


def _parse_triggers(value: Any) -> frozenset[Trigger] | None:
    if value is None:
        return None
    if isinstance(value, (str, Trigger)):
        value = [value] if isinstance(value, Trigger) else value.split(",")
    # An explicit empty list scopes the rule to no trigger at all
    return frozenset(Trigger.parse(t) for t in value if str(t).strip())


@dataclass(frozen=True)
class Rule:
    """A single validation constraint.

    Attributes:
        required: The value must be non-empty
        message: Message reported when this rule fails (engine default if None)
        trigger: Triggers this rule is scoped to; None means every trigger
        constraints: Engine-specific keys (type, pattern, min, max, validator...)
    """

    required: bool = False
    message: str | None = None
    trigger: frozenset[Trigger] | None = None
    constraints: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if self.trigger is not None and not (
            isinstance(self.trigger, frozenset)
            and all(isinstance(t, Trigger) for t in self.trigger)
        ):
            object.__setattr__(self, "trigger", _parse_triggers(self.trigger))
        if not isinstance(self.constraints, MappingProxyType):
            object.__setattr__(
                self, "constraints", MappingProxyType(dict(self.constraints))
            )

    def __hash__(self) -> int:
        return hash((self.required, self.message, self.trigger, tuple(self.constraints)))

    def applies_to(self, trigger: Trigger) -> bool:
        return self.trigger is None or trigger in self.trigger

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
        """Create a Rule from a loose YAML/JSON style mapping.

        The trigger may be a single name ("blur"), a comma separated string
        ("change,blur") or a list of names.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Rule must be a mapping, got {type(data).__name__}"
            )
        return cls(
            required=bool(data.get("required", False)),
            message=data.get("message"),
            trigger=_parse_triggers(data.get("trigger")),
            constraints={k: v for k, v in data.items() if k not in _CORE_KEYS},
        )

    def to_descriptor(self) -> dict[str, Any]:
        """Flatten the rule into the mapping shape the engine consumes."""
        descriptor: dict[str, Any] = dict(self.constraints)
        if self.required:
            descriptor["required"] = True
        if self.message is not None:
            descriptor["message"] = self.message
        return descriptor


RuleSpec = Rule | Mapping[str, Any] | Sequence[Rule | Mapping[str, Any]]


@dataclass(frozen=True)
class FieldError:
    """A single failed rule reported by the engine.

    Attributes:
        message: Human-readable message (may be empty)
        field: Field name the error belongs to
        code: Machine-readable error code (e.g., "REQUIRED", "INVALID_EMAIL")
    """

    message: str
    field: str | None = None
    code: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "field": self.field,
            "code": self.code,
        }


class ConfigurationError(ValueError):
    """A rule or form definition is malformed."""


class SchemaError(ConfigurationError):
    """The validation engine rejected a rule descriptor."""


class ValidationFailure(Exception):
    """One or more rules rejected a field's current value.

    Attributes:
        message: The first failing rule's message ("" if the engine gave none)
        errors: Every error the engine reported, in rule order
    """

    def __init__(self, message: str, errors: Sequence[FieldError] = ()):
        super().__init__(message)
        self.message = message
        self.errors = list(errors)

    @property
    def field(self) -> str | None:
        return self.errors[0].field if self.errors else None


@dataclass(frozen=True)
class FieldState:
    """Observable state of one field.

    ``valid`` is False exactly when ``error`` carries a message produced
    by the field's own validation history.
    """

    value: Any = ""
    valid: bool = True
    error: str = ""
    status: FieldStatus = FieldStatus.PRISTINE


@dataclass
class FormValidationResult:
    """Result of validating every field registered with a form.

    Attributes:
        valid: True if no field failed
        values: Model of every named field that took part ({name: value})
        errors: Errors from failing fields, first error per field
    """

    valid: bool
    values: dict[str, Any] = field(default_factory=dict)
    errors: list[FieldError] = field(default_factory=list)

    def errors_by_field(self) -> dict[str, str]:
        return {e.field: e.message for e in self.errors if e.field is not None}

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "values": dict(self.values),
            "errors": [e.to_dict() for e in self.errors],
        }
