"""Adapter between a field and a descriptor-based validation engine.

The engine is an opaque dependency: anything that can be built from a
descriptor (field name -> rule list) and asked to validate a model
(field name -> value) satisfies the contract. The adapter turns one field
into a one-key descriptor/model pair and settles the outcome exactly once:
the model on success, ``ValidationFailure`` on rejected values,
``ConfigurationError`` when the engine itself blew up.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from formforge.validation.schema import Schema
from formforge.validation.types import (
    ConfigurationError,
    FieldError,
    Rule,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


class SchemaLike(Protocol):
    """A validator built for one descriptor."""

    async def validate(
        self,
        model: Mapping[str, Any],
        *,
        first: bool = False,
    ) -> Sequence[FieldError]:
        """Validate the model.

        Args:
            model: Field name -> value
            first: Report only the first failing rule per field

        Returns:
            Errors in rule order; empty means valid
        """
        ...


# Engine factory signature: (descriptor) -> SchemaLike
ValidationEngine = Callable[[Mapping[str, list[dict[str, Any]]]], SchemaLike]


class EngineAdapter:
    """Runs a single field's rules through a validation engine.

    Example:
        adapter = EngineAdapter()
        model = await adapter.validate("email", "a@b.com", rules)
    """

    def __init__(self, engine: ValidationEngine | None = None):
        self.engine: ValidationEngine = engine or Schema

    async def validate(
        self,
        name: str | None,
        value: Any,
        rules: Sequence[Rule],
    ) -> dict[str, Any]:
        """Validate one field value against already resolved and filtered rules.

        Args:
            name: Field name; unnamed fields are never validated
            value: Current field value
            rules: Rules applicable to the current trigger

        Returns:
            ``{}`` for an unnamed field, otherwise ``{name: value}``

        Raises:
            ValidationFailure: If any rule rejected the value
            ConfigurationError: If the engine could not run the rules
        """
        if not name:
            return {}

        model = {name: value}
        if not rules:
            return model

        descriptor = {name: [rule.to_descriptor() for rule in rules]}
        try:
            schema = self.engine(descriptor)
            errors = [
                _coerce_error(error, name)
                for error in await schema.validate(model, first=True)
            ]
        except ConfigurationError:
            logger.error("Invalid rules for field '%s'", name, exc_info=True)
            raise
        except Exception as exc:
            logger.error("Validation engine failed for field '%s'", name, exc_info=True)
            raise ConfigurationError(
                f"Validation engine failed for field '{name}': {exc}"
            ) from exc

        if not errors:
            return model

        first_error = errors[0]
        raise ValidationFailure(first_error.message or "", errors)


def _coerce_error(error: Any, name: str) -> FieldError:
    """Accept FieldError instances or ``{"message": ...}`` mappings from engines."""
    if isinstance(error, FieldError):
        return error
    if isinstance(error, Mapping):
        return FieldError(
            message=error.get("message") or "",
            field=error.get("field", name),
            code=error.get("code", ""),
        )
    return FieldError(message=str(error), field=name)
