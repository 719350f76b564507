"""The enclosing form: shared rules, field registry and whole-form operations."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from formforge.config import FieldConfig, FormConfig, FormDefinition
from formforge.field import FieldController
from formforge.registry import FieldRegistry
from formforge.validation.engine import ValidationEngine
from formforge.validation.types import (
    FieldError,
    FormValidationResult,
    Rule,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


class Form:
    """Coordinates the fields mounted in one form instance.

    Implements both RuleSource and FieldRegistrar for its fields.

    Example:
        form = Form(FormConfig(rules_by_name={"email": [{"type": "email"}]}))
        email = form.field(FieldConfig(name="email"))
        email.set_field_value("a@b.com")
        result = await form.validate()
    """

    def __init__(
        self,
        config: FormConfig | None = None,
        *,
        engine: ValidationEngine | None = None,
    ):
        self.config = config or FormConfig()
        self.engine = engine
        self.registry = FieldRegistry()

    @classmethod
    def from_definition(
        cls,
        definition: FormDefinition,
        *,
        engine: ValidationEngine | None = None,
    ) -> "Form":
        """Build a form and mount every field of a loaded definition."""
        form = cls(definition.config, engine=engine)
        for field_config in definition.fields:
            form.field(field_config)
        return form

    # RuleSource

    def rules_for(self, name: str | None) -> tuple[Rule, ...] | None:
        return self.config.rules_for(name)

    # FieldRegistrar

    def add_field(self, field: FieldController) -> None:
        self.registry.add(field)

    def remove_field(self, field: FieldController) -> None:
        self.registry.remove(field)

    def field(self, config: FieldConfig, *, mount: bool = True) -> FieldController:
        """Create a field bound to this form, mounted unless told otherwise."""
        controller = FieldController(config, self, self, engine=self.engine)
        if mount:
            controller.mount()
        return controller

    def get_field(self, name: str) -> FieldController:
        """Get the first mounted field with a name.

        Raises:
            ValueError: If no mounted field has that name
        """
        matches = self.registry.named(name)
        if not matches:
            raise ValueError(f"Field '{name}' is not mounted in this form")
        return matches[0]

    # Whole-form operations

    async def validate(self) -> FormValidationResult:
        """Validate every mounted field with all of its rules.

        Fields run concurrently; unnamed fields never block the result.
        Errors other than ValidationFailure propagate.
        """
        fields = self.registry.fields()
        outcomes = await asyncio.gather(
            *(f.validate(None) for f in fields),
            return_exceptions=True,
        )

        values: dict[str, Any] = {}
        errors: list[FieldError] = []
        for f, outcome in zip(fields, outcomes):
            if isinstance(outcome, ValidationFailure):
                errors.append(
                    outcome.errors[0]
                    if outcome.errors
                    else FieldError(message=outcome.message, field=f.name)
                )
                if f.name:
                    values[f.name] = f.value
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                values.update(outcome)

        result = FormValidationResult(valid=not errors, values=values, errors=errors)
        logger.debug(
            "Validated %d field(s): valid=%s, errors=%d",
            len(fields),
            result.valid,
            len(errors),
        )
        return result

    def reset_fields(self) -> None:
        """Reset every mounted field to its initial value."""
        for f in self.registry.fields():
            f.reset()

    def set_fields_value(self, values: Mapping[str, Any]) -> None:
        """Populate fields by name without validating them.

        Names without a mounted field are ignored.
        """
        for f in self.registry.fields():
            if f.name in values:
                f.set_field_value(values[f.name])

    def get_fields_value(self) -> dict[str, Any]:
        """Current values of every mounted named field."""
        return {f.name: f.value for f in self.registry.fields() if f.name}

    def label_text(self, field: FieldController) -> str:
        """Label of a field with the form's suffix, or "" if it has none."""
        if not field.config.label:
            return ""
        return field.config.label + self.config.layout.label_suffix
