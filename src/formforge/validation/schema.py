"""Bundled descriptor-based validation engine.

``Schema`` is the default engine used by the adapter when the caller does
not supply one. It accepts a descriptor mapping each field name to a list of
rule mappings and validates a model against it:

    schema = Schema({"email": [{"required": True}, {"type": "email"}]})
    errors = await schema.validate({"email": "not-an-email"}, first=True)

Supported rule keys:
- required: Value must be non-empty
- whitespace: A string made only of whitespace counts as empty
- type: string, number, integer, float, boolean, array, object, enum,
  regexp, email, url, phone, uuid, date, datetime
- len / min / max: String or list length, or numeric value
- enum: Allowed values
- pattern: Regex searched in string values
- validator: Custom callable ``(rule, value)``; may be async
- message: Overrides the default message of any failure in the rule

Empty optional values skip every check except ``validator``.
"""

import inspect
import re
from collections.abc import Mapping, Sequence
from typing import Any

from formforge.validation.types import FieldError, SchemaError


# Patterns for the built-in "type" values. They check shape only.
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(
    r"^[\+]?[(]?[0-9]{1,3}[)]?[-\s\.]?[(]?[0-9]{1,4}[)]?[-\s\.]?[0-9]{1,4}[-\s\.]?[0-9]{1,9}$"
)
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")

_FORMAT_PATTERNS: dict[str, re.Pattern[str]] = {
    "email": EMAIL_PATTERN,
    "phone": PHONE_PATTERN,
    "url": URL_PATTERN,
    "uuid": UUID_PATTERN,
    "date": DATE_PATTERN,
    "datetime": DATETIME_PATTERN,
}

_FORMAT_NAMES = {
    "email": "email",
    "phone": "phone number",
    "url": "URL",
    "uuid": "UUID",
    "date": "date (YYYY-MM-DD)",
    "datetime": "datetime",
}

SUPPORTED_TYPES = frozenset({
    "string", "number", "integer", "float", "boolean",
    "array", "object", "enum", "regexp",
    *_FORMAT_PATTERNS,
})


def is_empty(value: Any) -> bool:
    """Check if a value is considered empty."""
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    if isinstance(value, (list, tuple, dict)) and len(value) == 0:
        return True
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# =============================================================================
# Schema
# =============================================================================


class Schema:
    """Validates models against a field-name -> rules descriptor."""

    def __init__(self, descriptor: Mapping[str, Any]):
        if not isinstance(descriptor, Mapping):
            raise SchemaError("Descriptor must be a mapping of field name to rules")
        self.descriptor: dict[str, list[dict[str, Any]]] = {}
        self._patterns: dict[int, re.Pattern[str]] = {}
        for name, rules in descriptor.items():
            if isinstance(rules, Mapping):
                rules = [rules]
            compiled = []
            for rule in rules:
                if not isinstance(rule, Mapping):
                    raise SchemaError(f"Rule for '{name}' must be a mapping")
                rule = dict(rule)
                self._check_rule(name, rule)
                compiled.append(rule)
            self.descriptor[name] = compiled

    def _check_rule(self, name: str, rule: dict[str, Any]) -> None:
        """Reject malformed rules up front."""
        rule_type = rule.get("type")
        if rule_type is not None and rule_type not in SUPPORTED_TYPES:
            raise SchemaError(
                f"Unknown type '{rule_type}' in rule for '{name}'. "
                "Supported types: " + ", ".join(sorted(SUPPORTED_TYPES))
            )
        if rule_type == "enum" and "enum" not in rule:
            raise SchemaError(f"Rule for '{name}' has type 'enum' but no 'enum' values")

        pattern = rule.get("pattern")
        if pattern is not None:
            if isinstance(pattern, re.Pattern):
                self._patterns[id(rule)] = pattern
            else:
                try:
                    self._patterns[id(rule)] = re.compile(pattern)
                except (re.error, TypeError) as exc:
                    raise SchemaError(
                        f"Invalid pattern {pattern!r} in rule for '{name}': {exc}"
                    ) from exc

        validator = rule.get("validator")
        if validator is not None and not callable(validator):
            raise SchemaError(f"Validator in rule for '{name}' is not callable")

    async def validate(
        self,
        model: Mapping[str, Any],
        *,
        first: bool = False,
    ) -> list[FieldError]:
        """Validate a model.

        Args:
            model: Field name -> value
            first: Stop at the first failing rule of each field

        Returns:
            List of errors, empty when the model is valid
        """
        errors: list[FieldError] = []
        for name, rules in self.descriptor.items():
            value = model.get(name)
            for rule in rules:
                rule_errors = await self._validate_rule(name, rule, value)
                if rule_errors:
                    if first:
                        errors.append(rule_errors[0])
                        break
                    errors.extend(rule_errors)
        return errors

    async def _validate_rule(
        self, name: str, rule: dict[str, Any], value: Any
    ) -> list[FieldError]:
        errors = []

        empty = is_empty(value) or (
            rule.get("whitespace") and isinstance(value, str) and not value.strip()
        )

        if empty:
            if rule.get("required"):
                return [self._error(rule, f"{name} is required", name, "REQUIRED")]
        else:
            error = self._check_value(name, rule, value)
            if error:
                return [error]

        validator = rule.get("validator")
        if validator is not None:
            errors.extend(await self._run_validator(name, rule, value, validator))

        return errors

    def _check_value(self, name: str, rule: dict[str, Any], value: Any) -> FieldError | None:
        """Run the declarative checks on a non-empty value."""
        type_error = self._check_type(name, rule, value)
        if type_error:
            return type_error

        range_error = self._check_range(name, rule, value)
        if range_error:
            return range_error

        if "enum" in rule and value not in rule["enum"]:
            allowed = ", ".join(str(v) for v in rule["enum"])
            return self._error(
                rule, f"{name} must be one of {allowed}", name, "INVALID_OPTION"
            )

        pattern = self._patterns.get(id(rule))
        if pattern is not None and isinstance(value, str) and not pattern.search(value):
            return self._error(
                rule,
                f"{name} value {value} does not match pattern {pattern.pattern}",
                name,
                "PATTERN_MISMATCH",
            )

        return None

    def _check_type(self, name: str, rule: dict[str, Any], value: Any) -> FieldError | None:
        rule_type = rule.get("type")
        if rule_type is None:
            return None

        if rule_type in _FORMAT_PATTERNS:
            ok = isinstance(value, str) and bool(_FORMAT_PATTERNS[rule_type].match(value))
            label = _FORMAT_NAMES[rule_type]
        else:
            label = rule_type
            if rule_type == "string":
                ok = isinstance(value, str)
            elif rule_type == "number":
                ok = _is_number(value)
            elif rule_type == "integer":
                ok = isinstance(value, int) and not isinstance(value, bool)
            elif rule_type == "float":
                ok = isinstance(value, float)
            elif rule_type == "boolean":
                ok = isinstance(value, bool)
            elif rule_type == "array":
                ok = isinstance(value, (list, tuple))
            elif rule_type == "object":
                ok = isinstance(value, Mapping)
            elif rule_type == "enum":
                ok = value in rule["enum"]
            else:  # regexp
                ok = self._compiles(value)

        if ok:
            return None
        return self._error(
            rule,
            f"{name} is not a valid {label}",
            name,
            f"INVALID_{rule_type.upper()}",
        )

    def _check_range(self, name: str, rule: dict[str, Any], value: Any) -> FieldError | None:
        """Apply len/min/max to string and list lengths or numeric values."""
        if not any(key in rule for key in ("len", "min", "max")):
            return None

        if _is_number(value):
            measured, unit = value, ""
        elif isinstance(value, (str, list, tuple)):
            measured = len(value)
            unit = " characters" if isinstance(value, str) else " items"
        else:
            return None

        if rule.get("len") is not None and measured != rule["len"]:
            return self._error(
                rule, f"{name} must be exactly {rule['len']}{unit}", name, "LENGTH"
            )
        if rule.get("min") is not None and measured < rule["min"]:
            code = "MIN_VALUE" if not unit else "MIN_LENGTH"
            return self._error(
                rule, f"{name} must be at least {rule['min']}{unit}", name, code
            )
        if rule.get("max") is not None and measured > rule["max"]:
            code = "MAX_VALUE" if not unit else "MAX_LENGTH"
            return self._error(
                rule, f"{name} must be at most {rule['max']}{unit}", name, code
            )
        return None

    async def _run_validator(
        self, name: str, rule: dict[str, Any], value: Any, validator: Any
    ) -> list[FieldError]:
        """Run a custom validator and normalize what it returns.

        A validator may return True/None (valid), False (invalid), a message,
        or a list of messages, and may raise ValueError carrying a message.
        """
        default = f"{name} fails validation"
        try:
            result = validator(rule, value)
            if inspect.isawaitable(result):
                result = await result
        except ValueError as exc:
            return [self._error(rule, str(exc) or default, name, "CUSTOM")]

        if result is None or result is True:
            return []
        if result is False:
            return [self._error(rule, default, name, "CUSTOM")]
        if isinstance(result, str):
            return [FieldError(message=rule.get("message") or result, field=name, code="CUSTOM")]
        if isinstance(result, Sequence):
            return [
                FieldError(message=rule.get("message") or str(m), field=name, code="CUSTOM")
                for m in result
            ]
        raise SchemaError(
            f"Validator for '{name}' returned unsupported value {result!r}"
        )

    @staticmethod
    def _compiles(value: Any) -> bool:
        if isinstance(value, re.Pattern):
            return True
        if not isinstance(value, str):
            return False
        try:
            re.compile(value)
        except re.error:
            return False
        return True

    @staticmethod
    def _error(rule: dict[str, Any], default: str, name: str, code: str) -> FieldError:
        return FieldError(message=rule.get("message") or default, field=name, code=code)
