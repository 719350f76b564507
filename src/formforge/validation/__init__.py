"""formforge validation pipeline.

Rules flow through three stages on every trigger:
- Resolution: explicit rules, form-level rules and the required shortcut
- Filtering: rules scoped to the current trigger
- Execution: a descriptor-based engine run through EngineAdapter

Usage:
    from formforge.validation import EngineAdapter, filter_rules, resolve_rules

    rules = filter_rules(resolve_rules(explicit, form_rules, required), "blur")
    model = await EngineAdapter().validate("email", value, rules)
"""

from formforge.validation.engine import EngineAdapter, SchemaLike, ValidationEngine
from formforge.validation.rules import (
    DEFAULT_REQUIRED_RULE,
    filter_rules,
    has_required,
    normalize_rules,
    resolve_rules,
)
from formforge.validation.schema import Schema
from formforge.validation.types import (
    ConfigurationError,
    FieldError,
    FieldState,
    FieldStatus,
    FormValidationResult,
    Rule,
    RuleSpec,
    SchemaError,
    Trigger,
    ValidationFailure,
)

__all__ = [
    # Types
    "ConfigurationError",
    "FieldError",
    "FieldState",
    "FieldStatus",
    "FormValidationResult",
    "Rule",
    "RuleSpec",
    "SchemaError",
    "Trigger",
    "ValidationFailure",
    # Rules
    "DEFAULT_REQUIRED_RULE",
    "filter_rules",
    "has_required",
    "normalize_rules",
    "resolve_rules",
    # Engine
    "EngineAdapter",
    "Schema",
    "SchemaLike",
    "ValidationEngine",
]
