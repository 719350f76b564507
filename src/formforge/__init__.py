"""formforge: per-field validation orchestration for form-binding UIs.

Usage:
    from formforge import FieldConfig, Form, FormConfig

    form = Form(FormConfig(rules_by_name={"email": {"type": "email"}}))
    email = form.field(FieldConfig(name="email", required=True))

    await email.set_value("not-an-email")
    email.valid, email.error   # (False, "email is not a valid email")

    result = await form.validate()
"""

from formforge.binding import compose_trigger, extract_value
from formforge.config import (
    MISSING,
    FieldConfig,
    FormConfig,
    FormDefinition,
    FormLoader,
    LayoutOptions,
    Settings,
    load_form_file,
)
from formforge.context import FieldRegistrar, RuleSource
from formforge.field import FieldController
from formforge.form import Form
from formforge.registry import FieldRegistry
from formforge.validation import (
    DEFAULT_REQUIRED_RULE,
    ConfigurationError,
    EngineAdapter,
    FieldError,
    FieldState,
    FieldStatus,
    FormValidationResult,
    Rule,
    Schema,
    SchemaError,
    Trigger,
    ValidationFailure,
    filter_rules,
    normalize_rules,
    resolve_rules,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "MISSING",
    "FieldConfig",
    "FormConfig",
    "FormDefinition",
    "FormLoader",
    "LayoutOptions",
    "Settings",
    "load_form_file",
    # Runtime
    "FieldController",
    "FieldRegistrar",
    "FieldRegistry",
    "Form",
    "RuleSource",
    # Binding
    "compose_trigger",
    "extract_value",
    # Validation
    "DEFAULT_REQUIRED_RULE",
    "ConfigurationError",
    "EngineAdapter",
    "FieldError",
    "FieldState",
    "FieldStatus",
    "FormValidationResult",
    "Rule",
    "Schema",
    "SchemaError",
    "Trigger",
    "ValidationFailure",
    "filter_rules",
    "normalize_rules",
    "resolve_rules",
]
