"""Form and field configuration, and loading form definitions from YAML."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from formforge.validation.rules import normalize_rules
from formforge.validation.types import ConfigurationError, Rule, RuleSpec

logger = logging.getLogger(__name__)


class _Missing:
    """Marker for "no initial value was given"."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

LABEL_POSITIONS = ("right", "left", "top")


@dataclass
class FieldConfig:
    """Configuration a field receives from its caller.

    Attributes:
        name: Key for form-level rule lookup and registry membership;
            a field without a name is never validated
        rules: Explicit rules (single rule, mapping or list); override form rules
        required: Shortcut that adds a blur-scoped required rule
        initial_value: Value used on creation and reset ("" when MISSING)
        label: Text shown next to the control
        label_width: Overrides the form's label width
        value_prop_name: Prop the bound control reads its value from
        trigger_prop: Prop the bound control reports changes through
        on_change: Consumer handler that also observes every change event
    """

    name: str | None = None
    rules: RuleSpec | None = None
    required: bool = False
    initial_value: Any = MISSING
    label: str | None = None
    label_width: int | str | None = None
    value_prop_name: str = "value"
    trigger_prop: str = "on_change"
    on_change: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        if self.rules is not None:
            self.rules = normalize_rules(self.rules)

    @property
    def initial(self) -> Any:
        return "" if self.initial_value is MISSING else self.initial_value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FieldConfig:
        """Create FieldConfig from a YAML/JSON dict."""
        return cls(
            name=data.get("name"),
            rules=data.get("rules"),
            required=bool(data.get("required", False)),
            initial_value=data.get("initialValue", MISSING),
            label=data.get("label"),
            label_width=data.get("labelWidth"),
            value_prop_name=data.get("valuePropName", "value"),
            trigger_prop=data.get("trigger", "on_change"),
        )


@dataclass(frozen=True)
class LayoutOptions:
    """Presentation options shared by the fields of a form."""

    label_position: str = "right"
    label_width: int | str | None = None
    label_suffix: str = ":"
    disabled: bool = False

    def __post_init__(self) -> None:
        if self.label_position not in LABEL_POSITIONS:
            raise ConfigurationError(
                f"Invalid label position '{self.label_position}'. "
                f"Expected one of: {', '.join(LABEL_POSITIONS)}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LayoutOptions:
        return cls(
            label_position=data.get("labelPosition", "right"),
            label_width=data.get("labelWidth"),
            label_suffix=data.get("labelSuffix", ":"),
            disabled=bool(data.get("disabled", False)),
        )


@dataclass(frozen=True)
class FormConfig:
    """Read-only configuration shared by every field of a form.

    Attributes:
        rules_by_name: Field name -> rules, used when a field has no explicit rules
        layout: Presentation options (never consulted by validation)
    """

    rules_by_name: Mapping[str, tuple[Rule, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    layout: LayoutOptions = field(default_factory=LayoutOptions)

    def __post_init__(self) -> None:
        normalized = {
            name: normalize_rules(rules) for name, rules in self.rules_by_name.items()
        }
        object.__setattr__(self, "rules_by_name", MappingProxyType(normalized))

    def rules_for(self, name: str | None) -> tuple[Rule, ...] | None:
        if not name:
            return None
        return self.rules_by_name.get(name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FormConfig:
        return cls(
            rules_by_name=data.get("rules") or {},
            layout=LayoutOptions.from_dict(data.get("layout") or {}),
        )


@dataclass
class FormDefinition:
    """A complete form loaded from YAML: shared config plus its fields."""

    name: str
    config: FormConfig
    fields: list[FieldConfig] = field(default_factory=list)
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Path | None = None) -> FormDefinition:
        """Create FormDefinition from a parsed YAML document.

        Raises:
            ConfigurationError: If the document is not a form definition
        """
        if not isinstance(data, Mapping) or "form" not in data:
            raise ConfigurationError(
                f"{source or 'Document'} is not a form definition (missing 'form' key)"
            )
        fields = [FieldConfig.from_dict(f) for f in data.get("fields") or []]
        return cls(
            name=str(data["form"]),
            config=FormConfig.from_dict(data),
            fields=fields,
            source=source,
        )


def load_form_file(path: Path) -> FormDefinition:
    """Load a single form definition YAML file.

    Raises:
        ConfigurationError: If the file cannot be parsed or is not a form
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"YAML parse error in {path}: {exc}") from exc
    definition = FormDefinition.from_dict(data, source=path)
    logger.debug("Loaded form '%s' from %s", definition.name, path)
    return definition


class FormLoader:
    """Loads every form definition under a directory."""

    def __init__(self, forms_path: Path):
        self.forms_path = forms_path
        self.forms: dict[str, FormDefinition] = {}

    def load_all(self) -> None:
        """Load all ``*.yaml`` form definitions.

        Raises:
            ConfigurationError: If two files define the same form name
        """
        if not self.forms_path.exists():
            return

        for yaml_file in sorted(self.forms_path.glob("*.yaml")):
            definition = load_form_file(yaml_file)
            if definition.name in self.forms:
                raise ConfigurationError(
                    f"Duplicate form '{definition.name}' defined in both "
                    f"{self.forms[definition.name].source} and {yaml_file}"
                )
            self.forms[definition.name] = definition

    def get_form(self, name: str) -> FormDefinition | None:
        return self.forms.get(name)

    def list_forms(self) -> list[str]:
        return list(self.forms.keys())


@dataclass
class Settings:
    """Process settings for the formforge CLI."""

    forms_path: Path
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> Settings:
        """Create settings from environment variables.

        Resolution order for the forms directory:
        1. FORMFORGE_FORMS_PATH env var
        2. {base_path}/forms
        3. ./forms
        """
        forms_path = os.environ.get("FORMFORGE_FORMS_PATH")
        if forms_path:
            path = Path(forms_path)
        elif base_path:
            path = base_path / "forms"
        else:
            path = Path("forms")

        return cls(
            forms_path=path,
            log_level=os.environ.get("FORMFORGE_LOG_LEVEL", "WARNING").upper(),
        )
