"""
definitions.py: JSON Schema checks for formforge form definition files.

Usage:
    from formforge.definitions import check_forms_dir, check_form_file

    issues = check_forms_dir(Path("forms"))
    for issue in issues:
        print(issue)

Schema checks catch shape errors (unknown keys, bad trigger names); the
semantic pass then loads the file the way the runtime does so rule
normalization errors surface too.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from formforge.config import FormDefinition
from formforge.validation.types import ConfigurationError

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "form.schema.json"


@dataclass
class DefinitionIssue:
    """A single finding for a form definition file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "fields[0]/rules"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


def _load_schema() -> dict[str, Any]:
    with _SCHEMA_PATH.open() as fh:
        return json.load(fh)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def check_form_file(
    yaml_path: Path,
    *,
    validator: Draft202012Validator | None = None,
) -> list[DefinitionIssue]:
    """
    Check a single form definition file.

    Args:
        yaml_path: Path to the YAML file.
        validator: Pre-built schema validator.  Built automatically if omitted.

    Returns:
        A list of :class:`DefinitionIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [DefinitionIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            DefinitionIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    if validator is None:
        validator = Draft202012Validator(_load_schema())

    issues = [
        DefinitionIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(raw), key=lambda e: list(map(str, e.path)))
    ]
    if issues:
        return issues

    try:
        definition = FormDefinition.from_dict(raw, source=yaml_path)
    except ConfigurationError as exc:
        return [DefinitionIssue(file=yaml_path, message=str(exc))]

    names = [f.name for f in definition.fields if f.name]
    for name in sorted({n for n in names if names.count(n) > 1}):
        issues.append(
            DefinitionIssue(
                file=yaml_path,
                message=f"Field name '{name}' is used more than once",
                path="fields",
                severity="warning",
            )
        )
    for name in definition.config.rules_by_name:
        if name not in names:
            issues.append(
                DefinitionIssue(
                    file=yaml_path,
                    message=f"Rules defined for '{name}' but no field has that name",
                    path=f"rules/{name}",
                    severity="warning",
                )
            )
    return issues


def check_forms_dir(forms_dir: Path, *, strict: bool = False) -> list[DefinitionIssue]:
    """
    Check every ``*.yaml`` file under *forms_dir*.

    Args:
        forms_dir: Directory holding form definitions.
        strict:    If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of :class:`DefinitionIssue` objects across all files.
    """
    if not forms_dir.is_dir():
        return [
            DefinitionIssue(
                file=forms_dir,
                message=f"Forms directory does not exist: {forms_dir}",
            )
        ]

    try:
        validator = Draft202012Validator(_load_schema())
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        return [
            DefinitionIssue(
                file=_SCHEMA_PATH,
                message=f"Failed to load JSON Schema: {exc}",
            )
        ]

    all_issues: list[DefinitionIssue] = []
    for yaml_file in sorted(forms_dir.glob("*.yaml")):
        file_issues = check_form_file(yaml_file, validator=validator)
        if strict:
            for issue in file_issues:
                if issue.severity == "warning":
                    issue.severity = "error"
        all_issues.extend(file_issues)

    logger.debug("Checked %s: %d issue(s)", forms_dir, len(all_issues))
    return all_issues
