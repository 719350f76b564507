"""Rule resolution and trigger filtering.

A field's effective rule list is computed from three sources:
1. Rules passed to the field explicitly
2. Form-level rules addressed by the field's name
3. The ``required`` shortcut flag

Explicit rules win outright over form-level rules; only the shortcut is
additive. Resolution is pure, so it can be recomputed on every trigger.
"""

from collections.abc import Iterable, Mapping

from formforge.validation.types import ConfigurationError, Rule, RuleSpec, Trigger

DEFAULT_REQUIRED_RULE = Rule(
    required=True,
    message="required",
    trigger=frozenset({Trigger.BLUR}),
)


def normalize_rules(spec: RuleSpec | None) -> tuple[Rule, ...]:
    """Coerce a single rule, a rule mapping or a sequence of either into a tuple.

    Args:
        spec: Rule(s) in any accepted shape, or None

    Returns:
        Tuple of Rule instances (empty for None)

    Raises:
        ConfigurationError: If an entry is neither a Rule nor a mapping
    """
    if spec is None:
        return ()
    if isinstance(spec, (Rule, Mapping)):
        spec = [spec]
    elif isinstance(spec, (str, bytes)) or not isinstance(spec, Iterable):
        raise ConfigurationError(
            f"Rules must be a rule, a mapping or a list, got {type(spec).__name__}"
        )

    rules = []
    for entry in spec:
        if isinstance(entry, Rule):
            rules.append(entry)
        elif isinstance(entry, Mapping):
            rules.append(Rule.from_dict(entry))
        else:
            raise ConfigurationError(
                f"Rule entries must be rules or mappings, got {type(entry).__name__}"
            )
    return tuple(rules)


def resolve_rules(
    explicit: RuleSpec | None,
    form_rules: RuleSpec | None,
    required: bool = False,
) -> tuple[Rule, ...]:
    """Compute a field's effective rule list.

    Args:
        explicit: Rules given to the field itself (win when present)
        form_rules: Form-level rules for the field's name
        required: Shortcut flag; adds a blur-scoped required rule unless
            the base list already has a required rule

    Returns:
        The effective rule list, before trigger filtering
    """
    base = normalize_rules(explicit if explicit is not None else form_rules)

    if not required:
        return base

    if any(rule.required for rule in base):
        return base

    return (DEFAULT_REQUIRED_RULE, *base)


def filter_rules(rules: Iterable[Rule], trigger: Trigger | str | None) -> tuple[Rule, ...]:
    """Narrow rules to those that apply to a trigger.

    Rules without a trigger apply to every trigger. Passing ``None`` keeps
    every rule, which is what a whole-form validation pass wants.
    """
    if trigger is None:
        return tuple(rules)
    trigger = Trigger.parse(trigger)
    return tuple(rule for rule in rules if rule.applies_to(trigger))


def has_required(rules: Iterable[Rule]) -> bool:
    """Check if any rule carries the required flag."""
    return any(rule.required for rule in rules)
