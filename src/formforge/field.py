"""Per-field validation controller.

A FieldController owns one field's value, validity flag and error message.
On every trigger it resolves the field's rules, keeps those scoped to the
trigger, runs them through the engine adapter and publishes the outcome:

    PRISTINE --set_value/handle_blur--> VALIDATING --ok--> VALID
                                                   --fail--> INVALID
    (any) --reset / set_field_value--> PRISTINE

Each validation run takes a sequence token when it starts. Only the
completion holding the latest token updates state, so a slow run that
finishes after a newer one cannot overwrite its result. Completions that
arrive after the field unmounted are dropped.
"""

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from typing import Any

from formforge.binding import compose_trigger, extract_value
from formforge.config import FieldConfig
from formforge.context import FieldRegistrar, RuleSource
from formforge.validation.engine import EngineAdapter, ValidationEngine
from formforge.validation.rules import filter_rules, has_required, resolve_rules
from formforge.validation.types import (
    FieldState,
    FieldStatus,
    Rule,
    Trigger,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

Listener = Callable[[FieldState], None]


def _running_loop(caller: str) -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        raise RuntimeError(
            f"{caller}() schedules validation and needs a running event loop"
        ) from None


class FieldController:
    """Stateful validation unit for a single form field.

    Example:
        field = FieldController(FieldConfig(name="email", rules={"type": "email"}))
        await field.set_value("not-an-email")
        field.error  # "email is not a valid email"
    """

    def __init__(
        self,
        config: FieldConfig,
        rule_source: RuleSource | None = None,
        registrar: FieldRegistrar | None = None,
        *,
        engine: ValidationEngine | None = None,
    ):
        self.config = config
        self.rule_source = rule_source
        self.registrar = registrar
        self._adapter = EngineAdapter(engine)
        self._state = FieldState(value=config.initial)
        self._settled_status = self._state.status
        self._listeners: list[Listener] = []
        self._sequence = 0
        self._mounted = False
        self._unmounted = False
        # Strong references to fire-and-forget validation runs
        self._tasks: set[asyncio.Task] = set()
        self.change_handler = compose_trigger(self.handle_change, config.on_change)

    # -------------------------------------------------------------------------
    # Observable state
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str | None:
        return self.config.name

    @property
    def state(self) -> FieldState:
        return self._state

    @property
    def value(self) -> Any:
        return self._state.value

    @property
    def valid(self) -> bool:
        return self._state.valid

    @property
    def error(self) -> str:
        return self._state.error

    @property
    def status(self) -> FieldStatus:
        return self._state.status

    @property
    def mounted(self) -> bool:
        return self._mounted

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new state.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, **changes: Any) -> None:
        self._state = dataclasses.replace(self._state, **changes)
        if self._state.status is not FieldStatus.VALIDATING:
            self._settled_status = self._state.status
        for listener in list(self._listeners):
            listener(self._state)

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def effective_rules(self) -> tuple[Rule, ...]:
        """Merged rules for this field, before trigger filtering."""
        form_rules = None
        if self.name and self.rule_source is not None:
            form_rules = self.rule_source.rules_for(self.name)
        return resolve_rules(self.config.rules, form_rules, self.config.required)

    def filtered_rules(self, trigger: Trigger | str | None) -> tuple[Rule, ...]:
        return filter_rules(self.effective_rules(), trigger)

    def is_required(self) -> bool:
        return has_required(self.effective_rules())

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    def set_value(self, raw: Any) -> "asyncio.Task[bool]":
        """Store a value (or the value carried by an event) and validate on change.

        The value is stored synchronously. Validation runs in the background;
        the returned task resolves to the field's validity.

        Raises:
            RuntimeError: If no event loop is running. The value is left untouched.
        """
        loop = _running_loop("set_value")
        self._replace(value=extract_value(raw))
        return self._schedule(Trigger.CHANGE, loop)

    def handle_change(self, event: Any) -> "asyncio.Task[bool]":
        return self.set_value(event)

    def handle_blur(self, event: Any = None) -> "asyncio.Task[bool]":
        """Validate the current value for the blur trigger."""
        return self._schedule(Trigger.BLUR, _running_loop("handle_blur"))

    def _schedule(
        self, trigger: Trigger, loop: asyncio.AbstractEventLoop
    ) -> "asyncio.Task[bool]":
        task = loop.create_task(self._run(trigger))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, trigger: Trigger) -> bool:
        # Failures are already reflected in state; nobody is waiting on them here.
        try:
            await self.validate(trigger)
        except ValidationFailure:
            return False
        return True

    async def validate(self, trigger: Trigger | str | None = None) -> dict[str, Any]:
        """Validate the current value.

        Args:
            trigger: Only rules scoped to this trigger run; None runs every rule

        Returns:
            ``{name: value}`` on success, ``{}`` for an unnamed field

        Raises:
            ValidationFailure: If a rule rejected the value
            ConfigurationError: If the rules could not be run
        """
        rules = self.filtered_rules(trigger)
        self._sequence += 1
        token = self._sequence
        self._replace(status=FieldStatus.VALIDATING)
        logger.debug(
            "Validating field '%s' (trigger=%s, rules=%d, token=%d)",
            self.name,
            trigger,
            len(rules),
            token,
        )

        try:
            model = await self._adapter.validate(self.name, self._state.value, rules)
        except ValidationFailure as exc:
            self._settle(
                token,
                valid=False,
                error=exc.message or f"{self.name} is invalid",
                status=FieldStatus.INVALID,
            )
            raise
        except Exception:
            self._settle(token, status=self._settled_status)
            raise

        self._settle(token, valid=True, error="", status=FieldStatus.VALID)
        return model

    def _settle(self, token: int, **changes: Any) -> None:
        """Apply a completion if it is still the latest one for a live field."""
        if self._unmounted:
            logger.warning(
                "Dropping validation result for unmounted field '%s'", self.name
            )
            return
        if token != self._sequence:
            logger.debug(
                "Dropping stale validation result for field '%s' (token=%d, latest=%d)",
                self.name,
                token,
                self._sequence,
            )
            return
        self._replace(**changes)

    # -------------------------------------------------------------------------
    # Programmatic updates
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Restore the initial value and clear any validation outcome."""
        self._sequence += 1
        self._replace(
            value=self.config.initial,
            valid=True,
            error="",
            status=FieldStatus.PRISTINE,
        )

    def set_field_value(self, value: Any) -> None:
        """Replace the value without validating it (form population)."""
        self._sequence += 1
        self._replace(value=value, valid=True, error="", status=FieldStatus.PRISTINE)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def mount(self) -> None:
        """Join the form registry. Unnamed fields never join."""
        if self._mounted:
            return
        self._mounted = True
        self._unmounted = False
        if self.name and self.registrar is not None:
            self.registrar.add_field(self)

    def unmount(self) -> None:
        """Leave the form registry; later validation results are dropped."""
        self._mounted = False
        self._unmounted = True
        if self.registrar is not None:
            self.registrar.remove_field(self)

    def bound_props(self) -> dict[str, Any]:
        """Props the rendering layer passes to the bound control."""
        if not self.name:
            return {}
        return {
            self.config.value_prop_name: self._state.value,
            self.config.trigger_prop: self.change_handler,
        }

    def __repr__(self) -> str:
        return (
            f"FieldController(name={self.name!r}, value={self._state.value!r}, "
            f"status={self._state.status.value})"
        )
