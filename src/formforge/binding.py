"""Glue between raw interaction events and field controllers."""

from collections.abc import Callable
from typing import Any

Handler = Callable[[Any], Any]


def extract_value(event: Any) -> Any:
    """Get the semantic value out of an interaction event.

    Anything without a ``target`` is taken to be the value itself. A
    checkbox-like target yields ``checked``; any other target yields ``value``.
    """
    target = getattr(event, "target", None)
    if event is None or target is None:
        return event
    if getattr(target, "type", None) == "checkbox":
        return getattr(target, "checked", None)
    return getattr(target, "value", None)


def compose_trigger(internal: Handler, external: Handler | None = None) -> Handler:
    """Combine the field's own handler with a consumer-supplied one.

    The internal handler always sees the event first. Without an external
    handler the internal one is returned as is.
    """
    if external is None:
        return internal

    def handler(event: Any) -> None:
        internal(event)
        external(event)

    return handler
