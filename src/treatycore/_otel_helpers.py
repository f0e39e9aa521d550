"""
Span event helper used by every telemetry emitter in treatycore.

Emitters in ``treatycore.diagnostics.otel`` build a flat attribute dict
and hand it to ``add_span_event()``, which attaches it to whatever span is
current.  Nothing is recorded outside an active, recording span.

Usage::

    from treatycore._otel_helpers import add_span_event

    add_span_event("treaty.validation.result", {"treaty.valid": True})
"""

from __future__ import annotations

from opentelemetry import trace as otel_trace

AttributeValue = str | int | float | bool


def add_span_event(name: str, attributes: dict[str, AttributeValue]) -> None:
    """Attach ``name`` with ``attributes`` to the current span, if it records."""
    current = otel_trace.get_current_span()
    if current is not None and current.is_recording():
        current.add_event(name=name, attributes=attributes)
