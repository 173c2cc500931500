"""OpenTelemetry spans around node event dispatch.

Tracing is opt-in (``enable_tracing``) and degrades to a no-op when
opentelemetry-api is not installed.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

try:
    from opentelemetry import trace  # type: ignore[import-untyped]
    from opentelemetry.trace import StatusCode  # type: ignore[import-untyped]

    _OTEL_AVAILABLE: bool = True
except ImportError:
    trace = None  # type: ignore[assignment]
    StatusCode = None  # type: ignore[assignment,misc]
    _OTEL_AVAILABLE = False


class CanvasflowTracer:
    """One span per ``execute_node_events`` call, tagged with the session."""

    def __init__(self, session_name: str, enable: bool = True) -> None:
        self.session_name: str = session_name
        self.enabled: bool = enable and _OTEL_AVAILABLE

    @contextmanager
    def node_event(self, node_id: str, event_type: str) -> Generator[Any, None, None]:
        if not self.enabled or trace is None:
            yield None
            return

        tracer = trace.get_tracer("canvasflow", "0.1.0")
        attrs = {
            "canvasflow.session": self.session_name,
            "canvasflow.node_id": node_id,
            "canvasflow.event_type": event_type,
        }
        with tracer.start_as_current_span(
            f"canvasflow.{event_type}", attributes=attrs
        ) as span:
            try:
                yield span
            except Exception as e:
                if span is not None and StatusCode is not None:
                    span.set_status(StatusCode.ERROR, str(e))
                    span.record_exception(e)
                raise

    def record_matched(self, span: Any, count: int) -> None:
        if span is not None:
            span.set_attribute("canvasflow.matched_events", count)

    def record_skip(self, span: Any, kind: str, message: str) -> None:
        if span is not None:
            span.add_event("canvasflow.skipped", {"kind": kind, "message": message})


class _NoopTracer:
    """Stand-in used when tracing is off and after an engine is disposed."""

    @contextmanager
    def node_event(self, node_id: str, event_type: str) -> Generator[None, None, None]:
        yield

    def record_matched(self, span: Any, count: int) -> None:
        pass

    def record_skip(self, span: Any, kind: str, message: str) -> None:
        pass


def make_tracer(session_name: str, enable: bool) -> CanvasflowTracer | _NoopTracer:
    if enable and _OTEL_AVAILABLE:
        return CanvasflowTracer(session_name)
    return _NoopTracer()
