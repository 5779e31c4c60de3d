"""OpenTelemetry tracer setup and span wrappers for privileged clock mutations."""

from __future__ import annotations

import functools
import logging
import os

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

logger = logging.getLogger(__name__)

_TRACER_NAME = "calendar_compat"

# True once the global TracerProvider has been installed by init_telemetry().
_tracer_provider_installed: bool = False


def init_telemetry(service_name: str = "calendar-compat") -> trace.Tracer:
    """Install an SDK TracerProvider once per process and return a tracer.

    An SDK provider already set by the embedding process is kept as is.
    Otherwise no exporter is attached. Spans still get real trace and span ids, which
    the logging processors attach to every record emitted inside them.
    ``OTEL_SERVICE_NAME`` overrides the resource's service name.
    """
    global _tracer_provider_installed

    if _tracer_provider_installed:
        logger.debug("TracerProvider already initialized; reusing it for %s", service_name)
        return trace.get_tracer(service_name)

    if isinstance(trace.get_tracer_provider(), TracerProvider):
        # An embedding process installed its own SDK provider; keep its exporters.
        _tracer_provider_installed = True
        logger.debug("Using the existing TracerProvider for %s", service_name)
        return trace.get_tracer(service_name)

    resource = Resource.create({"service.name": os.environ.get("OTEL_SERVICE_NAME", service_name)})
    trace.set_tracer_provider(TracerProvider(resource=resource))
    _tracer_provider_installed = True
    logger.info("Telemetry initialized for service=%s", service_name)
    return trace.get_tracer(service_name)


def get_tracer(name: str = _TRACER_NAME) -> trace.Tracer:
    """Get a tracer from the current provider."""
    return trace.get_tracer(name)


class mutation_span:
    """Create a span around a privileged world-time mutation.

    Usable as a context manager::

        with mutation_span("set_time", authority="reference"):
            ...

    or as a decorator on coroutine functions::

        @mutation_span("advance_days")
        async def advance_days(self, amount): ...

    The span is named ``calendar_compat.mutation.<name>``. Exceptions are
    recorded on the span, its status is set to ERROR and the exception is
    re-raised.
    """

    def __init__(self, name: str, *, authority: str | None = None) -> None:
        self._name = name
        self._authority = authority
        self._span_name = f"calendar_compat.mutation.{name}"
        self._span: trace.Span | None = None
        self._token: object | None = None

    def __enter__(self) -> trace.Span:
        tracer = get_tracer()
        self._span = tracer.start_span(self._span_name)
        self._span.set_attribute("calendar_compat.operation", self._name)
        if self._authority:
            self._span.set_attribute("calendar_compat.authority", self._authority)
        self._token = trace.context_api.attach(trace.set_span_in_context(self._span))
        return self._span

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._span is None:
            return
        if exc_val is not None:
            self._span.set_status(trace.StatusCode.ERROR, str(exc_val))
            self._span.record_exception(exc_val)
        self._span.end()
        if self._token is not None:
            trace.context_api.detach(self._token)

    def __call__(self, func):  # noqa: ANN001, ANN204
        # Each invocation gets its own instance so concurrent calls never share span state.
        name = self._name
        authority = self._authority

        @functools.wraps(func)
        async def _wrapper(*args, **kwargs):  # noqa: ANN002, ANN003, ANN202
            with mutation_span(name, authority=authority):
                return await func(*args, **kwargs)

        return _wrapper
