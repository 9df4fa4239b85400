"""OpenTelemetry spans around index builds, snapshot restores and queries."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider


if TYPE_CHECKING:
    from collections.abc import Generator, Mapping

    from opentelemetry.trace import Span

logger = logging.getLogger(__name__)

SERVICE_NAME = "archive-search"
TRACER_NAME = "archive_search"

_provider_holder: dict[str, TracerProvider | None] = {"provider": None}


def configure_tracing() -> TracerProvider:
    """Install the process tracer provider; later calls return the same one."""
    provider = _provider_holder["provider"]
    if provider is None:
        provider = TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
        trace.set_tracer_provider(provider)
        _provider_holder["provider"] = provider
        logger.debug("Tracing configured for %s", SERVICE_NAME)
    return provider


@contextmanager
def create_span(name: str, attributes: Mapping[str, Any] | None = None) -> Generator[Span, None, None]:
    """Run the block inside a span.

    Before ``configure_tracing`` the span is a no-op. An exception leaving the
    block is recorded on the span and marks it as failed.
    """
    tracer = trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span(name, attributes=dict(attributes or {})) as span:
        yield span
