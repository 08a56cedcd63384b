"""Request tracing for mcpkit.

The dispatcher opens one ``mcp.request`` span per JSON-RPC message through
:func:`get_tracer`; the OpenTelemetry API makes these no-ops until
:func:`configure_telemetry` installs an SDK provider (``mcpkit serve
--telemetry``, or ``telemetry.enabled`` in the settings file).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from mcpkit.config import TelemetrySettings

# ---------------------------------------------------------------------------
# Semantic attribute keys used throughout mcpkit instrumentation
# ---------------------------------------------------------------------------

ATTR_RPC_METHOD = "mcpkit.rpc.method"
ATTR_RPC_ID = "mcpkit.rpc.id"
ATTR_RPC_ERROR_CODE = "mcpkit.rpc.error_code"
ATTR_TOOL_NAME = "mcpkit.tool.name"
ATTR_TOOL_KIND = "mcpkit.tool.kind"
ATTR_TOOL_IS_ERROR = "mcpkit.tool.is_error"
ATTR_TOOL_PROGRESS_STEPS = "mcpkit.tool.progress_steps"
ATTR_RESOURCE_URI = "mcpkit.resource.uri"
ATTR_PROMPT_NAME = "mcpkit.prompt.name"

_INSTRUMENTATION_NAME = "mcpkit"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(settings: TelemetrySettings, *, service_name: str = "mcpkit") -> None:
    """Install an SDK tracer provider exporting request spans (``mcpkit[otel]``).

    Spans go to ``settings.otlp_endpoint`` over OTLP/gRPC when one is set,
    and to stdout as JSON otherwise.

    Raises:
        ImportError: If the SDK, or the OTLP exporter an endpoint needs, is
            not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import export  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for tracing; install mcpkit[otel]"
        raise ImportError(msg) from exc

    if settings.otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = f"opentelemetry-exporter-otlp is required to export to {settings.otlp_endpoint}"
            raise ImportError(msg) from exc
        processor = export.BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
    else:
        processor = export.SimpleSpanProcessor(export.ConsoleSpanExporter())

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)
