"""``mcpkit serve`` — run an MCP server over HTTP with uvicorn."""

from __future__ import annotations

import sys

import click

from mcpkit.cli_commands import DEFAULT_APP, load_server
from mcpkit.cli_commands._output import console
from mcpkit.utils.logsink import LogLevel

# uvicorn has no "notice" level
_UVICORN_LEVELS = {
    LogLevel.DEBUG: "debug",
    LogLevel.INFO: "info",
    LogLevel.NOTICE: "info",
    LogLevel.WARNING: "warning",
    LogLevel.ERROR: "error",
}


@click.command()
@click.argument("app", default=DEFAULT_APP)
@click.option("--host", default=None, help="Interface to bind (default from settings).")
@click.option("--port", type=int, default=None, help="Port to bind (default from settings).")
@click.option("--config", "-c", "config_file", type=click.Path(exists=True), default=None, help="Settings YAML file.")
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel]),
    default=None,
    help="Minimum level for logs and client log notifications.",
)
@click.option("--telemetry", is_flag=True, help="Enable telemetry.")
def serve(
    app: str,
    host: str | None,
    port: int | None,
    config_file: str | None,
    log_level: str | None,
    telemetry: bool,
) -> None:
    """Serve APP (``module:attribute`` naming an McpServer) over HTTP."""
    import uvicorn

    from mcpkit.config import ConfigError, load_settings
    from mcpkit.utils.logsink import configure_logging

    try:
        settings = load_settings(config_file)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    overrides = {
        key: value
        for key, value in {"host": host, "port": port, "log_level": log_level}.items()
        if value is not None
    }
    if overrides:
        settings = settings.model_validate({**settings.model_dump(), **overrides})
    if telemetry:
        settings.telemetry.enabled = True

    try:
        server = load_server(app)
        server.configure(settings)
    except (ValueError, RuntimeError) as exc:
        console.print(f"[red]Cannot load app:[/red] {exc}")
        sys.exit(1)

    configure_logging(settings.log_level)

    if settings.telemetry.enabled:
        from mcpkit.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(settings.telemetry, service_name=server.name)
        except ImportError as exc:
            console.print(f"[red]Telemetry unavailable:[/red] {exc}")
            sys.exit(1)

    console.print(
        f"Serving [cyan]{server.name}[/cyan] {server.version} "
        f"on http://{settings.host}:{settings.port}{settings.path}"
    )
    uvicorn.run(server.app, host=settings.host, port=settings.port, log_level=_UVICORN_LEVELS[settings.log_level])
