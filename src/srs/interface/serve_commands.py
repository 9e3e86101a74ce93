"""`srs serve` subgroup: HTTP daemon and MCP server."""

from typing import Annotated

import typer

from srs.interface._common import _resolve_with_overrides

serve_app = typer.Typer(help="Run srs as a background service.", no_args_is_help=True)


@serve_app.command("daemon")
def daemon(
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the HTTP daemon (FastAPI)."""
    import uvicorn

    config = _resolve_with_overrides(server_host=host, server_port=port)
    typer.echo(f"Starting srs daemon on {config.server_host}:{config.server_port}")
    uvicorn.run(
        "srs.server:create_app",
        factory=True,
        host=config.server_host,
        port=config.server_port,
        reload=reload,
        log_level="debug" if config.verbose >= 2 else "info",
    )


@serve_app.command("mcp")
def mcp():
    """Start the MCP server on stdio (for AI assistants)."""
    from srs.mcp_server import main

    main()
