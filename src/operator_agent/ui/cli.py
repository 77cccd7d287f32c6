"""CLI interface for the operator agent.

This module provides a Typer-based command-line interface for starting the
bot and inspecting its configuration and tool catalogue.
"""

import typer
from rich.console import Console
from rich.table import Table

from operator_agent.config import (
    REQUIRED_SECRETS,
    AppConfig,
    ModelConfigError,
    load_app_config,
    load_model_config,
)
from operator_agent.config.env_loader import load_env_files
from operator_agent.errors import ConfigurationError
from operator_agent.telemetry import configure_logging
from operator_agent.tools import get_default_registry

app = typer.Typer(help="Operator Agent - natural-language command router for Discord")
console = Console()


def _load_config_or_exit() -> AppConfig:
    try:
        return load_app_config()
    except ConfigurationError as e:
        console.print(f"[bold red]❌ FATAL ERROR:[/bold red] {e}")
        raise typer.Exit(code=1) from e


@app.command(name="run")
def run_command() -> None:
    """Start the bot and block until it disconnects.

    Refuses to start (exit status 1) when a required secret is missing.
    """
    from operator_agent.bot import OperatorBot  # noqa: PLC0415

    config = _load_config_or_exit()
    configure_logging(
        log_level=config.log_level, log_dir=config.log_dir, log_format=config.log_format
    )

    try:
        model_config = load_model_config(config.model_config_path)
    except ModelConfigError as e:
        console.print(f"[bold red]❌ FATAL ERROR:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    bot = OperatorBot(config, model_config)
    token = config.discord_token.get_secret_value() if config.discord_token else ""
    # Logging is already routed through structlog
    bot.run(token, log_handler=None)


@app.command(name="tools")
def tools_command() -> None:
    """List the capabilities offered to the language model."""
    table = Table(title="Tool Registry")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Parameters", style="magenta")
    table.add_column("Description")

    for tool in get_default_registry():
        params = ", ".join(
            f"{p.name}: {p.type}" + ("" if p.required else " (optional)") for p in tool.parameters
        )
        table.add_row(tool.name, params or "-", tool.description)

    console.print(table)


@app.command(name="check-config")
def check_config_command() -> None:
    """Validate configuration and report which required secrets are set."""
    load_env_files()
    try:
        config = AppConfig()
    except ValueError as e:
        console.print(f"[bold red]Invalid configuration:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    missing = set(config.missing_secrets())
    table = Table(title="Required secrets")
    table.add_column("Variable", style="cyan")
    table.add_column("Status")
    for env_name in REQUIRED_SECRETS.values():
        status = "[red]missing[/red]" if env_name in missing else "[green]set[/green]"
        table.add_row(env_name, status)
    console.print(table)

    console.print(f"Environment: {config.environment.value}")
    console.print(f"Model catalogue: {config.model_config_path}")
    console.print(f"Session TTL: {config.session_ttl_seconds:g}s")
    console.print(f"Execution timeout: {config.execution_timeout_seconds}")

    if missing:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
