"""CLI for gasless-agentkit - chat with a gasless smart-account agent from the terminal."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from gasless_agentkit.config import (
    DEFAULT_CHAIN_ID,
    OPTIONAL_ENV_VARS,
    AgentkitConfig,
    config_from_env,
    load_config,
    missing_env_vars,
)
from gasless_agentkit.errors import AgentkitError, ConfigurationError

app = typer.Typer(
    name="gasless-agentkit",
    help="Gasless blockchain actions for AI agents, driven from the terminal.",
    no_args_is_help=True,
)
console = Console()

SEPARATOR = "-------------------"


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        console.print(f"gasless-agentkit {version('gasless-agentkit')}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """Gasless blockchain actions for AI agents, driven from the terminal."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
        )


def _run(coro):
    """Run an async function synchronously."""
    try:
        loop = asyncio.get_event_loop()
        if loop.is_running():
            import concurrent.futures
            with concurrent.futures.ThreadPoolExecutor() as pool:
                return pool.submit(asyncio.run, coro).result()
        return loop.run_until_complete(coro)
    except RuntimeError:
        return asyncio.run(coro)


def validate_environment(environ=None) -> None:
    """Exit with placeholders for every required variable that is unset.

    ``CHAIN_ID`` only produces a warning and falls back to Base.
    """
    env = os.environ if environ is None else environ
    missing = missing_env_vars(env)
    required = [var for var in missing if var not in OPTIONAL_ENV_VARS]
    if required:
        console.print("[red]Error: Required environment variables are not set[/red]")
        for var in required:
            console.print(f"{var}=your_{var.lower()}_here", markup=False)
        raise typer.Exit(code=1)
    if "CHAIN_ID" in missing:
        console.print(
            f"[yellow]Warning: CHAIN_ID not set, defaulting to Base ({DEFAULT_CHAIN_ID})[/yellow]"
        )


def _load(config_path: Optional[Path]) -> AgentkitConfig:
    if config_path is not None:
        if not config_path.exists():
            console.print(f"[red]Config file not found: {config_path}[/red]")
            raise typer.Exit(code=1)
        return load_config(config_path)
    validate_environment()
    try:
        return config_from_env()
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


# ------------------------------------------------------------------
# chat
# ------------------------------------------------------------------


@app.command()
def chat(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML config file (defaults to environment variables)"
    ),
):
    """Start an interactive chat with the agent."""
    from gasless_agentkit.agent import AgentkitAgent
    from gasless_agentkit.agentkit import Agentkit
    from gasless_agentkit.llm import LLMRouter
    from gasless_agentkit.prompts import build_system_prompt
    from gasless_agentkit.toolkit import AgentkitToolkit

    config = _load(config_path)

    async def _chat():
        agentkit = await Agentkit.from_config(config)
        provider = LLMRouter(config.llm).get_provider()
        agent = AgentkitAgent(
            provider,
            AgentkitToolkit(agentkit),
            system_prompt=config.agent.system_prompt
            or build_system_prompt(config.testnet_support or None),
            max_iterations=config.agent.max_iterations,
        )

        console.print("[bold]Starting chat mode...[/bold] Type 'exit' to end.\n")
        while True:
            try:
                user_input = console.input("Prompt: ")
            except (EOFError, KeyboardInterrupt):
                break
            if user_input.strip() == "exit":
                break
            if not user_input.strip():
                continue

            with console.status("Thinking..."):
                async for event in agent.stream(user_input):
                    console.print(event.content, markup=False)
                    console.print(SEPARATOR)

        console.print("[dim]Chat ended.[/dim]")

    try:
        _run(_chat())
    except AgentkitError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


# ------------------------------------------------------------------
# actions
# ------------------------------------------------------------------


@app.command()
def actions():
    """List every registered action."""
    from gasless_agentkit.actions import get_registry

    table = Table(title="Actions")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Account")
    table.add_column("Description")
    for action in get_registry():
        summary = next(
            (line.strip() for line in action.description.splitlines() if line.strip()), ""
        )
        table.add_row(
            action.name,
            action.kind.value,
            "yes" if action.requires_account else "no",
            summary,
        )
    console.print(table)


# ------------------------------------------------------------------
# address
# ------------------------------------------------------------------


@app.command()
def address(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML config file (defaults to environment variables)"
    ),
):
    """Print the configured smart account address."""
    from gasless_agentkit.agentkit import Agentkit

    config = _load(config_path)

    async def _address():
        agentkit = await Agentkit.from_config(config)
        return await agentkit.get_address()

    try:
        smart_address = _run(_address())
    except AgentkitError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"Smart Account: {smart_address}")
