"""Typer CLI wiring for the Relay workflow steps."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from relay import __version__
from relay.core import Relay
from relay.errors import RelayError
from relay.logging_utils import configure_logging, get_logger

app = typer.Typer(help="Artifact-handoff development workflow for coding agents")

logger = get_logger(__name__)

_STATE: dict = {"config": None, "agent": None}


def _version_callback(value: bool) -> None:
    """Print the Relay package version when requested."""

    if value:
        typer.echo(f"Relay {__version__}")
        raise typer.Exit()


@app.callback()
def _main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show the Relay version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option(
        "",
        "--log-level",
        help="Set Relay log level (e.g. info, warning, debug). Overrides RELAY_LOG_LEVEL.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Path to the relay.yaml configuration file to use.",
    ),
    agent: Optional[str] = typer.Option(
        None,
        "--agent",
        help="Override the agent provider (claude_code or null).",
    ),
) -> None:
    """Global callback to wire shared options like --version."""

    configure_logging(log_level or None)
    _STATE["config"] = config
    _STATE["agent"] = agent

    return None


def _create_relay() -> Relay:
    overrides = {}
    if _STATE.get("agent"):
        overrides["agent"] = {"provider": _STATE["agent"]}
    return Relay(config_path=_STATE.get("config"), config=overrides or None)


def _fail(exc: RelayError) -> None:
    logger.debug("Step failed", exc_info=exc)
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def prime() -> None:
    """Load repository context and print a summary."""

    try:
        result = _create_relay().prime()
    except RelayError as exc:
        _fail(exc)
    typer.echo(result.output.rstrip())


@app.command()
def planning(
    feature: str = typer.Argument(..., help="Feature name; the plan is saved as plans/<feature>.md."),
    force: bool = typer.Option(False, "--force", help="Replace an existing plan."),
) -> None:
    """Draft an implementation plan for FEATURE."""

    try:
        result = _create_relay().plan(feature, force=force)
    except RelayError as exc:
        _fail(exc)
    suffix = " (skeleton; agent produced no plan)" if result.used_fallback else ""
    typer.echo(f"Plan written to {result.artifacts[0]}{suffix}")


@app.command()
def execute(
    feature: str = typer.Argument(..., help="Feature whose plan should be implemented."),
) -> None:
    """Implement the plan previously written for FEATURE."""

    try:
        result = _create_relay().execute(feature)
    except RelayError as exc:
        _fail(exc)
    typer.echo(f"Executed {result.inputs[0]} ({result.metadata.get('tasks', 0)} task(s))")
    if result.output:
        typer.echo(result.output)


@app.command()
def commit(
    files: Optional[List[str]] = typer.Argument(
        None, help="Files to commit (defaults to all changes)."
    ),
    message: Optional[str] = typer.Option(
        None, "--message", "-m", help="Commit subject; skips message generation."
    ),
) -> None:
    """Commit working-tree changes with a derived conventional message."""

    try:
        result = _create_relay().commit(files or None, message=message)
    except RelayError as exc:
        _fail(exc)
    typer.echo(f"Created commit {(result.commit_sha or '')[:12]}: {result.commit_message}")


@app.command()
def rca(
    issue_id: str = typer.Argument(..., help="Issue number, e.g. 123 or #123."),
    force: bool = typer.Option(False, "--force", help="Replace an existing analysis."),
) -> None:
    """Investigate a tracker issue and write a root cause analysis."""

    try:
        result = _create_relay().rca(issue_id, force=force)
    except RelayError as exc:
        _fail(exc)
    suffix = " (skeleton; agent produced no analysis)" if result.used_fallback else ""
    typer.echo(f"RCA written to {result.artifacts[0]}{suffix}")


@app.command("implement-fix")
def implement_fix(
    issue_id: str = typer.Argument(..., help="Issue number with an existing RCA."),
    commit_changes: bool = typer.Option(
        True, "--commit/--no-commit", help="Commit the fix once the agent finishes."
    ),
) -> None:
    """Apply the fix proposed by an RCA and commit it."""

    try:
        result = _create_relay().implement_fix(issue_id, commit=commit_changes)
    except RelayError as exc:
        _fail(exc)
    if result.output:
        typer.echo(result.output)
    if not result.success:
        typer.echo(f"Error: {result.reason}", err=True)
        raise typer.Exit(code=1)
    if result.commit_sha:
        typer.echo(f"Created commit {result.commit_sha[:12]}: {result.commit_message}")
    else:
        typer.echo(f"Fix applied from {result.inputs[0]}; changes left uncommitted")


@app.command()
def status() -> None:
    """List plan and RCA artifacts in the project."""

    try:
        inventory = _create_relay().status()
    except RelayError as exc:
        _fail(exc)
    plans = inventory["plans"]
    rcas = inventory["rcas"]
    typer.echo("Plans: " + (", ".join(plans) if plans else "none"))
    typer.echo("RCAs: " + (", ".join(f"#{number}" for number in rcas) if rcas else "none"))


def main() -> None:
    """Entry point used by the console script."""

    app()


if __name__ == "__main__":
    main()
