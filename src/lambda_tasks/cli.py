"""Main CLI entry point for lambda-tasks."""

from __future__ import annotations

from pathlib import Path

import click

from . import output
from .config import ExecutionMode
from .errors import LambdaTasksError
from .local_server import LocalRunner
from .orchestrator import OPERATIONS, Orchestrator, print_operations


@click.group()
def cli():
    """Lambda Tasks: build, package and deploy a Python AWS Lambda function."""
    pass


def target_argument(f):
    return click.argument(
        "target",
        type=click.Path(file_okay=False, path_type=Path),
        default=Path("."),
    )(f)


def production_option(f):
    return click.option(
        "--production",
        is_flag=True,
        help="Resolve the production entry of a per-mode functionName.",
    )(f)


def run_operation(
    ctx: click.Context, operation: str, target: Path, production: bool, **collaborators
):
    """Runs one lifecycle operation on target, exiting non-zero on failure."""
    mode = ExecutionMode.PRODUCTION if production else ExecutionMode.DEVELOP
    orchestrator = Orchestrator(
        target, mode, check_entry=(operation != "init"), **collaborators
    )
    try:
        orchestrator.run(operation)
    except LambdaTasksError as e:
        output.error(str(e))
        ctx.exit(1)


def _make_command(operation: str, help_text: str):
    @click.pass_context
    def command(ctx, target, production):
        run_operation(ctx, operation, target, production)

    command.__doc__ = help_text[0].upper() + help_text[1:] + "."
    return cli.command(name=operation)(production_option(target_argument(command)))


for _operation, _help in OPERATIONS.items():
    if _operation != "run":
        _make_command(_operation, _help)


@cli.command(name="run")
@target_argument
@production_option
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=3000, show_default=True, type=int, help="Port to listen on.")
@click.pass_context
def run(ctx, target, production, host, port):
    """Run the function behind a local HTTP server."""
    run_operation(ctx, "run", target, production, local_runner=LocalRunner(host, port))


@cli.command(name="lambda")
def list_operations():
    """List the available operations."""
    print_operations()


def main():
    cli()


if __name__ == "__main__":
    main()
