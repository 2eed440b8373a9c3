# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from betterbuild.build import EXIT_CONFIGURATION_ERROR, EXIT_INTERRUPTED
from betterbuild.errors import ConfigurationError
from betterbuild.runner import load_workflow
from betterbuild.ui.console import Console, get_console, set_console

DEFAULT_WORKFLOW = "build_workflow.py"


def find_workflow_files(directory: Path | None = None) -> list[Path]:
    """
    Find all workflow files in a directory (default: current directory).

    Returns:
        List of Path objects for workflow files
    """
    current_dir = directory or Path(".")
    workflow_files = []

    default_workflow = current_dir / DEFAULT_WORKFLOW
    if default_workflow.exists():
        workflow_files.append(default_workflow)

    for path in current_dir.glob("*_workflow.py"):
        if path != default_workflow:
            workflow_files.append(path)

    return sorted(workflow_files)


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    Discover workflow file from argument or default.

    Raises:
        SystemExit: If workflow cannot be found or multiple workflows exist
    """
    console = get_console()

    if workflow_arg:
        workflow_path = Path(workflow_arg)
        if not workflow_path.exists() and workflow_path.suffix != ".py":
            workflow_path = Path(str(workflow_path) + ".py")
        if not workflow_path.exists():
            console.print_error(
                "Workflow file not found",
                f"Could not find workflow file: {workflow_arg}",
                suggestion="Create a workflow file or specify a different path:\n  betterbuild run --workflow my_workflow.py",
            )
            sys.exit(EXIT_CONFIGURATION_ERROR)
        return workflow_path

    workflow_files = find_workflow_files()

    if len(workflow_files) == 0:
        console.print_error(
            "No workflow file found",
            "Could not find any workflow files.",
            details=[
                "Looked for:",
                f"  {DEFAULT_WORKFLOW}",
                "  *_workflow.py",
            ],
            suggestion=f"Create a workflow file:\n  {DEFAULT_WORKFLOW}\n\nOr specify a workflow explicitly:\n  betterbuild run --workflow my_workflow.py",
        )
        sys.exit(EXIT_CONFIGURATION_ERROR)

    if len(workflow_files) > 1:
        file_list = "\n".join(f"  {f}" for f in workflow_files)
        console.print_error(
            "Multiple workflow files found",
            "Found multiple workflow files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a workflow explicitly:\n  betterbuild run --workflow {DEFAULT_WORKFLOW}",
        )
        sys.exit(EXIT_CONFIGURATION_ERROR)

    return workflow_files[0]


def parse_params(values: tuple[str, ...]) -> dict[str, str]:
    """`("configuration=Release", "runtime=linux-x64")` -> dict."""
    out: dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", param_hint="'-p' / '--param'")
        name, value = item.split("=", 1)
        name = name.strip().lstrip("-")
        if not name:
            raise click.BadParameter(f"empty parameter name in {item!r}", param_hint="'-p' / '--param'")
        out[name] = value
    return out


def _load(workflow):
    console = get_console()
    workflow_path = discover_workflow(workflow)
    try:
        return workflow_path, load_workflow(workflow_path)
    except ConfigurationError as e:
        console.print_error("Failed to load workflow", str(e))
        sys.exit(EXIT_CONFIGURATION_ERROR)


workflow_option = click.option(
    "--workflow",
    default=None,
    envvar="BETTERBUILD_WORKFLOW",
    help=f"Workflow file path (defaults to {DEFAULT_WORKFLOW} if present)",
)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    envvar="BETTERBUILD_DEBUG",
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """betterbuild: declarative build targets with a deterministic runner."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("targets", nargs=-1)
@workflow_option
@click.option("-p", "--param", "params", multiple=True, metavar="NAME=VALUE", help="Parameter override (repeatable)")
@click.option("--skip", multiple=True, metavar="TARGET", help="Skip a target even if it is scheduled (repeatable)")
@click.pass_context
def run(ctx, targets, workflow, params, skip):
    """Run TARGETS (or the default target) and everything they depend on."""
    console = get_console()
    overrides = parse_params(params)
    workflow_path, build = _load(workflow)

    try:
        code = build.run(list(targets) or None, overrides, skip=skip, console=console)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)
    sys.exit(code)


@cli.command()
@click.argument("targets", nargs=-1)
@workflow_option
@click.option("--skip", multiple=True, metavar="TARGET", help="Mark a target as skipped in the plan")
@click.pass_context
def plan(ctx, targets, workflow, skip):
    """Print the execution order for TARGETS without running anything."""
    console = get_console()
    workflow_path, build = _load(workflow)
    try:
        sequence = build.plan(list(targets) or None)
    except ConfigurationError as e:
        console.print_error("Configuration error", str(e), details=[f"kind={type(e).__name__}"])
        sys.exit(EXIT_CONFIGURATION_ERROR)
    console.print_plan(sequence, skip=skip)


@cli.command(name="list")
@workflow_option
@click.pass_context
def list_targets(ctx, workflow):
    """List targets and parameters defined by the workflow."""
    console = get_console()
    workflow_path, build = _load(workflow)
    console.print_info(f"Workflow: {workflow_path}")
    console.print_targets(build.targets, build.default, build.parameters)


if __name__ == "__main__":
    cli()
