# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from wacgen.errors import DriftDetected, REGENERATE_HINT, UsageError, WacgenError
from wacgen.registry import DEFAULT_WORKFLOW_FILE, find_workflow_files, load_all, select
from wacgen.sync import CHECK, DEFAULT_OUT_DIR, GENERATE, SyncReport, run_all
from wacgen.ui.console import Console, get_console, set_console


class WacgenGroup(click.Group):
    """Command group whose unknown-command error lists the accepted commands."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            accepted = ", ".join(self.list_commands(ctx))
            raise click.UsageError(f"{e.message} Expected one of: {accepted}.", ctx) from e


def discover_sources(workflow_args: tuple[str, ...]) -> list[Path]:
    """
    Resolve workflow definition files from --workflow or by discovery.

    Raises:
        UsageError: If nothing is given and nothing can be discovered
    """
    if workflow_args:
        return [Path(p) for p in workflow_args]

    found = find_workflow_files(".")
    if not found:
        raise UsageError(
            "No workflow definition file found. Looked for "
            f"{DEFAULT_WORKFLOW_FILE} and *_workflow.py; "
            "create one or pass --workflow my_workflow.py"
        )
    return found


def _print_report(report: SyncReport) -> None:
    console = get_console()

    for r in report.results:
        if r.status == "generated":
            console.print_generated(r.slug, str(r.path))
        else:
            console.print_in_sync(r.slug, str(r.path))

    for slug, err in report.failures:
        console.print_failure(slug, str(err), hint=err.hint)
        if isinstance(err, DriftDetected):
            console.print_diff(err.diff)

    console.print_results(report.statuses())


def _sync(ctx, mode: str, workflow_args, out_dir: str, only) -> None:
    console = get_console()

    try:
        sources = discover_sources(workflow_args)
        console.print_debug(f"definition files: {', '.join(str(s) for s in sources)}")
        selected = select(load_all(sources), only)
    except UsageError as e:
        raise click.UsageError(str(e), ctx) from e
    except WacgenError as e:
        console.print_error(e.title, str(e), suggestion=e.hint)
        sys.exit(1)
    except Exception as e:
        console.print_error("Failed to load workflows", "Could not load workflow definitions.")
        console.print_exception(e)
        sys.exit(1)

    console.print_run_started(mode, [str(s) for s in sources], len(selected))

    try:
        report = run_all(mode, selected, out_dir)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    _print_report(report)

    if not report.ok:
        failed = ", ".join(slug for slug, _ in report.failures)
        if mode == CHECK:
            console.print_error(
                "Workflows are out of sync",
                f"Out of sync: {failed}",
                suggestion=REGENERATE_HINT,
            )
        else:
            console.print_error("Generation failed", f"Failed: {failed}")
        sys.exit(1)

    if mode == CHECK:
        console.print_info("Workflows are ok!")


def _common_options(fn):
    fn = click.option(
        "--only",
        multiple=True,
        metavar="SLUG",
        help="Only process the workflow with this slug (repeatable)",
    )(fn)
    fn = click.option(
        "--out-dir",
        default=DEFAULT_OUT_DIR,
        show_default=True,
        envvar="WACGEN_OUT_DIR",
        help="Directory holding the rendered <slug>.yml files",
    )(fn)
    fn = click.option(
        "--workflow",
        "workflow_args",
        multiple=True,
        envvar="WACGEN_WORKFLOW",
        help=f"Workflow definition file (defaults to {DEFAULT_WORKFLOW_FILE} and *_workflow.py)",
    )(fn)
    return fn


@click.group(cls=WacgenGroup, invoke_without_command=True)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces, paths and drift diffs)",
)
@click.pass_context
def cli(ctx, debug):
    """wacgen: workflows as code for GitHub Actions."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    if ctx.invoked_subcommand is None:
        accepted = ", ".join(ctx.command.list_commands(ctx))
        raise click.UsageError(f"Missing command. Expected one of: {accepted}.", ctx)


@cli.command()
@_common_options
@click.pass_context
def generate(ctx, workflow_args, out_dir, only):
    """Render workflows and write them to <out-dir>/<slug>.yml."""
    _sync(ctx, GENERATE, workflow_args, out_dir, only)


@cli.command()
@_common_options
@click.pass_context
def check(ctx, workflow_args, out_dir, only):
    """Render workflows and fail if any committed file differs."""
    _sync(ctx, CHECK, workflow_args, out_dir, only)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
