"""CLI entrypoint for docbase-tasks."""

from pathlib import Path

import rich_click as click

from docbase_tasks import __version__
from docbase_tasks.tasks.controllers import (
    DocbaseCliController,
    DocbaseCliResult,
    DocbaseJobCommand,
    DocbaseStatusCommand,
)
from docbase_tasks.tasks.models import JobKind

click.rich_click.USE_MARKDOWN = True
JOB_CONTROLLER = DocbaseCliController(emit=click.echo)

_scratch_path_option = click.option(
    "--scratch-path",
    type=click.Path(path_type=Path),
    default=None,
    help="JSON file recording the in-flight task id.",
)
_org_option = click.option(
    "--org",
    "organization_id",
    type=click.IntRange(min=0),
    required=True,
    help="Organisation id owning the docbase.",
)
_base_option = click.option("--base", "base_name", required=True, help="Docbase name.")


@click.group()
@click.version_option(version=__version__, prog_name="docbase-tasks")
def docbase_tasks() -> None:
    """Document base job client."""


@docbase_tasks.group()
def job() -> None:
    """Start remote docbase jobs and wait for their result."""


@job.command("create")
@_org_option
@_base_option
@click.option(
    "--document-id",
    "document_ids",
    type=int,
    multiple=True,
    required=True,
    help="Document id to include. Can be repeated.",
)
@click.option(
    "--attribute",
    "attributes",
    multiple=True,
    help="Attribute name, in display order. Can be repeated.",
)
@click.option(
    "--max-nuggets",
    type=click.IntRange(min=0),
    default=10,
    show_default=True,
    help="How many nuggets to print.",
)
@_scratch_path_option
def job_create(  # noqa: PLR0913
    organization_id: int,
    base_name: str,
    document_ids: tuple[int, ...],
    attributes: tuple[str, ...],
    max_nuggets: int,
    scratch_path: Path | None,
) -> None:
    """Create a docbase from uploaded documents."""

    _finish(
        JOB_CONTROLLER.run_job(
            DocbaseJobCommand(
                kind=JobKind.CREATE,
                organization_id=organization_id,
                base_name=base_name,
                document_ids=document_ids,
                attributes=attributes,
                max_nuggets=max_nuggets,
                scratch_path=scratch_path,
            ),
        ),
    )


@job.command("load")
@_org_option
@_base_option
@click.option(
    "--max-nuggets",
    type=click.IntRange(min=0),
    default=10,
    show_default=True,
    help="How many nuggets to print.",
)
@_scratch_path_option
def job_load(
    organization_id: int,
    base_name: str,
    max_nuggets: int,
    scratch_path: Path | None,
) -> None:
    """Load an existing docbase."""

    _finish(
        JOB_CONTROLLER.run_job(
            DocbaseJobCommand(
                kind=JobKind.LOAD,
                organization_id=organization_id,
                base_name=base_name,
                max_nuggets=max_nuggets,
                scratch_path=scratch_path,
            ),
        ),
    )


@job.command("interactive")
@_org_option
@_base_option
@_scratch_path_option
def job_interactive(organization_id: int, base_name: str, scratch_path: Path | None) -> None:
    """Start interactive table population for a docbase."""

    _finish(
        JOB_CONTROLLER.run_job(
            DocbaseJobCommand(
                kind=JobKind.INTERACTIVE,
                organization_id=organization_id,
                base_name=base_name,
                scratch_path=scratch_path,
            ),
        ),
    )


@job.command("order-nuggets")
@_org_option
@_base_option
@click.option("--document-name", required=True, help="Name of the document to rank nuggets for.")
@click.option(
    "--document-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="File holding the document text.",
)
@_scratch_path_option
def job_order_nuggets(
    organization_id: int,
    base_name: str,
    document_name: str,
    document_file: Path,
    scratch_path: Path | None,
) -> None:
    """Order the nuggets of one document."""

    _finish(
        JOB_CONTROLLER.run_job(
            DocbaseJobCommand(
                kind=JobKind.ORDER_NUGGETS,
                organization_id=organization_id,
                base_name=base_name,
                document_name=document_name,
                document_content=document_file.read_text("utf-8"),
                scratch_path=scratch_path,
            ),
        ),
    )


@job.command("confirm-nugget")
@_org_option
@_base_option
@click.option("--document-name", required=True, help="Name of the document holding the nugget.")
@click.option(
    "--document-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="File holding the document text.",
)
@click.option("--start", "start_index", type=click.IntRange(min=0), required=True)
@click.option("--end", "end_index", type=click.IntRange(min=0), required=True)
@click.option(
    "--interactive-task-id",
    required=True,
    help="Task id of the running interactive population job.",
)
@click.option(
    "--custom",
    is_flag=True,
    default=False,
    help="Confirm a custom span instead of a matched nugget.",
)
@_scratch_path_option
def job_confirm_nugget(  # noqa: PLR0913
    organization_id: int,
    base_name: str,
    document_name: str,
    document_file: Path,
    start_index: int,
    end_index: int,
    interactive_task_id: str,
    custom: bool,
    scratch_path: Path | None,
) -> None:
    """Confirm a nugget span during interactive population."""

    if end_index < start_index:
        raise click.BadParameter("--end must not be smaller than --start.")
    document_content = document_file.read_text("utf-8")
    _finish(
        JOB_CONTROLLER.run_job(
            DocbaseJobCommand(
                kind=JobKind.CONFIRM_CUSTOM if custom else JobKind.CONFIRM_MATCH,
                organization_id=organization_id,
                base_name=base_name,
                document_name=document_name,
                document_content=document_content,
                nugget_text=document_content[start_index:end_index],
                start_index=start_index,
                end_index=end_index,
                interactive_task_id=interactive_task_id,
                scratch_path=scratch_path,
            ),
        ),
    )


@job.command("status")
@click.argument("task_id", required=False)
@_scratch_path_option
def job_status(task_id: str | None, scratch_path: Path | None) -> None:
    """Query a task once. Defaults to the task recorded as in flight."""

    _finish(JOB_CONTROLLER.status(DocbaseStatusCommand(task_id=task_id, scratch_path=scratch_path)))


def _finish(result: DocbaseCliResult) -> None:
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException("Docbase job failed.")


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    docbase_tasks()
