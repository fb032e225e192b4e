"""planner-press command line.

    planner-press build job.yaml -o booklet.pdf
    planner-press build job.yaml -o preview.pdf --preview
    planner-press estimate job.yaml --out counts.json
    planner-press validate cover.pdf --type cover
"""

from pathlib import Path

import click

from cli.common import exit_with_message, format_accounting, write_json_outputs
from cli.handlers import handle_build, handle_estimate, handle_validate
from config.settings import settings
from core.logging import setup_logging


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override PP_LOG_LEVEL for this run.",
)
def cli(log_level):
    """Assemble print-ready planner booklets from PDF fragments."""
    if log_level:
        settings.log_level = log_level.upper()
    setup_logging()


@cli.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    "output_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the booklet PDF.",
)
@click.option("--preview", is_flag=True, default=False, help="Build a capped preview.")
@click.option(
    "--watermark/--no-watermark",
    default=None,
    help="Overlay the watermark image (previews default to on).",
)
@click.option(
    "--page-numbers/--no-page-numbers",
    default=None,
    help="Number the content pages (default on).",
)
@click.option(
    "--compression",
    type=click.Choice(["low", "medium", "high"]),
    help="Compression preset (previews default to high).",
)
@click.option(
    "--summary",
    "summary_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the page accounting as JSON.",
)
def build(job_file, output_path, preview, watermark, page_numbers, compression, summary_path):
    """Build the booklet described by JOB_FILE."""
    result = handle_build(
        job_file,
        output_path,
        preview=preview,
        watermark=watermark,
        page_numbers=page_numbers,
        compression=compression,
    )
    if not result["ok"]:
        exit_with_message(f"[ERROR] {result['error']}", code=1)

    details = result["value"]
    if summary_path is not None:
        write_json_outputs(payload=details, out_path=summary_path)
    click.echo(f"Wrote {details['output']}")
    click.echo(format_accounting(details))


@cli.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--out",
    "out_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the accounting JSON to a file instead of stdout.",
)
def estimate(job_file, out_path):
    """Print production page counts for JOB_FILE without building it."""
    result = handle_estimate(job_file)
    if not result["ok"]:
        exit_with_message(f"[ERROR] {result['error']}", code=1)

    write_json_outputs(
        payload=result["value"], out_path=out_path, emit_stdout=out_path is None
    )


@cli.command()
@click.argument("pdf_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--type",
    "fragment_type",
    default="default",
    show_default=True,
    help="Fragment type: cover, planner, binding, or a content type.",
)
def validate(pdf_file, fragment_type):
    """Check that PDF_FILE has an acceptable page count for its type."""
    result = handle_validate(pdf_file, fragment_type)
    if not result["ok"]:
        exit_with_message(f"[ERROR] {result['error']}", code=1)

    check = result["value"]
    if not check["valid"]:
        got = f" (got {check['pages']})" if check["pages"] is not None else ""
        exit_with_message(f"[INVALID] {check['message']}{got}", code=1)
    click.echo(f"[OK] {pdf_file} ({check['pages']} pages)")


def main():
    cli()


if __name__ == "__main__":
    main()
