"""CLI command handlers.

Each handler takes plain parameters and returns a Result, which keeps the
click commands thin and lets tests call handlers without a CLI runner.
"""

from pathlib import Path
from typing import Optional

from cli.common import ensure_paths_exist, resolve_output_path
from config.schema import load_job
from pdf.validation import validate_fragment_upload
from result import Result, try_operation
from services.assembly import AssemblyService


def handle_build(
    job_path: Path,
    output_path: Path,
    *,
    preview: bool = False,
    watermark: Optional[bool] = None,
    page_numbers: Optional[bool] = None,
    compression: Optional[str] = None,
    service: Optional[AssemblyService] = None,
) -> Result:
    """Build the booklet described by a job file and write the PDF.

    Options left as None keep the job file's value (or the preview default).

    Returns:
        Result containing the accounting plus the output path
    """

    def run_build():
        job = load_job(job_path)
        overrides = {}
        if watermark is not None:
            overrides["add_watermark"] = watermark
        if page_numbers is not None:
            overrides["add_page_numbers"] = page_numbers
        if compression is not None:
            overrides["compression"] = compression
        options = job.options.model_validate(
            {**job.options.model_dump(exclude_unset=True), **overrides}
        )

        assembler = service or AssemblyService()
        if preview:
            result = assembler.assemble_preview(job.book, job.fragments, options)
        else:
            result = assembler.assemble(job.book, job.fragments, options)

        out = resolve_output_path(output_path)
        ensure_paths_exist([out])
        out.write_bytes(result.pdf_bytes)
        return {**result.to_dict(), "output": str(out)}

    return try_operation(run_build)


def handle_estimate(
    job_path: Path, *, service: Optional[AssemblyService] = None
) -> Result:
    """Production page counts for a job file, without building it."""

    def run_estimate():
        job = load_job(job_path)
        assembler = service or AssemblyService()
        return assembler.estimate(job.book, job.fragments, job.options.color_map).to_dict()

    return try_operation(run_estimate)


def handle_validate(pdf_path: Path, fragment_type: str) -> Result:
    """Upload check for a single fragment PDF."""

    def run_validate():
        check = validate_fragment_upload(Path(pdf_path).read_bytes(), fragment_type)
        return {
            "valid": check.valid,
            "message": check.message,
            "pages": check.pages,
            "type": fragment_type,
        }

    return try_operation(run_validate)
