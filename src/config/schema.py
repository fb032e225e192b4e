"""Job File Schema

Pydantic models for build job files: book details, the fragment list and
build options in one YAML or JSON document.

Example (YAML):
    book:
      title: Klasse 7b
      code: DE-SL
      period: {start: 2026-08-24, end: 2027-07-31}
      add_holidays: true
      custom_dates:
        - {date: 2026-10-10, name: Sportfest}
    fragments:
      - {id: cover, type: cover, source: modules/cover.pdf}
      - {id: planner, type: planner, idx: 1, source: modules/planner.pdf}
      - {id: notes, type: notes, idx: 2, source: /modules/notes.pdf, color: grayscale}
    options:
      compression: medium
"""

import json
from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, Field, field_validator

from errors import ValidationError
from pdf.models import BookDetails, BuildOptions, FragmentDescriptor


class JobConfig(BaseModel):
    """One booklet build."""

    book: BookDetails = Field(default_factory=BookDetails, description="Book details")
    fragments: list[FragmentDescriptor] = Field(..., description="Fragments in the book")
    options: BuildOptions = Field(
        default_factory=BuildOptions, description="Build options"
    )

    @field_validator("fragments")
    @classmethod
    def validate_ids(cls, v: list[FragmentDescriptor]) -> list[FragmentDescriptor]:
        """Fragment ids must be unique; the colour map is keyed by them."""
        seen = set()
        for fragment in v:
            if fragment.id in seen:
                raise ValueError(f"Duplicate fragment id: {fragment.id}")
            seen.add(fragment.id)
        return v

    def with_sources_relative_to(self, base_dir: Path) -> "JobConfig":
        """Resolve local file sources against the job file's directory."""
        fragments = []
        for fragment in self.fragments:
            source = fragment.source
            if isinstance(source, str) and source and "://" not in source:
                candidate = (base_dir / source).expanduser()
                if not Path(source).is_absolute() and candidate.is_file():
                    fragment = fragment.model_copy(update={"source": str(candidate)})
            fragments.append(fragment)
        return self.model_copy(update={"fragments": fragments})


def _read(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in [".yaml", ".yml"]:
            return yaml.safe_load(f) or {}
        return json.load(f)


def load_job(job_path: Union[str, Path]) -> JobConfig:
    """Load and validate a job file.

    Raises:
        ValidationError: If the file is missing, unparsable or invalid
    """
    path = Path(job_path).expanduser()
    if not path.exists():
        raise ValidationError(f"Job file not found: {path}")

    try:
        data = _read(path)
    except (yaml.YAMLError, json.JSONDecodeError) as error:
        raise ValidationError(f"Could not parse job file {path}: {error}") from error

    try:
        job = JobConfig.model_validate(data)
    except ValueError as error:
        raise ValidationError(f"Invalid job file {path}: {error}") from error

    return job.with_sources_relative_to(path.parent)


def save_job(job: JobConfig, job_path: Path) -> None:
    """Write a job file as YAML. Byte sources cannot be serialized."""
    if any(isinstance(f.source, bytes) for f in job.fragments):
        raise ValidationError("Cannot save a job with in-memory fragment sources")

    job_path.parent.mkdir(parents=True, exist_ok=True)
    data = job.model_dump(mode="json", exclude_unset=True)

    with open(job_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, indent=2, allow_unicode=True)
