"""Service layer for planner-press.

Business logic separated from the CLI for testability and reuse.
"""

from .assembly import (
    AssemblyService,
    assemble,
    assemble_preview,
    estimate,
    get_assembly_service,
)
from .sources import SourceLoader

__all__ = [
    "AssemblyService",
    "SourceLoader",
    "assemble",
    "assemble_preview",
    "estimate",
    "get_assembly_service",
]
