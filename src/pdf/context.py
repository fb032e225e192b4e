"""Per-build state passed between the orchestrator and fragment handlers."""

from contextlib import ExitStack
from dataclasses import dataclass, field, replace
from datetime import date
from typing import TYPE_CHECKING, Any, Optional

from pypdf import PdfWriter

from pdf.models import BookDetails, FragmentDescriptor, GrayscaleStrategy
from pdf.utils import page_size_with_bleed

if TYPE_CHECKING:
    from config.settings import PlannerPressSettings
    from pdf.grayscale import GrayscaleClient
    from pdf.holidays import HolidayClient


@dataclass
class BuildContext:
    """Everything a handler needs for one invocation.

    Planner handlers derive one context per week with ``for_week``; the
    week fields stay empty for every other handler.
    """

    book: BookDetails
    fragment: FragmentDescriptor
    output: PdfWriter
    settings: "PlannerPressSettings"
    preview_mode: bool = False
    grayscale: bool = False
    grayscale_strategy: GrayscaleStrategy = GrayscaleStrategy.REMOTE
    grayscale_client: Optional["GrayscaleClient"] = None
    holiday_client: Optional["HolidayClient"] = None
    resources: Optional[ExitStack] = None
    current_page_count: int = 0
    today: Optional[date] = None
    blank_size: tuple[float, float] = field(default_factory=page_size_with_bleed)

    week_index: Optional[int] = None
    week_dates: list[date] = field(default_factory=list)
    date_labels: dict[str, str] = field(default_factory=dict)

    def for_week(
        self, week_index: int, week_dates: list[date], date_labels: dict[str, str]
    ) -> "BuildContext":
        return replace(
            self, week_index=week_index, week_dates=week_dates, date_labels=date_labels
        )


@dataclass
class HandlerResult:
    """Outcome of ``process``.

    ``pages_added`` includes any alignment blanks, which are also reported
    separately in ``blank_pages`` so they can be accounted as grayscale.
    """

    pages_added: int
    blank_pages: int = 0
    back_cover: Optional[PdfWriter] = None


@dataclass
class Accounting:
    """Page totals consumed by the pricing calculator."""

    page_count: int = 0
    full_page_count: int = 0
    b_pages: int = 0
    c_pages: int = 0

    def add(self, pages: int, *, grayscale: bool) -> None:
        self.full_page_count += pages
        if grayscale:
            self.b_pages += pages
        else:
            self.c_pages += pages

    def to_dict(self) -> dict[str, int]:
        return {
            "pageCount": self.page_count,
            "fullPageCount": self.full_page_count,
            "bPages": self.b_pages,
            "cPages": self.c_pages,
        }


@dataclass
class BuildResult:
    """Final bytes plus their accounting."""

    pdf_bytes: bytes
    accounting: Accounting
    preview: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {**self.accounting.to_dict(), "isPreview": self.preview}
