"""Booklet Assembly Service

Builds one press-ready booklet from its fragments:
cover front -> content fragments in index order -> alignment blanks -> cover back.

Also answers price quotes (``estimate``) without building the document, and
builds small watermarked previews carrying production page counts
(``assemble_preview``).
"""

from contextlib import ExitStack
from dataclasses import dataclass, replace
from datetime import date
from typing import Mapping, Optional, Sequence, Union

from pypdf import PdfWriter

from config.settings import PlannerPressSettings, settings as default_settings
from constants import BOOKLET_MULTIPLE, COVER_PAGE_COUNT, COVER_TYPE
from core.logging import get_logger, log_operation
from errors import ConfigurationError, FragmentError
from pdf.context import Accounting, BuildContext, BuildResult, HandlerResult
from pdf.documents import document_bytes
from pdf.finishing import (
    add_page_numbers,
    add_watermark,
    configure_compression,
    finalize_document,
)
from pdf.grayscale import GrayscaleClient
from pdf.handlers import HandlerRegistry, registry as default_registry
from pdf.holidays import HolidayClient
from pdf.models import (
    BookDetails,
    BuildOptions,
    ColorMode,
    CompressionLevel,
    FragmentDescriptor,
    GrayscaleStrategy,
)
from pdf.utils import page_size_with_bleed
from services.sources import SourceLoader

logger = get_logger(__name__)

ColorMap = Mapping[str, Union[ColorMode, str, int]]


@dataclass
class AssemblyState:
    """Mutable state of one build, owned by a single ``assemble`` call."""

    output: PdfWriter
    resources: ExitStack
    base: BuildContext
    accounting: Accounting
    back_cover: Optional[PdfWriter] = None


class AssemblyService:
    """Service for booklet assembly and page-count estimation."""

    def __init__(
        self,
        config: Optional[PlannerPressSettings] = None,
        *,
        handlers: Optional[HandlerRegistry] = None,
        grayscale_client: Optional[GrayscaleClient] = None,
        holiday_client: Optional[HolidayClient] = None,
        source_loader: Optional[SourceLoader] = None,
        today: Optional[date] = None,
    ):
        self.config = config or default_settings
        self.registry = handlers or default_registry
        # None means the process-wide client
        self.grayscale_client = grayscale_client
        self.holiday_client = holiday_client or HolidayClient(self.config)
        self.sources = source_loader or SourceLoader(self.config)
        self.today = today

    def split_fragments(
        self, fragments: Sequence[FragmentDescriptor]
    ) -> tuple[FragmentDescriptor, list[FragmentDescriptor]]:
        """Separate the cover from the content fragments.

        Content fragments are sorted by ``idx``; equal indices keep their
        input order.

        Raises:
            FragmentError: If there is no cover or more than one
        """
        covers = [f for f in fragments if self.registry.resolve_type(f.type) == COVER_TYPE]
        if not covers:
            raise FragmentError("cover not found")
        if len(covers) > 1:
            ids = ", ".join(f.id for f in covers)
            raise FragmentError(f"expected exactly one cover, got {len(covers)} ({ids})")

        cover = covers[0]
        content = sorted((f for f in fragments if f is not cover), key=lambda f: f.idx)
        return cover, content

    @staticmethod
    def is_grayscale(fragment: FragmentDescriptor, color_map: ColorMap) -> bool:
        color = color_map.get(fragment.id, fragment.color)
        return ColorMode.from_code(color) == ColorMode.GRAYSCALE

    def _strategy(self, options: BuildOptions) -> GrayscaleStrategy:
        return options.grayscale_strategy or GrayscaleStrategy(
            self.config.grayscale_strategy
        )

    def _book_format(self, options: BuildOptions) -> str:
        if options.book_format is not None:
            return options.book_format.value
        return self.config.book_format

    def _process_cover(
        self, state: AssemblyState, cover: FragmentDescriptor, options: BuildOptions
    ) -> None:
        handler = self.registry.get(COVER_TYPE)
        if handler is None:
            raise ConfigurationError("No handler registered for cover fragments")

        grayscale = self.is_grayscale(cover, options.color_map)
        context = replace(state.base, fragment=cover, grayscale=grayscale)
        result = handler.process(context, self.sources.load(cover.source))

        state.back_cover = result.back_cover
        state.accounting.add(COVER_PAGE_COUNT, grayscale=grayscale)

    def _process_fragment(
        self, state: AssemblyState, fragment: FragmentDescriptor, options: BuildOptions
    ) -> HandlerResult:
        handler = self.registry.get_or_default(fragment.type)
        grayscale = self.is_grayscale(fragment, options.color_map)
        context = replace(
            state.base,
            fragment=fragment,
            grayscale=grayscale,
            current_page_count=len(state.output.pages),
        )
        result = handler.process(context, self.sources.load(fragment.source))

        state.accounting.add(result.pages_added - result.blank_pages, grayscale=grayscale)
        state.accounting.add(result.blank_pages, grayscale=True)
        logger.debug(
            "Fragment {} ({}) added {} pages via {} handler",
            fragment.id,
            fragment.type,
            result.pages_added,
            handler.module_type,
        )
        return result

    def _finish(self, state: AssemblyState, options: BuildOptions) -> bytes:
        blanks = finalize_document(
            state.output, state.back_cover, options.preview_mode, state.base.blank_size
        )
        state.accounting.add(blanks, grayscale=True)

        if options.add_watermark:
            add_watermark(
                state.output,
                self.config.watermark_path,
                scale=self.config.watermark_scale,
                opacity=self.config.watermark_opacity,
            )
        if options.add_page_numbers:
            add_page_numbers(state.output, options.page_numbers)
        configure_compression(state.output, options.compression)

        state.accounting.page_count = len(state.output.pages)
        return document_bytes(state.output)

    def assemble(
        self,
        book: BookDetails,
        fragments: Sequence[FragmentDescriptor],
        options: Optional[BuildOptions] = None,
    ) -> BuildResult:
        """Build the booklet.

        Raises:
            FragmentError: Missing or duplicate cover
            PageCountError: Cover or planner with the wrong number of pages
            GrayscaleConversionError: Grayscale conversion failed
        """
        options = options or BuildOptions()
        cover, content = self.split_fragments(fragments)

        with log_operation(
            "Assembling booklet", fragments=len(fragments), preview=options.preview_mode
        ), ExitStack() as resources:
            output = PdfWriter()
            base = BuildContext(
                book=book,
                fragment=cover,
                output=output,
                settings=self.config,
                preview_mode=options.preview_mode,
                grayscale_strategy=self._strategy(options),
                grayscale_client=self.grayscale_client,
                holiday_client=self.holiday_client,
                resources=resources,
                today=self.today,
                blank_size=page_size_with_bleed(self._book_format(options)),
            )
            state = AssemblyState(
                output=output, resources=resources, base=base, accounting=Accounting()
            )

            self._process_cover(state, cover, options)
            for fragment in content:
                self._process_fragment(state, fragment, options)
            pdf_bytes = self._finish(state, options)

        logger.info("Booklet ready: {}", state.accounting.to_dict())
        return BuildResult(
            pdf_bytes=pdf_bytes, accounting=state.accounting, preview=options.preview_mode
        )

    def estimate(
        self,
        book: BookDetails,
        fragments: Sequence[FragmentDescriptor],
        color_map: Optional[ColorMap] = None,
    ) -> Accounting:
        """Production page counts without building the document.

        Content fragments are loaded only when their handler needs the source
        to count pages. The planner count ignores alignment blanks, so the
        result can be a little short of the real build.
        """
        color_map = color_map or {}
        cover, content = self.split_fragments(fragments)
        accounting = Accounting()

        with log_operation("Estimating page count", fragments=len(fragments)), ExitStack() as resources:
            scratch = PdfWriter()
            count = COVER_PAGE_COUNT
            accounting.add(COVER_PAGE_COUNT, grayscale=self.is_grayscale(cover, color_map))

            for fragment in content:
                handler = self.registry.get_or_default(fragment.type)
                grayscale = self.is_grayscale(fragment, color_map)
                context = BuildContext(
                    book=book,
                    fragment=fragment,
                    output=scratch,
                    settings=self.config,
                    grayscale=grayscale,
                    resources=resources,
                    current_page_count=count,
                    today=self.today,
                )
                source = self.sources.load(fragment.source) if handler.counts_from_source else b""
                pages = handler.calculate_page_count(context, source)
                count += pages
                accounting.add(pages, grayscale=grayscale)

            remainder = count % BOOKLET_MULTIPLE
            if remainder:
                accounting.add(BOOKLET_MULTIPLE - remainder, grayscale=True)

        accounting.page_count = accounting.full_page_count
        return accounting

    def assemble_preview(
        self,
        book: BookDetails,
        fragments: Sequence[FragmentDescriptor],
        options: Optional[BuildOptions] = None,
    ) -> BuildResult:
        """Small preview document carrying production page counts.

        Unless the caller sets them, previews are watermarked and use high
        compression.
        """
        options = options or BuildOptions()
        update: dict = {"preview_mode": True}
        if "add_watermark" not in options.model_fields_set:
            update["add_watermark"] = True
        if "compression" not in options.model_fields_set:
            update["compression"] = CompressionLevel.HIGH
        preview_options = options.model_copy(update=update)

        production = self.estimate(book, fragments, options.color_map)
        result = self.assemble(book, fragments, preview_options)

        result.accounting.full_page_count = production.full_page_count
        result.accounting.b_pages = production.b_pages
        result.accounting.c_pages = production.c_pages
        return result


_service: Optional[AssemblyService] = None


def get_assembly_service() -> AssemblyService:
    """Get the default assembly service."""
    global _service
    if _service is None:
        _service = AssemblyService()
    return _service


def assemble(
    book: BookDetails,
    fragments: Sequence[FragmentDescriptor],
    options: Optional[BuildOptions] = None,
) -> BuildResult:
    return get_assembly_service().assemble(book, fragments, options)


def estimate(
    book: BookDetails,
    fragments: Sequence[FragmentDescriptor],
    color_map: Optional[ColorMap] = None,
) -> Accounting:
    return get_assembly_service().estimate(book, fragments, color_map)


def assemble_preview(
    book: BookDetails,
    fragments: Sequence[FragmentDescriptor],
    options: Optional[BuildOptions] = None,
) -> BuildResult:
    return get_assembly_service().assemble_preview(book, fragments, options)
