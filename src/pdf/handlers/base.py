"""Base class for fragment handlers.

A handler owns one fragment type. It declares the form fields it fills as
``TagDefinition`` entries and implements ``process`` to append the fragment's
pages to the shared output document.

To add a handler:
1. Subclass ``BaseHandler``
2. Set ``module_type`` to the fragment type tag
3. Return the handler's tag definitions from ``tags``
4. Implement ``process``
5. Register an instance in ``pdf/handlers/__init__.py``
"""

from dataclasses import dataclass
from typing import Callable, Optional

from pypdf import PdfReader

from constants import DEFAULT_TYPE
from core.logging import get_logger
from pdf.context import BuildContext, HandlerResult
from pdf.documents import fill_and_flatten, form_field_names, load_document
from pdf.grayscale import convert_to_grayscale

logger = get_logger(__name__)


@dataclass(frozen=True)
class TagDefinition:
    """A form field and how to compute its value from the build context."""

    field_name: str
    get_value: Callable[[BuildContext], Optional[str]]
    required: bool = False


class BaseHandler:
    """Common behaviour for all fragment handlers."""

    module_type: str = DEFAULT_TYPE

    # Whether the estimate path needs the fragment's bytes to count pages
    counts_from_source: bool = True

    @property
    def tags(self) -> list[TagDefinition]:
        return []

    def validate(self, document: PdfReader) -> bool:
        """Check that every required form field exists.

        Never raises; a missing field is logged and reported as False.
        """
        names = form_field_names(document)
        for tag in self.tags:
            if tag.field_name in names:
                continue
            if tag.required:
                logger.warning(
                    "Required field {} missing in {} fragment",
                    tag.field_name,
                    self.module_type,
                )
                return False
            logger.debug(
                "Optional field {} missing in {} fragment",
                tag.field_name,
                self.module_type,
            )
        return True

    def tag_values(self, context: BuildContext) -> dict[str, str]:
        values = {}
        for tag in self.tags:
            value = tag.get_value(context)
            if value is not None:
                values[tag.field_name] = value
        return values

    def fill(self, document: PdfReader, context: BuildContext) -> bytes:
        """Fill this handler's tags and flatten the form."""
        return fill_and_flatten(document, self.tag_values(context))

    def load(self, context: BuildContext, data: bytes) -> PdfReader:
        return load_document(data, context.resources)

    def to_grayscale(self, context: BuildContext, data: bytes) -> bytes:
        strategy = context.fragment.grayscale_strategy or context.grayscale_strategy
        return convert_to_grayscale(
            data, strategy=strategy, client=context.grayscale_client
        )

    def process(self, context: BuildContext, source: bytes) -> HandlerResult:
        raise NotImplementedError

    def calculate_page_count(self, context: BuildContext, source: bytes) -> int:
        """Pages this fragment adds, without building it.

        The default reads the source's page count.
        """
        return len(self.load(context, source).pages)
