"""Default handler for content fragments (notes, rules, calendars, ...).

Copies the fragment's pages without touching form fields. Preview builds copy
at most ``preview_page_cap`` pages per fragment.
"""

from constants import DEFAULT_TYPE
from pdf.context import BuildContext, HandlerResult
from pdf.documents import copy_pages
from pdf.handlers.base import BaseHandler


class DefaultHandler(BaseHandler):
    module_type = DEFAULT_TYPE

    def process(self, context: BuildContext, source: bytes) -> HandlerResult:
        if context.grayscale:
            source = self.to_grayscale(context, source)

        document = self.load(context, source)
        total = len(document.pages)
        if context.preview_mode:
            total = min(total, context.settings.preview_page_cap)

        added = copy_pages(context.output, document, range(total))
        return HandlerResult(pages_added=added)
