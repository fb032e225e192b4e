"""Handler registry.

Maps fragment type tags to handlers, with the ``default`` handler as the
fallback for unknown types. New fragment types register here without any
change to the orchestrator.
"""

from typing import Iterable, Optional

from constants import DEFAULT_TYPE, TYPE_ALIASES
from core.logging import get_logger
from pdf.handlers.base import BaseHandler, TagDefinition
from pdf.handlers.cover import CoverHandler
from pdf.handlers.default import DefaultHandler
from pdf.handlers.planner import PlannerHandler, estimate_planner_page_count

logger = get_logger(__name__)


class HandlerRegistry:
    """Registry of fragment handlers keyed by type tag."""

    def __init__(
        self,
        handlers: Iterable[BaseHandler] = (),
        aliases: Optional[dict[str, str]] = None,
    ):
        self.handlers: dict[str, BaseHandler] = {}
        self.aliases: dict[str, str] = dict(aliases or {})
        self.default_handler: BaseHandler = DefaultHandler()
        for handler in handlers:
            self.register(handler)

    def register(self, handler: BaseHandler) -> None:
        """Register a handler under its ``module_type``.

        Registering a handler for ``default`` replaces the fallback.
        """
        module_type = handler.module_type.lower()
        if module_type == DEFAULT_TYPE:
            self.default_handler = handler
        self.handlers[module_type] = handler
        logger.debug("Registered handler for type: {}", module_type)

    def resolve_type(self, module_type: str) -> str:
        """Canonical type tag, following aliases."""
        key = module_type.strip().lower()
        return self.aliases.get(key, key)

    def get(self, module_type: str) -> Optional[BaseHandler]:
        return self.handlers.get(self.resolve_type(module_type))

    def get_or_default(self, module_type: str) -> BaseHandler:
        return self.get(module_type) or self.default_handler

    def has(self, module_type: str) -> bool:
        return self.resolve_type(module_type) in self.handlers

    def registered_types(self) -> list[str]:
        return list(self.handlers.keys())


# Global registry instance
registry = HandlerRegistry(
    [CoverHandler(), PlannerHandler(), DefaultHandler()], aliases=TYPE_ALIASES
)

__all__ = [
    "BaseHandler",
    "CoverHandler",
    "DefaultHandler",
    "HandlerRegistry",
    "PlannerHandler",
    "TagDefinition",
    "estimate_planner_page_count",
    "registry",
]
