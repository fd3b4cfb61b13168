"""
Editor state - pages, overlay elements and selection.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .config import EditorConfig
from .transform import CoordinateTransform
from .types import AnyElement, ElementKind, PageRaster, TextElement, Tool

logger = logging.getLogger(__name__)


@dataclass
class EditorState:
    """The in-memory scene.

    ``elements`` order is the paint and export order: later entries are
    drawn on top. ``selected_id`` and ``editing_id`` always refer to an
    element that is currently present, or are None.
    """

    pages: List[PageRaster]
    config: EditorConfig = field(default_factory=EditorConfig)
    elements: List[AnyElement] = field(default_factory=list)
    current_page: int = 0
    selected_id: Optional[str] = None
    editing_id: Optional[str] = None
    active_tool: Tool = Tool.SELECT
    zoom: float = 0.0
    _ids: Iterator[int] = field(default_factory=lambda: itertools.count(1), repr=False)

    def __post_init__(self):
        if not self.zoom:
            self.zoom = self.config.zoom
        self.zoom = self.config.clamp_zoom(self.zoom)

    # Properties

    @property
    def transform(self) -> CoordinateTransform:
        return CoordinateTransform(self.zoom)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def page(self) -> PageRaster:
        """The page being edited."""
        return self.pages[self.current_page]

    @property
    def selected(self) -> Optional[AnyElement]:
        return self.get(self.selected_id) if self.selected_id else None

    @property
    def editing(self) -> Optional[TextElement]:
        element = self.get(self.editing_id) if self.editing_id else None
        return element if isinstance(element, TextElement) else None

    # Elements

    def next_id(self, kind: ElementKind) -> str:
        """Allocate a session-unique id. Ids are never reused."""
        return f"{kind.value}-{next(self._ids)}"

    def add(self, element: AnyElement) -> AnyElement:
        """Append an element on top of the stack."""
        if not 0 <= element.page < len(self.pages):
            raise IndexError(f"Page index {element.page} out of range")
        if self.get(element.id) is not None:
            raise ValueError(f"Duplicate element id {element.id}")
        self.elements.append(element)
        logger.debug("Added %s on page %d", element.id, element.page)
        return element

    def remove(self, element_id: str) -> bool:
        """Delete an element, clearing selection and editing if they pointed to it."""
        for i, element in enumerate(self.elements):
            if element.id == element_id:
                del self.elements[i]
                if self.selected_id == element_id:
                    self.selected_id = None
                if self.editing_id == element_id:
                    self.editing_id = None
                logger.debug("Removed %s", element_id)
                return True
        return False

    def get(self, element_id: str) -> Optional[AnyElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def elements_on_page(self, page_index: int) -> List[AnyElement]:
        """Elements on a page, in paint order."""
        return [e for e in self.elements if e.page == page_index]

    def element_at(self, x: float, y: float) -> Optional[AnyElement]:
        """Topmost element on the current page under a document-space point."""
        for element in reversed(self.elements):
            if element.page == self.current_page and element.contains(x, y):
                return element
        return None

    def update_text(self, element_id: str, content: str) -> None:
        element = self.get(element_id)
        if isinstance(element, TextElement):
            element.content = content

    # Selection

    def select(self, element_id: Optional[str]) -> None:
        if element_id is not None and self.get(element_id) is None:
            raise KeyError(element_id)
        if self.editing_id and self.editing_id != element_id:
            self.editing_id = None
        self.selected_id = element_id

    def clear_selection(self) -> None:
        self.selected_id = None
        self.editing_id = None

    def begin_text_edit(self, element_id: str) -> None:
        if isinstance(self.get(element_id), TextElement):
            self.selected_id = element_id
            self.editing_id = element_id

    def end_text_edit(self) -> None:
        self.editing_id = None

    # Navigation

    def set_page(self, index: int) -> bool:
        if 0 <= index < len(self.pages) and index != self.current_page:
            self.current_page = index
            self.clear_selection()
            return True
        return False

    def next_page(self) -> bool:
        return self.set_page(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.set_page(self.current_page - 1)

    def set_zoom(self, value: float) -> float:
        self.zoom = self.config.clamp_zoom(value)
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + self.config.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - self.config.zoom_step)
