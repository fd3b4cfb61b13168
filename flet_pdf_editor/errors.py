"""
Editor exceptions.
"""


class EditorError(Exception):
    """Base class for editor errors."""


class LoadError(EditorError):
    """The source document could not be opened or rasterized."""


class ExportError(EditorError):
    """The document could not be reopened or serialized during export."""


class ElementEmbedError(EditorError):
    """A single element could not be embedded. The export continues."""

    def __init__(self, element_id: str, reason: str):
        super().__init__(f"Cannot embed element {element_id}: {reason}")
        self.element_id = element_id
        self.reason = reason


class SaveInProgressError(EditorError):
    """A save was requested while another one is still running."""
