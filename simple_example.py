"""
Minimal PDF Editor example.

    python simple_example.py path/to/file.pdf

Edited copies are written next to the source as ``<name>-edited.pdf``.
"""

import logging
import sys
from pathlib import Path

import flet as ft

from flet_pdf_editor import EditorConfig, LoadError, PdfEditor

logging.basicConfig(level=logging.INFO)


def main(page: ft.Page):
    page.title = "PDF Editor"
    page.padding = 0

    source = Path(sys.argv[1] if len(sys.argv) > 1 else "demo_files/sample.pdf")

    def on_save(data: bytes):
        target = source.with_name(f"{source.stem}-edited.pdf")
        target.write_bytes(data)
        page.open(ft.SnackBar(ft.Text(f"Saved {target.name}")))

    def on_cancel():
        page.window.close()

    try:
        editor = PdfEditor(
            source,
            on_save=on_save,
            on_cancel=on_cancel,
            config=EditorConfig(zoom=0.9),
        )
    except LoadError as e:
        page.add(ft.Text(f"Could not open {source}: {e}", color=ft.Colors.ERROR))
        return

    # Delete, Backspace and Escape are handled by the editor
    page.on_keyboard_event = editor.on_keyboard_event
    page.add(editor.control)


if __name__ == "__main__":
    ft.app(target=main)
