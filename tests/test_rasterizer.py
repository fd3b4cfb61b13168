import io

import pymupdf
import pytest

from flet_pdf_editor.backends.pymupdf import PyMuPDFBackend, image_size
from flet_pdf_editor.errors import LoadError
from flet_pdf_editor.images import PNG_MAGIC
from flet_pdf_editor.rendering.rasterizer import load_pages, rasterize_document


def test_pages_keep_native_size(two_page_pdf):
    pages = load_pages(two_page_pdf, scale=1.0)
    assert [(p.index, p.width, p.height) for p in pages] == [(0, 612, 792), (1, 400, 600)]
    assert all(p.image.startswith(PNG_MAGIC) for p in pages)


def test_raster_scale_supersamples(two_page_pdf):
    page = load_pages(io.BytesIO(two_page_pdf), scale=2.0)[1]
    assert image_size(page.image) == (800, 1200)
    assert (page.width, page.height) == (400, 600)


def test_load_from_path(tmp_path, two_page_pdf):
    path = tmp_path / "doc.pdf"
    path.write_bytes(two_page_pdf)
    assert len(load_pages(path, scale=0.5)) == 2


def test_garbage_raises_load_error():
    with pytest.raises(LoadError):
        load_pages(b"definitely not a pdf")


def test_empty_document_raises_load_error(make_recording_doc):
    with pytest.raises(LoadError):
        rasterize_document(make_recording_doc(sizes=[]))


def test_page_render_failure_aborts_load(recording_doc):
    recording_doc.fail_pages.append(1)
    with pytest.raises(LoadError, match="page 2"):
        rasterize_document(recording_doc, scale=2.0)


def test_rasterize_uses_backend_scale(recording_doc):
    pages = rasterize_document(recording_doc, scale=3.0)
    assert len(pages) == 2
    assert ("rasterize", 0, 3.0) in recording_doc.calls


def test_encrypted_document_needs_password(two_page_pdf):
    doc = pymupdf.open(stream=two_page_pdf, filetype="pdf")
    locked = doc.tobytes(
        encryption=pymupdf.PDF_ENCRYPT_AES_256, user_pw="secret", owner_pw="owner"
    )
    doc.close()

    with pytest.raises(LoadError):
        PyMuPDFBackend(locked)

    with PyMuPDFBackend(locked, password="secret") as backend:
        assert backend.page_count == 2


def test_image_size_rejects_non_images():
    with pytest.raises(ValueError):
        image_size(b"not an image")


def test_cropped_page_reports_visible_size(cropped_pdf):
    page = load_pages(cropped_pdf, scale=1.0)[0]
    assert (page.width, page.height) == (612, 600)
    assert image_size(page.image) == (612, 600)
