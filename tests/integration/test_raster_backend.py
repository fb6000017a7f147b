"""
Integration tests for the raster backend - renders real PDFs with PyMuPDF.
"""

import fitz
import pytest

from scribe.contexts.composition import PaginationMode, compose
from scribe.contexts.rendering import RasterBackend, RenderBackend, RenderError, load_render_config
from scribe.utils.pdf_processing import page_count, page_sizes


@pytest.fixture
def config(monkeypatch):
    monkeypatch.setattr("scribe.contexts.rendering.config.RENDER_CONFIG_PATH", None)
    return load_render_config()


@pytest.mark.integration
def test_satisfies_backend_protocol(config):
    """Test RasterBackend satisfies the RenderBackend protocol."""
    backend = RasterBackend(config)
    assert isinstance(backend, RenderBackend)
    assert backend.source == "layout"


@pytest.mark.integration
def test_oversample_clamped(config):
    """Test that oversampling below 2x is raised to 2x."""
    config.raster.oversample = 1.0
    assert RasterBackend(config).zoom == 2.0


@pytest.mark.integration
def test_surface_measures_every_block(sample_record, config):
    """Test the surface measures and stacks every block."""
    backend = RasterBackend(config)
    tree = compose(sample_record)

    with backend.open_surface(tree) as surface:
        heights = [surface.measure(block) for block in tree.blocks()]
        tops = [surface.top_of(block) for block in tree.blocks()]

    assert all(height > 0 for height in heights)
    assert tops == sorted(tops)
    assert tops[0] == pytest.approx(backend.margin)


@pytest.mark.integration
def test_surface_snapshot_resolution(sample_record, config):
    """Test snapshot pixel size follows the zoom factor."""
    backend = RasterBackend(config)
    with backend.open_surface(compose(sample_record)) as surface:
        pixmap = surface.snapshot(0, 100, zoom=2.0)

    assert pixmap.width == pytest.approx(backend.page_box.width * 2, abs=2)
    assert pixmap.height == pytest.approx(200, abs=2)


@pytest.mark.integration
def test_one_page_record(sample_record, config):
    """Test a short record renders to one valid page."""
    document = RasterBackend(config).render(compose(sample_record))

    assert document.content.startswith(b"%PDF")
    assert document.media_type == "application/pdf"
    assert document.page_count == 1
    assert document.diagnostics.intended_page_count == 1
    assert document.diagnostics.is_valid


@pytest.mark.integration
def test_pages_are_a4(sample_record, config):
    """Test output pages are A4."""
    document = RasterBackend(config).render(compose(sample_record))
    for width, height in page_sizes(document.content):
        assert width == pytest.approx(595.28, abs=0.5)
        assert height == pytest.approx(841.89, abs=0.5)


@pytest.mark.integration
def test_each_page_is_a_single_image(long_record, config):
    """Test every page holds exactly one image and no text."""
    document = RasterBackend(config).render(compose(long_record))

    with fitz.open(stream=document.content, filetype="pdf") as pdf:
        for page in pdf:
            assert len(page.get_images()) == 1
            assert page.get_text().strip() == ""


@pytest.mark.integration
def test_long_record_paginates(long_record, config):
    """Test a long record renders the planned number of pages."""
    document = RasterBackend(config).render(compose(long_record))

    assert document.page_count > 1
    assert document.page_count == document.diagnostics.intended_page_count
    assert page_count(document.content) == document.page_count
    assert document.diagnostics.is_valid


@pytest.mark.integration
def test_shrink_to_fit_always_one_page(long_record, config):
    """Test shrink-to-fit always renders one page."""
    document = RasterBackend(config, mode=PaginationMode.SHRINK_TO_FIT).render(compose(long_record))

    assert document.page_count == 1
    assert document.diagnostics is None


@pytest.mark.integration
def test_shrink_to_fit_scales_image_into_page(long_record, config):
    """Test shrink-to-fit scales and centers the image."""
    backend = RasterBackend(config, mode=PaginationMode.SHRINK_TO_FIT)
    document = backend.render(compose(long_record))

    with fitz.open(stream=document.content, filetype="pdf") as pdf:
        page = pdf[0]
        xref = page.get_images()[0][0]
        (rect,) = page.get_image_rects(xref)

    assert rect.height <= backend.page_box.height + 0.5
    assert rect.width < backend.page_box.width
    assert rect.x0 == pytest.approx(backend.page_box.width - rect.x1, abs=0.5)


@pytest.mark.integration
def test_empty_record_renders_header_only_page(empty_record, config):
    """Test an empty record renders one page."""
    document = RasterBackend(config).render(compose(empty_record))
    assert document.page_count == 1


@pytest.mark.integration
def test_unreadable_custom_font_falls_back(sample_record, config, tmp_path):
    """Test an unreadable font file falls back to the built-in font."""
    bad_font = tmp_path / "Broken.ttf"
    bad_font.write_bytes(b"not a font")
    config.fonts.regular_url = str(bad_font)

    document = RasterBackend(config).render(compose(sample_record))
    assert document.page_count == 1


@pytest.mark.integration
def test_fitz_failure_becomes_render_error(sample_record, config, monkeypatch):
    """Test PyMuPDF errors are wrapped in RenderError."""
    backend = RasterBackend(config)

    def broken_snapshot(self, top, bottom, zoom):
        raise RuntimeError("pixmap allocation failed")

    monkeypatch.setattr("scribe.contexts.rendering.raster.RasterSurface.snapshot", broken_snapshot)

    with pytest.raises(RenderError) as exc_info:
        backend.render(compose(sample_record))
    assert exc_info.value.backend == "raster"
    assert isinstance(exc_info.value.original_error, RuntimeError)
