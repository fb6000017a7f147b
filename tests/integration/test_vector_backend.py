"""
Integration tests for the vector backend - renders real PDFs with ReportLab and
reads them back with pdfplumber.
"""

import pytest

from scribe.contexts.composition import compose
from scribe.contexts.rendering import RenderBackend, RenderError, VectorBackend, load_render_config
from scribe.utils.pdf_processing import PDFDocument, normalize_for_matching, page_sizes


@pytest.fixture
def config(monkeypatch):
    monkeypatch.setattr("scribe.contexts.rendering.config.RENDER_CONFIG_PATH", None)
    return load_render_config()


def _section_positions(pdf: PDFDocument, titles):
    positions = []
    for title in titles:
        location = pdf.find(title, whole_line=True)
        assert location is not None, f"Section heading '{title}' not found"
        positions.append(location)
    return positions


@pytest.mark.integration
def test_satisfies_backend_protocol(config):
    """Test VectorBackend satisfies the RenderBackend protocol."""
    backend = VectorBackend(config)
    assert isinstance(backend, RenderBackend)
    assert backend.source == "record"


@pytest.mark.integration
def test_renders_selectable_text(sample_record, config):
    """Test the vector PDF carries extractable text."""
    document = VectorBackend(config).render(sample_record)
    pdf = PDFDocument(document.content)

    assert document.content.startswith(b"%PDF")
    assert document.page_count == 1
    assert pdf.find("Ada Lovelace", whole_line=True) is not None
    assert pdf.find("Sep 1842 – Present") is not None
    assert pdf.find("Translated Menabrea's memoir") is not None


@pytest.mark.integration
def test_section_order_matches_composer(sample_record, config):
    """Test section order matches compose()."""
    tree = compose(sample_record)
    titles = [section.title for section in tree.sections]

    pdf = PDFDocument(VectorBackend(config).render(sample_record).content)
    positions = _section_positions(pdf, titles)

    assert positions == sorted(positions)


@pytest.mark.integration
def test_section_presence_matches_composer(sample_record, config):
    """Test empty sections are omitted as compose() omits them."""
    sample_record.projects = []
    sample_record.achievements = []
    tree = compose(sample_record)

    pdf = PDFDocument(VectorBackend(config).render(sample_record).content)
    text = normalize_for_matching(pdf.get_text())

    for section in tree.sections:
        assert normalize_for_matching(section.title) in text
    assert pdf.find("Projects", whole_line=True) is None
    assert pdf.find("Achievements", whole_line=True) is None


@pytest.mark.integration
def test_contacts_in_fixed_order(sample_record, config):
    """Test header contacts appear in fixed order."""
    pdf = PDFDocument(VectorBackend(config).render(sample_record).content)
    contact_line = next(line for line in pdf.get_lines(1) if "ada@example.com" in line)

    assert contact_line.index("ada@example.com") < contact_line.index("+44") < contact_line.index("ada.dev")


@pytest.mark.integration
def test_long_record_paginates_on_a4(long_record, config):
    """Test a long record spans several A4 pages."""
    document = VectorBackend(config).render(long_record)

    assert document.page_count > 1
    for width, height in page_sizes(document.content):
        assert width == pytest.approx(595.28, abs=0.5)
        assert height == pytest.approx(841.89, abs=0.5)


@pytest.mark.integration
def test_empty_record(empty_record, config):
    """Test an empty record renders one page."""
    document = VectorBackend(config).render(empty_record)
    assert document.page_count == 1


@pytest.mark.integration
def test_markup_characters_escaped(sample_record, config):
    """Test markup characters in user text are rendered literally."""
    sample_record.projects[0].title = "R&D <prototype>"
    pdf = PDFDocument(VectorBackend(config).render(sample_record).content)
    assert "R&D <prototype>" in pdf.get_text()


@pytest.mark.integration
def test_smaller_than_raster(long_record, config):
    """Test vector output is smaller than raster output."""
    from scribe.contexts.rendering import RasterBackend

    vector = VectorBackend(config).render(long_record)
    raster = RasterBackend(config).render(compose(long_record))
    assert vector.size_bytes < raster.size_bytes


@pytest.mark.integration
def test_layout_failure_becomes_render_error(sample_record, config, monkeypatch):
    """Test ReportLab layout errors are wrapped in RenderError."""
    from reportlab.platypus.doctemplate import LayoutError

    def broken_build(self, story, *args, **kwargs):
        raise LayoutError("Flowable too large")

    monkeypatch.setattr("reportlab.platypus.SimpleDocTemplate.build", broken_build)

    with pytest.raises(RenderError) as exc_info:
        VectorBackend(config).render(sample_record)
    assert exc_info.value.backend == "vector"
