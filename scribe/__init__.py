"""
SCRIBE - Structured Career Record Into Bound Exports

Turns a structured resume record, collected step by step by a wizard UI, into a
paginated A4 document and serializes it through interchangeable render backends.

Architecture:
- Record Context: Resume data model and the explicit session state container
- Composition Context: Layout tree composition and page fitting
- Rendering Context: Raster, print-view and vector backends
- Export Context: Backend selection, progress events and artifact delivery
"""

__version__ = "0.1.0"
