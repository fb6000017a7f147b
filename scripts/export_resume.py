#!/usr/bin/env python3
"""
Resume Export CLI

Exports a resume record (YAML/JSON) through one of the render backends and
inspects the results.

Commands:
    export  - Export a record to PDF (raster, vector) or a print-ready view (print_view)
    preview - Show the raster page plan and layout diagnostics without writing a file
    inspect - Show page count and extracted text of an exported PDF

Examples:\n

    export_resume.py export data/ada.yaml                          # Raster PDF into outs/exports

    export_resume.py export data/ada.yaml --backend vector         # Vector PDF

    export_resume.py export data/ada.yaml --mode shrink_to_fit     # Everything on one page

    export_resume.py export data/ada.yaml -b print_view --open     # Open the print view

    export_resume.py preview data/ada.yaml                         # Page plan + diagnostics

    export_resume.py inspect outs/exports/Ada_Lovelace_Resume.pdf  # Page count + text
"""

import asyncio
import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from omegaconf.errors import OmegaConfBaseException
from typing_extensions import Annotated

from scribe.contexts.composition import PaginationMode, analyze_pages, compose
from scribe.contexts.export import BACKENDS, export_document
from scribe.contexts.record import InvalidRecordError, load_record
from scribe.contexts.rendering import RasterBackend, load_render_config
from scribe.utils.logger import setup_logger
from scribe.utils.pdf_processing import PDFDocument
from scribe.utils.timestamp import now

load_dotenv()
OUTPUT_PATH = Path(os.getenv("SCRIBE_OUTPUT_PATH", "outs/exports"))
LOGS_PATH = Path(os.getenv("SCRIBE_LOGS_PATH", "outs/logs"))


app = typer.Typer(
    help="Export resume records to PDF or a print-ready view",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _load(record_path: Path):
    try:
        return load_record(record_path)
    except (FileNotFoundError, InvalidRecordError, OmegaConfBaseException) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _config(config_path: Optional[Path], mode: Optional[PaginationMode]):
    overrides = {"mode": mode.value} if mode is not None else None
    try:
        return load_render_config(config_path, overrides=overrides)
    except (FileNotFoundError, OmegaConfBaseException) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("export")
def export_command(
    record_path: Annotated[
        Path,
        typer.Argument(help="Resume record file (YAML or JSON)", dir_okay=False),
    ],
    backend: Annotated[
        Optional[str],
        typer.Option(
            "--backend",
            "-b",
            help=f"Render backend ({', '.join(BACKENDS)}); default from render config",
        ),
    ] = None,
    mode: Annotated[
        Optional[PaginationMode],
        typer.Option(
            "--mode",
            "-m",
            help="Pagination mode for the raster backend",
            case_sensitive=False,
        ),
    ] = None,
    output_dir: Annotated[
        Path,
        typer.Option(
            "--output-dir",
            "-o",
            help="Directory for the exported file",
            file_okay=False,
        ),
    ] = OUTPUT_PATH,
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Render config YAML overriding the defaults",
            dir_okay=False,
        ),
    ] = None,
    open_view: Annotated[
        bool,
        typer.Option(
            "--open",
            help="Open the exported artifact in a browser view",
        ),
    ] = False,
    timeout_s: Annotated[
        Optional[float],
        typer.Option(
            "--timeout",
            help="Fail the export if rendering takes longer than this many seconds",
            min=0.1,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show debug logging on the console",
        ),
    ] = False,
):
    """
    Export a resume record.

    Writes {first}_{last}_Resume.pdf (raster, vector) or .html (print_view)
    into the output directory. Progress and diagnostics are logged to
    outs/logs/export_<timestamp>/export.log.

    Examples:\n

        $ export_resume.py export data/ada.yaml                       # Default backend

        $ export_resume.py export data/ada.yaml -b vector -o out/     # Vector PDF into out/
    """
    config = _config(config_path, mode)
    backend = backend or config.default_backend
    if backend not in BACKENDS:
        typer.secho(
            f"Error: unknown backend '{backend}'. Available: {', '.join(BACKENDS)}\n",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)

    log_file = setup_logger(
        context_name="export",
        log_dir=LOGS_PATH / f"export_{now()}",
        extra_provenance={"Record": record_path, "Backend": backend, "Mode": config.mode.value},
        verbose=verbose,
    )

    record = _load(record_path)

    typer.secho(f"\nExporting: {record_path}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Backend: {backend}")
    typer.echo("")

    result = asyncio.run(
        export_document(
            record,
            backend,
            config=config,
            output_dir=output_dir,
            open_view=open_view,
            timeout_s=timeout_s,
        )
    )

    if result.success:
        artifact = result.artifact
        typer.secho("✓ Export succeeded", fg=typer.colors.GREEN, bold=True)
        if artifact.page_count is not None:
            typer.echo(f"  Pages: {artifact.page_count}")
        typer.echo(f"  Size: {artifact.size_bytes / 1024:.1f} KiB")
        typer.echo(f"  File: {artifact.path}")
        if result.diagnostics is not None:
            for note in result.diagnostics.get_notes():
                typer.secho(f"  Note: {note}", fg=typer.colors.YELLOW)
    else:
        typer.secho(f"✗ Export failed ({result.error.kind})", fg=typer.colors.RED, bold=True)
        typer.secho(f"  {result.error.message}", fg=typer.colors.RED)

    typer.echo(f"  Log: {log_file}")
    typer.echo("")

    raise typer.Exit(code=0 if result.success else 1)


@app.command("preview")
def preview_command(
    record_path: Annotated[
        Path,
        typer.Argument(help="Resume record file (YAML or JSON)", dir_okay=False),
    ],
    mode: Annotated[
        Optional[PaginationMode],
        typer.Option("--mode", "-m", help="Pagination mode", case_sensitive=False),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Render config YAML", dir_okay=False),
    ] = None,
):
    """
    Show the raster page plan for a record.

    Composes the record, measures every block off-screen and paginates, then
    prints which sections land on which page and any layout diagnostics.
    """
    config = _config(config_path, mode)
    record = _load(record_path)

    backend = RasterBackend(config)
    tree = compose(record)
    with backend.open_surface(tree) as surface:
        pages = backend.paginate(tree, surface)
    usable = backend.page_box.usable_height(backend.margin)
    diagnostics = analyze_pages(pages, usable)

    typer.secho(f"\nPage plan: {record_path}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Mode: {backend.mode.value}")
    typer.echo(f"Pages: {len(pages)}")
    for page in pages:
        fill = page.content_height / usable * 100
        typer.echo(f"\n  Page {page.number} ({fill:.0f}% of usable height)")
        for block in page.blocks:
            label = getattr(block, "title", None) or getattr(block, "name", None) or "(untitled)"
            typer.echo(f"    {type(block).__name__:<12} {label}")

    typer.echo("")
    for note in diagnostics.get_notes():
        typer.secho(f"  Note: {note}", fg=typer.colors.YELLOW)
    issues = diagnostics.get_inherited_issues()
    if issues:
        typer.secho(f"✗ {len(issues)} layout issue(s)", fg=typer.colors.RED, bold=True)
        for issue in issues:
            typer.secho(f"  - {issue}", fg=typer.colors.RED)
    else:
        typer.secho("✓ Layout valid", fg=typer.colors.GREEN, bold=True)
    typer.echo("")

    raise typer.Exit(code=0 if diagnostics.is_valid else 1)


@app.command("inspect")
def inspect_command(
    pdf_path: Annotated[
        Path,
        typer.Argument(help="Exported PDF", dir_okay=False),
    ],
    show_text: Annotated[
        bool,
        typer.Option("--text/--no-text", help="Print extracted text lines per page"),
    ] = True,
):
    """Show page count and extracted text of an exported PDF."""
    try:
        pdf = PDFDocument(pdf_path)
    except FileNotFoundError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"\nInspecting: {pdf_path}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Pages: {pdf.page_count}")

    if show_text:
        for page in range(1, pdf.page_count + 1):
            lines = pdf.get_lines(page)
            typer.echo(f"\n  Page {page} ({len(lines)} text lines)")
            for line in lines:
                typer.echo(f"    {line}")
    typer.echo("")


if __name__ == "__main__":
    app()
