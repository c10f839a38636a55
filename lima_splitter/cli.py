"""
Command-line interface for LIMA Splitter.
"""

import logging
import os
import sys
import threading

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from lima_splitter import __version__
from lima_splitter.backends import detect_render_backend
from lima_splitter.exceptions import InputPathNotFoundError
from lima_splitter.splitter import BatchProcessor
from lima_splitter.utils import format_file_size

console = Console()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.command()
@click.version_option(version=__version__)
@click.option(
    '--path', '-p', 'input_path',
    required=True,
    help='Input path (PDF file or directory)',
    type=click.Path()
)
@click.option(
    '--output-dir', '-o',
    default='output',
    help='Output root directory',
    type=click.Path()
)
@click.option(
    '--workers', '-w',
    default=None,
    help='Number of files processed in parallel (defaults to CPU count)',
    type=click.IntRange(min=1)
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable debug logging'
)
def cli(input_path, output_dir, workers, verbose):
    """
    Split PDFs into single pages, compress them and render WebP previews.

    Examples:

        lima-splitter --path REPLIM150324.pdf

        lima-splitter --path ./incoming --output-dir ./site
    """
    configure_logging(verbose)

    try:
        pdf_files = BatchProcessor.find_pdf_files(input_path)
    except InputPathNotFoundError as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)

    if not pdf_files:
        console.print(f"[bold yellow]⚠ No PDF files found in {input_path}[/bold yellow]")
        return

    console.print(f"Found {len(pdf_files)} files to process.")
    console.print(f"Output directory: {output_dir}")

    backend = detect_render_backend()
    if backend is None:
        console.print("[bold yellow]⚠  Ghostscript not found. Compression and Image generation will be skipped.[/bold yellow]")
        console.print("   To enable, place 'gs' (Linux) or 'gswin32c.exe' (Windows) in this folder.")
    else:
        console.print("[bold green]✓ Ghostscript detected. Compression and Images enabled.[/bold green]")

    processor = BatchProcessor(output_dir, backend=backend, max_workers=workers)

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        SpinnerColumn(),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    ) as progress:
        tasks = {}
        lock = threading.Lock()

        def update_progress(filename, current, total):
            with lock:
                if filename not in tasks:
                    tasks[filename] = progress.add_task(filename, total=total)
            progress.update(tasks[filename], completed=current)

        results = processor.process(pdf_files, progress_callback=update_progress)

    # Show failures
    if results.failure > 0:
        console.print("\n[bold red]Failed Files:[/bold red]")
        for result in results.results:
            if not result.success:
                console.print(f"  ✗ Failed to process {result.source_file}: {result.error}")

    written = [path for result in results.results for path in result.files_created]
    output_size = sum(os.path.getsize(path) for path in written if os.path.exists(path))

    summary_table = Table(title="Summary", show_header=False)
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")

    summary_table.add_row("Total Files", str(results.total))
    summary_table.add_row("✓ Successful", f"[green]{results.success}[/green]")
    summary_table.add_row("✗ Failed", f"[red]{results.failure}[/red]")
    summary_table.add_row("Pages Written", str(len(written)))
    summary_table.add_row("Split Size", format_file_size(output_size))
    summary_table.add_row("Output Directory", os.path.abspath(output_dir))

    console.print()
    console.print(summary_table)


if __name__ == '__main__':
    cli()
