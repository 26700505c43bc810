"""Collections Explorer CLI - usage reports for Java collection and stream APIs."""
from pathlib import Path
from typing import List, Optional

import structlog
import typer
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from collections_explorer.analyzer.filter import TypeFilter
from collections_explorer.analyzer.parser import JavaParser
from collections_explorer.analyzer.resolver import ClassIndex, DeclarationTypeResolver
from collections_explorer.config import __version__, get_config
from collections_explorer.corpus import collect_java_files, read_manifest
from collections_explorer.errors import InputIOError
from collections_explorer.report.context import AnalysisKind, ReportContext
from collections_explorer.report.exporter import export_reports
from collections_explorer.utils.logger import configure_logging
from collections_explorer.utils.safe_console import SafeConsole


app = typer.Typer(
    name="collections-explorer",
    help="Finds and parses Java code and reports how collections and streams are used",
    add_completion=False,
)
console = SafeConsole()
logger = structlog.get_logger()


def selected_kinds(imports: bool, variables: bool, creations: bool, streams: bool) -> List[AnalysisKind]:
    """Analysis kinds enabled by the command-line switches, in report order."""
    switches = {
        AnalysisKind.IMPORT: imports,
        AnalysisKind.VARIABLE_DECLARATION: variables,
        AnalysisKind.OBJECT_CREATION: creations,
        AnalysisKind.STREAM_USAGE: streams,
    }
    return [kind for kind, enabled in switches.items() if enabled]


def build_class_index(jar: Optional[Path]) -> ClassIndex:
    """JDK class catalog, extended with the classes of an optional jar.

    An unreadable jar is reported and ignored; resolution just gets worse.
    """
    class_index = ClassIndex.with_jdk_defaults()
    if jar is None:
        return class_index

    try:
        added = class_index.add_jar(jar)
    except InputIOError as e:
        logger.warning("jar_unreadable", path=str(jar), reason=e.reason)
        console.print(f"[yellow]Warning:[/yellow] ignoring jar {escape(str(jar))}: {escape(e.reason)}")
    else:
        logger.info("jar_indexed", path=str(jar), classes=added)
    return class_index


def _print_summary(context: ReportContext, written: List[Path]) -> None:
    table = Table(title="Collections Explorer Report")
    table.add_column("Analysis", style="cyan")
    table.add_column("Entries", justify="right", style="yellow")
    table.add_column("File", style="magenta", no_wrap=False)

    for (kind, count), path in zip(context.counts().items(), written):
        table.add_row(kind.label, str(count), escape(str(path)))

    console.print(table)
    console.print(
        f"[dim]{context.files_processed} files processed, "
        f"{context.files_skipped} skipped, "
        f"{context.extraction_failures} extraction failures[/dim]"
    )


@app.command()
def explore(
    roots: List[Path] = typer.Argument(..., help="Input directories (or manifest files with --files-listed)"),
    files_listed: bool = typer.Option(False, "--files-listed", help="Treat each input as a text file listing Java files, one per line"),
    filters: Optional[List[str]] = typer.Option(None, "--filter", "-f", help="Simple type name to inspect (repeatable); all types when omitted"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Directory where the reports are saved"),
    imports: bool = typer.Option(False, "--import", help="Analyze every import declaration that matches the filter"),
    variables: bool = typer.Option(False, "--var", help="Analyze every variable declaration that matches the filter"),
    creations: bool = typer.Option(False, "--new", help="Analyze every object instantiation that matches the filter"),
    streams: bool = typer.Option(False, "--stream", help="Analyze every stream call chain"),
    jar: Optional[Path] = typer.Option(None, "--jar", help="Jar file whose classes help resolve types"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Be verbose"),
):
    """Scan Java sources and write one CSV report per selected analysis."""
    config = get_config()
    configure_logging("DEBUG" if verbose else config.log_level)
    logger.info("starting", version=__version__)

    type_filter = TypeFilter(filters or [])
    if type_filter.is_empty:
        logger.info("no_filters", detail="inspecting all types")
    else:
        logger.info("filters_configured", filters=sorted(type_filter.names))

    kinds = selected_kinds(imports, variables, creations, streams)
    for kind in kinds:
        logger.info("inspecting", kind=kind.label)
    context = ReportContext.for_kinds(kinds, type_filter)

    class_index = build_class_index(jar)
    parser = JavaParser()

    def resolver_factory(source_file):
        return DeclarationTypeResolver(source_file, class_index)

    failed_roots = 0
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        for root in roots:
            try:
                if files_listed:
                    logger.info("reading_manifest", path=str(root))
                    paths = read_manifest(root)
                else:
                    logger.info("adding_directory", path=str(root))
                    paths = collect_java_files(root, config.extra_ignored_dirs)
            except InputIOError as e:
                failed_roots += 1
                logger.error("root_failed", path=str(e.path), reason=e.reason)
                console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
                continue

            logger.info("files_found", root=str(root), count=len(paths))
            task = progress.add_task(f"[cyan]{escape(root.name or str(root))}", total=len(paths))
            context.process(paths, parser, resolver_factory,
                            on_file=lambda _path, task=task: progress.advance(task))

    logger.info("all_files_processed", files=context.files_processed, skipped=context.files_skipped)

    try:
        written = export_reports(context, out if out is not None else config.output_dir)
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] cannot write reports: {escape(str(e))}")
        raise typer.Exit(1)

    _print_summary(context, written)

    if failed_roots == len(roots):
        raise typer.Exit(1)


@app.command()
def version():
    """Print the Collections Explorer version."""
    console.print(f"collections-explorer {__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
