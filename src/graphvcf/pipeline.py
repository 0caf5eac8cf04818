"""
Pipeline Orchestrator: Manages the execution flow of graphvcf.

This module handles:
1. Loading the alignment and reference tables into a MappingContext.
2. Rewriting the graph VCF record by record into linear coordinates.
3. Optionally synthesizing a header for the rewritten body.
"""

import logging
import os
import tempfile
from contextlib import ExitStack
from pathlib import Path

from .core.mapping import LoadReport, MappingContext, ReferenceStore
from .core.resolver import CoordinateResolver
from .header import BlockSummary, synthesize_header
from .io.input import FastaSequenceAccessor, read_alignment_table, read_reference_table
from .models.core import CombineConfig, HeaderConfig
from .rewriter import RewriteStats, rewrite_file
from .utils.logging import console, timed

logger = logging.getLogger(__name__)


def _report_load(name: str, path: Path, report: LoadReport) -> None:
    console.print(
        f"Loaded [bold]{report.loaded}[/bold] {name} rows from {path}"
        + (f" ([yellow]{report.malformed} malformed skipped[/yellow])" if report.malformed else "")
    )
    if report.duplicates:
        logger.warning("%s: %d duplicate node rows, last row kept", path, report.duplicates)


class Pipeline:
    """Rewrite a graph VCF into linear coordinates."""

    def __init__(self, config: CombineConfig):
        self.config = config
        self.console = console

    def run(self) -> RewriteStats:
        """Execute the pipeline."""
        cfg = self.config
        output = cfg.output_path
        self.console.print("[bold blue]Starting graphvcf combine[/bold blue]")
        self.console.print(f"Output: {output}")

        # 1. Load mapping stores
        with self.console.status("[bold green]Loading mapping tables...[/bold green]"):
            context = self._load_context()

        if context.is_empty:
            self.console.print(
                "[yellow]Warning: no usable mapping rows; every record will pass through unmapped[/yellow]"
            )

        # 2. Rewrite, optionally behind a synthesized header
        with ExitStack() as stack:
            accessor = None
            if cfg.graph_fasta is not None:
                accessor = stack.enter_context(FastaSequenceAccessor(cfg.graph_fasta))

            resolver = CoordinateResolver(
                context,
                skip=cfg.skip,
                ignore_level=cfg.ignore_level,
                sequence_accessor=accessor,
            )

            with self.console.status("[bold green]Rewriting records...[/bold green]"):
                with timed("Rewriting records", logger) as timer:
                    if cfg.emit_header:
                        stats = self._rewrite_with_header(resolver, context.reference, output)
                    else:
                        stats = rewrite_file(cfg.vcf, output, resolver)

        self._print_summary(stats)
        self.console.print(f"Rewrite took {timer.elapsed:.1f}s")
        self.console.print("[bold green]Pipeline completed successfully.[/bold green]")
        return stats

    def _load_context(self) -> MappingContext:
        cfg = self.config
        with timed("Loading alignment table", logger):
            alignment, report = read_alignment_table(cfg.alignment)
        _report_load("alignment", cfg.alignment, report)

        reference = ReferenceStore()
        if cfg.reference is not None:
            with timed("Loading reference table", logger):
                reference, report = read_reference_table(cfg.reference)
            _report_load("reference", cfg.reference, report)

        return MappingContext(reference=reference, alignment=alignment)

    def _rewrite_with_header(
        self, resolver: CoordinateResolver, reference: ReferenceStore, output: Path
    ) -> RewriteStats:
        cfg = self.config
        fd, spool = tempfile.mkstemp(
            prefix=f".{output.name}.", suffix=".body", dir=output.parent
        )
        os.close(fd)
        spool_path = Path(spool)
        try:
            stats = rewrite_file(cfg.vcf, spool_path, resolver)
            synthesize_header(
                spool_path,
                output,
                path_lengths=reference.path_lengths,
                ignore_level=cfg.ignore_level,
                block_size=cfg.block_size,
                n_jobs=cfg.threads,
                backend=cfg.backend,
            )
        finally:
            spool_path.unlink(missing_ok=True)
        return stats

    def _print_summary(self, stats: RewriteStats) -> None:
        self.console.print(
            f"Records: [bold]{stats.total}[/bold] "
            f"(replaced [green]{stats.replaced}[/green], "
            f"unmapped [yellow]{stats.unmapped}[/yellow], "
            f"skipped [red]{stats.skipped}[/red])"
        )
        if stats.skipped:
            self.console.print(
                f"  skipped by keyword: {stats.skipped_keyword}, "
                f"by ignore level: {stats.skipped_ignore}, malformed: {stats.malformed}"
            )
        if stats.replaced:
            self.console.print(
                f"  REF from graph: {stats.ref_from_graph}, from reference: "
                f"{stats.ref_from_reference}, unchanged: {stats.ref_missing}"
            )
            self.console.print(
                f"  POS from alignment: {stats.pos_from_alignment}, from reference: "
                f"{stats.pos_from_reference}, unchanged: {stats.pos_missing}"
            )


class HeaderPipeline:
    """Synthesize a header for an existing VCF body."""

    def __init__(self, config: HeaderConfig):
        self.config = config
        self.console = console

    def run(self) -> BlockSummary:
        cfg = self.config
        output = cfg.output_path
        self.console.print("[bold blue]Starting graphvcf header[/bold blue]")

        with self.console.status("[bold green]Loading reference table...[/bold green]"):
            reference, report = read_reference_table(cfg.reference)
        _report_load("reference", cfg.reference, report)

        with self.console.status("[bold green]Inferring header from body...[/bold green]"):
            with timed("Header synthesis", logger) as timer:
                summary = synthesize_header(
                    cfg.vcf,
                    output,
                    path_lengths=reference.path_lengths,
                    ignore_level=cfg.ignore_level,
                    block_size=cfg.block_size,
                    n_jobs=cfg.threads,
                    backend=cfg.backend,
                )

        self.console.print(
            f"Declared [bold]{len(summary.info)}[/bold] INFO and "
            f"[bold]{len(summary.formats)}[/bold] FORMAT keys "
            f"from {summary.lines} body lines in {timer.elapsed:.1f}s -> {output}"
        )
        return summary
