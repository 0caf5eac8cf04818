"""
CLI Entry Point: Exposes the graphvcf functionality via command line.
"""

from pathlib import Path

import typer
from rich.markup import escape

from . import __version__
from .core.naming import IgnoreLevel
from .dedup import trim_file
from .header import DEFAULT_BLOCK_SIZE
from .models.core import CombineConfig, HeaderConfig
from .pipeline import HeaderPipeline, Pipeline
from .rename import MapMode, rename_qtl_file
from .utils.logging import console, setup_logging

app = typer.Typer(help="graphvcf: graph VCF coordinate translation and header repair")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
    log_file: str | None = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    graphvcf: graph VCF coordinate translation and header repair
    """
    setup_logging(verbose=verbose, log_file=log_file)


def _fail(e: Exception) -> typer.Exit:
    console.print(f"[bold red]Error: {escape(str(e))}[/bold red]", soft_wrap=True)
    return typer.Exit(code=1)


def _split_skip(skip: str | None) -> frozenset[str]:
    if not skip:
        return frozenset()
    return frozenset(k.strip() for k in skip.split(",") if k.strip())


@app.command()
def combine(
    vcf: Path = typer.Option(..., "--vcf", "-v", help="Graph VCF to rewrite"),
    alignment: Path = typer.Option(
        ..., "--alignment", "-a", help="Alignment table (node, distance, position, path)"
    ),
    reference: Path | None = typer.Option(
        None, "--reference", "-r", help="Reference table (node, start, end, [seq, length,] path)"
    ),
    graph_fasta: Path | None = typer.Option(
        None, "--graph-fasta", "-g", help="Indexed FASTA of node sequences, named by node id"
    ),
    skip: str | None = typer.Option(
        None, "--skip", "-s", help="Comma-separated substrings; records whose CHROM contains one are dropped"
    ),
    ignore: int = typer.Option(
        0, "--ignore", "-i", min=0, max=5, help="Chromosome-name ignore level (0-5)"
    ),
    header: bool = typer.Option(
        False, "--header", help="Synthesize a header for the output (needs --reference)"
    ),
    threads: int = typer.Option(1, "--threads", "-t", help="Worker count for header inference"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output VCF (default: <stem>.replaced.vcf)"
    ),
):
    """
    Rewrite graph-local VCF records into linear coordinates.
    """
    try:
        config = CombineConfig(
            vcf=vcf,
            alignment=alignment,
            reference=reference,
            graph_fasta=graph_fasta,
            output=output,
            emit_header=header,
            skip=_split_skip(skip),
            ignore_level=IgnoreLevel(ignore),
            threads=threads,
        )

        pipeline = Pipeline(config)
        pipeline.run()

    except Exception as e:
        raise _fail(e) from e


@app.command("header")
def header_cmd(
    vcf: Path = typer.Option(..., "--vcf", "-v", help="VCF whose header should be synthesized"),
    reference: Path = typer.Option(..., "--reference", "-r", help="Reference table for contig lines"),
    ignore: int = typer.Option(
        0, "--ignore", "-i", min=0, max=5, help="Chromosome-name ignore level (0-5)"
    ),
    threads: int = typer.Option(1, "--threads", "-t", help="Worker count for body inference"),
    block_size: int = typer.Option(
        DEFAULT_BLOCK_SIZE, "--block-size", help="Body lines per inference block"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output VCF (default: <stem>.withheader.vcf)"
    ),
):
    """
    Infer INFO/FORMAT declarations and contig lines and write them ahead of the body.
    """
    try:
        config = HeaderConfig(
            vcf=vcf,
            reference=reference,
            output=output,
            ignore_level=IgnoreLevel(ignore),
            threads=threads,
            block_size=block_size,
        )

        HeaderPipeline(config).run()

    except Exception as e:
        raise _fail(e) from e


@app.command()
def dedup(
    vcf: Path = typer.Option(..., "--vcf", "-v", help="VCF with possibly duplicated sample columns"),
    same: int = typer.Option(
        ..., "--same", "-n", min=0, help="Data lines a column must match its neighbour on (0 copies)"
    ),
    output: Path = typer.Option(..., "--output", "-o", help="Output VCF"),
):
    """
    Cut duplicated trailing sample columns from a VCF.
    """
    if not vcf.exists():
        console.print(f"[bold red]Error: VCF file not found: {vcf}[/bold red]")
        raise typer.Exit(code=1)

    try:
        cut = trim_file(vcf, output, same)
    except Exception as e:
        raise _fail(e) from e

    if cut is None:
        console.print("No duplicated sample columns found; all columns kept.")
    else:
        console.print(f"Cut at column [bold]{cut + 1}[/bold] -> {output}")


@app.command()
def rename(
    vcf: Path = typer.Option(..., "--vcf", "-v", help="VCF providing variant ids and keys"),
    qtl: Path = typer.Option(..., "--qtl", "-q", help="QTL table whose second column names the variant"),
    map_mode: MapMode = typer.Option(
        MapMode.IDS_ONLY, "--map-mode", help="ids-only: numeric IDs; all: also keys and positions"
    ),
):
    """
    Rename QTL variant identifiers to chrom:pos:ref:alt keys.
    """
    for path, name in ((vcf, "VCF"), (qtl, "QTL")):
        if not path.exists():
            console.print(f"[bold red]Error: {name} file not found: {path}[/bold red]")
            raise typer.Exit(code=1)

    try:
        stats = rename_qtl_file(vcf, qtl, mode=map_mode)
    except Exception as e:
        raise _fail(e) from e

    console.print(
        f"Rows: [bold]{stats.rows}[/bold] (replaced [green]{stats.replaced}[/green], "
        f"unchanged [yellow]{stats.unchanged}[/yellow])"
    )


@app.command()
def version():
    """
    Print the graphvcf version.
    """
    typer.echo(f"graphvcf {__version__}")


if __name__ == "__main__":
    app()
