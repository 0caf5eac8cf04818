"""Pytest configuration and fixtures."""

import sys
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# Add src directory to path so tests use local code, not installed package
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def reference_table(temp_dir: Path) -> Path:
    """Six-column reference table with a header row."""
    path = temp_dir / "reference.tsv"
    path.write_text(
        "node\tstart\tend\tseq\tlength\tpath\n"
        "10\t0\t5\tACGTG\t5\tsample#0#chr1\n"
        "11\t5\t9\tTTAA\t4\tsample#0#chr1\n"
        "20\t0\t3\tGGC\t3\tGRCh38.chr12_random\n"
        "30\t100\t104\tCCCC\t4\tHG002#1#chr07\n"
        "50\t0\t7\tAAAAAAA\t7\tHG002#1#chrUn_KI270\n"
    )
    return path


@pytest.fixture
def alignment_table(temp_dir: Path) -> Path:
    """Alignment table with a header row."""
    path = temp_dir / "alignment.tsv"
    path.write_text(
        "node\tdistance\tposition\tpath\n"
        "11\t3\t100\tsample#0#chr1\n"
        "40\t2000000000\t777\tHG002#1#chrX\n"
    )
    return path


@pytest.fixture
def graph_vcf(temp_dir: Path) -> Path:
    """Graph VCF whose CHROM column carries node ids."""
    path = temp_dir / "graph.vcf"
    path.write_text(
        "##fileformat=VCFv4.2\n"
        "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS1\n"
        "10\t3\t.\tA\tT\t.\tPASS\tDP=5\tGT:AD\t0/1:3,2\n"
        "11\t2\t.\tT\tC\t.\tPASS\tDP=7;AF=0.5\tGT:AD\t1/1:0,7\n"
        "20\t1\t.\tG\tA\t.\tPASS\tSV\tGT:AD\t0/0:4,0\n"
        "30\t0\t.\tC\tG\t.\tPASS\tDP=2\tGT:AD\t0/1:1,1\n"
        "40\t5\t.\tA\tG\t.\tPASS\tDP=9\tGT:AD\t0/1:5,4\n"
        "50\t1\t.\tA\tG\t.\tPASS\tDP=3\tGT:AD\t0/1:2,1\n"
        "node_random_60\t1\t.\tA\tG\t.\tPASS\tDP=3\tGT:AD\t0/1:2,1\n"
        "99\t8\t.\tA\tG\t.\tPASS\tDP=1\tGT:AD\t0/1:1,0\n"
    )
    return path
