"""
Configuration models for graphvcf runs.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.naming import IgnoreLevel
from ..header import DEFAULT_BLOCK_SIZE
from ..parallel import BACKENDS


def _require_file(v: Path | None) -> Path | None:
    if v is not None and not v.exists():
        raise ValueError(f"File not found: {v}")
    return v


class CombineConfig(BaseModel):
    """
    Configuration for rewriting a graph VCF into linear coordinates.
    """

    # Input
    vcf: Path
    alignment: Path
    reference: Path | None = None
    graph_fasta: Path | None = None

    # Output
    output: Path | None = None
    emit_header: bool = False

    # Record policy
    skip: frozenset[str] = frozenset()
    ignore_level: IgnoreLevel = IgnoreLevel.KEEP_ALL

    # Performance
    threads: int = Field(default=1, ge=1)
    block_size: int = Field(default=DEFAULT_BLOCK_SIZE, ge=1)
    backend: str = "loky"

    @field_validator("vcf", "alignment", "reference", "graph_fasta")
    @classmethod
    def validate_file_exists(cls, v: Path | None) -> Path | None:
        return _require_file(v)

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        if v not in BACKENDS:
            raise ValueError(f"Unknown backend '{v}', expected one of {', '.join(BACKENDS)}")
        return v

    @model_validator(mode="after")
    def validate_header_inputs(self) -> "CombineConfig":
        if self.emit_header and self.reference is None:
            raise ValueError("Header synthesis needs a reference table (--reference)")
        return self

    @property
    def output_path(self) -> Path:
        return self.output or self.vcf.with_name(f"{self.vcf.stem}.replaced.vcf")


class HeaderConfig(BaseModel):
    """
    Configuration for synthesizing a header in front of an existing VCF body.
    """

    vcf: Path
    reference: Path
    output: Path | None = None

    ignore_level: IgnoreLevel = IgnoreLevel.KEEP_ALL
    threads: int = Field(default=1, ge=1)
    block_size: int = Field(default=DEFAULT_BLOCK_SIZE, ge=1)
    backend: str = "loky"

    @field_validator("vcf", "reference")
    @classmethod
    def validate_file_exists(cls, v: Path) -> Path:
        return _require_file(v)

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        if v not in BACKENDS:
            raise ValueError(f"Unknown backend '{v}', expected one of {', '.join(BACKENDS)}")
        return v

    @property
    def output_path(self) -> Path:
        return self.output or self.vcf.with_name(f"{self.vcf.stem}.withheader.vcf")
