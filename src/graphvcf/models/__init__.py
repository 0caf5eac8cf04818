"""
Data models for graphvcf.

Provides Pydantic models for run configuration.
"""

from .core import CombineConfig, HeaderConfig

__all__ = [
    "CombineConfig",
    "HeaderConfig",
]
