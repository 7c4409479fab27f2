"""Pipeline orchestration module."""

from thumbcompare.pipeline.compare import (
    CompareResult,
    ComparePipeline,
    compare_competitors,
    parse_handles,
)

__all__ = ["ComparePipeline", "CompareResult", "compare_competitors", "parse_handles"]
