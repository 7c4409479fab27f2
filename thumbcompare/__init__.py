"""ThumbCompare - Compare your thumbnail against the latest competitor feed."""

from thumbcompare.channel import fetch_competitors, resolve_channel
from thumbcompare.feed import interleave
from thumbcompare.pipeline import ComparePipeline, compare_competitors

__version__ = "0.3.0"
__all__ = [
    "ComparePipeline",
    "compare_competitors",
    "fetch_competitors",
    "resolve_channel",
    "interleave",
]
