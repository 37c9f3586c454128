"""
listmaker - fluent, lazily evaluated sequences.

    >>> from listmaker import FluentSequence
    >>> FluentSequence.of(3, 1, 2).filter(lambda x: x > 1).sorted().to_list()
    [2, 3]
"""

from .accumulator import SUM, Accumulator
from .fluent import FluentSequence
from .maker import ALWAYS_TRUE, ListMaker
from .models import FluentSettings, PerformanceInfo, PerformanceSummary
from .utils import (
    DuplicateKeyError,
    EmptyResultError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    ListMakerError,
    SinglePassConsumedError,
    configure,
    get_settings,
    setup_logging,
)

__version__ = "1.0.0"

__all__ = [
    "Accumulator",
    "ALWAYS_TRUE",
    "DuplicateKeyError",
    "EmptyResultError",
    "FluentSequence",
    "FluentSettings",
    "IndexOutOfRangeError",
    "InvalidArgumentError",
    "ListMaker",
    "ListMakerError",
    "PerformanceInfo",
    "PerformanceSummary",
    "SinglePassConsumedError",
    "SUM",
    "configure",
    "get_settings",
    "setup_logging",
]
