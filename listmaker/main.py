"""Walkthrough of FluentSequence; run with ``python -m listmaker.main``."""

import logging
from time import sleep

from .fluent import FluentSequence
from .maker import ListMaker
from .utils import get_performance_summary, measure_performance, setup_logging

logger = logging.getLogger(__name__)


def expensive_transform(x, delay=0.0):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    if delay:
        sleep(delay)
    return x * x


def main(delay=0.05):
    setup_logging()

    print("\n--- Demo: laziness (no work until iterated) ---")
    pipeline = (
        FluentSequence.from_array(range(1, 10_000))
        .map(lambda x: expensive_transform(x, delay))
        .filter(lambda v: v % 2 == 0)
        .skip(3)
        .limit(5)
    )
    print(f"Constructed pipeline {pipeline!r}. Nothing computed yet.")
    info = measure_performance("lazy_pipeline", pipeline.to_list)
    print(f"{info.result_size} results in {info.execution_time_ms:.2f}ms (only what was needed was computed)\n")

    print("--- Demo: sorting, grouping, joining ---")
    words = FluentSequence.of("pear", "fig", "apple", "kiwi", "plum", "date")
    print("by length:", words.sorted_on(len).to_list())
    print("grouped:", words.index(len))
    print("joined:", words.sorted().join(", "))

    print("\n--- Demo: single-pass source with cache() ---")
    cursor = FluentSequence.from_iterator(iter([5, 3, 8, 1])).cache()
    print("size:", cursor.size(), "max:", cursor.max(lambda a, b: a - b), "list:", cursor.to_list())

    print("\n--- Demo: cycle + limit ---")
    print(FluentSequence.of("A", "B", "C").cycle().limit(7).join())

    print("\n--- Demo: ListMaker lookups ---")
    people = ListMaker.of(("ada", 36), ("alan", 41), ("grace", 85))
    print("oldest:", people.max_on_result_of(lambda p: p[1]))
    print("first named alan:", people.first_where(lambda p: p[0], "alan"))

    summary = get_performance_summary()
    logger.info(f"Measured {summary.total_operations} operation(s), avg {summary.avg_time_ms:.2f}ms")
    return summary


if __name__ == "__main__":
    main()
