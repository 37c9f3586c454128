import pytest
import time
from listmaker import FluentSequence
from listmaker.utils import validate_lazy_evaluation


class TestLazyEvaluation:
    """Test core lazy evaluation functionality"""

    def test_deferred_execution(self):
        """Test that operations are not executed immediately"""
        call_count = 0

        def track_calls(x):
            nonlocal call_count
            call_count += 1
            return x * 2

        # Create fluent sequence - should not execute yet
        seq = FluentSequence.from_array(range(10)).map(track_calls)
        assert call_count == 0, "Operations should not execute during definition"

        result = seq.limit(3).to_list()
        assert call_count == 3, f"Expected 3 calls, got {call_count}"
        assert result == [0, 2, 4], f"Unexpected result: {result}"

    def test_lazy_chaining(self):
        """Test that chained operations remain lazy"""
        seq = (
            FluentSequence.from_array(range(100))
            .map(lambda x: x * x)
            .filter(lambda x: x % 2 == 0)
            .skip(5)
            .limit(10)
        )

        assert validate_lazy_evaluation(seq), "Should be an unevaluated recipe"
        assert [op for op, _ in seq._ops] == ["map", "filter", "skip", "limit"]

        result = seq.to_list()
        assert len(result) == 10, f"Expected 10 items, got {len(result)}"
        assert result[0] == 100, f"Expected 10*10 first, got {result[0]}"

    def test_intermediate_operations_do_not_mutate_receiver(self):
        """Each operation returns a fresh sequence and leaves the receiver alone"""
        base = FluentSequence.of(3, 1, 2)
        mapped = base.map(lambda x: x * 10)
        sorted_seq = base.sorted()

        assert base is not mapped and base is not sorted_seq
        assert base._ops == [], "Receiver should keep an empty recipe"
        assert base.to_list() == [3, 1, 2]
        assert mapped.to_list() == [30, 10, 20]
        assert sorted_seq.to_list() == [1, 2, 3]

    def test_multiple_consumption(self):
        """Test that replayable sequences can be consumed multiple times"""
        seq = FluentSequence.from_array([0, 1, 2, 3, 4]).map(lambda x: x * 2)

        result1 = seq.to_list()
        result2 = seq.to_list()

        assert result1 == result2, "Multiple consumptions should yield same result"
        assert result1 == [0, 2, 4, 6, 8], f"Unexpected result: {result1}"
        assert seq.size() == 5

    def test_backing_list_is_not_copied(self):
        """Wrapping reads through to the backing collection"""
        backing = [1, 2]
        seq = FluentSequence.from_array(backing)
        backing.append(3)

        assert seq.to_list() == [1, 2, 3], "Changes to the backing list should be visible"

    def test_sort_is_deferred_until_iteration(self):
        """Sorting happens when a terminal operation runs"""
        keys_seen = []

        def key(x):
            keys_seen.append(x)
            return x

        seq = FluentSequence.of(3, 1, 2).sorted_on(key)
        assert keys_seen == [], "Sort key should not run during definition"

        assert seq.first() == 1
        assert sorted(keys_seen) == [1, 2, 3]

    def test_first_stops_early(self):
        """Short-circuiting terminals only pull what they need"""
        pulled = []

        def source():
            for i in range(1000):
                pulled.append(i)
                yield i

        seq = FluentSequence.from_iterator(source())
        assert seq.first_match(lambda x: x > 2) == 3
        assert pulled == [0, 1, 2, 3], f"Pulled too many elements: {pulled}"

    def test_cycle_is_lazy(self):
        """cycle() only works when limited before materializing"""
        result = FluentSequence.of(1, 2, 3).cycle().limit(8).to_list()
        assert result == [1, 2, 3, 1, 2, 3, 1, 2], f"Unexpected result: {result}"

    def test_cycle_of_empty_sequence_terminates(self):
        assert FluentSequence.empty().cycle().to_list() == []

    def test_lazy_evaluation_performance(self):
        """Test that lazy evaluation only does the work needed for small outputs"""
        start_time = time.perf_counter()
        result = (
            FluentSequence.from_array(range(10_000_000))
            .map(lambda x: x * x)
            .filter(lambda x: x % 1000 == 0)
            .limit(5)
            .to_list()
        )
        lazy_time = time.perf_counter() - start_time

        assert result == [0, 10000, 40000, 90000, 160000]
        assert lazy_time < 1.0, f"Lazy evaluation took too long: {lazy_time:.2f}s"
