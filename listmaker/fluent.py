"""
Fluent, lazily evaluated sequences.

A FluentSequence is a recipe: the source it was built from plus an ordered
list of pending operations. Intermediate operations (map, filter, sorted,
limit, ...) return a new FluentSequence with one more operation appended and
never touch the data. Terminal operations (to_list, size, reduce, index, ...)
walk the recipe from the start, once, in order.

Replay rules:

* Sequences built from in-memory collections (lists, tuples, ranges, arrays,
  dicts, sets, ...) can feed any number of terminal operations; each one
  re-reads the source.
* Sequences built from an iterator (a generator, a file object, ``iter(x)``)
  are single-pass. The first terminal operation consumes the iterator; a
  second one only sees what the first left behind, which is nothing after a
  full traversal. This is logged as a warning, or raised as
  SinglePassConsumedError when ``strict_single_pass`` is configured.
  Call ``cache()`` to memoize the realized elements instead.
* ``cycle()`` never terminates on its own. Follow it with ``limit()`` before
  any terminal operation that needs the whole sequence.
"""

import functools
import itertools
import logging
from collections.abc import Iterator
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Set, TypeVar

from .utils import (
    DuplicateKeyError,
    EmptyResultError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    SinglePassConsumedError,
    get_settings,
    require_callable,
    require_non_negative,
    require_not_none,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")
K = TypeVar("K")
V = TypeVar("V")

_MISSING = object()


class _SinglePassSource:
    """Iterator wrapper that notices when it is iterated more than once."""

    def __init__(self, iterator: Iterator):
        self._iterator = iterator
        self._passes = 0

    def __iter__(self):
        self._passes += 1
        if self._passes > 1:
            if get_settings().strict_single_pass:
                raise SinglePassConsumedError(
                    "single-pass source has already been iterated; call cache() to replay it"
                )
            logger.warning(
                f"Iterating single-pass source {type(self._iterator).__name__} again "
                f"(pass {self._passes}); only elements not yet consumed will be produced"
            )
        return self._iterator


def _map(it, transform):
    for item in it:
        yield transform(item)


def _filter(it, predicate):
    for item in it:
        if predicate(item):
            yield item


def _exclude(it, predicate):
    for item in it:
        if not predicate(item):
            yield item


def _flatten(it, transform):
    for item in it:
        yield from transform(item)


def _distinct(it):
    seen = set()
    seen_unhashable = []
    for item in it:
        try:
            if item in seen:
                continue
            seen.add(item)
        except TypeError:
            if item in seen_unhashable:
                continue
            seen_unhashable.append(item)
        yield item


def _sort(it, key, reverse):
    # deferred so sorting happens on the first next(), not when the pipeline is built
    yield from sorted(it, key=key, reverse=reverse)


def _replay(upstream):
    while True:
        produced = False
        for item in upstream:
            produced = True
            yield item
        if not produced:
            return


class FluentSequence(Generic[T]):
    """
    A chainable, lazy view over a sequence of values. Transformations are
    stored and applied only when you iterate. Optionally supports caching of
    realized results.
    """

    def __init__(self, source: Iterable[T], ops=None, cache_enabled=False):
        require_not_none(source, "source")
        if isinstance(source, Iterator):
            source = _SinglePassSource(source)
        self._source = source
        self._ops = ops or []          # sequence of ("op_name", argument)
        self._cache_enabled = cache_enabled
        self._cache: List[T] = []      # realized items (post-ops)
        self._pending = None           # shared pipeline feeding the cache
        self._exhausted = False        # whether the cache holds every element
        self._failure = None           # error that ended the cached pipeline

    # --------- entry points ----------
    @classmethod
    def of(cls, *values: T) -> "FluentSequence[T]":
        """Wrap the given values"""
        return cls(values)

    @classmethod
    def empty(cls) -> "FluentSequence[T]":
        return cls(())

    @classmethod
    def from_array(cls, values) -> "FluentSequence[T]":
        """Wrap an in-memory collection (list, tuple, range, array.array) without copying it"""
        require_not_none(values, "values")
        if isinstance(values, Iterator):
            raise InvalidArgumentError("from_array() expects an in-memory collection, got an iterator")
        return cls(values)

    @classmethod
    def from_iterable(cls, values: Iterable[T]) -> "FluentSequence[T]":
        """Wrap any iterable; a FluentSequence is returned unchanged"""
        require_not_none(values, "values")
        if isinstance(values, FluentSequence):
            return values
        if isinstance(values, Iterator):
            return cls.from_iterator(values)
        return cls(values)

    @classmethod
    def from_iterator(cls, iterator: Iterator[T]) -> "FluentSequence[T]":
        """Wrap a single-pass cursor. The result supports one full traversal."""
        require_not_none(iterator, "iterator")
        logger.debug(f"Wrapping single-pass {type(iterator).__name__}")
        return cls(_SinglePassSource(iter(iterator)))

    # --------- chainable operators (lazy) ----------
    def filter(self, predicate: Callable[[T], bool]) -> "FluentSequence[T]":
        """Keep elements matching predicate.

        Classes are called like any predicate, so filter(bool) keeps truthy
        elements. Use filter_type() to select by isinstance.
        """
        return self._with_op(("filter", require_callable(predicate, "predicate")))

    def filter_type(self, target_type) -> "FluentSequence[Any]":
        """Keep elements that are instances of a class, or of a tuple of classes"""
        require_not_none(target_type, "target_type")
        types = target_type if isinstance(target_type, tuple) else (target_type,)
        if not types or not all(isinstance(t, type) for t in types):
            raise InvalidArgumentError(f"filter_type() expects a class or tuple of classes, got {target_type!r}")
        return self._with_op(("filter", lambda x: isinstance(x, target_type)))

    def exclude(self, predicate: Callable[[T], bool]) -> "FluentSequence[T]":
        """Keep elements not matching predicate"""
        return self._with_op(("exclude", require_callable(predicate, "predicate")))

    def not_nulls(self) -> "FluentSequence[T]":
        return self._with_op(("exclude", lambda x: x is None))

    def map(self, transform: Callable[[T], R]) -> "FluentSequence[R]":
        return self._with_op(("map", require_callable(transform, "transform")))

    def flat_map(self, transform: Callable[[T], Iterable[R]]) -> "FluentSequence[R]":
        """Map each element to an iterable and concatenate the results in order"""
        return self._with_op(("flat_map", require_callable(transform, "transform")))

    def sorted(self, comparator: Optional[Callable[[T, T], int]] = None) -> "FluentSequence[T]":
        """Stable sort by natural order, or by a cmp-style comparator"""
        key = None if comparator is None else functools.cmp_to_key(require_callable(comparator, "comparator"))
        return self._with_op(("sort", (key, False)))

    def sorted_on(self, key: Callable[[T], Any]) -> "FluentSequence[T]":
        return self._with_op(("sort", (require_callable(key, "key"), False)))

    def reversed(self, comparator: Callable[[T, T], int]) -> "FluentSequence[T]":
        """Stable sort in descending comparator order; ties keep their original order"""
        key = functools.cmp_to_key(require_callable(comparator, "comparator"))
        return self._with_op(("sort", (key, True)))

    def reversed_on(self, key: Callable[[T], Any]) -> "FluentSequence[T]":
        return self._with_op(("sort", (require_callable(key, "key"), True)))

    def distinct(self) -> "FluentSequence[T]":
        """Drop elements equal to an earlier one, keeping first occurrences"""
        return self._with_op(("distinct", None))

    def limit(self, limit_size: int) -> "FluentSequence[T]":
        n = require_non_negative(limit_size, "limit is negative")
        return self._with_op(("limit", n))

    def skip(self, number_to_skip: int) -> "FluentSequence[T]":
        n = require_non_negative(number_to_skip, "number to skip cannot be negative")
        return self._with_op(("skip", n))

    def substream(self, start_inclusive: int, end_exclusive: Optional[int] = None) -> "FluentSequence[T]":
        """Elements from start_inclusive up to, not including, end_exclusive"""
        start = require_non_negative(start_inclusive, "start is negative")
        end = None
        if end_exclusive is not None:
            end = require_non_negative(end_exclusive, "end is negative")
            if end < start:
                raise InvalidArgumentError(f"end {end} is before start {start}")
        return self._with_op(("slice", (start, end)))

    def concat(self, *values: T) -> "FluentSequence[T]":
        """Append values after the current elements.

        A single FluentSequence argument is appended element by element.
        """
        if len(values) == 1 and isinstance(values[0], FluentSequence):
            return self.concat_all(values[0])
        return self._with_op(("concat", values))

    def concat_all(self, values: Iterable[T]) -> "FluentSequence[T]":
        """Append every element of an iterable after the current elements"""
        return self._with_op(("concat", FluentSequence.from_iterable(values)))

    def cycle(self) -> "FluentSequence[T]":
        """Repeat the whole sequence forever. Limit it before materializing."""
        return self._with_op(("cycle", None))

    def cache(self, enabled=True) -> "FluentSequence[T]":
        """Memoize realized elements so later traversals replay them"""
        if enabled == self._cache_enabled:
            return self
        return FluentSequence(self._source, list(self._ops), enabled)

    # --------- iterator protocol ----------
    def __iter__(self) -> Iterator[T]:
        if self._cache_enabled:
            yield from self._iter_cached()
        else:
            yield from self._pipeline()

    def iterator(self) -> Iterator[T]:
        return iter(self)

    def is_replayable(self) -> bool:
        """Whether every traversal sees the full sequence"""
        if self._cache_enabled:
            return True
        if isinstance(self._source, _SinglePassSource):
            return False
        if isinstance(self._source, FluentSequence) and not self._source.is_replayable():
            return False
        return all(
            arg.is_replayable()
            for op, arg in self._ops
            if op == "concat" and isinstance(arg, FluentSequence)
        )

    # --------- terminal: materialization ----------
    def to_list(self) -> List[T]:
        return list(self)

    def to_set(self) -> Set[T]:
        return set(self)

    def to_sorted_list(self, comparator: Callable[[T, T], int]) -> List[T]:
        require_callable(comparator, "comparator")
        return sorted(self, key=functools.cmp_to_key(comparator))

    def to_sorted_set(self, comparator: Callable[[T, T], int]) -> List[T]:
        """Sorted elements with comparator-equivalent duplicates removed.

        The first occurrence of each equivalence class is kept.
        """
        result: List[T] = []
        for item in self.to_sorted_list(comparator):
            if not result or comparator(result[-1], item) != 0:
                result.append(item)
        return result

    def to_array(self, factory: Callable[[int], Any]):
        """Fill the fixed-size container returned by factory(size)"""
        require_callable(factory, "factory")
        items = self.to_list()
        array = factory(len(items))
        if array is None or len(array) != len(items):
            raise InvalidArgumentError(f"factory must return a container of size {len(items)}")
        for position, item in enumerate(items):
            array[position] = item
        return array

    def collect(self, collector: Callable[[Iterable[T]], R]) -> R:
        """Hand the elements to collector, e.g. tuple or collections.Counter"""
        return require_callable(collector, "collector")(self)

    def copy_into(self, collection):
        """Add every element to collection and return it"""
        require_not_none(collection, "collection")
        if hasattr(collection, "extend"):
            collection.extend(self)
        elif hasattr(collection, "update"):
            collection.update(self)
        elif hasattr(collection, "add"):
            for item in self:
                collection.add(item)
        else:
            raise InvalidArgumentError(f"cannot add elements to {type(collection).__name__}")
        return collection

    # --------- terminal: queries ----------
    def size(self) -> int:
        """Number of elements. Traverses the whole sequence every time."""
        return sum(1 for _ in self)

    def count(self, predicate: Callable[[T], bool]) -> int:
        require_callable(predicate, "predicate")
        return sum(1 for item in self if predicate(item))

    def is_empty(self) -> bool:
        for _ in self:
            return False
        return True

    def first(self) -> Optional[T]:
        """Return the first element, or None if empty"""
        for item in self:
            return item
        return None

    def first_match(self, predicate: Callable[[T], bool]) -> Optional[T]:
        """Return the first element that satisfies the predicate, or None"""
        require_callable(predicate, "predicate")
        for item in self:
            if predicate(item):
                return item
        return None

    def last(self) -> Optional[T]:
        """Return the last element, or None if empty"""
        last_item = None
        for item in self:
            last_item = item
        return last_item

    def get_only_element(self) -> T:
        item = self._first_or_missing()
        if item is _MISSING:
            raise EmptyResultError("get on empty sequence")
        return item

    def get(self, index: int) -> T:
        """Element at a 0-based position"""
        index = require_non_negative(index, "index is negative")
        for position, item in enumerate(self):
            if position == index:
                return item
        raise IndexOutOfRangeError(f"index {index} out of range")

    def index_of(self, element) -> int:
        for position, item in enumerate(self):
            if item == element:
                return position
        return -1

    def contains(self, element) -> bool:
        return any(item == element for item in self)

    def any_match(self, predicate: Callable[[T], bool]) -> bool:
        require_callable(predicate, "predicate")
        return any(predicate(item) for item in self)

    def all_match(self, predicate: Callable[[T], bool]) -> bool:
        require_callable(predicate, "predicate")
        return all(predicate(item) for item in self)

    def none_match(self, predicate: Callable[[T], bool]) -> bool:
        require_callable(predicate, "predicate")
        return not any(predicate(item) for item in self)

    def join(self, delimiter: str = "") -> str:
        require_not_none(delimiter, "delimiter")
        return delimiter.join(str(item) for item in self)

    # --------- terminal: reductions ----------
    def min(self, comparator: Callable[[T, T], int]) -> Optional[T]:
        """Smallest element per comparator, first one on ties; None if empty"""
        require_callable(comparator, "comparator")
        best = _MISSING
        for item in self:
            if best is _MISSING or comparator(item, best) < 0:
                best = item
        return None if best is _MISSING else best

    def max(self, comparator: Callable[[T, T], int]) -> Optional[T]:
        """Largest element per comparator, first one on ties; None if empty"""
        require_callable(comparator, "comparator")
        best = _MISSING
        for item in self:
            if best is _MISSING or comparator(item, best) > 0:
                best = item
        return None if best is _MISSING else best

    def reduce(self, accumulator: Callable[[Any, T], Any], identity=_MISSING):
        """Left fold. Without identity, folds from the first element and
        returns None for an empty sequence."""
        require_callable(accumulator, "accumulator")
        if identity is not _MISSING:
            return functools.reduce(accumulator, self, identity)
        it = iter(self)
        first = next(it, _MISSING)
        if first is _MISSING:
            return None
        return functools.reduce(accumulator, it, first)

    def sum(self, mapper: Optional[Callable[[T], Any]] = None, start=0):
        """Return the sum of all elements, optionally mapped first"""
        total = start
        for item in self:
            total += item if mapper is None else mapper(item)
        return total

    # --------- terminal: indexing ----------
    def unique_index(self, to_key: Callable[[T], K]) -> Dict[K, T]:
        """Map each derived key to its element. Keys must be unique."""
        require_callable(to_key, "to_key")
        result: Dict[K, T] = {}
        for item in self:
            key = to_key(item)
            if key in result:
                raise DuplicateKeyError(key)
            result[key] = item
        return result

    def index(self, to_key: Callable[[T], K]) -> Dict[K, List[T]]:
        """Group elements by the result of to_key, keeping their order"""
        require_callable(to_key, "to_key")
        groups: Dict[K, List[T]] = {}
        for item in self:
            groups.setdefault(to_key(item), []).append(item)
        return groups

    def to_map(self, to_value: Callable[[T], V]) -> Dict[T, V]:
        """Map each element to a derived value. Elements must be unique."""
        require_callable(to_value, "to_value")
        result: Dict[T, V] = {}
        for item in self:
            if item in result:
                raise DuplicateKeyError(item)
            result[item] = to_value(item)
        return result

    # --------- terminal: visiting ----------
    def for_each_with_index(self, consumer: Callable[[int, T], Any]):
        require_callable(consumer, "consumer")
        for position, item in enumerate(self):
            consumer(position, item)

    def for_each_ordered(self, action: Callable[[T], Any]):
        require_callable(action, "action")
        for item in self:
            action(item)

    def _first_or_missing(self):
        for item in self:
            return item
        return _MISSING

    def __repr__(self):
        ops = ", ".join(op for op, _ in self._ops)
        cached = ", cached" if self._cache_enabled else ""
        return f"FluentSequence({type(self._source).__name__}, ops=[{ops}]{cached})"

    # --------- helpers ----------
    def _with_op(self, op_tuple) -> "FluentSequence":
        if self._cache_enabled:
            # chain off the cache instead of recomputing the recipe
            return FluentSequence(self, [op_tuple])
        return FluentSequence(self._source, self._ops + [op_tuple])

    def _pipeline(self) -> Iterator:
        ops = self._ops
        cut = None
        for position in range(len(ops) - 1, -1, -1):
            if ops[position][0] == "cycle":
                cut = position
                break

        if cut is None:
            it = iter(self._source)
        else:
            upstream = FluentSequence(self._source, ops[:cut])
            it = _replay(upstream) if upstream.is_replayable() else itertools.cycle(upstream)
            ops = ops[cut + 1:]

        for op, arg in ops:
            if op == "map":
                it = _map(it, arg)
            elif op == "filter":
                it = _filter(it, arg)
            elif op == "exclude":
                it = _exclude(it, arg)
            elif op == "flat_map":
                it = _flatten(it, arg)
            elif op == "sort":
                key, reverse = arg
                it = _sort(it, key, reverse)
            elif op == "distinct":
                it = _distinct(it)
            elif op == "limit":
                it = itertools.islice(it, arg)
            elif op == "skip":
                it = itertools.islice(it, arg, None)
            elif op == "slice":
                start, end = arg
                it = itertools.islice(it, start, end)
            elif op == "concat":
                it = itertools.chain(it, arg)
            else:
                raise ValueError(f"Unknown op: {op}")
        return it

    def _iter_cached(self) -> Iterator[T]:
        position = 0
        while True:
            if position < len(self._cache):
                yield self._cache[position]
                position += 1
                continue
            if self._exhausted:
                return
            if self._failure is not None:
                raise self._failure
            if self._pending is None:
                self._pending = self._pipeline()
            try:
                item = next(self._pending, _MISSING)
            except Exception as e:
                # the pipeline is dead; later traversals fail the same way
                self._failure = e
                self._pending = None
                raise
            if item is _MISSING:
                self._exhausted = True
                self._pending = None
                logger.debug(f"Cache complete with {len(self._cache)} elements")
                return
            self._cache.append(item)
