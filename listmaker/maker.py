"""
ListMaker: an iterable wrapper with lookup-style helpers.

Filters and projections return new ListMakers over lazy FluentSequence views.
Lookups raise EmptyResultError instead of returning None, and sorting produces
an eager, stable copy.
"""

from typing import Any, Callable, Dict, FrozenSet, Generic, Iterable, Iterator, List, Optional, Set, Tuple, TypeVar

from .fluent import FluentSequence
from .utils import EmptyResultError, InvalidArgumentError, require_callable, require_not_none

T = TypeVar("T")
R = TypeVar("R")
K = TypeVar("K")


def ALWAYS_TRUE(_value) -> bool:
    return True


def _natural(left, right) -> int:
    return (left > right) - (left < right)


def _where_equals(transform: Callable, *values) -> Callable[[Any], bool]:
    require_callable(transform, "transform")
    return lambda item: any(transform(item) == value for value in values)


def _compose(predicate: Callable, transform: Callable) -> Callable[[Any], bool]:
    require_callable(predicate, "predicate")
    require_callable(transform, "transform")
    return lambda item: predicate(transform(item))


class ListMaker(Generic[T]):
    """Wraps an iterable; wrapping a ListMaker again returns it unchanged."""

    def __init__(self, values: Iterable[T]):
        self.values = FluentSequence.from_iterable(values)

    @classmethod
    def wrap(cls, values: Iterable[T]) -> "ListMaker[T]":
        require_not_none(values, "values")
        if isinstance(values, ListMaker):
            return values
        return cls(values)

    @classmethod
    def of(cls, *values: T) -> "ListMaker[T]":
        return cls(list(values))

    # ---------- filtering ----------
    def only(self, predicate: Callable[[T], bool]) -> "ListMaker[T]":
        if predicate is ALWAYS_TRUE:
            return self
        return ListMaker(self.values.filter(predicate))

    def only_where(self, transform: Callable[[T], Any], *values) -> "ListMaker[T]":
        """Keep elements whose transform result equals one of values"""
        return self.only(_where_equals(transform, *values))

    def only_if(self, transform: Callable[[T], R], predicate: Callable[[R], bool]) -> "ListMaker[T]":
        return self.only(_compose(predicate, transform))

    def exclude(self, predicate: Callable[[T], bool]) -> "ListMaker[T]":
        return ListMaker(self.values.exclude(predicate))

    def exclude_type(self, cls) -> "ListMaker[T]":
        require_not_none(cls, "cls")
        return self.exclude(lambda item: isinstance(item, cls))

    def exclude_values(self, *values: T) -> "ListMaker[T]":
        return self.exclude_all(list(values))

    def exclude_all(self, values: Iterable[T]) -> "ListMaker[T]":
        require_not_none(values, "values")
        excluded = list(values)
        return self.exclude(lambda item: item in excluded)

    def exclude_if(self, transform: Callable[[T], R], predicate: Callable[[R], bool]) -> "ListMaker[T]":
        return self.exclude(_compose(predicate, transform))

    def not_nulls(self) -> "ListMaker[T]":
        return ListMaker(self.values.not_nulls())

    # ---------- lookups ----------
    def first(self, predicate: Optional[Callable[[T], bool]] = None) -> T:
        """First element, or first match of predicate; raises EmptyResultError if none"""
        candidates = self.values if predicate is None else self.values.filter(predicate)
        for item in candidates:
            return item
        raise EmptyResultError("no element found" if predicate is None else "no element matches")

    def first_where(self, transform: Callable[[T], Any], value) -> T:
        return self.first(_where_equals(transform, value))

    def first_or_default(self, default: T, predicate: Optional[Callable[[T], bool]] = None) -> T:
        try:
            return self.first(predicate)
        except EmptyResultError:
            return default

    def first_or_default_where(self, transform: Callable[[T], Any], value, default: T) -> T:
        return self.first_or_default(default, _where_equals(transform, value))

    def get_last(self) -> T:
        missing = object()
        last = missing
        for item in self.values:
            last = item
        if last is missing:
            raise EmptyResultError("no last element in an empty list")
        return last

    # ---------- queries ----------
    def contains(self, predicate: Callable[[T], bool]) -> bool:
        return self.values.any_match(predicate)

    def contains_where(self, transform: Callable[[T], Any], value) -> bool:
        return self.contains(_where_equals(transform, value))

    def count(self, predicate: Callable[[T], bool]) -> int:
        return self.only(predicate).size()

    def count_where(self, transform: Callable[[T], Any], value) -> int:
        return self.count(_where_equals(transform, value))

    def size(self) -> int:
        return self.values.size()

    def is_empty(self) -> bool:
        return self.values.is_empty()

    # ---------- ordering ----------
    def sort_on(self, key: Callable[[T], Any]) -> "ListMaker[T]":
        require_callable(key, "key")
        return ListMaker(sorted(self.values, key=key))

    def sort_with(self, comparator: Callable[[T, T], int]) -> "ListMaker[T]":
        return ListMaker(self.values.to_sorted_list(comparator))

    def max(self, comparator: Callable[[T, T], int]) -> T:
        return self._extreme(comparator, 1)

    def min(self, comparator: Callable[[T, T], int]) -> T:
        return self._extreme(comparator, -1)

    def max_on_result_of(self, function: Callable[[T], Any]) -> T:
        require_callable(function, "function")
        return self.max(lambda left, right: _natural(function(left), function(right)))

    def min_on_result_of(self, function: Callable[[T], Any]) -> T:
        require_callable(function, "function")
        return self.min(lambda left, right: _natural(function(left), function(right)))

    def _extreme(self, comparator, sign: int):
        require_callable(comparator, "comparator")
        missing = object()
        best = missing
        for item in self.values:
            if best is missing or sign * comparator(item, best) > 0:
                best = item
        if best is missing:
            raise EmptyResultError("no extreme element in an empty list")
        return best

    # ---------- projection ----------
    def to(self, transform: Callable[[T], R]) -> "ListMaker[R]":
        return ListMaker(self.values.map(transform))

    def flat_map(self, transform: Callable[[T], Iterable[R]]) -> "ListMaker[R]":
        return ListMaker(self.values.flat_map(transform))

    # ---------- materialization ----------
    def to_list(self) -> List[T]:
        return self.values.to_list()

    def to_tuple(self) -> Tuple[T, ...]:
        return tuple(self.values)

    def to_set(self, transform: Optional[Callable[[T], R]] = None) -> Set:
        if transform is None:
            return self.values.to_set()
        return self.values.map(transform).to_set()

    def to_frozenset(self) -> FrozenSet[T]:
        return frozenset(self.values)

    def to_tree_set(self, comparator: Optional[Callable] = None, transform: Optional[Callable] = None) -> List:
        """Sorted list without duplicates, by natural order unless a comparator is given"""
        source = self.values if transform is None else self.values.map(transform)
        return source.to_sorted_set(comparator or _natural)

    def to_array(self, factory: Callable[[int], Any]):
        return self.values.to_array(factory)

    def join(self, separator: str) -> str:
        """Join string forms of the elements; None elements are rejected"""
        require_not_none(separator, "separator")
        parts = []
        for item in self.values:
            if item is None:
                raise InvalidArgumentError("cannot join a None element")
            parts.append(str(item))
        return separator.join(parts)

    def index_by(self, to_key: Callable[[T], K]) -> Dict[K, T]:
        """Map each key to its element; later elements overwrite earlier ones"""
        require_callable(to_key, "to_key")
        return {to_key(item): item for item in self.values}

    # ---------- value semantics ----------
    def __iter__(self) -> Iterator[T]:
        return iter(self.values)

    def __eq__(self, other):
        if self is other:
            return True
        if not hasattr(other, "__iter__") or isinstance(other, (str, bytes)):
            return NotImplemented
        return list(self.values) == list(other)

    def __hash__(self):
        return hash(tuple(self.values))

    def __repr__(self):
        return repr(self.values.to_list())
