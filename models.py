# models.py - pipecutter ver1.0
# Data structures for stock lengths, catalog, customer orders, cutting patterns
# and solutions.

import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple


EPSILON = 1e-8


# ------------------------------
# Numeric helpers
# ------------------------------

def round5(value: float) -> float:
    """Quantize to 5 decimals (half up) to suppress floating noise."""
    return math.floor(value * 100000 + 0.5) / 100000.0


def almost_equal(a: float, b: float, epsilon: float = EPSILON) -> bool:
    return abs(a - b) <= epsilon


def fits(capacity: float, length: float) -> bool:
    """True when a piece of `length` can be cut from `capacity`."""
    return capacity > length or almost_equal(capacity, length)


# ------------------------------
# Basic Specs
# ------------------------------

@dataclass(frozen=True)
class StockLength:
    length: float

    def __post_init__(self):
        if not self.length > 0:
            raise ValueError(f"Length must be greater than 0, got {self.length}")


@dataclass(frozen=True)
class Customer:
    id: int = 0
    name: str = ""

    def __post_init__(self):
        if self.id < 0:
            raise ValueError(f"Customer id must not be negative, got {self.id}")

    def __str__(self) -> str:
        return f"Customer [id={self.id}, name={self.name}]"


class Catalog:
    """
    Immutable set of available stock lengths, longest first.
    Shared read-only by every search.
    """

    DEFAULT_LENGTHS = (2.0, 3.0, 4.0, 5.0)

    def __init__(self, lengths: Sequence[float]):
        stocks = {StockLength(float(x)) for x in lengths}
        if not stocks:
            raise ValueError("Catalog needs at least one stock length.")
        self._stocks: Tuple[StockLength, ...] = tuple(
            sorted(stocks, key=lambda s: s.length, reverse=True)
        )

    @classmethod
    def default(cls) -> "Catalog":
        return cls(cls.DEFAULT_LENGTHS)

    @property
    def stock_lengths(self) -> Tuple[StockLength, ...]:
        return self._stocks

    @property
    def max_length(self) -> float:
        return self._stocks[0].length

    def __iter__(self) -> Iterator[StockLength]:
        return iter(self._stocks)

    def __len__(self) -> int:
        return len(self._stocks)

    def __eq__(self, other) -> bool:
        return isinstance(other, Catalog) and self._stocks == other._stocks

    def __hash__(self) -> int:
        return hash(self._stocks)

    def __repr__(self) -> str:
        return f"Catalog({[s.length for s in self._stocks]})"


# ------------------------------
# Demand
# ------------------------------

@dataclass
class DemandItem:
    piece: StockLength
    quantity: int

    @property
    def length(self) -> float:
        return self.piece.length


class Order:
    """
    A customer's demand. Items are unique by length; adding an existing
    length accumulates its quantity.
    """

    def __init__(self, customer: Optional[Customer] = None,
                 items: Sequence[DemandItem] = ()):
        self.customer = customer if customer is not None else Customer()
        self._items: List[DemandItem] = []
        for it in items:
            self.add_item(it.length, it.quantity)

    @property
    def items(self) -> Tuple[DemandItem, ...]:
        return tuple(self._items)

    def add_item(self, length: float, quantity: int) -> None:
        piece = StockLength(float(length))
        if quantity <= 0:
            raise ValueError(f"Quantity must be positive, got {quantity}")

        for it in self._items:
            if it.piece.length == piece.length:
                it.quantity += quantity
                return
        self._items.append(DemandItem(piece=piece, quantity=quantity))

    def expand_to_pieces(self) -> List[StockLength]:
        """One StockLength per unit of quantity, longest first."""
        pieces: List[StockLength] = []
        for it in self._items:
            pieces.extend([it.piece] * it.quantity)
        pieces.sort(key=lambda p: p.length, reverse=True)
        return pieces

    def total_length(self) -> float:
        return sum(it.length * it.quantity for it in self._items)

    def is_empty(self) -> bool:
        return not self._items

    def copy(self) -> "Order":
        return Order(self.customer, [DemandItem(it.piece, it.quantity) for it in self._items])

    def __eq__(self, other) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return (self.customer == other.customer
                and self.expand_to_pieces() == other.expand_to_pieces())

    def __repr__(self) -> str:
        items = ", ".join(f"{it.quantity}*{it.length}" for it in self._items)
        return f"Order({self.customer}, [{items}])"


# ------------------------------
# Cutting patterns
# ------------------------------

class Pattern:
    """
    One stock piece and the demand pieces cut from it.
    """

    def __init__(self, source: StockLength, pieces: Sequence[StockLength] = ()):
        self.source = source
        self.pieces: List[StockLength] = list(pieces)

    @property
    def offcut(self) -> float:
        return round5(self.source.length - sum(p.length for p in self.pieces))

    @property
    def piece_count(self) -> int:
        # An exact fit leaves no offcut, so its last piece needs no cut.
        if self.offcut > 0:
            return len(self.pieces)
        return max(0, len(self.pieces) - 1)

    def add_piece(self, piece: StockLength) -> None:
        self.pieces.append(piece)

    def sort_pieces(self) -> None:
        self.pieces.sort(key=lambda p: p.length, reverse=True)

    def copy(self) -> "Pattern":
        return Pattern(self.source, self.pieces)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Pattern):
            return NotImplemented
        return (self.source == other.source
                and sorted(p.length for p in self.pieces) == sorted(p.length for p in other.pieces))

    def __repr__(self) -> str:
        return f"Pattern({self.source.length} -> {[p.length for p in self.pieces]})"


def sum_offcuts(patterns: Sequence[Pattern]) -> float:
    return round5(sum(p.offcut for p in patterns))


def sum_piece_counts(patterns: Sequence[Pattern]) -> int:
    return sum(p.piece_count for p in patterns)


def presentation_key(p: Pattern):
    """Ascending offcut, then longer stock first, then more pieces first."""
    return (p.offcut, -p.source.length, -p.piece_count)


# ------------------------------
# Solution
# ------------------------------

@dataclass
class Solution:
    order: Order
    patterns: List[Pattern] = field(default_factory=list)

    def __post_init__(self):
        self.order = self.order.copy()
        copied = []
        for p in self.patterns:
            c = p.copy()
            c.sort_pieces()
            copied.append(c)
        copied.sort(key=presentation_key)
        self.patterns = copied

    @property
    def total_offcut(self) -> float:
        return sum_offcuts(self.patterns)

    @property
    def total_pieces(self) -> int:
        return sum_piece_counts(self.patterns)

    def has_same_quality(self, other: "Solution") -> bool:
        return (self.total_offcut == other.total_offcut
                and self.total_pieces == other.total_pieces)

    def __len__(self) -> int:
        return len(self.patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)
