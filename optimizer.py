# optimizer.py - pipecutter ver1.0
#
# Minimum-offcut search. Every demand piece is either cut from the pattern
# opened last (if it still fits) or from a new stock piece out of the catalog.
# All branches are explored depth first; a branch is skipped when it cannot
# beat the best complete plan found so far.

import logging
import sys
import time
from typing import List, Optional, Sequence

from models import (
    Catalog, Order, Pattern, Solution, StockLength,
    fits, sum_offcuts, sum_piece_counts
)

logger = logging.getLogger(__name__)

# interpreter frames needed per demand piece on the deepest branch
FRAMES_PER_PIECE = 4
FRAME_HEADROOM = 1000

# slack value used while no pattern is open yet
NO_OPEN_PATTERN = -1.0

SAME_OFFCUT_TOLERANCE = 1e-4
EXACT_FIT_TOLERANCE = 1e-7
NEAR_OFFCUT_TOLERANCE = 0.1


# -------------------------------------------------------------
# Comparison / pruning policy
# -------------------------------------------------------------

class BestPlan:
    """Best complete assignment found so far; shared by the whole search tree."""

    def __init__(self):
        self.patterns: Optional[List[Pattern]] = None
        self.offcut: float = 0.0
        self.piece_count: int = 0

    @property
    def found(self) -> bool:
        return self.patterns is not None

    def offer(self, patterns: List[Pattern]) -> bool:
        offcut = sum_offcuts(patterns)
        piece_count = sum_piece_counts(patterns)
        if not is_better(self, offcut, piece_count):
            return False
        self.patterns = patterns
        self.offcut = offcut
        self.piece_count = piece_count
        return True


def is_better(best: Optional[BestPlan], offcut: float, piece_count: int) -> bool:
    """
    True when a complete plan with these totals should replace `best`:
    equal offcut (within 1e-4) with fewer pieces, or strictly less offcut.
    """
    if best is None or not best.found:
        return True
    better = abs(offcut - best.offcut) <= SAME_OFFCUT_TOLERANCE
    better = better and piece_count < best.piece_count
    return better or offcut < best.offcut


def potential_better(best: Optional[BestPlan],
                     patterns: Optional[Sequence[Pattern]],
                     slack: float) -> bool:
    """
    Pruning gate evaluated before descending into a branch.

    `slack` is the unused length of the open pattern, already included in
    the offcut of `patterns`. These thresholds are tuned cutoffs, not a
    lower bound: the search may miss the optimum on some inputs.
    """
    if best is None or not best.found or not patterns:
        return True
    offcut = sum_offcuts(patterns)
    potential = sum_piece_counts(patterns) < best.piece_count
    potential = potential and abs(slack) < EXACT_FIT_TOLERANCE
    potential = potential and abs(offcut - best.offcut) <= NEAR_OFFCUT_TOLERANCE
    return potential or offcut - best.offcut < slack


# -------------------------------------------------------------
# Branch helpers
# -------------------------------------------------------------

def _copy_patterns(patterns: Optional[Sequence[Pattern]]) -> List[Pattern]:
    if not patterns:
        return []
    return [p.copy() for p in patterns]


def _extend_open_pattern(patterns: Sequence[Pattern], piece: StockLength) -> List[Pattern]:
    updated = _copy_patterns(patterns)
    updated[-1].add_piece(piece)
    return updated


def _open_new_pattern(patterns: Optional[Sequence[Pattern]],
                      piece: StockLength, stock: StockLength) -> List[Pattern]:
    updated = _copy_patterns(patterns)
    updated.append(Pattern(stock, [piece]))
    return updated


def _without(pieces: Sequence[StockLength], index: int) -> List[StockLength]:
    return list(pieces[:index]) + list(pieces[index + 1:])


def _distinct_choices(pieces: Sequence[StockLength]):
    """(index, piece) for the first piece of every distinct length."""
    seen = set()
    for idx, p in enumerate(pieces):
        if p.length in seen:
            continue
        seen.add(p.length)
        yield idx, p


# -------------------------------------------------------------
# Search engine
# -------------------------------------------------------------

def _ensure_recursion_depth(piece_count: int) -> None:
    """Every piece adds a level to the search, so deep orders need a higher limit."""
    needed = FRAMES_PER_PIECE * piece_count + FRAME_HEADROOM
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


class MinOffcutOptimizer:
    """
    Exhaustive branch-and-bound search for the cutting plan with the least
    offcut, then the fewest cuttings. Holds only the injected catalog, so
    one instance can serve concurrent callers.
    """

    def __init__(self, catalog: Optional[Catalog] = None):
        self.catalog = catalog if catalog is not None else Catalog.default()

    def solve(self, order: Order) -> Optional[Solution]:
        """
        Returns the best Solution for `order`, an empty Solution when the
        order has no demand, or None when no catalog length can hold
        one of its pieces.
        """
        start_time = time.time()
        logger.info("Started the optimization of %s", order.customer)

        pieces = order.expand_to_pieces()
        _ensure_recursion_depth(len(pieces))
        best = BestPlan()
        self._compute_offcuts(pieces, best, None, NO_OPEN_PATTERN)

        elapsed_ms = (time.time() - start_time) * 1000
        if not best.found:
            logger.info("No feasible cutting plan for %s (%.0f ms)", order.customer, elapsed_ms)
            return None

        solution = Solution(order, best.patterns)
        logger.info(
            "Finished the optimization of %s in %.0f ms: offcuts=%.2f, cuttings=%d",
            order.customer, elapsed_ms, solution.total_offcut, solution.total_pieces
        )
        return solution

    def _compute_offcuts(self, remaining: List[StockLength], best: BestPlan,
                         patterns: Optional[List[Pattern]], slack: float) -> None:
        if not remaining:
            best.offer(patterns or [])
            return
        if potential_better(best, patterns, slack):
            self._explore_remaining_limb(remaining, best, patterns, slack)

    def _explore_remaining_limb(self, remaining: List[StockLength], best: BestPlan,
                                patterns: Optional[List[Pattern]], slack: float) -> None:
        for idx, piece in _distinct_choices(remaining):
            rest = _without(remaining, idx)

            # continue the pattern opened last
            if patterns and fits(slack, piece.length):
                self._compute_offcuts(
                    rest, best,
                    _extend_open_pattern(patterns, piece),
                    slack - piece.length
                )

            # open a new pattern from every stock length that holds the piece
            for stock in self.catalog.stock_lengths:
                if fits(stock.length, piece.length):
                    self._compute_offcuts(
                        rest, best,
                        _open_new_pattern(patterns, piece, stock),
                        stock.length - piece.length
                    )


def search(order: Order, catalog: Optional[Catalog] = None) -> Optional[Solution]:
    """Solve a single order against `catalog` (default {2, 3, 4, 5})."""
    return MinOffcutOptimizer(catalog).solve(order)
