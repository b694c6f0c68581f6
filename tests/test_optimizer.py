"""
pipecutter search engine tests
==============================
Reference scenarios, plan invariants and the comparison / pruning policy.
"""

import pytest

from models import Catalog, Customer, Order, Pattern, StockLength
from optimizer import (
    BestPlan, MinOffcutOptimizer, is_better, potential_better, search
)


def make_order(*items, customer=None):
    order = Order(customer or Customer(7, "Test Customer"))
    for qty, length in items:
        order.add_item(length, qty)
    return order


def pattern(stock, *pieces):
    return Pattern(StockLength(stock), [StockLength(p) for p in pieces])


def best_plan(offcut, piece_count):
    best = BestPlan()
    best.patterns = []
    best.offcut = offcut
    best.piece_count = piece_count
    return best


def layout(solution):
    return [(p.source.length, [x.length for x in p.pieces], p.offcut) for p in solution.patterns]


SATISFIABLE_ORDERS = [
    ((2, 1.5), (1, 2.5)),
    ((3, 1.0), (1, 2.0)),
    ((2, 2.2), (2, 0.8)),
    ((1, 4.5), (2, 0.5)),
    ((1, 5.0),),
    ((3, 1.7),),
]


# ══════════════════════════════════════════════════════════════
# REFERENCE SCENARIOS
# ══════════════════════════════════════════════════════════════

class TestScenarios:
    def test_unsatisfiable_piece_longer_than_stock(self):
        assert search(make_order((1, 7.0))) is None

    def test_unsatisfiable_even_with_other_pieces(self):
        assert search(make_order((2, 1.0), (1, 5.5))) is None

    def test_exact_fit(self):
        sol = search(make_order((2, 3.0)))
        assert layout(sol) == [(3.0, [3.0], 0.0), (3.0, [3.0], 0.0)]
        assert sol.total_offcut == 0.0
        assert sol.total_pieces == 0

    def test_mixed(self):
        sol = search(make_order((2, 1.5), (1, 2.5)))
        assert sol.total_offcut == 0.5
        assert layout(sol) == [(4.0, [2.5, 1.5], 0.0), (2.0, [1.5], 0.5)]
        assert sol.total_pieces == 2

    def test_empty_order_gives_empty_solution(self):
        sol = search(make_order())
        assert sol is not None
        assert not sol
        assert sol.total_offcut == 0.0

    def test_piece_equal_to_longest_stock(self):
        sol = search(make_order((1, 5.0)))
        assert layout(sol) == [(5.0, [5.0], 0.0)]

    def test_solution_keeps_order(self):
        order = make_order((2, 3.0))
        assert search(order).order == order


# ══════════════════════════════════════════════════════════════
# PLAN INVARIANTS
# ══════════════════════════════════════════════════════════════

class TestInvariants:
    @pytest.mark.parametrize("items", SATISFIABLE_ORDERS)
    def test_coverage(self, items):
        order = make_order(*items)
        sol = search(order)
        assert sol
        placed = sorted(x.length for p in sol.patterns for x in p.pieces)
        assert placed == sorted(p.length for p in order.expand_to_pieces())

    @pytest.mark.parametrize("items", SATISFIABLE_ORDERS)
    def test_conservation(self, items):
        sol = search(make_order(*items))
        for p in sol.patterns:
            used = sum(x.length for x in p.pieces)
            assert abs(used + p.offcut - p.source.length) <= 1e-5

    @pytest.mark.parametrize("items", SATISFIABLE_ORDERS)
    def test_non_negative_offcuts(self, items):
        sol = search(make_order(*items))
        assert all(p.offcut >= -1e-8 for p in sol.patterns)
        assert sol.total_offcut >= -1e-8

    @pytest.mark.parametrize("items", SATISFIABLE_ORDERS)
    def test_determinism(self, items):
        first = search(make_order(*items))
        second = search(make_order(*items))
        assert layout(first) == layout(second)
        assert first.total_offcut == second.total_offcut
        assert first.total_pieces == second.total_pieces

    def test_deep_exact_fit_order(self):
        sol = search(make_order((500, 5.0)))
        assert len(sol.patterns) == 500
        assert all(layout_row == (5.0, [5.0], 0.0) for layout_row in layout(sol))
        assert sol.total_offcut == 0.0

    def test_patterns_use_catalog_lengths(self):
        catalog = Catalog([2, 3, 4, 5])
        sol = search(make_order((2, 2.2), (2, 0.8)), catalog)
        assert {p.source for p in sol.patterns} <= set(catalog.stock_lengths)


# ══════════════════════════════════════════════════════════════
# CATALOG INJECTION
# ══════════════════════════════════════════════════════════════

class TestCatalogInjection:
    def test_default_catalog(self):
        assert MinOffcutOptimizer().catalog == Catalog.default()

    def test_single_long_stock_combines_pieces(self):
        sol = search(make_order((2, 3.0)), Catalog([6]))
        assert layout(sol) == [(6.0, [3.0, 3.0], 0.0)]
        assert sol.total_pieces == 1

    def test_custom_catalog_unsatisfiable(self):
        assert search(make_order((1, 2.5)), Catalog([2])) is None

    def test_optimizer_is_reusable(self):
        optimizer = MinOffcutOptimizer(Catalog.default())
        a = optimizer.solve(make_order((2, 3.0)))
        b = optimizer.solve(make_order((2, 1.5), (1, 2.5)))
        assert a.total_offcut == 0.0
        assert b.total_offcut == 0.5


# ══════════════════════════════════════════════════════════════
# COMPARISON POLICY
# ══════════════════════════════════════════════════════════════

class TestIsBetter:
    def test_nothing_found_yet(self):
        assert is_better(None, 5.0, 9)
        assert is_better(BestPlan(), 5.0, 9)

    def test_less_offcut_wins_regardless_of_pieces(self):
        assert is_better(best_plan(0.5, 2), 0.4, 10)

    def test_equal_offcut_fewer_pieces(self):
        assert is_better(best_plan(0.5, 2), 0.5, 1)

    def test_equal_offcut_within_tolerance(self):
        assert is_better(best_plan(0.5, 2), 0.50005, 1)

    def test_tie_keeps_best(self):
        assert not is_better(best_plan(0.5, 2), 0.5, 2)

    def test_more_offcut_loses(self):
        assert not is_better(best_plan(0.5, 2), 0.6, 0)

    def test_offer_replaces_only_when_better(self):
        best = BestPlan()
        assert best.offer([pattern(3, 2.5), pattern(3, 1.5, 1.5)])
        assert (best.offcut, best.piece_count) == (0.5, 2)
        assert not best.offer([pattern(4, 2.5, 1.5), pattern(2, 1.5)])
        assert best.offer([pattern(4, 2.5, 1.5), pattern(2, 1.0, 1.0)])
        assert best.offcut == 0.0


class TestPotentialBetter:
    def test_nothing_found_yet(self):
        assert potential_better(None, [pattern(5, 1.0)], 4.0)
        assert potential_better(BestPlan(), [pattern(5, 1.0)], 4.0)

    def test_no_partial_patterns(self):
        assert potential_better(best_plan(0.0, 0), None, -1.0)
        assert potential_better(best_plan(0.0, 0), [], -1.0)

    def test_closed_offcut_below_best(self):
        # open pattern slack 1.5 is part of the 1.5 partial offcut
        assert potential_better(best_plan(0.5, 2), [pattern(4, 2.5)], 1.5)

    def test_closed_offcut_above_best_is_pruned(self):
        partial = [pattern(5, 2.5), pattern(5, 1.5)]
        assert not potential_better(best_plan(1.5, 3), partial, 3.5)

    def test_exact_fit_near_best_with_fewer_pieces(self):
        partial = [pattern(2, 1.5), pattern(3, 3.0)]
        assert potential_better(best_plan(0.45, 3), partial, 0.0)

    def test_exact_fit_near_best_without_fewer_pieces(self):
        partial = [pattern(2, 1.5), pattern(3, 3.0)]
        assert not potential_better(best_plan(0.45, 1), partial, 0.0)

    def test_exact_fit_too_far_from_best(self):
        partial = [pattern(2, 1.5), pattern(3, 3.0)]
        assert not potential_better(best_plan(0.0, 3), partial, 0.0)
