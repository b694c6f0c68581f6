# costing.py - pipecutter ver1.0
#
# Aggregates the solved orders of one run: stock pieces consumed per catalog
# length, offcut and cutting totals, material cost.
# Currency formatting is done in pdf_export.py, but numeric totals are prepared here.

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from io_utils import OrderJob
from models import Solution, StockLength, round5


# -------------------------------------------------------------
# Data structures
# -------------------------------------------------------------

@dataclass
class StockUsageSummary:
    stock: StockLength
    pieces_used: int = 0
    total_length: float = 0.0     # pieces_used * stock length
    total_offcut: float = 0.0
    cost: float = 0.0             # total_length * cost per length unit


@dataclass
class GlobalSummary:
    stock_usages: Dict[float, StockUsageSummary] = field(default_factory=dict)

    orders_solved: int = 0
    orders_failed: int = 0

    total_demand_length: float = 0.0
    total_stock_length: float = 0.0
    total_offcut: float = 0.0
    total_cuttings: int = 0

    grand_total_cost: float = 0.0
    currency: str = ""

    @property
    def utilization_percent(self) -> float:
        if self.total_stock_length <= 0:
            return 0.0
        return self.total_demand_length / self.total_stock_length * 100


# -------------------------------------------------------------
# Main summary computation
# -------------------------------------------------------------

def compute_summary(
    results: Sequence[Tuple[OrderJob, Optional[Solution]]],
    stock_cost_per_unit: float = 0.0,
    currency: str = ""
) -> GlobalSummary:

    summary = GlobalSummary(currency=currency)

    for job, solution in results:
        if not solution:
            summary.orders_failed += 1
            continue
        summary.orders_solved += 1
        summary.total_demand_length += solution.order.total_length()
        summary.total_cuttings += solution.total_pieces

        for p in solution.patterns:
            su = summary.stock_usages.get(p.source.length)
            if su is None:
                su = StockUsageSummary(stock=p.source)
                summary.stock_usages[p.source.length] = su
            su.pieces_used += 1
            su.total_length += p.source.length
            su.total_offcut = round5(su.total_offcut + p.offcut)

    # --- COST ---
    for su in summary.stock_usages.values():
        su.cost = su.total_length * stock_cost_per_unit
        summary.total_stock_length += su.total_length
        summary.grand_total_cost += su.cost

    summary.total_offcut = round5(sum(su.total_offcut for su in summary.stock_usages.values()))
    summary.total_demand_length = round5(summary.total_demand_length)

    # longest stock first, as the catalog lists them
    summary.stock_usages = dict(
        sorted(summary.stock_usages.items(), key=lambda kv: kv[0], reverse=True)
    )
    return summary
