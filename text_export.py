# text_export.py - pipecutter ver1.0
#
# Plain text rendering of orders and cutting plans, and the .out / .err
# sidecar files written next to each input.

import os
from typing import List, Optional

from io_utils import DEFAULT_OUTPUT_PREFIX, OrderJob, output_path
from models import Order, Pattern, Solution

ITEMS_PER_LINE = 10


def fmt(value: float) -> str:
    return f"{value:.2f}"


def format_order(order: Order) -> str:
    lines = [str(order.customer)]
    if order.is_empty():
        lines.append("No Items ordered!")
        return "\n".join(lines)

    tokens = [f"{it.quantity}*{fmt(it.length)};" for it in order.items]
    for i in range(0, len(tokens), ITEMS_PER_LINE):
        lines.append(" ".join(tokens[i:i + ITEMS_PER_LINE]))
    return "\n".join(lines)


def format_pattern(pattern: Pattern) -> str:
    if pattern.pieces:
        cuts = "; ".join(fmt(p.length) for p in pattern.pieces)
    else:
        cuts = "No cuts"
    return f"{fmt(pattern.source.length)} -> {cuts} Offcuts: {fmt(pattern.offcut)}"


def format_solution(solution: Solution) -> str:
    lines: List[str] = [format_order(solution.order), ""]
    lines.extend(format_pattern(p) for p in solution.patterns)
    lines.append("")
    lines.append(f"Offcuts: {fmt(solution.total_offcut)}")
    lines.append(f"Number of Cuttings: {solution.total_pieces}")
    return "\n".join(lines) + "\n"


def failure_message(job: OrderJob, solution: Optional[Solution]) -> Optional[str]:
    """Diagnostic for a job that gets an .err file, None when it succeeded."""
    if job.order is None:
        return job.error or "no information to read found"
    if solution is None:
        return (
            "No feasible cutting plan: a piece is longer than every stock length "
            f"(longest demand piece {fmt(max(it.length for it in job.order.items))})"
        )
    if not solution.patterns:
        return "No Items ordered!"
    return None


def write_result(job: OrderJob, solution: Optional[Solution],
                 prefix: str = DEFAULT_OUTPUT_PREFIX) -> str:
    """
    Writes <prefix><stem>.out on success or <prefix><stem>.err otherwise.
    Returns the written path. OSError propagates.
    """
    error = failure_message(job, solution)
    target = output_path(job.path, failed=error is not None, prefix=prefix)

    text = format_solution(solution) if error is None else error + "\n"
    with open(target, "w", encoding="utf-8") as f:
        f.write(text)

    # a stale sidecar of the other kind would be picked up as current
    stale = output_path(job.path, failed=error is None, prefix=prefix)
    if os.path.isfile(stale):
        os.remove(stale)
    return target
