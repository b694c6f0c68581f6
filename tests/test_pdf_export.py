"""
pipecutter PDF report tests
===========================
"""

from costing import compute_summary
from io_utils import OrderJob
from models import Customer, Order, Pattern, Solution, StockLength
from optimizer import search
from pdf_export import generate_pdf, mm_to_pt, parse_rgb, summary_tables


def run_results():
    order = Order(Customer(42, "Max Mustermann"))
    order.add_item(1.5, 2)
    order.add_item(2.5, 1)
    return [
        (OrderJob("a.txt", order), search(order)),
        (OrderJob("b.txt", None, "No orders found"), None),
    ]


class TestHelpers:
    def test_mm_to_pt(self):
        assert round(mm_to_pt(25.4), 6) == 72.0

    def test_parse_rgb_short(self):
        c = parse_rgb("F00")
        assert (c.red, c.green, c.blue) == (1.0, 0.0, 0.0)

    def test_parse_rgb_long_with_hash(self):
        c = parse_rgb("#0000FF")
        assert (c.red, c.green, c.blue) == (0.0, 0.0, 1.0)

    def test_parse_rgb_invalid_is_black(self):
        c = parse_rgb("zzz")
        assert (c.red, c.green, c.blue) == (0.0, 0.0, 0.0)

    def test_summary_tables(self):
        summary = compute_summary(run_results(), 1.0, "EUR")
        stock_data, totals_data = summary_tables(summary)
        assert stock_data[0][0] == "Stock length"
        assert [row[0] for row in stock_data[1:]] == ["4.00", "2.00"]
        assert ["Orders failed", "1"] in totals_data
        assert totals_data[-1] == ["TOTAL", "6.00 EUR"]


class TestGeneratePdf:
    def test_writes_pdf(self, tmp_path):
        results = run_results()
        target = tmp_path / "report.pdf"
        generate_pdf(str(target), results, compute_summary(results), 5.0, {})
        assert target.read_bytes().startswith(b"%PDF")

    def test_portrait_without_summary(self, tmp_path):
        results = run_results()
        target = tmp_path / "report.pdf"
        cfg = {"generate-summary": "false", "orientation": "v", "piece-color": "00F"}
        generate_pdf(str(target), results, compute_summary(results), 5.0, cfg)
        assert target.stat().st_size > 0

    def test_many_patterns_continue_on_next_page(self, tmp_path):
        order = Order(Customer(1, "Big"))
        order.add_item(1.9, 60)
        patterns = [Pattern(StockLength(4), [StockLength(1.9), StockLength(1.9)]) for _ in range(30)]
        results = [(OrderJob("big.txt", order), Solution(order, patterns))]
        target = tmp_path / "big.pdf"
        generate_pdf(str(target), results, compute_summary(results), 5.0, {})
        assert target.read_bytes().startswith(b"%PDF")
