# pipecutter ver1.0 - main entry
# - Solves one order file or every order file in a directory
# - Writes optimized_<name>.out / .err next to each input
# - Optional PDF cutting report

import argparse
import logging
import sys

from io_utils import (
    FileAccessError, discover_order_files, parse_properties, settings_from_properties
)
from pipeline import run_pipeline
from costing import compute_summary
from pdf_export import generate_pdf


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipecutter",
        description="Minimum-offcut cutting plans for pipe orders"
    )
    parser.add_argument("source", help="order file or directory of order files")
    parser.add_argument("--config", help="config.properties input")
    parser.add_argument("--pdf", dest="output_pdf", help="write a PDF cutting report to this path")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # --- CONFIG ---
    try:
        cfg = parse_properties(args.config) if args.config else {}
        settings = settings_from_properties(cfg)
    except (FileAccessError, ValueError) as e:
        print(f"\n[ERROR] Invalid configuration: {e}\n")
        return 1

    configure_logging(settings.log_level)

    # --- INPUT FILES ---
    try:
        paths = discover_order_files(args.source, settings.output_prefix, settings.overwrite)
    except FileAccessError as e:
        print(f"\n[ERROR] {e}\n")
        return 1

    if not paths:
        print(f"[WARNING] Nothing to do: no unprocessed order files in {args.source}")
        return 0

    # --- SOLVE + WRITE ---
    results = run_pipeline(paths, settings.catalog, settings.output_prefix)

    summary = compute_summary(results, settings.stock_cost, settings.currency)

    # --- PDF OUTPUT ---
    if args.output_pdf:
        generate_pdf(
            output_path=args.output_pdf,
            results=results,
            summary=summary,
            max_stock_length=settings.catalog.max_length,
            cfg=cfg
        )
        print(f"PDF saved to {args.output_pdf}")

    print(f"Success! {summary.orders_solved} order(s) solved, {summary.orders_failed} failed.")
    print(f"Offcuts: {summary.total_offcut:.2f}, Number of Cuttings: {summary.total_cuttings}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
