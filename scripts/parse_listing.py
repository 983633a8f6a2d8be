"""Offline check of the listing match against a saved page dump.

Usage:
    python scripts/parse_listing.py artifacts/20260211_101500_42.html --tax-id 900123456
    python scripts/parse_listing.py listado.html --company "ACME LOGISTICA"

Exit codes: 0 match found, 1 no match, 2 no rows parsed, 3 file missing.
"""
# ruff: noqa: E402
import argparse
import sys
from pathlib import Path

project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from src.core.listing import match_row, parse_listing_html


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("path", type=str)
    parser.add_argument("--tax-id", type=str, default="")
    parser.add_argument("--company", type=str, default="")
    args = parser.parse_args()

    path = Path(args.path)
    if not path.exists():
        print(f"File not found: {path}")
        return 3

    rows = parse_listing_html(path.read_text(encoding="utf-8"))
    print(f"Rows parsed: {len(rows)}")
    for i, row in enumerate(rows):
        print(f"[{i}] ticket={row.ticket} tax_id={row.tax_id} company={row.company}")
    if not rows:
        return 2

    match = match_row(rows, args.tax_id, args.company)
    if match is None:
        print(f"No match (would fall back to first row: {rows[0].ticket})")
        return 1
    print(f"MATCH by {match.strategy} => {match.ticket}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
