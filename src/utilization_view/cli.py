#!/usr/bin/env python3
"""
Authorization Utilization Overview CLI

Prints portfolio statistics and the visible authorization lines of a
snapshot, optionally filtered to overused lines, sorted, and with the
selection exported to CSV.

Usage:
    python -m utilization_view.cli snapshot.json
    python -m utilization_view.cli snapshot.json --overused-only --sort overage
    python -m utilization_view.cli snapshot.json --select-all --csv selection.csv
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from utilization_core import (
    DuplicatePolicy,
    FilterMode,
    OverviewConfig,
    OverviewSession,
    RecordValidationError,
    SortMode,
    build_selection_csv,
    load_snapshot,
)

from .semantics import format_amount, format_percent, get_severity_badge_text

logger = logging.getLogger(__name__)

SORT_CHOICES = {
    'input': SortMode.INPUT_ORDER,
    'authorized': SortMode.AUTHORIZED_AMOUNT_DESC,
    'overage': SortMode.OVERAGE_DESC,
}


def render_view_model(view_model) -> List[str]:
    """Text lines for a ViewModel (or the empty variant)."""
    if view_model.is_empty:
        return ["No authorization lines to display."]

    currency = view_model.currency_code
    agg = view_model.aggregate
    lines = [
        f"Accounts:          {agg.total_accounts}",
        f"Total authorized:  {format_amount(agg.total_authorized, currency)}",
        f"Total used:        {format_amount(agg.total_used, currency)}",
        f"Utilization rate:  {format_percent(agg.utilization_rate_percent)}",
        f"Overused lines:    {agg.overused_count}",
        "",
        f"Showing {view_model.visible_count} of {view_model.total_count} line(s)",
    ]

    for row in view_model.rows:
        record = row.record
        mark = "[x]" if row.is_selected else "[ ]"
        lines.append(
            f"{mark} {record.account_number}/{record.authorization_number}  "
            f"auth {format_amount(record.authorized_amount, record.currency_code or currency)}  "
            f"used {format_amount(record.used_amount, record.currency_code or currency)}  "
            f"over {format_amount(record.overage_amount, record.currency_code or currency)} "
            f"({format_percent(row.overage_percent)})  "
            f"{get_severity_badge_text(row.severity)}"
        )

    totals = view_model.selection_totals
    if totals.count:
        lines.extend([
            "",
            f"Selected: {totals.count} line(s), "
            f"authorized {format_amount(totals.total_authorized, currency)}, "
            f"used {format_amount(totals.total_used, currency)}, "
            f"overage {format_amount(totals.total_overage, currency)}",
        ])
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Review credit-authorization utilization for a client snapshot',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Everything, in delivery order
  utilization-overview snapshot.json

  # Overused lines, largest overage first
  utilization-overview snapshot.json --overused-only --sort overage

  # Export every visible line
  utilization-overview snapshot.json --overused-only --select-all --csv out.csv
""",
    )
    parser.add_argument('snapshot', type=Path, help='Snapshot JSON file')
    parser.add_argument('--overused-only', action='store_true',
                        help='Show only lines with a positive overage')
    parser.add_argument('--sort', choices=sorted(SORT_CHOICES), default='input',
                        help='Sort order (default: input)')
    parser.add_argument('--select-all', action='store_true',
                        help='Select every visible line')
    parser.add_argument('--csv', type=Path, metavar='OUT',
                        help='Write the selected visible lines to a CSV file')
    parser.add_argument('--keep-first', action='store_true',
                        help='Keep the first of duplicate account/authorization pairs '
                             'instead of failing')
    parser.add_argument('--currency', default=None,
                        help='Fallback currency code (default: MAD)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    config = OverviewConfig.from_mapping({
        'default_currency': args.currency,
        'duplicate_policy': DuplicatePolicy.KEEP_FIRST if args.keep_first else DuplicatePolicy.REJECT,
    })

    try:
        snapshot = load_snapshot(args.snapshot, policy=config.duplicate_policy)
    except FileNotFoundError:
        print(f"Error: snapshot not found: {args.snapshot}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Error: cannot read snapshot {args.snapshot}: {e.strerror or e}", file=sys.stderr)
        return 2
    except RecordValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    session = OverviewSession(snapshot.records, config=config, as_of=snapshot.as_of)
    if args.overused_only:
        session.set_filter_mode(FilterMode.OVERUSED_ONLY)
    session.set_sort_mode(SORT_CHOICES[args.sort])
    if args.select_all:
        session.select_all_visible()

    view_model = session.view_model
    if snapshot.as_of is not None:
        print(f"As of {snapshot.as_of.isoformat()}")
    print("\n".join(render_view_model(view_model)))

    if args.csv:
        args.csv.write_text(build_selection_csv(view_model), encoding="utf-8")
        logger.info("Wrote selection export to %s", args.csv)

    return 0


if __name__ == '__main__':
    sys.exit(main())
