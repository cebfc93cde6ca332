"""
Tests for the presentation helpers and the command line.

Lightweight tests that prove the view layer is presentation-only:
1. Every SeverityLevel has a badge
2. Amount/percent formatting
3. CLI output reflects the core's ViewModel (filter, sort, selection, export)

Run: PYTHONPATH=src pytest tests/test_utilization_view.py -v
"""
import json
import os
import sys
from decimal import Decimal

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from utilization_core import OverviewSession, SeverityLevel
from utilization_view import (
    SEVERITY_BADGES,
    format_amount,
    format_percent,
    get_severity_badge_html,
    get_severity_badge_text,
)
from utilization_view.cli import main, render_view_model


# ═══════════════════════════════════════════════════════════════════════════════
# SEVERITY BADGES
# ═══════════════════════════════════════════════════════════════════════════════

class TestSeverityBadges:
    """Badges exist for each severity level and are keyed by level only."""

    def test_every_level_has_badge(self):
        for level in SeverityLevel:
            assert level in SEVERITY_BADGES

    def test_badge_text(self):
        assert get_severity_badge_text(SeverityLevel.CRITICAL_OVERAGE) == "🔴 Critical overage"

    def test_badge_html_contains_label(self):
        html = get_severity_badge_html(SeverityLevel.MINOR_OVERAGE)
        assert "Minor overage" in html
        assert html.startswith("<span")

    def test_labels_distinct(self):
        labels = {badge.label for badge in SEVERITY_BADGES.values()}
        assert len(labels) == len(SeverityLevel)


# ═══════════════════════════════════════════════════════════════════════════════
# FORMATTING
# ═══════════════════════════════════════════════════════════════════════════════

class TestFormatting:
    def test_amount_with_grouping(self):
        assert format_amount(Decimal("1234567.5"), "MAD") == "1,234,567.50 MAD"

    def test_amount_default_currency(self):
        assert format_amount(Decimal("0"), None) == "0.00 MAD"

    def test_amount_rounds_half_up(self):
        assert format_amount(Decimal("0.005"), "EUR") == "0.01 EUR"

    def test_negative_amount(self):
        assert format_amount(Decimal("-20"), "MAD") == "-20.00 MAD"

    def test_percent(self):
        assert format_percent(Decimal(1600) / Decimal(1500) * 100) == "106.67 %"

    def test_percent_places(self):
        assert format_percent(Decimal("12.345"), places=1) == "12.3 %"

    def test_percent_beyond_default_precision(self):
        assert format_percent(Decimal("1E+31")) == "1" + "0" * 31 + ".00 %"

    def test_amount_beyond_default_precision(self):
        assert format_amount(Decimal("1E+30"), "MAD") == "1," + ",".join(["000"] * 10) + ".00 MAD"


# ═══════════════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def snapshot_file(tmp_path, scenario_payload):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(scenario_payload), encoding="utf-8")
    return path


class TestRenderViewModel:
    def test_empty(self):
        assert render_view_model(OverviewSession().view_model) == [
            "No authorization lines to display."
        ]

    def test_selected_rows_marked(self, scenario_records):
        session = OverviewSession(scenario_records)
        session.toggle_row(scenario_records[0].row_key, True)
        text = "\n".join(render_view_model(session.view_model))
        assert "[x] A1/1" in text
        assert "[ ] A2/1" in text
        assert "Selected: 1 line(s)" in text


class TestCli:
    def test_summary(self, snapshot_file, capsys):
        assert main([str(snapshot_file)]) == 0
        out = capsys.readouterr().out
        assert "Accounts:          2" in out
        assert "1,500.00 MAD" in out
        assert "106.67 %" in out
        assert "Showing 2 of 2 line(s)" in out
        assert "As of 2024-05-31T18:00:00+00:00" in out

    def test_overused_only(self, snapshot_file, capsys):
        assert main([str(snapshot_file), "--overused-only"]) == 0
        out = capsys.readouterr().out
        assert "Showing 1 of 2 line(s)" in out
        assert "A1/1" in out
        assert "A2/1" not in out
        assert "Moderate overage" in out

    def test_sort_by_authorized(self, snapshot_file, capsys):
        assert main([str(snapshot_file), "--sort", "authorized"]) == 0
        out = capsys.readouterr().out
        assert out.index("A1/1") < out.index("A2/1")

    def test_csv_export(self, snapshot_file, tmp_path):
        out_csv = tmp_path / "sel.csv"
        assert main([str(snapshot_file), "--overused-only", "--select-all", "--csv", str(out_csv)]) == 0
        lines = out_csv.read_text(encoding="utf-8").strip().splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("A1,1,")

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.json")]) == 2
        assert "snapshot not found" in capsys.readouterr().err

    def test_non_utf8_file(self, tmp_path, capsys):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'[{"accountNumber": "\xff\xfe"}]')
        assert main([str(path)]) == 2
        assert "not UTF-8" in capsys.readouterr().err

    def test_directory_instead_of_file(self, tmp_path, capsys):
        assert main([str(tmp_path)]) == 2
        assert "cannot read snapshot" in capsys.readouterr().err

    def test_duplicates_fail_without_keep_first(self, tmp_path, capsys):
        path = tmp_path / "dupes.json"
        row = {"accountNumber": "A1", "authorizationNumber": "1", "authorizedAmount": 1,
               "usedAmount": 1, "overageAmount": 0}
        path.write_text(json.dumps([row, row]), encoding="utf-8")
        assert main([str(path)]) == 2
        assert "Duplicate" in capsys.readouterr().err
        assert main([str(path), "--keep-first"]) == 0
