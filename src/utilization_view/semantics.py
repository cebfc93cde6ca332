"""
Severity & Amount Presentation
==============================
Behavioral Change: None (presentation only)

Maps the core's semantic output (SeverityLevel, raw Decimal amounts and
percentages) to display text, badges and colors.

═══════════════════════════════════════════════════════════════════════════════
DESIGN CONTRACT
═══════════════════════════════════════════════════════════════════════════════

* Badges are keyed by SeverityLevel ONLY. Nothing here looks at an overage
  percentage, so display tiers cannot drift from classification tiers.
* No decision logic. If these helpers are removed, every computed value
  in the ViewModel is unchanged.

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from utilization_core.config import DEFAULT_CURRENCY
from utilization_core.model import SeverityLevel, round_half_up


# ═══════════════════════════════════════════════════════════════════════════════
# SEVERITY BADGES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SeverityBadge:
    label: str
    icon: str
    background: str
    text: str


SEVERITY_BADGES: Dict[SeverityLevel, SeverityBadge] = {
    SeverityLevel.NORMAL: SeverityBadge("Within limit", "✅", "#e8f5e9", "#1b5e20"),
    SeverityLevel.MINOR_OVERAGE: SeverityBadge("Minor overage", "🟡", "#fff8e1", "#8d6e00"),
    SeverityLevel.MODERATE_OVERAGE: SeverityBadge("Moderate overage", "🟠", "#fff3e0", "#e65100"),
    SeverityLevel.CRITICAL_OVERAGE: SeverityBadge("Critical overage", "🔴", "#ffebee", "#b71c1c"),
}


def get_severity_badge_text(level: SeverityLevel) -> str:
    """
    Plain-text badge, e.g. for terminals and CSV previews.

    Example:
        >>> get_severity_badge_text(SeverityLevel.CRITICAL_OVERAGE)
        '🔴 Critical overage'
    """
    badge = SEVERITY_BADGES[level]
    return f"{badge.icon} {badge.label}"


def get_severity_badge_html(level: SeverityLevel) -> str:
    """Small inline HTML badge for a severity level."""
    badge = SEVERITY_BADGES[level]
    return (
        f'<span style="display: inline-block; padding: 2px 8px; '
        f'border-radius: 10px; font-size: 0.8em; '
        f'background: {badge.background}; color: {badge.text};">'
        f'{badge.icon} {badge.label}</span>'
    )


# ═══════════════════════════════════════════════════════════════════════════════
# AMOUNTS & PERCENTAGES
# ═══════════════════════════════════════════════════════════════════════════════

def format_amount(amount: Decimal, currency_code: Optional[str] = None) -> str:
    """
    Render an amount with two decimals, a thousands separator and the
    currency code as suffix.

    Example:
        >>> format_amount(Decimal("1234567.5"), "MAD")
        '1,234,567.50 MAD'
    """
    quantized = round_half_up(amount, 2)
    return f"{quantized:,f} {currency_code or DEFAULT_CURRENCY}"


def format_percent(value: Decimal, places: int = 2) -> str:
    """
    Example:
        >>> format_percent(Decimal("106.6666"))
        '106.67 %'
    """
    return f"{round_half_up(value, places):f} %"
