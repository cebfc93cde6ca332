"""
Rendering-side helpers for the utilization overview.

Presentation only: badges, amount formatting and the command line. All
numbers come from utilization_core unchanged.
"""
from .semantics import (
    SEVERITY_BADGES,
    SeverityBadge,
    format_amount,
    format_percent,
    get_severity_badge_html,
    get_severity_badge_text,
)

__all__ = [
    'SEVERITY_BADGES',
    'SeverityBadge',
    'format_amount',
    'format_percent',
    'get_severity_badge_html',
    'get_severity_badge_text',
]
