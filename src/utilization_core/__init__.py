# src/utilization_core/__init__.py
"""
Utilization Core - Non-UI logic for the credit-authorization overview.

This package contains pure Python logic with ZERO Streamlit dependencies.
All modules here accept/return plain Python objects.

Architecture:
- model.py: Records, enums and derived-state dataclasses (ViewModel, EmptyViewModel)
- classify.py: classify() - overage percentage to SeverityLevel
- statistics.py: Per-row percentages, aggregate stats, selection totals
- pipeline.py: derive_view() - filter + stable sort
- selection.py: SelectionTracker - the only mutable core state
- viewmodel.py: derive_view_model() - compose everything for rendering
- actions.py: Action types and apply_action() reducer
- session.py: OverviewSession and session-state binding
- ingest.py: Payload to records, RowKey uniqueness
- export.py: CSV export of the selected visible rows
- config.py: OverviewConfig

HARD RULE: Import of `streamlit` is FORBIDDEN in this package.
"""

# Model types
from .model import (
    ROW_KEY_SEPARATOR,
    AggregateStats,
    AnyViewModel,
    EmptyViewModel,
    FilterMode,
    RowView,
    SelectionTotals,
    SeverityLevel,
    SortMode,
    UtilizationRecord,
    ViewModel,
    ViewModelKind,
    make_row_key,
    split_row_key,
)

# Configuration
from .config import DEFAULT_CURRENCY, DuplicatePolicy, OverviewConfig

# Classification
from .classify import (
    MINOR_OVERAGE_CEILING,
    MODERATE_OVERAGE_CEILING,
    classify,
    classify_record,
)

# Statistics
from .statistics import (
    aggregate_stats,
    per_row_overage_percent,
    per_row_utilization_rate_percent,
    selection_totals,
)

# Pipeline
from .pipeline import derive_view, filter_records, sort_records, visible_keys

# Selection
from .selection import SelectionTracker

# View model computation
from .viewmodel import derive_view_model

# Action system
from .actions import (
    Action,
    ActionResult,
    ActionType,
    OverviewState,
    apply_action,
    compute_view_model,
)

# Session
from .session import OverviewSession, get_overview_session, reset_overview_session

# Ingestion
from .ingest import (
    DuplicateRowKeyError,
    RecordValidationError,
    Snapshot,
    load_records,
    load_snapshot,
    record_from_mapping,
)

# Export
from .export import build_selection_csv, build_selection_rows, generate_export_filename

__all__ = [
    # Model
    'ROW_KEY_SEPARATOR',
    'AggregateStats',
    'AnyViewModel',
    'EmptyViewModel',
    'FilterMode',
    'RowView',
    'SelectionTotals',
    'SeverityLevel',
    'SortMode',
    'UtilizationRecord',
    'ViewModel',
    'ViewModelKind',
    'make_row_key',
    'split_row_key',

    # Config
    'DEFAULT_CURRENCY',
    'DuplicatePolicy',
    'OverviewConfig',

    # Classification
    'MINOR_OVERAGE_CEILING',
    'MODERATE_OVERAGE_CEILING',
    'classify',
    'classify_record',

    # Statistics
    'aggregate_stats',
    'per_row_overage_percent',
    'per_row_utilization_rate_percent',
    'selection_totals',

    # Pipeline
    'derive_view',
    'filter_records',
    'sort_records',
    'visible_keys',

    # Selection
    'SelectionTracker',

    # ViewModel
    'derive_view_model',

    # Actions
    'Action',
    'ActionResult',
    'ActionType',
    'OverviewState',
    'apply_action',
    'compute_view_model',

    # Session
    'OverviewSession',
    'get_overview_session',
    'reset_overview_session',

    # Ingestion
    'DuplicateRowKeyError',
    'RecordValidationError',
    'Snapshot',
    'load_records',
    'load_snapshot',
    'record_from_mapping',

    # Export
    'build_selection_csv',
    'build_selection_rows',
    'generate_export_filename',
]
