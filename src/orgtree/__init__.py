"""orgtree: designation reconciliation and reporting-hierarchy forests."""

__version__ = "0.3.0"
