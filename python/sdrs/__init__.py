"""
SDRS - storage data retention engine

This package turns retention rules into transfer jobs:
- Time-bucketed prefix generation for dataset retention windows
- Retention rule models (dataset, default and global rules)
- Creation and idempotent reconciliation of transfer jobs
- Storage Transfer REST and in-memory clients
"""

__version__ = "0.1.0"
__all__ = [
    "config",
    "exceptions",
    "executor",
    "logging",
    "models",
    "paths",
    "prefixes",
    "transfer",
]
