"""Reusable terraform actions."""

from terrafirm.actions.terraform import (
    ExecutionFailedError,
    TerraformCycleAction,
    ValidationFailedError,
    backend_key,
)

__all__ = [
    'ExecutionFailedError',
    'TerraformCycleAction',
    'ValidationFailedError',
    'backend_key',
]
