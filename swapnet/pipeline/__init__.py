"""Batch orchestration."""

from .batch_coordinator import BatchCoordinator

__all__ = ["BatchCoordinator"]
