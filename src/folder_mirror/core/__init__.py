"""Async helpers shared by the sync engine and the worker loop."""

from .async_utils import run_sync, wait_for_stop

__all__ = ["run_sync", "wait_for_stop"]
