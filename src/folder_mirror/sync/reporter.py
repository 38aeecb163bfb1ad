"""Cycle report formatting.

- ``format_sync_result`` -- human-readable cycle summary.
- ``result_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SyncResult


def format_sync_result(result: SyncResult) -> str:
    """Format a cycle result as human-readable text.

    Sections are only included when they contain at least one operation.

    Args:
        result: The completed cycle result.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = f"Mirror {result.source_root} -> {result.replica_root}"
    if result.cancelled:
        header += " (CANCELLED)"
    lines.append(header)
    lines.append(f"Started: {result.started_at}")
    if result.completed_at:
        lines.append(f"Completed: {result.completed_at}")
    lines.append("")
    lines.append(result.summary())
    lines.append("")

    if result.created_directories:
        lines.append("Created directories:")
        for op in result.created_directories:
            lines.append(f"  {op.path}")
        lines.append("")

    if result.copied_files:
        lines.append("Copied:")
        for op in result.copied_files:
            lines.append(f"  {op.path} -> {op.target}")
        lines.append("")

    if result.deleted_directories:
        lines.append("Deleted directories:")
        for op in result.deleted_directories:
            lines.append(f"  {op.path}")
        lines.append("")

    if result.deleted_files:
        lines.append("Deleted files:")
        for op in result.deleted_files:
            lines.append(f"  {op.path}")
        lines.append("")

    if result.errors:
        lines.append("Errors:")
        for op in result.errors:
            lines.append(f"  [{op.action.value}] {op.path}: {op.error}")
        lines.append("")

    if not result.operations:
        lines.append("Replica already up to date.")

    return "\n".join(lines).rstrip()


def result_to_json(result: SyncResult) -> dict:
    """Convert a cycle result to a structured dict for JSON serialisation.

    Args:
        result: The cycle result.

    Returns:
        Dict with roots, timestamps, counts, and per-operation details.
    """
    operations = []
    for op in result.operations:
        entry: dict = {
            "action": op.action.value,
            "path": str(op.path),
            "success": op.success,
        }
        if op.target is not None:
            entry["target"] = str(op.target)
        if op.error:
            entry["error"] = op.error
        operations.append(entry)

    return {
        "source_root": str(result.source_root),
        "replica_root": str(result.replica_root),
        "cancelled": result.cancelled,
        "started_at": result.started_at,
        "completed_at": result.completed_at,
        "counts": {
            "created_directories": len(result.created_directories),
            "copied_files": len(result.copied_files),
            "deleted_files": len(result.deleted_files),
            "deleted_directories": len(result.deleted_directories),
            "errors": len(result.errors),
        },
        "operations": operations,
    }
