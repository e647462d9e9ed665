# src/acminer/utils.py

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "log_event"]

console = Console()


def log_event(msg: str) -> None:
    """Minimal consistent log line for ranking passes."""
    console.log(f"[acminer] {msg}", markup=False)
