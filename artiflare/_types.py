"""
Core types for artiflare.

Result types come from kungfu; documents are plain dicts keyed by string ids.
"""

from __future__ import annotations

from typing import Any

from kungfu import Error, LazyCoroResult, Ok, Result

type Lazy[T, E] = LazyCoroResult[T, E]
"""Awaitable computation that resolves to a Result."""

type DocumentData = dict[str, Any]
"""Raw document payload as stored in a collection."""

type DocumentId = str
"""Generated or caller-supplied document key."""

__all__ = (
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Lazy",
    "DocumentData",
    "DocumentId",
)
