"""Explicit success/failure values.

Every step of a release operation (clone, edit, render, push) returns a
Result instead of raising, so a flow reads as a straight sequence of
checks and the first failure is reported with its context.

Usage:
    match read_header(text):
        case Ok(header):
            print(header.name)
        case Err(error):
            print(f"skipped: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful step carrying its output in ``value``."""

    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed step carrying the reason in ``error``."""

    error: E


type Result[T, E] = Ok[T] | Err[E]
