"""
Module: billing_engines.pagination
Responsibility:
    Page arithmetic shared by the reports: offset/limit for a page and the
    pagination block returned with every page.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - total_pages = ceil(total / page_size); zero rows means zero pages.
    - A page past the end is not an error: it yields no rows and the same
      totals.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def slice(self, rows: Sequence[T]) -> list[T]:
        """This page's window over an already filtered, ordered sequence."""
        return list(rows[self.offset:self.offset + self.page_size])


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def of(cls, request: PageRequest, total: int) -> Pagination:
        return cls(
            page=request.page,
            page_size=request.page_size,
            total=total,
            total_pages=total_pages(total, request.page_size),
        )

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def total_pages(total: int, page_size: int) -> int:
    if total <= 0:
        return 0
    return -(-total // page_size)
