"""Page/limit validation and the page envelope shared by the order listings."""

import math
from dataclasses import dataclass

from protean.exceptions import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    def __post_init__(self) -> None:
        errors = {}
        if not isinstance(self.page, int) or self.page < 1:
            errors["page"] = ["page must be a positive integer"]
        if not isinstance(self.limit, int) or not 1 <= self.limit <= MAX_LIMIT:
            errors["limit"] = [f"limit must be between 1 and {MAX_LIMIT}"]
        if errors:
            raise ValidationError(errors)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page:
    orders: tuple
    total_orders: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    next_page: int | None
    prev_page: int | None

    @classmethod
    def build(cls, rows, total: int, request: PageRequest) -> "Page":
        total_pages = math.ceil(total / request.limit) if total else 0
        has_next = request.page < total_pages
        has_prev = request.page > 1
        return cls(
            orders=tuple(rows),
            total_orders=total,
            page=request.page,
            limit=request.limit,
            total_pages=total_pages,
            has_next_page=has_next,
            has_prev_page=has_prev,
            next_page=request.page + 1 if has_next else None,
            prev_page=request.page - 1 if has_prev else None,
        )
