from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Pagination(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    page: int = 0
    limit: int = 0
    total: int = 0
    pages: int = 0

    @classmethod
    def zero(cls) -> "Pagination":
        return cls()

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages


class PageResult(BaseModel):
    """One page of a list endpoint as stored by the resource cache."""

    model_config = ConfigDict(frozen=True)

    items: tuple[Any, ...] = ()
    pagination: Pagination = Field(default_factory=Pagination.zero)
    stats: dict[str, Any] = Field(default_factory=dict)
