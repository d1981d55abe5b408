"""Collaborator result models.

Every remote call returns a ``FetchResult``: either live data
(``status="ok"``) or substitute data produced after the call failed
(``status="degraded"``). Callers always get usable data; they can inspect
``status`` to tell live from simulated.
"""

from __future__ import annotations

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class FetchResult(BaseModel, Generic[T]):
    status: Literal["ok", "degraded"]
    data: T
    error: str | None = None  # Set only when degraded

    @property
    def is_live(self) -> bool:
        return self.status == "ok"

    @classmethod
    def ok(cls, data: T) -> FetchResult[T]:
        return cls(status="ok", data=data)

    @classmethod
    def degraded(cls, data: T, error: str) -> FetchResult[T]:
        return cls(status="degraded", data=data, error=error)
