"""Typed success/failure values returned by collaborator services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceError:
    code: str
    message: str


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    data: T | None = None
    error: ServiceError | None = None

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        return cls(data=data)

    @classmethod
    def failure(cls, code: str, message: str) -> ServiceResult[T]:
        return cls(error=ServiceError(code=code, message=message))
