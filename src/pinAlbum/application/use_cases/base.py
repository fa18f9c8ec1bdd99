from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class UseCaseRequest:
    """Use Case input DTO base."""
    pass

@dataclass(frozen=True)
class UseCaseResponse:
    """Use Case output DTO base.

    Expected failures (unknown pin, bad coordinates) come back as a response
    with ``success=False``; pipeline errors travel on the returned futures.
    """
    success: bool = True
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str, **fields):
        return cls(success=False, error=error, **fields)

class UseCase(ABC):
    """Use Case base class."""

    @abstractmethod
    def execute(self, request: UseCaseRequest) -> UseCaseResponse:
        ...
