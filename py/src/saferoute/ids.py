from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol
from uuid import uuid4


class IdGenerator(Protocol):
    def new_id(self) -> str: ...


@dataclass(slots=True)
class UuidIdGenerator:
    def new_id(self) -> str:
        return str(uuid4())


@dataclass(slots=True)
class SequenceIdGenerator:
    prefix: str = "req"
    start: int = 1
    queued: list[str] = field(default_factory=list)
    _counter: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self._counter = int(self.start)

    def push(self, *ids: str) -> None:
        self.queued.extend(str(v) for v in ids)

    def new_id(self) -> str:
        if self.queued:
            return self.queued.pop(0)
        out = f"{self.prefix}-{self._counter}"
        self._counter += 1
        return out
