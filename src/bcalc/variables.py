from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Protocol


class VariableStore(Protocol):
    """What the evaluator needs from wherever variables live."""

    def get(self, name: str) -> Fraction | None: ...

    def update(self, name: str, value: Fraction, history_id: int | None) -> None: ...


@dataclass(slots=True)
class MemoryVariableStore:
    """A `VariableStore` kept in a dict for the life of the session.

    Alongside each value it remembers the history id of the input line that last
    wrote or referenced the variable.
    """

    values: dict[str, Fraction] = field(default_factory=dict)
    last_used: dict[str, int | None] = field(default_factory=dict)

    def get(self, name: str) -> Fraction | None:
        return self.values.get(name)

    def update(self, name: str, value: Fraction, history_id: int | None) -> None:
        self.values[name] = value
        self.last_used[name] = history_id

    def touch(self, name: str, history_id: int | None) -> None:
        if name in self.values:
            self.last_used[name] = history_id

    def purge(self, name: str) -> None:
        """Forget `name`. Forgetting an unknown variable is not an error."""
        self.values.pop(name, None)
        self.last_used.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self.values)
