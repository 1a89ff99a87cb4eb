"""Module record entity."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class ModuleRecord:
    """Immutable result of evaluating one module.

    Stored in the module cache under its identifier until the next
    request for the same identifier evicts it.
    """

    identifier: str
    value: Any
    evaluated_at: datetime
    origin: str | None = None
    duration: float = 0.0

    @property
    def age(self) -> float:
        """Seconds elapsed since the module was evaluated."""
        return (datetime.now(timezone.utc) - self.evaluated_at).total_seconds()

    @classmethod
    def create(
        cls,
        identifier: str,
        value: Any,
        origin: str | None = None,
        duration: float = 0.0,
    ) -> "ModuleRecord":
        """Factory method to create a record stamped with the current time.

        Args:
            identifier: The module identifier that was evaluated.
            value: The value the evaluation produced.
            origin: Resolved source location, if known.
            duration: Evaluation time in seconds.

        Returns:
            A new ModuleRecord instance.
        """
        return cls(
            identifier=identifier,
            value=value,
            evaluated_at=datetime.now(timezone.utc),
            origin=origin,
            duration=duration,
        )
