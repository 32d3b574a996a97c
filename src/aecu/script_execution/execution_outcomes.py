"""Script execution result entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of running one upgrade script.

    `success`, `result` and `output` always describe the script at `path`; when it failed and
    a fallback script ran, that run is attached as `fallback`.
    """

    path: str
    success: bool
    elapsed_ms: int
    result: str
    output: str
    fallback: ExecutionResult | None = None

    def __post_init__(self) -> None:
        if self.fallback is not None and self.fallback.fallback is not None:
            raise ValueError("A fallback result cannot carry its own fallback.")

    @property
    def recovered(self) -> bool:
        """Whether a failed script was followed by a successful fallback."""
        return not self.success and self.fallback is not None and self.fallback.success
