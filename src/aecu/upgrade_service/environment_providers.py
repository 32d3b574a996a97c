"""Run-mode and version providers supplied by the host environment."""

from __future__ import annotations

from collections.abc import Iterable
from importlib.metadata import PackageNotFoundError, version
from typing import Protocol

from aecu.aecu_errors import AecuError

DISTRIBUTION_NAME = "aecu"


class RunModeProvider(Protocol):  # pylint: disable=too-few-public-methods
    """Source of the run modes active on the running system."""

    def active_run_modes(self) -> frozenset[str]: ...


class StaticRunModeProvider:  # pylint: disable=too-few-public-methods
    """Run modes fixed at construction time, e.g. from configuration."""

    def __init__(self, run_modes: Iterable[str]) -> None:
        self._run_modes = frozenset(mode.strip() for mode in run_modes if mode.strip())

    def active_run_modes(self) -> frozenset[str]:
        return self._run_modes


def package_version(distribution: str = DISTRIBUTION_NAME) -> str:
    """Return the installed version of `distribution`."""
    try:
        return version(distribution)
    except PackageNotFoundError as exc:
        raise AecuError(f"Unable to determine version of {distribution}.") from exc
