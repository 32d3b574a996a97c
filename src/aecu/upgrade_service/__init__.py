"""Upgrade service exports."""

from .aecu_service import AecuService
from .environment_providers import RunModeProvider, StaticRunModeProvider, package_version
from .service_factory import build_repository, build_service

__all__ = [
    "AecuService",
    "RunModeProvider",
    "StaticRunModeProvider",
    "build_repository",
    "build_service",
    "package_version",
]
