"""Use cases module."""

from .health_management import HealthManagementUseCase
from .like_coordinator import LikeCoordinator

__all__ = [
    "HealthManagementUseCase",
    "LikeCoordinator",
]
