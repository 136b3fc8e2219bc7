"""CLI commands for progress-fit."""

from .init import init
from .nutrition import nutrition
from .preferences import preferences, profile
from .serve import serve
from .workouts import workouts

__all__ = [
    "init",
    "nutrition",
    "preferences",
    "profile",
    "serve",
    "workouts",
]
