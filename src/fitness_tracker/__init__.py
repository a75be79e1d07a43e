"""Fitness tracker backend - profiles, weekly workout plans, meals and progress."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("fitness-tracker")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"
