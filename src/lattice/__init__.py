"""Lattice - deadline-driven task auto-scheduler."""

from .engine import Schedule, Scheduler

__all__ = ["Schedule", "Scheduler"]
