"""Tier-transition batch jobs.

Submodules:
- base: the Manipulator protocol
- candidates: candidate selection queries per transition
- executor: the time-boxed loop and outcome reconciliation
- deleter / puller / recoverer: the three manipulators
- builder: construct and run a manipulator by kind
"""

from object_tier.manipulators.base import Manipulator
from object_tier.manipulators.builder import build_manipulator, run_manipulator
from object_tier.manipulators.deleter import Deleter
from object_tier.manipulators.executor import TimeBoxedExecutor, reconcile_location
from object_tier.manipulators.puller import Puller
from object_tier.manipulators.recoverer import Recoverer

__all__ = [
    "Deleter",
    "Manipulator",
    "Puller",
    "Recoverer",
    "TimeBoxedExecutor",
    "build_manipulator",
    "reconcile_location",
    "run_manipulator",
]
