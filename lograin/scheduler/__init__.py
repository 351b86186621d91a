"""Adaptive queueing and lane scheduling for the rain display.

Every component operates on one explicit `SchedulerState`; all of them run
on the single asyncio loop, so the queue needs no locking.
"""

from __future__ import annotations

from lograin.scheduler.intake import Intake, make_event
from lograin.scheduler.lanes import LaneAllocator, sample_without_replacement
from lograin.scheduler.load import LoadMonitor, multi_lane_count
from lograin.scheduler.overflow import OverflowHandler
from lograin.scheduler.queue import EventQueue
from lograin.scheduler.rate import RateController, compute_interval
from lograin.scheduler.state import LaneGrid, Metrics, RateState, SchedulerState

__all__ = [
    "EventQueue",
    "Intake",
    "LaneAllocator",
    "LaneGrid",
    "LoadMonitor",
    "Metrics",
    "OverflowHandler",
    "RateController",
    "RateState",
    "SchedulerState",
    "compute_interval",
    "make_event",
    "multi_lane_count",
    "sample_without_replacement",
]
