"""
Timing infrastructure: clock and timer abstraction.

- **Scheduler**: interface (``now_ms``, ``call_later``, ``call_every``)
- **AsyncioScheduler**: production implementation on the running event loop
- **ManualScheduler**: virtual-time implementation for deterministic tests
"""

from spheregrid.core.timing.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    ScheduledTask,
    Scheduler,
)

__all__ = [
    "Scheduler",
    "ScheduledTask",
    "AsyncioScheduler",
    "ManualScheduler",
]
