"""
Core infrastructure layer for SphereGrid.

Purpose
-------
Provide a single import surface for the infrastructure subsystems:

- Configuration management (Config, ConfigManager)
- Logging (structured logging, logger factory)
- Timing (Scheduler abstraction with asyncio and manual clocks)

Non-Responsibilities
--------------------
- Progression rules or session guarding (see ``spheregrid.modules``)
- Any side effects beyond simple re-exports

Design Decisions
----------------
- This module is thin: no logic, no configuration, no I/O.
- Domain modules import from their own packages, not from here.
"""

from __future__ import annotations

from spheregrid.core.config import Config, ConfigManager
from spheregrid.core.logging import get_logger, setup_logging
from spheregrid.core.timing import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    # Configuration
    "Config",
    "ConfigManager",
    # Logging
    "setup_logging",
    "get_logger",
    # Timing
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
]
