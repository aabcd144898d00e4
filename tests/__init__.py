"""
SphereGrid Core Test Suite
==========================

Test Organization
-----------------
- tests/unit/          : Fast unit tests (no network, no real clock)
- tests/unit/domain/   : Domain model tests (value objects, aggregates, entities)

Testing Philosophy
------------------
- Time-driven code runs on ManualScheduler, never on wall-clock sleeps
- Use pytest markers (unit, domain, session) to select subsets
- Follow AAA pattern: Arrange, Act, Assert
"""
