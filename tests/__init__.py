"""
VOID economy core test suite
============================

Test Organization
-----------------
- tests/unit/domain/   : Pure domain models (level curve, skills, staking, fees, rankings)
- tests/unit/          : Services and infrastructure over in-memory storage
- tests/integration/   : SQLAlchemy repositories on an in-memory aiosqlite engine

Run a slice with markers, e.g. ``pytest -m domain`` or ``pytest -m "not database"``.
Tests follow Arrange, Act, Assert.
"""
