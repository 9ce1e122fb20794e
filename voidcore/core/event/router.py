"""
Wildcard event-name matching for the EventBus.

Supported Patterns
------------------
- Exact:    "bank.withdrawn" matches only "bank.withdrawn"
- Global:   "*" matches any event
- Prefix:   "bank.*" matches "bank.staked", "bank.withdrawn", ...
- Suffix:   "*.level_up" matches "progression.level_up", ...
- Sandwich: "bank.*.claimed" matches "bank.interest.claimed", ...

Matching is case-sensitive. Repeated wildcards ("**") collapse to one.
"""

from __future__ import annotations


class EventRouter:
    """
    Stateless wildcard matcher.

    >>> router = EventRouter()
    >>> router.matches("bank.staked", "bank.*")
    True
    >>> router.matches("bank.staked", "progression.*")
    False
    """

    def matches(self, event_name: str, pattern: str) -> bool:
        if pattern == "*":
            return True

        if "*" not in pattern:
            return event_name == pattern

        while "**" in pattern:
            pattern = pattern.replace("**", "*")

        parts = pattern.split("*")

        if parts[0] and not event_name.startswith(parts[0]):
            return False
        if parts[-1] and not event_name.endswith(parts[-1]):
            return False
        if len(event_name) < len(parts[0]) + len(parts[-1]):
            return False

        # Middle pieces must appear in order between prefix and suffix.
        idx = len(parts[0])
        end = len(event_name) - len(parts[-1])
        for mid in parts[1:-1]:
            if not mid:
                continue
            next_idx = event_name.find(mid, idx, end)
            if next_idx == -1:
                return False
            idx = next_idx + len(mid)

        return True

    @staticmethod
    def is_wildcard(pattern: str) -> bool:
        return "*" in pattern
