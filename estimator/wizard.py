"""
Wizard navigation — a bounded position counter.

The estimate wizard and the contract-signing flow each own one. Positions
run 1..total inclusive, start at 1, and never wrap. Out-of-range requests
are ignored, not raised.
"""

import logging

logger = logging.getLogger(__name__)

ESTIMATE_STEPS = 6
CONTRACT_SECTIONS = 7


class StepCounter:
    """Bounded 1..total position. Moves return False when the target is out of range."""

    def __init__(self, total: int, name: str = "step"):
        if total < 1:
            raise ValueError(f"{name} counter needs at least one position, got {total}")
        self.total = total
        self.name = name
        self.position = 1

    def advance(self) -> bool:
        return self.go_to(self.position + 1)

    def retreat(self) -> bool:
        return self.go_to(self.position - 1)

    def go_to(self, position: int) -> bool:
        if not 1 <= position <= self.total:
            logger.debug(f"Ignoring {self.name} {position} (valid 1-{self.total})")
            return False
        self.position = position
        return True

    def reset(self):
        self.position = 1

    def __repr__(self):
        return f"StepCounter({self.name}={self.position}/{self.total})"
