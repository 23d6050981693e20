from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Dict


@dataclass
class GamePassSnapshot:
    outcomes: Dict[str, int]
    rewards: Dict[str, int]
    zen_spent_total: int
    retries: int

    def as_dict(self) -> Dict[str, object]:
        return {
            "outcomes": dict(self.outcomes),
            "rewards": dict(self.rewards),
            "zen_spent_total": self.zen_spent_total,
            "retries": self.retries,
        }


class GamePassObservabilityStore:
    """Collect claim pipeline telemetry for dashboards and alerting."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._outcomes: Dict[str, int] = defaultdict(int)
        self._rewards: Dict[str, int] = defaultdict(int)
        self._zen_spent_total = 0
        self._retries = 0

    def record_outcome(self, code: str) -> None:
        with self._lock:
            self._outcomes[code] += 1

    def record_grant(self, reward_type: str, zen_spent: int) -> None:
        with self._lock:
            self._outcomes["claimed"] += 1
            self._rewards[reward_type] += 1
            self._zen_spent_total += max(0, zen_spent)

    def record_retry(self) -> None:
        with self._lock:
            self._retries += 1

    def snapshot(self) -> GamePassSnapshot:
        with self._lock:
            return GamePassSnapshot(
                outcomes=dict(self._outcomes),
                rewards=dict(self._rewards),
                zen_spent_total=self._zen_spent_total,
                retries=self._retries,
            )

    def reset(self) -> None:
        with self._lock:
            self._outcomes.clear()
            self._rewards.clear()
            self._zen_spent_total = 0
            self._retries = 0


_STORE = GamePassObservabilityStore()


def get_gamepass_store() -> GamePassObservabilityStore:
    return _STORE


__all__ = ["get_gamepass_store", "GamePassObservabilityStore", "GamePassSnapshot"]
