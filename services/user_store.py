from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class UserRecord:
    name: str
    session_start: Optional[float] = None
    logged_seconds: Optional[float] = None
    timers: Dict[str, int] = field(default_factory=dict)
    shortcuts: Dict[str, List[str]] = field(default_factory=dict)


class UserStore:
    """Per-run user state: roster, roles, sessions, timers and shortcuts.

    Records are created lazily on first reference and live until the process
    exits. User names are case-sensitive identity keys; role membership is
    compared lowercased.
    """

    def __init__(
        self,
        *,
        ops: Optional[Iterable[str]] = None,
        hops: Optional[Iterable[str]] = None,
        clock: Clock = time.time,
    ):
        self._clock = clock
        self._records: Dict[str, UserRecord] = {}
        self._roster: List[str] = []
        self.ops: Set[str] = {str(u).strip().lower() for u in (ops or []) if str(u).strip()}
        self.hops: Set[str] = {str(u).strip().lower() for u in (hops or []) if str(u).strip()}

    def record(self, user: str) -> UserRecord:
        rec = self._records.get(user)
        if rec is None:
            rec = UserRecord(name=user)
            self._records[user] = rec
        return rec

    def find(self, user: str) -> Optional[UserRecord]:
        return self._records.get(user)

    # ── Roster ──
    @property
    def roster(self) -> List[str]:
        return list(self._roster)

    def is_connected(self, user: str) -> bool:
        return user in self._roster

    def connect(self, user: str) -> None:
        rec = self.record(user)
        rec.session_start = self._clock()
        if user not in self._roster:
            self._roster.append(user)
        logger.info("%s connected", user)

    def disconnect(self, user: str) -> None:
        rec = self.find(user)
        if user in self._roster:
            self._roster.remove(user)
        if rec is None or rec.session_start is None:
            return
        elapsed = max(0.0, self._clock() - rec.session_start)
        rec.logged_seconds = (rec.logged_seconds or 0.0) + elapsed
        rec.session_start = None
        logger.info("%s disconnected after %d minutes", user, minutes(elapsed))

    # ── Roles ──
    def is_op(self, user: str) -> bool:
        return str(user).lower() in self.ops

    def is_hop(self, user: str) -> bool:
        return str(user).lower() in self.hops

    def add_hop(self, user: str) -> None:
        self.hops.add(str(user).lower())

    def remove_hop(self, user: str) -> None:
        self.hops.discard(str(user).lower())

    # ── Uptime ──
    def session_seconds(self, user: str) -> Optional[float]:
        rec = self.find(user)
        if rec is None or rec.session_start is None or user not in self._roster:
            return None
        return max(0.0, self._clock() - rec.session_start)

    def logged_seconds(self, user: str) -> Optional[float]:
        rec = self.find(user)
        return rec.logged_seconds if rec else None

    # ── Timers ──
    def set_timer(self, user: str, item: str, frequency: int) -> None:
        self.record(user).timers[item] = int(frequency)

    def remove_timer(self, user: str, item: str) -> bool:
        rec = self.find(user)
        if rec is None or item not in rec.timers:
            return False
        del rec.timers[item]
        return True

    def timers(self, user: str) -> Dict[str, int]:
        rec = self.find(user)
        return dict(rec.timers) if rec else {}

    def due_timers(self, tick: int) -> List[Tuple[str, str]]:
        """(user, item) pairs for connected users whose timer fires on this tick."""
        due: List[Tuple[str, str]] = []
        for user in self._roster:
            rec = self.find(user)
            if rec is None:
                continue
            for item, frequency in rec.timers.items():
                if frequency > 0 and tick % frequency == 0:
                    due.append((user, item))
        return due

    # ── Shortcuts ──
    def set_shortcut(self, user: str, label: str, command: List[str]) -> None:
        self.record(user).shortcuts[label] = list(command)

    def get_shortcut(self, user: str, label: str) -> Optional[List[str]]:
        rec = self.find(user)
        if rec is None or label not in rec.shortcuts:
            return None
        return list(rec.shortcuts[label])

    def shortcut_labels(self, user: str) -> List[str]:
        rec = self.find(user)
        return list(rec.shortcuts.keys()) if rec else []


def minutes(seconds: float) -> int:
    return int(seconds // 60)
