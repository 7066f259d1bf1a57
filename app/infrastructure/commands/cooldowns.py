"""Per-user command cooldowns backed by a timed cache."""

import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar, Union

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


@dataclass(frozen=True)
class ExpireAgeFormat:
    """Human-readable duration."""

    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    milliseconds: int = 0


# Plain numbers are milliseconds
ExpireAge = Union[int, float, ExpireAgeFormat]


class StandardCooldowns:
    LOW = ExpireAgeFormat(seconds=3)
    MEDIUM = ExpireAgeFormat(seconds=5)
    HIGH = ExpireAgeFormat(seconds=10)
    MINUTE = ExpireAgeFormat(minutes=1)


def to_milliseconds(age: ExpireAge) -> float:
    if isinstance(age, ExpireAgeFormat):
        return (
            age.hours * 3_600_000
            + age.minutes * 60_000
            + age.seconds * 1000
            + age.milliseconds
        )
    return age


def to_expire_age_format(milliseconds: float) -> ExpireAgeFormat:
    remaining = int(milliseconds)
    hours, remaining = divmod(remaining, 3_600_000)
    minutes, remaining = divmod(remaining, 60_000)
    seconds, remaining = divmod(remaining, 1000)
    return ExpireAgeFormat(hours, minutes, seconds, remaining)


def describe_expire_age(age: ExpireAge, include_ms: bool = True) -> str:
    """Render a duration like "1 minute, 30 seconds".

    Example:
        >>> describe_expire_age(ExpireAgeFormat(minutes=2))
        '2 minutes'
        >>> describe_expire_age(1500)
        '1 second, 500 milliseconds'
    """
    if not isinstance(age, ExpireAgeFormat):
        age = to_expire_age_format(age)
    units = [("hour", age.hours), ("minute", age.minutes), ("second", age.seconds)]
    if include_ms:
        units.append(("millisecond", age.milliseconds))
    return ", ".join(
        f"{amount} {unit}{'s' if amount != 1 else ''}" for unit, amount in units if amount
    )


class TimedCache(Generic[K, T]):
    """Associative cache whose entries expire a fixed time after being set.

    Expired entries behave as absent. The clock is injectable and must be
    monotonic, in seconds.

    Example:
        cache = TimedCache(StandardCooldowns.LOW)
        cache.set("user", 0)
        cache.get("user")  # 0 for the next three seconds, then None
    """

    def __init__(self, expire_age: ExpireAge, clock: Callable[[], float] = time.monotonic):
        self.expire_age_ms = to_milliseconds(expire_age)
        if self.expire_age_ms < 0:
            self.expire_age_ms = math.inf
        self._clock = clock
        self._entries: Dict[K, Tuple[float, T]] = {}

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def set(self, key: K, value: T) -> None:
        """Store value and restart its expiry, dropping entries that have expired."""
        now = self._now_ms()
        self._entries = {
            k: entry for k, entry in self._entries.items() if now < entry[0]
        }
        self._entries[key] = (now + self.expire_age_ms, value)

    def __len__(self) -> int:
        return len(self._entries)

    def update(self, key: K, value: T) -> None:
        """Replace the value of a live entry without touching its expiry."""
        entry = self._entries.get(key)
        if entry is not None:
            self._entries[key] = (entry[0], value)

    def get(self, key: K) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expire_at, value = entry
        if self._now_ms() >= expire_at:
            del self._entries[key]
            return None
        return value

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def clear(self) -> None:
        self._entries.clear()


class CooldownDecision(Enum):
    """What to do with an invocation after checking the cooldown."""

    ALLOW = "allow"
    WARN = "warn"  # First offense inside the window, tell the user once
    DENY = "deny"  # Repeated offense, ignore silently


class CooldownStore:
    """Tracks, per user, when a command may next run and how often they tried early."""

    def __init__(self, cooldown: ExpireAge, clock: Callable[[], float] = time.monotonic):
        self.cooldown = cooldown
        self._cache: TimedCache[str, int] = TimedCache(cooldown, clock)

    @property
    def expire_age_ms(self) -> float:
        return self._cache.expire_age_ms

    def check(self, user_id: str) -> CooldownDecision:
        """Record an attempt by user_id and decide whether it may proceed.

        Args:
            user_id: Caller identifier

        Returns:
            ALLOW when the user is not cooling down, which also starts a new
            window. WARN on the first early attempt, DENY after that.
        """
        offenses = self._cache.get(user_id)
        if offenses is None:
            self._cache.set(user_id, 0)
            return CooldownDecision.ALLOW
        self._cache.update(user_id, offenses + 1)
        return CooldownDecision.WARN if offenses == 0 else CooldownDecision.DENY

    def offenses(self, user_id: str) -> int:
        return self._cache.get(user_id) or 0

    def warning(self) -> str:
        """Message shown on the first early attempt."""
        if self.expire_age_ms > 60_000:
            return f"This command can only be run once every {describe_expire_age(self.cooldown)}."
        return "Slow down!"
