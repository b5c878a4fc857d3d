"""Per-session cache of matched recipes with pagination state.

Each matching request gets an opaque token. The cache keeps, per token, the
recipes discovered so far (stored ones from matching, generated ones from the
provider), how far the client has paged through them, and how many generated
recipes it has been handed.

Thread safety: the token map is guarded by a registry lock and every entry by
its own lock. Callers never touch entry fields directly; they go through the
atomic operations below. Locks are never held across an ``await``.
"""

import asyncio
import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from functools import lru_cache

from src.config import get_settings
from src.services.ingredient_matcher import PantryEntry, RecipeCandidate, normalize_name

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    """Where a session is in its pagination lifecycle."""

    FRESH = "fresh"
    SERVING = "serving"
    GENERATING = "generating"
    EXHAUSTED = "exhausted"


@dataclass
class SessionEntry:
    """Mutable state for one token. Only touched with ``lock`` held."""

    pantry_snapshot: tuple[PantryEntry, ...]
    min_prep_time: int
    max_prep_time: int
    created_at: datetime
    ordered_recipes: list[RecipeCandidate] = field(default_factory=list)
    cursor: int = 0
    presented_titles: set[str] = field(default_factory=set)
    all_titles: set[str] = field(default_factory=set)
    generated_titles: set[str] = field(default_factory=set)
    generated_served_count: int = 0
    state: SessionState = SessionState.FRESH
    generating: bool = False
    removed: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def fully_scanned(self) -> bool:
        return self.cursor >= len(self.ordered_recipes)

    def append(self, recipes: Iterable[RecipeCandidate]) -> int:
        """Append recipes whose normalized title is new. Returns how many were added."""
        added = 0
        for recipe in recipes:
            key = normalize_name(recipe.title)
            if not key or key in self.all_titles:
                continue
            self.ordered_recipes.append(recipe)
            self.all_titles.add(key)
            if recipe.is_generated:
                self.generated_titles.add(key)
            added += 1
        return added

    def draw(self, batch_size: int, max_generated: int) -> list[RecipeCandidate]:
        """Scan forward from the cursor collecting up to ``batch_size`` recipes.

        The cursor advances past every recipe looked at, including ones
        skipped because they were already presented or because the generated
        quota is spent.
        """
        batch: list[RecipeCandidate] = []
        while len(batch) < batch_size and self.cursor < len(self.ordered_recipes):
            recipe = self.ordered_recipes[self.cursor]
            self.cursor += 1

            key = normalize_name(recipe.title)
            if key in self.presented_titles:
                continue

            is_generated = key in self.generated_titles
            if is_generated and self.generated_served_count >= max_generated:
                continue

            batch.append(recipe)
            self.presented_titles.add(key)
            if is_generated:
                self.generated_served_count += 1
        return batch


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only copy of a session's state, safe to use without locks."""

    token: str
    pantry: tuple[PantryEntry, ...]
    min_prep_time: int
    max_prep_time: int
    all_titles: frozenset[str]
    presented_titles: frozenset[str]
    recipe_count: int
    cursor: int
    generated_served_count: int
    remaining_quota: int
    state: SessionState
    created_at: datetime

    @property
    def fully_scanned(self) -> bool:
        return self.cursor >= self.recipe_count

    @property
    def exhausted(self) -> bool:
        """Nothing left to scan and no generated recipes may be served."""
        return self.fully_scanned and self.remaining_quota == 0


class SessionCache:
    """Thread-safe token -> SessionEntry store with TTL eviction."""

    def __init__(
        self,
        max_generated_per_session: int | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        settings = get_settings()
        self.max_generated_per_session = (
            settings.max_generated_per_session
            if max_generated_per_session is None
            else max_generated_per_session
        )
        self.ttl = timedelta(
            seconds=settings.session_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._clock = clock or (lambda: datetime.now(UTC))
        self._entries: dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._entries

    def _is_expired(self, entry: SessionEntry, now: datetime) -> bool:
        return now - entry.created_at > self.ttl

    def _get(self, token: str | None) -> SessionEntry | None:
        """Look up a live entry, dropping it if its TTL has passed."""
        if not token:
            return None
        with self._lock:
            entry = self._entries.get(token)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            self.remove(token)
            return None
        return entry

    def _snapshot(self, token: str, entry: SessionEntry) -> SessionSnapshot:
        return SessionSnapshot(
            token=token,
            pantry=entry.pantry_snapshot,
            min_prep_time=entry.min_prep_time,
            max_prep_time=entry.max_prep_time,
            all_titles=frozenset(entry.all_titles),
            presented_titles=frozenset(entry.presented_titles),
            recipe_count=len(entry.ordered_recipes),
            cursor=entry.cursor,
            generated_served_count=entry.generated_served_count,
            remaining_quota=max(0, self.max_generated_per_session - entry.generated_served_count),
            state=entry.state,
            created_at=entry.created_at,
        )

    def _settle_state(self, entry: SessionEntry) -> None:
        if entry.generating:
            entry.state = SessionState.GENERATING
        elif entry.fully_scanned and entry.generated_served_count >= self.max_generated_per_session:
            entry.state = SessionState.EXHAUSTED
        else:
            entry.state = SessionState.SERVING

    def create(
        self,
        pantry: Sequence[PantryEntry],
        min_prep_time: int,
        max_prep_time: int,
        recipes: Iterable[RecipeCandidate] = (),
    ) -> str:
        """Open a session holding ``recipes`` and return its token."""
        entry = SessionEntry(
            pantry_snapshot=tuple(pantry),
            min_prep_time=min_prep_time,
            max_prep_time=max_prep_time,
            created_at=self._clock(),
        )
        added = entry.append(recipes)

        token = str(uuid.uuid4())
        with self._lock:
            self._entries[token] = entry

        logger.info(
            f"Created session {token} with {added} recipes "
            f"({len(entry.generated_titles)} generated)"
        )
        return token

    def append(self, token: str, recipes: Iterable[RecipeCandidate]) -> int | None:
        """Append recipes to a session, skipping known titles.

        Returns the number appended, or None if the token is unknown.
        """
        entry = self._get(token)
        if entry is None:
            return None
        with entry.lock:
            if entry.removed:
                return None
            added = entry.append(recipes)
            if added:
                self._settle_state(entry)
        if added:
            logger.info(f"Appended {added} recipes to session {token}")
        return added

    def draw(self, token: str, batch_size: int) -> list[RecipeCandidate]:
        """Take the next batch for a session (empty if unknown or drained)."""
        if batch_size <= 0:
            return []
        entry = self._get(token)
        if entry is None:
            logger.info(f"Session not found: {token}")
            return []
        with entry.lock:
            if entry.removed:
                return []
            batch = entry.draw(batch_size, self.max_generated_per_session)
            self._settle_state(entry)
        logger.debug(f"Drew {len(batch)} recipes for session {token}")
        return batch

    def snapshot(self, token: str) -> SessionSnapshot | None:
        """Consistent copy of a session's state, or None if unknown."""
        entry = self._get(token)
        if entry is None:
            return None
        with entry.lock:
            if entry.removed:
                return None
            return self._snapshot(token, entry)

    def mark_generating(self, token: str) -> bool:
        """Claim the session's generation round.

        Returns False if the token is unknown or a round is already in flight.
        """
        entry = self._get(token)
        if entry is None:
            return False
        with entry.lock:
            if entry.removed or entry.generating:
                return False
            entry.generating = True
            entry.state = SessionState.GENERATING
            return True

    def mark_settled(self, token: str) -> None:
        """Recompute SERVING/EXHAUSTED after a generation round."""
        entry = self._get(token)
        if entry is None:
            return
        with entry.lock:
            if not entry.removed:
                entry.generating = False
                self._settle_state(entry)

    def remove(self, token: str) -> bool:
        """Delete a session once no operation on it is in flight."""
        with self._lock:
            entry = self._entries.get(token)
        if entry is None:
            return False
        with entry.lock:
            with self._lock:
                if self._entries.get(token) is not entry:
                    return False
                del self._entries[token]
            entry.removed = True
        logger.info(f"Removed session {token}")
        return True

    def evict_expired(self, now: datetime | None = None) -> int:
        """Remove every session older than the TTL. Returns how many were removed."""
        now = now or self._clock()
        with self._lock:
            stale = [
                token for token, entry in self._entries.items() if self._is_expired(entry, now)
            ]

        evicted = sum(1 for token in stale if self.remove(token))
        if evicted:
            logger.info(f"Evicted {evicted} expired sessions")
        return evicted

    async def sweep_forever(self, interval_seconds: float) -> None:
        """Evict expired sessions every ``interval_seconds`` until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                self.evict_expired()
            except Exception as e:
                logger.error(f"Session sweep failed: {e}", exc_info=True)


@lru_cache
def get_session_cache() -> SessionCache:
    """Get the process-wide session cache."""
    return SessionCache()
