"""Paginated recipe suggestions blending stored and generated recipes."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from src.config import get_settings
from src.services.ingredient_matcher import PantryEntry, RecipeCandidate
from src.services.matching import MatchingEngine
from src.services.recipe_generator import RecipeGenerator
from src.services.session_cache import SessionCache, SessionSnapshot

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No recipes found for given ingredients and prep time."
NO_MORE_RESULTS_MESSAGE = "No more recipes available."
SESSION_NOT_FOUND_MESSAGE = "Session expired or not found."
QUOTA_REACHED_MESSAGE = "AI recipe limit reached (max {limit} per session)."

# Strong references to generation rounds still running after their caller left
_pending_generations: set[asyncio.Task] = set()


@dataclass
class BatchResult:
    """One page of suggestions for a session."""

    token: str
    recipes: list[RecipeCandidate] = field(default_factory=list)
    message: str | None = None
    exhausted: bool = False


class PaginationCoordinator:
    """Serve fixed-size batches of makeable recipes per session token.

    Stored matches are served first. When they run short the generator is
    asked for more, within a per-session cap on how many generated recipes
    a client may receive.
    """

    def __init__(
        self,
        engine: MatchingEngine,
        generator: RecipeGenerator,
        cache: SessionCache,
        retry_budget: int | None = None,
        generator_timeout: float | None = None,
    ):
        settings = get_settings()
        self.engine = engine
        self.generator = generator
        self.cache = cache
        self.retry_budget = settings.generator_retry_budget if retry_budget is None else retry_budget
        self.generator_timeout = (
            settings.generator_timeout_seconds if generator_timeout is None else generator_timeout
        )

    @staticmethod
    def _validate_batch_size(batch_size: int) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

    @staticmethod
    def _validate_filters(
        pantry: Sequence[PantryEntry], min_prep_time: int, max_prep_time: int
    ) -> None:
        if min_prep_time < 0:
            raise ValueError("min_prep_time must not be negative")
        if max_prep_time < min_prep_time:
            raise ValueError("max_prep_time must not be less than min_prep_time")
        for entry in pantry:
            if entry.quantity < 0:
                raise ValueError(f"Pantry quantity for '{entry.name}' must not be negative")

    def _quota_message(self) -> str:
        return QUOTA_REACHED_MESSAGE.format(limit=self.cache.max_generated_per_session)

    def _build_message(
        self,
        batch: list[RecipeCandidate],
        batch_size: int,
        snapshot: SessionSnapshot | None,
        first_batch: bool = False,
    ) -> str | None:
        if snapshot is None:
            return None if batch else SESSION_NOT_FOUND_MESSAGE

        quota_spent = (
            snapshot.remaining_quota == 0 and self.cache.max_generated_per_session > 0
        )
        if not batch:
            if quota_spent:
                return self._quota_message()
            return NO_RESULTS_MESSAGE if first_batch else NO_MORE_RESULTS_MESSAGE
        if len(batch) < batch_size and quota_spent:
            return self._quota_message()
        return None

    async def fetch_generated(
        self,
        pantry: Sequence[PantryEntry],
        min_prep_time: int,
        max_prep_time: int,
        excluded_titles: set[str],
        required: int,
    ) -> list[RecipeCandidate]:
        """Collect up to ``required`` valid, unseen generated recipes.

        Calls the generator at most ``retry_budget`` times. Provider failures
        and timeouts count as an attempt that returned nothing. Accepted
        recipes are persisted; a title that already exists in storage is
        served as that stored recipe instead.
        """
        accepted: list[RecipeCandidate] = []
        if required <= 0:
            return accepted

        seen = set(excluded_titles)
        attempts = 0
        while len(accepted) < required and attempts < self.retry_budget:
            attempts += 1
            still_needed = required - len(accepted)
            try:
                candidates = await asyncio.wait_for(
                    self.generator.generate(
                        pantry, min_prep_time, max_prep_time, set(seen), still_needed
                    ),
                    timeout=self.generator_timeout,
                )
            except TimeoutError:
                logger.warning(
                    f"Recipe generation attempt {attempts} timed out "
                    f"after {self.generator_timeout}s"
                )
                continue
            except Exception as e:
                logger.warning(f"Recipe generation attempt {attempts} failed: {e}")
                continue

            for candidate in candidates:
                if len(accepted) >= required:
                    break
                key = candidate.normalized_title
                if not key or key in seen:
                    logger.debug(f"Dropping repeated generated title '{candidate.title}'")
                    continue
                reason = self.engine.validate_generated(candidate, len(pantry))
                if reason:
                    logger.info(f"Rejected generated recipe '{candidate.title}': {reason}")
                    continue

                try:
                    saved = self.engine.source.save_generated(candidate)
                except SQLAlchemyError as e:
                    logger.warning(f"Could not store generated recipe '{candidate.title}': {e}")
                    continue
                seen.add(key)
                seen.add(saved.normalized_title)
                accepted.append(saved)

        logger.info(
            f"Collected {len(accepted)}/{required} generated recipes in {attempts} attempts"
        )
        return accepted

    async def start_session(
        self,
        pantry: Sequence[PantryEntry],
        min_prep_time: int,
        max_prep_time: int,
        batch_size: int,
    ) -> BatchResult:
        """Match recipes for a pantry, open a session and return its first batch.

        Raises:
            ValueError: if the batch size or filters are malformed
        """
        self._validate_batch_size(batch_size)
        self._validate_filters(pantry, min_prep_time, max_prep_time)
        pantry = tuple(pantry)

        matches = self.engine.find_matches(pantry, min_prep_time, max_prep_time)

        generated: list[RecipeCandidate] = []
        shortfall = min(batch_size - len(matches), self.cache.max_generated_per_session)
        if shortfall > 0:
            found_titles = {recipe.normalized_title for recipe in matches}
            generated = await self.fetch_generated(
                pantry, min_prep_time, max_prep_time, found_titles, shortfall
            )

        token = self.cache.create(pantry, min_prep_time, max_prep_time, [*matches, *generated])
        batch = self.cache.draw(token, batch_size)
        snapshot = self.cache.snapshot(token)
        return BatchResult(
            token=token,
            recipes=batch,
            message=self._build_message(batch, batch_size, snapshot, first_batch=True),
            exhausted=snapshot is None or snapshot.exhausted,
        )

    async def _generate_into(self, token: str, snapshot: SessionSnapshot, count: int) -> int:
        """Generate recipes for a session and merge them into its entry."""
        if not self.cache.mark_generating(token):
            return 0
        try:
            generated = await self.fetch_generated(
                snapshot.pantry,
                snapshot.min_prep_time,
                snapshot.max_prep_time,
                set(snapshot.all_titles),
                count,
            )
            return self.cache.append(token, generated) or 0
        finally:
            self.cache.mark_settled(token)

    async def next_batch(self, token: str, batch_size: int) -> BatchResult:
        """Return the next batch for a session.

        Unknown or expired tokens yield an empty batch. When cached recipes run
        out and quota remains, the generator is asked for the missing slots;
        the round completes and is merged even if the caller goes away.

        Raises:
            ValueError: if the batch size is not positive
        """
        self._validate_batch_size(batch_size)

        if self.cache.snapshot(token) is None:
            return BatchResult(
                token=token, recipes=[], message=SESSION_NOT_FOUND_MESSAGE, exhausted=True
            )

        batch = self.cache.draw(token, batch_size)
        remaining = batch_size - len(batch)
        snapshot = self.cache.snapshot(token)

        if remaining > 0 and snapshot is not None and snapshot.remaining_quota > 0:
            to_fetch = min(remaining, snapshot.remaining_quota)
            task = asyncio.ensure_future(self._generate_into(token, snapshot, to_fetch))
            _pending_generations.add(task)
            task.add_done_callback(_pending_generations.discard)
            await asyncio.shield(task)
            batch.extend(self.cache.draw(token, remaining))

        snapshot = self.cache.snapshot(token)
        return BatchResult(
            token=token,
            recipes=batch,
            message=self._build_message(batch, batch_size, snapshot),
            exhausted=snapshot is None or snapshot.exhausted,
        )

    def end_session(self, token: str) -> bool:
        """Discard a session explicitly."""
        return self.cache.remove(token)
