from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, Set, Tuple

from rasoi_revive.config import Settings
from rasoi_revive.core.board import RecipeBoard
from rasoi_revive.core.cards import render_card
from rasoi_revive.core.leftovers import LeftoverList
from rasoi_revive.core.models import KitchenState, KitchenStatus, RecipeBatch, RecipeCardView
from .exceptions import (
    GenerationError,
    GenerationInProgressError,
    ImageGenerationError,
    LeftoverValidationError,
    SafetyBlockedError,
)
from .llm import RecipeGenerator
from .metrics import MetricsLogger

logger = logging.getLogger(__name__)

EMPTY_LEFTOVERS_MESSAGE = "Add at least one item first!"
GENERIC_FAILURE_MESSAGE = "The chef is busy. Try again!"
BUSY_MESSAGE = "The chef is already cooking. Please wait for the current recipes."

Listener = Callable[[str, KitchenState], None]


class KitchenSession:
    """
    One user's leftovers, recipes and generation workflow.

    Status moves idle -> loading -> success | failed. In success, images arrive one
    recipe at a time; `is_loading` stays set until the last image attempt settles.
    Image requests are strictly sequential to stay inside the service's rate limit.
    """

    def __init__(
        self,
        generator: RecipeGenerator,
        settings: Optional[Settings] = None,
        metrics: Optional[MetricsLogger] = None,
    ):
        self.settings = settings or Settings()
        self._generator = generator
        self._metrics = metrics
        self._lock = threading.RLock()
        self._leftovers = LeftoverList()
        self._board = RecipeBoard()
        self._expanded: Set[str] = set()
        self._status = KitchenStatus.IDLE
        self._is_loading = False
        self._error: Optional[str] = None
        # Bumped by clear_all so a superseded run cannot repopulate the board.
        self._epoch = 0
        self._listeners: List[Listener] = []

    # ---- Observation ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, event: str) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(event, state)
            except Exception:
                logger.exception("Kitchen listener failed on %r", event)

    def snapshot(self) -> KitchenState:
        with self._lock:
            return KitchenState(
                status=self._status,
                leftovers=self._leftovers.items(),
                recipes=self._board.recipes(),
                is_loading=self._is_loading,
                error=self._error,
                can_generate=bool(len(self._leftovers)) and not self._is_loading,
            )

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._is_loading

    # ---- Leftovers -----------------------------------------------------------

    def add_leftover(self, raw: str) -> List[str]:
        with self._lock:
            self._leftovers.append(raw)
            return self._leftovers.items()

    def remove_leftover(self, index: int) -> List[str]:
        with self._lock:
            self._leftovers.remove(index)
            return self._leftovers.items()

    def leftovers(self) -> List[str]:
        with self._lock:
            return self._leftovers.items()

    def clear_all(self) -> KitchenState:
        """Drop leftovers, recipes and any error. A running workflow keeps running but is ignored."""
        with self._lock:
            self._leftovers.clear()
            self._board.clear()
            self._expanded.clear()
            self._error = None
            self._epoch += 1
            if not self._is_loading:
                self._status = KitchenStatus.IDLE
        self._notify("cleared")
        return self.snapshot()

    # ---- Cards ---------------------------------------------------------------

    def cards(self) -> List[RecipeCardView]:
        with self._lock:
            return [render_card(r, r.id in self._expanded, self._is_loading) for r in self._board]

    def card(self, recipe_id: str) -> RecipeCardView:
        with self._lock:
            recipe = self._board.get(recipe_id)
            if recipe is None:
                raise KeyError(recipe_id)
            return render_card(recipe, recipe_id in self._expanded, self._is_loading)

    def toggle_card(self, recipe_id: str) -> RecipeCardView:
        with self._lock:
            if recipe_id not in self._board:
                raise KeyError(recipe_id)
            if recipe_id in self._expanded:
                self._expanded.discard(recipe_id)
            else:
                self._expanded.add(recipe_id)
            return self.card(recipe_id)

    # ---- Generation workflow -------------------------------------------------

    def begin_generation(self) -> Tuple[int, List[str]]:
        """
        Enter `loading`, clearing the previous batch and error.

        Returns the (epoch, leftovers) pair to hand to `run_generation`.
        Raises LeftoverValidationError when there is nothing to cook with and
        GenerationInProgressError while a previous run is unsettled.
        """
        with self._lock:
            if self._is_loading:
                raise GenerationInProgressError(BUSY_MESSAGE)
            empty = not len(self._leftovers)
            if empty:
                self._error = EMPTY_LEFTOVERS_MESSAGE
            else:
                self._start_loading()
                epoch, leftovers = self._epoch, self._leftovers.items()
        if empty:
            self._notify("validation")
            raise LeftoverValidationError(EMPTY_LEFTOVERS_MESSAGE)
        self._notify("loading")
        return epoch, leftovers

    def _start_loading(self) -> None:
        self._error = None
        self._board.clear()
        self._expanded.clear()
        self._status = KitchenStatus.LOADING
        self._is_loading = True

    def run_generation(self, epoch: int, leftovers: List[str]) -> KitchenState:
        """Fetch the batch, publish it, then fetch images one by one. Always clears `is_loading`."""
        try:
            batch = self._fetch_batch(epoch, leftovers)
            if batch is not None and self.settings.generate_images:
                self._fetch_images(epoch, batch)
        finally:
            with self._lock:
                self._is_loading = False
                if not self._current(epoch):
                    self._status = KitchenStatus.IDLE
            self._notify("done")
        return self.snapshot()

    def generate(self) -> KitchenState:
        epoch, leftovers = self.begin_generation()
        return self.run_generation(epoch, leftovers)

    def _current(self, epoch: int) -> bool:
        return epoch == self._epoch

    def _fetch_batch(self, epoch: int, leftovers: List[str]) -> Optional[RecipeBatch]:
        t0 = time.perf_counter()
        try:
            batch = self._generator.generate_recipes(leftovers)
        except GenerationError as e:
            self._record_latency("recipes_generate", t0, ok=False, extra={"leftovers": len(leftovers)})
            with self._lock:
                if not self._current(epoch):
                    return None
                self._status = KitchenStatus.FAILED
                self._error = str(e) or GENERIC_FAILURE_MESSAGE
                self._board.clear()
            self._notify("failed")
            return None
        self._record_latency(
            "recipes_generate", t0, ok=True,
            extra={"leftovers": len(leftovers), "recipes": len(batch.recipes)},
        )

        with self._lock:
            if not self._current(epoch):
                logger.info("Discarding recipe batch from a cleared session")
                return None
            self._board.replace(batch.recipes)
            self._status = KitchenStatus.SUCCESS
        # Results are on screen before any image is requested.
        self._notify("recipes_ready")
        return batch

    def _fetch_images(self, epoch: int, batch: RecipeBatch) -> None:
        for recipe in batch.recipes:
            with self._lock:
                if not self._current(epoch):
                    return
            t0 = time.perf_counter()
            try:
                image_url = self._generator.generate_image(recipe.recipe_name, recipe.description)
            except SafetyBlockedError as e:
                self._record_latency("image_generate", t0, ok=False, extra={"recipe": recipe.id, "blocked": True})
                logger.warning("Image for %s was blocked (%s)", recipe.recipe_name, e.finish_reason)
                continue
            except ImageGenerationError as e:
                self._record_latency("image_generate", t0, ok=False, extra={"recipe": recipe.id})
                logger.warning("Failed to generate image for %s: %s", recipe.recipe_name, e)
                continue
            self._record_latency("image_generate", t0, ok=True, extra={"recipe": recipe.id})

            with self._lock:
                if not self._current(epoch):
                    return
                attached = self._board.attach_image(recipe.id, image_url)
            if attached:
                self._notify("image")

    def _record_latency(self, name: str, t0: float, ok: bool, extra: Dict[str, object]) -> None:
        if self._metrics is None:
            return
        self._metrics.log_latency(name, (time.perf_counter() - t0) * 1000.0, ok=ok, extra=extra)


class KitchenRegistry:
    """
    Kitchen sessions keyed by device id, created on first use.

    Sessions idle longer than `session_ttl_seconds` are dropped, and once
    `max_sessions` is reached the least recently used one goes. A session with
    a workflow in flight is never dropped.
    """

    def __init__(
        self,
        generator: RecipeGenerator,
        settings: Optional[Settings] = None,
        metrics: Optional[MetricsLogger] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or Settings()
        self._generator = generator
        self._metrics = metrics
        self._clock = clock
        # Least recently used first
        self._sessions: "OrderedDict[str, KitchenSession]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def get(self, device_id: str) -> KitchenSession:
        now = self._clock()
        with self._lock:
            session = self._sessions.get(device_id)
            if session is None:
                self._evict(now)
                session = KitchenSession(self._generator, self.settings, self._metrics)
                self._sessions[device_id] = session
            else:
                self._sessions.move_to_end(device_id)
            self._last_seen[device_id] = now
            return session

    def _evict(self, now: float) -> None:
        """Make room for one new session."""
        ttl = self.settings.session_ttl_seconds
        limit = self.settings.max_sessions - 1
        for device_id, session in list(self._sessions.items()):
            expired = now - self._last_seen[device_id] > ttl
            full = len(self._sessions) > limit
            if not (expired or full):
                # Everything after this one was seen more recently.
                break
            if session.is_loading:
                continue
            del self._sessions[device_id]
            del self._last_seen[device_id]
            logger.debug("Dropped kitchen session for %s", device_id)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
