"""Persistence-aware registry of live Find Words games."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Sequence

from ..services import high_scores
from ..services.combo import DEFAULT_COMBO_TIME_LIMIT, ComboEngine
from ..services.engine import create_high_score, create_new_game
from .models import GameSession, GameSettings, GameState, HighScore
from .storage import SnapshotStorage


@dataclass(eq=False)
class LiveGame:
    """A session together with the per-game resources that outlive snapshots."""

    session: GameSession
    combo: ComboEngine
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    score_recorded: bool = False

    @property
    def game_id(self) -> str:
        return self.session.id


class GameStateManager:
    """Keep live games in memory and mirror the latest one to storage.

    Only one game is persisted at a time under ``current_game``; finished
    games are moved into the high-score table instead.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        *,
        combo_time_limit: timedelta = DEFAULT_COMBO_TIME_LIMIT,
    ) -> None:
        self._logger = logging.getLogger(__name__)
        self._storage = storage
        self._combo_time_limit = combo_time_limit
        self._games: Dict[str, LiveGame] = {}
        self._load_from_disk()

    @property
    def storage(self) -> SnapshotStorage:
        return self._storage

    # Creation helpers -------------------------------------------------
    def create_game(
        self,
        settings: Optional[GameSettings] = None,
        *,
        letters: Optional[Sequence[str]] = None,
        rng: Optional[random.Random] = None,
    ) -> LiveGame:
        """Create a NOT_STARTED game using ``settings`` or the saved ones."""

        if settings is None:
            settings = self._storage.load_settings()
        else:
            self._storage.save_settings(settings)
        session = create_new_game(settings, letters=letters, rng=rng)
        live = self._register(session)
        self._persist(live)
        return live

    # Lookup helpers ---------------------------------------------------
    def get(self, game_id: str) -> Optional[LiveGame]:
        return self._games.get(game_id)

    def high_scores(self) -> List[HighScore]:
        return self._storage.load_high_scores()

    # Mutation helpers -------------------------------------------------
    def save(self, live: LiveGame, session: GameSession) -> GameSession:
        """Store a new snapshot for ``live`` and persist it.

        The first time a game is seen finished its score is offered to the
        high-score table and the saved current game is cleared.
        """

        live.session = session
        if session.state is GameState.FINISHED:
            live.combo.close()
            self._record_high_score(live)
            self._storage.clear_current_game()
        else:
            self._persist(live)
        return session

    def drop_game(self, game_id: str) -> None:
        live = self._games.pop(game_id, None)
        if live is None:
            return
        live.combo.close()
        saved = self._storage.load_current_game()
        if saved is not None and saved.id == game_id:
            self._storage.clear_current_game()

    def reset(self) -> None:
        """Forget every live game and wipe storage (used in tests)."""

        for live in self._games.values():
            live.combo.close()
        self._games.clear()
        self._storage.clear()

    # Internal helpers -------------------------------------------------
    def _register(self, session: GameSession) -> LiveGame:
        live = LiveGame(session=session, combo=ComboEngine(self._combo_time_limit))
        self._games[session.id] = live
        return live

    def _record_high_score(self, live: LiveGame) -> None:
        if live.score_recorded:
            return
        live.score_recorded = True
        if not live.session.found_words:
            return
        entry = create_high_score(live.session)
        scores = self._storage.load_high_scores()
        if not high_scores.is_high_score(scores, entry.score, entry.difficulty):
            self._logger.info("Score %d did not reach the %s leaderboard", entry.score, entry.difficulty.value)
            return
        updated = high_scores.add_high_score(scores, entry)
        self._storage.save_high_scores(high_scores.remove_duplicates(updated))
        self._logger.info("New %s high score for %s: %d", entry.difficulty.value, entry.player_name, entry.score)

    def _persist(self, live: LiveGame) -> None:
        if not self._storage.save_current_game(live.session):
            self._logger.warning("Game %s was not persisted", live.game_id)

    def _load_from_disk(self) -> None:
        """Restore the saved game, if any, so it can be resumed."""

        session = self._storage.load_current_game()
        if session is None:
            return
        if session.is_finished:
            self._storage.clear_current_game()
            return
        self._register(session)
        self._logger.info("Restored saved game %s (%s)", session.id, session.state.name)


__all__ = ["GameStateManager", "LiveGame"]
