from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gametracker.core.errors import PersistenceError
from gametracker.models.game import Game
from gametracker.schemas.game import GameStats


logger = logging.getLogger(__name__)

COMPLETED_STATUS = "Completed"


def is_pending(game: Game) -> bool:
    return game.status != COMPLETED_STATUS and game.progress < 100


def summarize(games: Iterable[Game]) -> GameStats:
    """Single pass over ``games``.

    The most played genre is the one with the strictly highest count; on a
    tie the genre seen first in ``games`` wins (dicts keep insertion order).
    """
    by_status: dict[str, int] = {}
    by_genre: dict[str, int] = {}
    total_hours = 0.0
    pending = 0
    total = 0

    for game in games:
        total += 1
        by_status[game.status] = by_status.get(game.status, 0) + 1
        by_genre[game.genre] = by_genre.get(game.genre, 0) + 1
        total_hours += game.hours_played
        if is_pending(game):
            pending += 1

    most_played_genre = ""
    best = 0
    for genre, count in by_genre.items():
        if count > best:
            best = count
            most_played_genre = genre

    average_hours = total_hours / total if total else 0.0

    return GameStats(
        total_games=total,
        by_status=by_status,
        average_hours_played=average_hours,
        most_played_genre=most_played_genre,
        pending_games=pending,
    )


class StatsAggregator:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def compute(self) -> GameStats:
        try:
            result = await self.session.execute(select(Game).order_by(Game.id))
        except SQLAlchemyError:
            logger.exception("Stats scan failed")
            raise PersistenceError("Error obtaining statistics")
        return summarize(result.scalars().all())
