from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gametracker.core.errors import ErrorCode, NotFoundError, PersistenceError
from gametracker.models.game import Game
from gametracker.schemas.game import GameIn


logger = logging.getLogger(__name__)

SearchField = Literal["title", "status", "genre"]

_SEARCH_COLUMNS = {
    "title": Game.title,
    "status": Game.status,
    "genre": Game.genre,
}


async def list_games(session: AsyncSession) -> list[Game]:
    try:
        result = await session.execute(select(Game).order_by(Game.id))
    except SQLAlchemyError:
        logger.exception("Failed to list games")
        raise PersistenceError("Error obtaining games")
    return list(result.scalars().all())


async def get_game(session: AsyncSession, game_id: int) -> Game:
    try:
        game = await session.get(Game, game_id)
    except SQLAlchemyError:
        logger.exception("Failed to load game %s", game_id)
        raise PersistenceError("Error obtaining game")
    if game is None:
        raise NotFoundError("Game not found")
    return game


async def create_game(session: AsyncSession, data: GameIn) -> Game:
    now = datetime.now(timezone.utc)
    game = Game(**data.model_dump(), created_at=now, updated_at=now)
    session.add(game)
    try:
        await session.commit()
        await session.refresh(game)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Failed to create game %r", data.title)
        raise PersistenceError("Error creating game")
    logger.info("Created game id=%s", game.id)
    return game


async def replace_game(session: AsyncSession, game_id: int, data: GameIn) -> Game:
    game = await get_game(session, game_id)

    for field, value in data.model_dump().items():
        setattr(game, field, value)
    game.updated_at = datetime.now(timezone.utc)

    try:
        await session.commit()
        await session.refresh(game)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Failed to update game %s", game_id)
        raise PersistenceError("Error updating game")
    return game


async def delete_game(session: AsyncSession, game_id: int) -> None:
    game = await get_game(session, game_id)
    try:
        await session.delete(game)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception("Failed to delete game %s", game_id)
        raise PersistenceError("Error deleting game")
    logger.info("Deleted game id=%s", game_id)


async def search_games(session: AsyncSession, field: SearchField, term: str) -> list[Game]:
    """Case-insensitive substring match on one column; an empty term matches everything."""
    column = _SEARCH_COLUMNS[field]
    try:
        result = await session.execute(
            select(Game).where(column.ilike(f"%{term}%")).order_by(Game.id)
        )
    except SQLAlchemyError:
        logger.exception("Search on %s failed", field)
        raise PersistenceError("Error searching games", ErrorCode.LOOKUP_FAILED)
    return list(result.scalars().all())
