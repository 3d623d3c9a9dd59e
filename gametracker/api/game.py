from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from gametracker.api.deps import get_stats_aggregator
from gametracker.core.db import get_session
from gametracker.schemas.game import GameIn, GameOut, GameStats, MessageResponse
from gametracker.services import games as games_service
from gametracker.services.stats import StatsAggregator


router = APIRouter(prefix="/games", tags=["games"])


@router.get("/", response_model=list[GameOut])
async def list_games(session: AsyncSession = Depends(get_session)):
    return await games_service.list_games(session)


@router.post("/", response_model=GameOut, status_code=status.HTTP_201_CREATED)
async def create_game(body: GameIn, session: AsyncSession = Depends(get_session)):
    return await games_service.create_game(session, body)


# static paths go before /{game_id}
@router.get("/title", response_model=list[GameOut])
async def search_by_title(title: str = "", session: AsyncSession = Depends(get_session)):
    return await games_service.search_games(session, "title", title)


@router.get("/status", response_model=list[GameOut])
async def search_by_status(status: str = "", session: AsyncSession = Depends(get_session)):
    return await games_service.search_games(session, "status", status)


@router.get("/genre", response_model=list[GameOut])
async def search_by_genre(genre: str = "", session: AsyncSession = Depends(get_session)):
    return await games_service.search_games(session, "genre", genre)


@router.get("/stats", response_model=GameStats)
async def get_stats(stats: StatsAggregator = Depends(get_stats_aggregator)):
    return await stats.compute()


@router.get("/{game_id}", response_model=GameOut)
async def get_game(game_id: int, session: AsyncSession = Depends(get_session)):
    return await games_service.get_game(session, game_id)


@router.put("/{game_id}", response_model=GameOut)
async def update_game(game_id: int, body: GameIn, session: AsyncSession = Depends(get_session)):
    return await games_service.replace_game(session, game_id, body)


@router.delete("/{game_id}", response_model=MessageResponse)
async def delete_game(game_id: int, session: AsyncSession = Depends(get_session)):
    await games_service.delete_game(session, game_id)
    return MessageResponse(message="Game deleted successfully")
