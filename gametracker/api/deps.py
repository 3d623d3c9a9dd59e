from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gametracker.core.db import get_session
from gametracker.services.auth import AuthService
from gametracker.services.stats import StatsAggregator


def get_auth_service(request: Request, session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session, request.app.state.hasher, request.app.state.tokens)


def get_stats_aggregator(session: AsyncSession = Depends(get_session)) -> StatsAggregator:
    return StatsAggregator(session)
