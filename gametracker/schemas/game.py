from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GameIn(BaseModel):
    """Body for create and full replace; omitted fields fall back to defaults."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(..., min_length=1, max_length=255)
    platform: str = Field(default="", max_length=100)
    genre: str = Field(default="", max_length=100)
    status: str = Field(default="", max_length=50)
    progress: int = Field(default=0, ge=0, le=100)
    hours_played: float = Field(default=0.0, ge=0, allow_inf_nan=False, alias="hoursPlayed")
    personal_note: str = Field(default="", alias="personalNote")
    score: int = Field(default=0, ge=0, le=10)
    started_at: Optional[datetime] = Field(default=None, alias="startedAt")
    finished_at: Optional[datetime] = Field(default=None, alias="finishedAt")
    cover_url: str = Field(default="", max_length=500, alias="coverURL")


class GameOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    title: str
    platform: str
    genre: str
    status: str
    progress: int
    hours_played: float = Field(alias="hoursPlayed")
    personal_note: str = Field(alias="personalNote")
    score: int
    started_at: Optional[datetime] = Field(default=None, alias="startedAt")
    finished_at: Optional[datetime] = Field(default=None, alias="finishedAt")
    cover_url: str = Field(alias="coverURL")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class GameStats(BaseModel):
    total_games: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    average_hours_played: float = 0.0
    most_played_genre: str = ""
    pending_games: int = 0


class MessageResponse(BaseModel):
    message: str
