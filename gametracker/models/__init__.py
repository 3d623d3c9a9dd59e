from gametracker.models.base import Base
from gametracker.models.game import Game
from gametracker.models.user import User

__all__ = ["Base", "Game", "User"]
