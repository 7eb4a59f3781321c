from ats_pickem import db  # noqa: F401 - imported for model imports

from .game import BOWL_SCOPE, BowlGame, Game, is_bowl_scope, model_for_scope
from .pick import BowlPick, Pick
from .team_alias import TeamAlias
from .user import User

__all__ = [
    "User",
    "Game",
    "BowlGame",
    "Pick",
    "BowlPick",
    "TeamAlias",
    "BOWL_SCOPE",
    "is_bowl_scope",
    "model_for_scope",
]
