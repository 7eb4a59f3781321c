"""
Provider-neutral shapes for games and results coming from outside.

Provider clients convert their own payloads into these before anything in
the services layer sees them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ExternalGameLine:
    """A game with a betting line, already turned into favorite/underdog form"""

    game_id: str
    favorite: str
    underdog: str
    line: float
    kickoff: Optional[datetime]
    home_team: str
    away_team: str
    year: int
    week: Optional[int] = None
    bowl_name: str = ""
    line_provider: str = "unknown"


@dataclass(frozen=True)
class ExternalGameResult:
    """A final (or in-progress) score from a results provider"""

    home_team: str
    away_team: str
    home_score: int
    away_score: int
    is_completed: bool
    game_id: str = ""
    year: Optional[int] = None
    week: Optional[int] = None  # None for bowl games
