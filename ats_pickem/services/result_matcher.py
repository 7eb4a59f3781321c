"""
Match provider results to tracked games.

Providers report home/away teams under their own spellings; tracked games
know favorite/underdog under ours. Both sides are normalized and compared as
unordered pairs, then the provider's home/away scores are mapped onto the
favorite/underdog columns. Nothing here writes results.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from ats_pickem.services.game_service import GameCatalog

logger = logging.getLogger(__name__)


@dataclass
class MatchedResult:
    game_id: int
    favorite_score: int
    underdog_score: int


@dataclass
class UnmatchedResult:
    home_team: str
    away_team: str
    reason: str = "Game not found"


@dataclass
class MatchResult:
    matched: List[MatchedResult] = field(default_factory=list)
    unmatched: List[UnmatchedResult] = field(default_factory=list)
    already_resolved_count: int = 0
    skipped_incomplete_count: int = 0


def _pair_key(first, second):
    return frozenset((first.casefold(), second.casefold()))


class ResultMatcher:
    def __init__(self, normalizer, catalog=None):
        self.normalizer = normalizer
        self.catalog = catalog or GameCatalog(normalizer)

    def match(self, year, scope, external_results):
        external_results = list(external_results)
        result = MatchResult()

        logger.info(
            f"Matching {len(external_results)} external results to games for {year} {scope}"
        )
        if not external_results:
            return result

        games_by_pair = {}
        for game in self.catalog.get_games_for(year, scope):
            favorite = self.normalizer.normalize(game.favorite_name)
            underdog = self.normalizer.normalize(game.underdog_name)
            key = _pair_key(favorite, underdog)

            if key in games_by_pair:
                logger.warning(
                    f"Duplicate game found for teams {game.favorite_name} vs {game.underdog_name}"
                )
                continue
            games_by_pair[key] = (game, favorite)

        for external in external_results:
            if not external.is_completed:
                result.skipped_incomplete_count += 1
                logger.debug(
                    f"Skipping incomplete game: {external.home_team} vs {external.away_team}"
                )
                continue

            home = self.normalizer.normalize(external.home_team)
            away = self.normalizer.normalize(external.away_team)
            entry = games_by_pair.get(_pair_key(home, away))

            if entry is None:
                logger.warning(
                    f"Could not find game for {external.home_team} vs {external.away_team}"
                )
                result.unmatched.append(
                    UnmatchedResult(external.home_team, external.away_team)
                )
                continue

            game, favorite = entry
            if game.has_result:
                result.already_resolved_count += 1
                logger.debug(f"Skipping game {game.id} - already has a result")
                continue

            # Home/away says nothing about favorite/underdog
            if home.casefold() == favorite.casefold():
                favorite_score, underdog_score = external.home_score, external.away_score
            else:
                favorite_score, underdog_score = external.away_score, external.home_score

            result.matched.append(MatchedResult(game.id, favorite_score, underdog_score))
            logger.debug(
                f"Matched game {game.id}: {external.home_team} {external.home_score} vs "
                f"{external.away_team} {external.away_score} -> "
                f"fav {favorite_score}, dog {underdog_score}"
            )

        logger.info(
            f"Matching complete: {len(result.matched)} matched, "
            f"{len(result.unmatched)} unmatched, "
            f"{result.already_resolved_count} already had results"
        )
        return result
