"""
CollegeFootballData (CFBD) API client

Fetches betting lines and final scores. Raw JSON is parsed into frozen
payload classes (CfbdGameLine, CfbdLine, CfbdGame) and converted straight
into ExternalGameLine / ExternalGameResult.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import wraps
from typing import Optional, Tuple

import requests

from ats_pickem.providers.base import ExternalGameLine, ExternalGameResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.collegefootballdata.com"


def rate_limit_decorator(max_retries=3, base_delay=1.0, backoff_factor=2.0):
    """
    Decorator to handle API rate limiting with exponential backoff
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return func(self, *args, **kwargs)

                except requests.exceptions.HTTPError as e:
                    status = e.response.status_code if e.response is not None else None
                    retryable = status == 429 or (status is not None and status >= 500)
                    if not retryable or attempt == max_retries - 1:
                        raise

                    delay = base_delay * (backoff_factor**attempt)
                    if status == 429:
                        delay = float(e.response.headers.get("Retry-After", delay))
                    logger.warning(
                        f"HTTP {status}. Waiting {delay}s before retry {attempt + 1}/{max_retries}"
                    )
                    time.sleep(delay)

                except requests.exceptions.RequestException as e:
                    if attempt == max_retries - 1:
                        raise

                    delay = base_delay * (backoff_factor**attempt)
                    logger.warning(
                        f"Request failed: {e}. Waiting {delay}s before retry {attempt + 1}/{max_retries}"
                    )
                    time.sleep(delay)

        return wrapper

    return decorator


def _parse_datetime(value):
    """CFBD timestamps are ISO 8601 with a trailing Z"""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class CfbdLine:
    provider: Optional[str]
    spread: Optional[float]
    over_under: Optional[float] = None

    @classmethod
    def from_json(cls, data):
        spread = data.get("spread")
        over_under = data.get("overUnder")
        return cls(
            provider=data.get("provider"),
            spread=float(spread) if spread is not None else None,
            over_under=float(over_under) if over_under is not None else None,
        )


@dataclass(frozen=True)
class CfbdGameLine:
    id: int
    home_team: str
    away_team: str
    start_date: Optional[datetime]
    notes: Optional[str]
    week: Optional[int]
    lines: Tuple[CfbdLine, ...] = ()

    @classmethod
    def from_json(cls, data):
        return cls(
            id=data.get("id"),
            home_team=data.get("homeTeam") or "",
            away_team=data.get("awayTeam") or "",
            start_date=_parse_datetime(data.get("startDate")),
            notes=data.get("notes"),
            week=data.get("week"),
            lines=tuple(CfbdLine.from_json(line) for line in data.get("lines") or []),
        )

    def preferred_line(self, provider):
        """The named provider's line, else the first line with a spread"""
        for line in self.lines:
            if line.provider and line.provider.lower() == provider.lower():
                if line.spread is not None:
                    return line
        for line in self.lines:
            if line.spread is not None:
                return line
        return None

    def bowl_name(self):
        return self.notes or f"{self.away_team} vs {self.home_team}"


@dataclass(frozen=True)
class CfbdGame:
    id: int
    season: int
    week: Optional[int]
    home_team: str
    away_team: str
    home_points: Optional[int]
    away_points: Optional[int]
    completed: bool
    start_date: Optional[datetime] = None

    @classmethod
    def from_json(cls, data):
        return cls(
            id=data.get("id"),
            season=data.get("season"),
            week=data.get("week"),
            home_team=data.get("homeTeam") or "",
            away_team=data.get("awayTeam") or "",
            home_points=data.get("homePoints"),
            away_points=data.get("awayPoints"),
            completed=data.get("completed") is True,
            start_date=_parse_datetime(data.get("startDate")),
        )

    def to_result(self):
        return ExternalGameResult(
            home_team=self.home_team,
            away_team=self.away_team,
            home_score=self.home_points or 0,
            away_score=self.away_points or 0,
            is_completed=self.completed,
            game_id=str(self.id),
            year=self.season,
            week=self.week,
        )


def favorite_and_line(home_team, away_team, spread):
    """
    Convert a home-perspective spread to (favorite, underdog, line).

    CFBD spreads are negative when the home team is favored. A zero spread
    lists the home team as the favorite.
    """
    if spread > 0:
        return away_team, home_team, -spread
    return home_team, away_team, spread if spread < 0 else 0.0


class CollegeFootballDataProvider:
    """Client for the CFBD REST API with rate limiting and retry logic"""

    name = "CollegeFootballData"

    def __init__(self, api_key=None, base_url=None, line_provider="consensus", session=None):
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.line_provider = line_provider
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "ATS-Pickem-App/1.0"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

        # Rate limiting configuration
        self.request_count = 0
        self.last_request_time = 0
        self.min_request_interval = 0.5  # Minimum 500ms between requests
        self.max_requests_per_minute = 60
        self.request_timestamps = []

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get("CFBD_API_KEY"),
            base_url=config.get("CFBD_API_BASE_URL"),
            line_provider=config.get("CFBD_LINE_PROVIDER") or "consensus",
        )

    def _enforce_rate_limit(self):
        """Enforce rate limiting before making requests"""
        current_time = time.time()

        # Remove timestamps older than 1 minute
        self.request_timestamps = [
            ts for ts in self.request_timestamps if current_time - ts < 60
        ]

        if len(self.request_timestamps) >= self.max_requests_per_minute:
            sleep_time = 60 - (current_time - self.request_timestamps[0])
            if sleep_time > 0:
                logger.info(f"Rate limit reached. Sleeping for {sleep_time:.1f}s")
                time.sleep(sleep_time)
                self.request_timestamps = []

        time_since_last = current_time - self.last_request_time
        if time_since_last < self.min_request_interval:
            time.sleep(self.min_request_interval - time_since_last)

        self.last_request_time = time.time()
        self.request_timestamps.append(self.last_request_time)
        self.request_count += 1

    @rate_limit_decorator(max_retries=3, base_delay=2.0)
    def _get(self, path, params=None):
        """GET a CFBD endpoint and return the decoded JSON list"""
        self._enforce_rate_limit()
        url = f"{self.base_url}{path}"

        try:
            response = self.session.get(url, params=params, timeout=30)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            logger.warning(f"Request timeout for {url}")
            raise
        except requests.exceptions.ConnectionError:
            logger.warning(f"Connection error for {url}")
            raise
        except requests.exceptions.HTTPError as e:
            logger.error(f"HTTP error {e.response.status_code}: {url}")
            raise

        return response.json() or []

    def _to_line(self, game_line, year, week=None):
        line = game_line.preferred_line(self.line_provider)
        if line is None:
            return None

        favorite, underdog, spread = favorite_and_line(
            game_line.home_team, game_line.away_team, line.spread
        )
        return ExternalGameLine(
            game_id=str(game_line.id),
            favorite=favorite,
            underdog=underdog,
            line=spread,
            kickoff=game_line.start_date,
            home_team=game_line.home_team,
            away_team=game_line.away_team,
            year=year,
            week=week,
            bowl_name=game_line.bowl_name() if week is None else "",
            line_provider=line.provider or "unknown",
        )

    def get_weekly_lines(self, year, week):
        """Games with a spread for a regular-season week"""
        logger.info(f"Fetching lines for {year} week {week} from CFBD")
        payload = self._get(
            "/lines", {"year": year, "week": week, "seasonType": "regular"}
        )

        lines = []
        for item in payload:
            external = self._to_line(CfbdGameLine.from_json(item), year, week)
            if external is not None:
                lines.append(external)

        if not lines:
            logger.warning(f"No games with lines found for {year} week {week}")
        else:
            logger.info(f"Retrieved {len(lines)} games with lines for {year} week {week}")
        return lines

    def get_bowl_lines(self, year):
        """Postseason games with a spread, in kickoff order"""
        logger.info(f"Fetching bowl lines for {year} from CFBD")
        payload = self._get("/lines", {"year": year, "seasonType": "postseason"})

        game_lines = sorted(
            (CfbdGameLine.from_json(item) for item in payload),
            key=lambda g: g.start_date or datetime.min.replace(tzinfo=timezone.utc),
        )

        lines = []
        for game_line in game_lines:
            external = self._to_line(game_line, year)
            if external is not None:
                lines.append(external)

        logger.info(f"Retrieved {len(lines)} bowl games with lines for {year}")
        return lines

    def get_weekly_results(self, year, week):
        """Completed regular-season games for a week"""
        logger.info(f"Fetching results for {year} week {week} from CFBD")
        payload = self._get(
            "/games", {"year": year, "week": week, "seasonType": "regular"}
        )
        results = [
            game.to_result()
            for game in (CfbdGame.from_json(item) for item in payload)
            if game.completed
        ]
        logger.info(f"Retrieved {len(results)} completed results for {year} week {week}")
        return results

    def get_bowl_results(self, year):
        logger.info(f"Fetching bowl results for {year} from CFBD")
        payload = self._get("/games", {"year": year, "seasonType": "postseason"})
        return [CfbdGame.from_json(item).to_result() for item in payload]

    def get_game_result(self, game_id):
        """Result for one CFBD game id, None when CFBD does not know it"""
        payload = self._get("/games", {"id": game_id})
        if not payload:
            logger.warning(f"Game {game_id} not found in CFBD")
            return None
        return CfbdGame.from_json(payload[0]).to_result()

    def get_rate_limit_status(self):
        current_time = time.time()
        recent = [ts for ts in self.request_timestamps if current_time - ts < 60]
        return {
            "requests_last_minute": len(recent),
            "max_requests_per_minute": self.max_requests_per_minute,
            "total_requests": self.request_count,
        }
