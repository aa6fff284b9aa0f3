"""Data models for the football tournament records."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import InvalidRecordError, UnsupportedRecordError


PHASES = ("group", "quarter", "semi", "final")
MATCH_STATUSES = ("upcoming", "live", "completed")
MATCH_EVENT_TYPES = ("goal", "yellow-card", "red-card")
EVENT_TYPES = ("party", "fan", "concert", "ceremony")
MEDIA_TYPES = ("image", "video")

PHASE_ALIASES = {
    "quarterfinal": "quarter",
    "quarter-final": "quarter",
    "semifinal": "semi",
    "semi-final": "semi",
}

MATCH_EVENT_ALIASES = {
    "yellowCard": "yellow-card",
    "yellow_card": "yellow-card",
    "redCard": "red-card",
    "red_card": "red-card",
}


def _local_id(record: dict[str, Any]) -> str:
    value = record.get("id", record.get("_id"))
    if value is None or str(value).strip() == "":
        raise InvalidRecordError("record has no id")
    return str(value)


def _text(record: dict[str, Any], *keys: str) -> Optional[str]:
    """Return the first non-empty string found under any of the keys."""
    for key in keys:
        value = record.get(key)
        if value is not None and str(value).strip() != "":
            return str(value)
    return None


def _required_text(record: dict[str, Any], *keys: str) -> str:
    value = _text(record, *keys)
    if value is None:
        raise InvalidRecordError(f"missing required field '{keys[0]}'")
    return value


def _int(value: Any, name: str, default: Optional[int] = None) -> Optional[int]:
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidRecordError(f"'{name}' must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidRecordError(f"'{name}' must be an integer, got {value!r}") from None


def _mapping(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidRecordError(f"'{name}' must be an object, got {value!r}")
    return value


def _list(value: Any, name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidRecordError(f"'{name}' must be an array, got {value!r}")
    return value


def _choice(value: Optional[str], allowed: tuple[str, ...], name: str) -> str:
    if value not in allowed:
        raise InvalidRecordError(f"'{name}' must be one of {', '.join(allowed)}, got {value!r}")
    return value


@dataclass
class TeamStats:
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @classmethod
    def from_local(cls, stats: Optional[dict[str, Any]]) -> "TeamStats":
        stats = _mapping(stats, "stats")
        result = cls(
            played=_int(stats.get("played"), "played", 0),
            won=_int(stats.get("won"), "won", 0),
            drawn=_int(stats.get("drawn"), "drawn", 0),
            lost=_int(stats.get("lost"), "lost", 0),
            goals_for=_int(stats.get("goalsFor"), "goalsFor", 0),
            goals_against=_int(stats.get("goalsAgainst"), "goalsAgainst", 0),
            points=_int(stats.get("points"), "points", 0),
        )
        if result.points != 3 * result.won + result.drawn:
            raise InvalidRecordError(
                f"points {result.points} do not match {result.won} won and {result.drawn} drawn"
            )
        if result.played != result.won + result.drawn + result.lost:
            raise InvalidRecordError(
                f"played {result.played} does not match won + drawn + lost"
            )
        return result


@dataclass
class PlayerStats:
    goals: int = 0
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0

    @classmethod
    def from_local(cls, stats: Optional[dict[str, Any]]) -> "PlayerStats":
        stats = _mapping(stats, "stats")
        return cls(
            goals=_int(stats.get("goals"), "goals", 0),
            assists=_int(stats.get("assists"), "assists", 0),
            yellow_cards=_int(stats.get("yellowCards"), "yellowCards", 0),
            red_cards=_int(stats.get("redCards"), "redCards", 0),
        )


@dataclass
class Team:
    local_id: str
    name: str
    logo: Optional[str] = None
    group: Optional[str] = None
    player_ids: list[str] = field(default_factory=list)
    stats: TeamStats = field(default_factory=TeamStats)

    @classmethod
    def from_local(cls, record: dict[str, Any]) -> "Team":
        return cls(
            local_id=_local_id(record),
            name=_required_text(record, "name"),
            logo=_text(record, "logo", "logoUrl"),
            group=_text(record, "group"),
            player_ids=[str(p) for p in _list(record.get("players"), "players")],
            stats=TeamStats.from_local(record.get("stats")),
        )

    def properties(self) -> dict[str, Any]:
        return {
            "local_id": self.local_id,
            "name": self.name,
            "logo": self.logo,
            "group": self.group,
            "stats_played": self.stats.played,
            "stats_won": self.stats.won,
            "stats_drawn": self.stats.drawn,
            "stats_lost": self.stats.lost,
            "stats_goals_for": self.stats.goals_for,
            "stats_goals_against": self.stats.goals_against,
            "stats_points": self.stats.points,
        }


@dataclass
class Player:
    local_id: str
    first_name: str
    last_name: str
    number: int
    team_id: str
    position: Optional[str] = None
    starter: bool = False
    photo: Optional[str] = None
    stats: PlayerStats = field(default_factory=PlayerStats)

    @classmethod
    def from_local(cls, record: dict[str, Any]) -> "Player":
        first_name = _text(record, "firstName")
        last_name = _text(record, "lastName") or ""
        if first_name is None:
            # Older records keep a single display name
            name = _required_text(record, "name").strip()
            first_name, _, last_name = name.partition(" ")
        number = _int(record.get("number"), "number")
        if number is None or number < 0:
            raise InvalidRecordError(f"shirt number must be a non-negative integer, got {number!r}")
        return cls(
            local_id=_local_id(record),
            first_name=first_name,
            last_name=last_name.strip(),
            number=number,
            team_id=_required_text(record, "teamId", "team_id"),
            position=_text(record, "position"),
            starter=bool(record.get("isStarter", record.get("starter", False))),
            photo=_text(record, "photo", "photoUrl"),
            stats=PlayerStats.from_local(record.get("stats")),
        )

    def properties(self) -> dict[str, Any]:
        return {
            "local_id": self.local_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "number": self.number,
            "position": self.position,
            "starter": self.starter,
            "photo": self.photo,
            "stats_goals": self.stats.goals,
            "stats_assists": self.stats.assists,
            "stats_yellow_cards": self.stats.yellow_cards,
            "stats_red_cards": self.stats.red_cards,
        }


@dataclass
class Match:
    local_id: str
    home_team_id: str
    away_team_id: str
    status: str
    phase: str = "group"
    date: Optional[str] = None
    time: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    group: Optional[str] = None
    stadium: Optional[str] = None
    events: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_local(cls, record: dict[str, Any]) -> "Match":
        home_team_id = _required_text(record, "homeTeamId", "home_team_id")
        away_team_id = _required_text(record, "awayTeamId", "away_team_id")
        if home_team_id == away_team_id:
            raise InvalidRecordError(f"home and away team are both '{home_team_id}'")

        status = _choice(_text(record, "status"), MATCH_STATUSES, "status")
        phase = _text(record, "phase") or "group"
        phase = _choice(PHASE_ALIASES.get(phase, phase), PHASES, "phase")

        score = _mapping(record.get("score"), "score")
        home_score = _int(score.get("home", record.get("homeScore")), "homeScore")
        away_score = _int(score.get("away", record.get("awayScore")), "awayScore")
        if status == "completed" and (home_score is None or away_score is None):
            raise InvalidRecordError("completed match is missing its score")
        if status == "upcoming":
            home_score = away_score = None

        return cls(
            local_id=_local_id(record),
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            status=status,
            phase=phase,
            date=_text(record, "date"),
            time=_text(record, "time"),
            home_score=home_score,
            away_score=away_score,
            group=_text(record, "group"),
            stadium=_text(record, "stadium", "venue", "location"),
            events=list(_list(record.get("events"), "events")),
        )

    @property
    def team_ids(self) -> tuple[str, str]:
        return self.home_team_id, self.away_team_id

    def properties(self) -> dict[str, Any]:
        return {
            "local_id": self.local_id,
            "date": self.date,
            "time": self.time,
            "status": self.status,
            "phase": self.phase,
            "group": self.group,
            "stadium": self.stadium,
            "home_score": self.home_score,
            "away_score": self.away_score,
        }


@dataclass
class MatchEvent:
    local_id: str
    match_id: str
    type: str
    minute: int
    team_id: str
    player_id: str
    assist_player_id: Optional[str] = None

    @classmethod
    def from_local(cls, record: dict[str, Any]) -> "MatchEvent":
        raw_type = _text(record, "type")
        if raw_type == "substitution":
            raise UnsupportedRecordError("substitutions are not match events")
        event_type = _choice(MATCH_EVENT_ALIASES.get(raw_type, raw_type), MATCH_EVENT_TYPES, "type")

        minute = _int(record.get("minute"), "minute")
        if minute is None or minute < 0:
            raise InvalidRecordError(f"minute must be a non-negative integer, got {minute!r}")

        player_id = _required_text(record, "playerId", "player_id")
        assist_player_id = _text(record, "assistPlayerId", "assist_player_id")
        if assist_player_id is not None:
            if event_type != "goal":
                raise InvalidRecordError(f"{event_type} cannot have an assisting player")
            if assist_player_id == player_id:
                raise InvalidRecordError("a player cannot assist their own goal")

        return cls(
            local_id=_local_id(record),
            match_id=_required_text(record, "matchId", "match_id"),
            type=event_type,
            minute=minute,
            team_id=_required_text(record, "teamId", "team_id"),
            player_id=player_id,
            assist_player_id=assist_player_id,
        )

    def properties(self) -> dict[str, Any]:
        return {
            "local_id": self.local_id,
            "type": self.type,
            "minute": self.minute,
        }


@dataclass
class Event:
    local_id: str
    title: str
    type: str
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_local(cls, record: dict[str, Any]) -> "Event":
        return cls(
            local_id=_local_id(record),
            title=_required_text(record, "title"),
            type=_choice(_text(record, "type"), EVENT_TYPES, "type"),
            date=_text(record, "date"),
            time=_text(record, "time"),
            location=_text(record, "location"),
            address=_text(record, "address"),
            description=_text(record, "description"),
            image=_text(record, "image"),
        )

    def properties(self) -> dict[str, Any]:
        return {
            "local_id": self.local_id,
            "title": self.title,
            "type": self.type,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "address": self.address,
            "description": self.description,
            "image": self.image,
        }


@dataclass
class Media:
    local_id: str
    type: str
    url: str
    title: Optional[str] = None
    thumbnail: Optional[str] = None
    date: Optional[str] = None
    match_id: Optional[str] = None
    matchday: Optional[str] = None

    @classmethod
    def from_local(cls, record: dict[str, Any]) -> "Media":
        return cls(
            local_id=_local_id(record),
            type=_choice(_text(record, "type"), MEDIA_TYPES, "type"),
            url=_required_text(record, "url"),
            title=_text(record, "title"),
            thumbnail=_text(record, "thumbnail", "thumbnailUrl"),
            date=_text(record, "date"),
            match_id=_text(record, "matchId", "match_id"),
            matchday=_text(record, "matchday"),
        )

    def properties(self) -> dict[str, Any]:
        return {
            "local_id": self.local_id,
            "type": self.type,
            "url": self.url,
            "title": self.title,
            "thumbnail": self.thumbnail,
            "date": self.date,
            "matchday": self.matchday,
        }
