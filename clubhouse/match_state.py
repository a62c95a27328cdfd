"""
Match state types shared by the builder, innings engine and outcome resolver
"""
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List

TIE = "Tie"

BOUNDARY_FIELDS = ("ones", "twos", "threes", "fours", "sixes")


@dataclass(frozen=True)
class RosterPlayer:
    """A registered club player selected for a match"""
    id: str
    name: str


@dataclass(frozen=True)
class MatchConfig:
    """Immutable setup for a match"""
    team_a_name: str
    team_b_name: str
    team_a_players: List[RosterPlayer]
    team_b_players: List[RosterPlayer]
    overs: int
    toss_winner: str
    toss_decision: str  # "bat" or "bowl"
    match_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    match_date: date = field(default_factory=date.today)

    @property
    def first_batting_team(self) -> str:
        """Toss winner bats first on "bat", the other side does on "bowl" """
        if self.toss_decision == "bat":
            return self.toss_winner
        return self.team_b_name if self.toss_winner == self.team_a_name else self.team_a_name


@dataclass
class PlayerEntry:
    """One player's line in a team innings"""
    player_id: str
    name: str
    runs: int = 0
    wickets: int = 0
    ones: int = 0
    twos: int = 0
    threes: int = 0
    fours: int = 0
    sixes: int = 0


@dataclass
class TeamInnings:
    """A team's batting record, one entry per roster player in selection order"""
    team_name: str
    entries: List[PlayerEntry] = field(default_factory=list)

    @property
    def total_runs(self) -> int:
        return sum(e.runs for e in self.entries)

    @property
    def total_wickets(self) -> int:
        return sum(e.wickets for e in self.entries)

    @property
    def roster_size(self) -> int:
        return len(self.entries)

    @property
    def balls_used(self) -> int:
        # runs + wickets stands in for deliveries faced
        return sum(e.runs + e.wickets for e in self.entries)

    def get(self, player_id: str) -> Optional[PlayerEntry]:
        return next((e for e in self.entries if e.player_id == player_id), None)

    @property
    def score_display(self) -> str:
        return f"{self.total_runs}/{self.total_wickets}"


@dataclass
class MatchState:
    """Mutable in-progress representation of a match being scored"""
    config: MatchConfig
    team_a_innings: TeamInnings
    team_b_innings: TeamInnings
    innings_number: int = 1
    target: Optional[int] = None  # set when the second innings starts
    is_completed: bool = False
    winner: Optional[str] = None  # team name or TIE
    man_of_match: Optional[str] = None  # player id
    man_of_match_name: Optional[str] = None
    is_persisted: bool = False

    @property
    def match_id(self) -> str:
        return self.config.match_id

    @property
    def match_date(self) -> date:
        return self.config.match_date

    def innings_for(self, team_name: str) -> TeamInnings:
        if team_name == self.config.team_a_name:
            return self.team_a_innings
        return self.team_b_innings

    @property
    def first_innings(self) -> TeamInnings:
        return self.innings_for(self.config.first_batting_team)

    @property
    def second_innings(self) -> TeamInnings:
        if self.first_innings is self.team_a_innings:
            return self.team_b_innings
        return self.team_a_innings

    @property
    def batting_innings(self) -> TeamInnings:
        """The innings currently being scored"""
        return self.first_innings if self.innings_number == 1 else self.second_innings

    @property
    def all_entries(self) -> List[PlayerEntry]:
        """Team A entries then team B entries"""
        return list(self.team_a_innings.entries) + list(self.team_b_innings.entries)

    def to_dict(self) -> dict:
        def innings_dict(innings: TeamInnings) -> dict:
            return {
                "name": innings.team_name,
                "runs": innings.total_runs,
                "wickets": innings.total_wickets,
                "players": [
                    {
                        "player_id": e.player_id,
                        "name": e.name,
                        "runs": e.runs,
                        "wickets": e.wickets,
                        **{f: getattr(e, f) for f in BOUNDARY_FIELDS},
                    }
                    for e in innings.entries
                ],
            }

        return {
            "match_id": self.match_id,
            "overs": self.config.overs,
            "toss_winner": self.config.toss_winner,
            "toss_decision": self.config.toss_decision,
            "innings_number": self.innings_number,
            "batting_team": self.batting_innings.team_name,
            "target": self.target,
            "team_a": innings_dict(self.team_a_innings),
            "team_b": innings_dict(self.team_b_innings),
            "is_completed": self.is_completed,
            "winner": self.winner,
            "man_of_match": self.man_of_match,
            "man_of_match_name": self.man_of_match_name,
            "match_date": self.match_date.isoformat(),
            "is_persisted": self.is_persisted,
        }
