"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel, Field, StrictInt
from typing import Optional, List, Literal, Callable, Dict
from datetime import datetime, date

from clubhouse.match_state import MatchConfig, RosterPlayer


# Player Schemas
class PlayerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class PlayerRename(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class PlayerResponse(BaseModel):
    id: str
    name: str
    club_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class PlayerBrief(BaseModel):
    id: str
    name: str


# Match setup and scoring
class MatchConfigRequest(BaseModel):
    team_a_name: str
    team_b_name: str
    team_a_player_ids: List[str]
    team_b_player_ids: List[str]
    overs: StrictInt
    toss_winner: str
    toss_decision: Literal["bat", "bowl"]
    match_id: Optional[str] = None  # client-generated idempotency key
    match_date: Optional[date] = None

    def to_config(self, resolve: Callable[[str], RosterPlayer]) -> MatchConfig:
        """Build the engine config, resolving each player id to a roster entry"""
        optional = {}
        if self.match_id:
            optional["match_id"] = self.match_id
        if self.match_date:
            optional["match_date"] = self.match_date

        return MatchConfig(
            team_a_name=self.team_a_name.strip(),
            team_b_name=self.team_b_name.strip(),
            team_a_players=[resolve(pid) for pid in self.team_a_player_ids],
            team_b_players=[resolve(pid) for pid in self.team_b_player_ids],
            overs=self.overs,
            toss_winner=self.toss_winner.strip(),
            toss_decision=self.toss_decision,
            **optional,
        )


class PlayerScoreRequest(BaseModel):
    runs: StrictInt = 0
    wickets: StrictInt = 0
    ones: Optional[StrictInt] = None
    twos: Optional[StrictInt] = None
    threes: Optional[StrictInt] = None
    fours: Optional[StrictInt] = None
    sixes: Optional[StrictInt] = None


class ScoresheetEntry(PlayerScoreRequest):
    player_id: str


class ScoresheetRequest(BaseModel):
    """A fully scored match submitted in one go"""
    config: MatchConfigRequest
    scores: List[ScoresheetEntry]

    def score_map(self) -> Dict[str, dict]:
        return {e.player_id: e.model_dump(exclude={"player_id"}, exclude_none=True) for e in self.scores}


class PlayerEntryResponse(BaseModel):
    player_id: str
    name: str
    runs: int
    wickets: int
    ones: int
    twos: int
    threes: int
    fours: int
    sixes: int


class TeamInningsResponse(BaseModel):
    name: str
    runs: int
    wickets: int
    players: List[PlayerEntryResponse]


class MatchStateResponse(BaseModel):
    match_id: str
    overs: int
    toss_winner: str
    toss_decision: str
    innings_number: int
    batting_team: str
    target: Optional[int] = None
    team_a: TeamInningsResponse
    team_b: TeamInningsResponse
    is_completed: bool
    winner: Optional[str] = None
    man_of_match: Optional[str] = None
    man_of_match_name: Optional[str] = None
    match_date: date
    is_persisted: bool
    innings_complete: bool
    completion_reason: Optional[str] = None


class SavedMatchResponse(BaseModel):
    id: str


# Stored matches
class MatchResponse(BaseModel):
    id: str
    team_a_name: str
    team_b_name: str
    overs: int
    toss_winner: str
    toss_decision: str
    team_a_score: int
    team_a_wickets: int
    team_b_score: int
    team_b_wickets: int
    winner: Optional[str] = None
    man_of_match: Optional[str] = None
    match_date: date
    is_completed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MatchBrief(BaseModel):
    id: str
    team_a_name: str
    team_b_name: str
    team_a_score: int
    team_a_wickets: int
    team_b_score: int
    team_b_wickets: int
    winner: Optional[str] = None
    man_of_match: Optional[str] = None
    match_date: date
    overs: int


class StatRowResponse(BaseModel):
    id: str
    match_id: str
    player_id: str
    player_name: str
    team: str
    runs: int
    wickets: int
    ones: int
    twos: int
    threes: int
    fours: int
    sixes: int
    match: MatchBrief


# Career stats
class BoundariesResponse(BaseModel):
    ones: int
    twos: int
    threes: int
    fours: int
    sixes: int


class CareerStatsResponse(BaseModel):
    player: PlayerBrief
    total_matches: int
    total_runs: int
    total_wickets: int
    total_wins: int
    man_of_match_count: int
    batting_average: str
    bowling_average: str
    win_percentage: str
    boundaries: BoundariesResponse


class DetailedStatsResponse(CareerStatsResponse):
    recent_matches: List[StatRowResponse]


class ClubBrief(BaseModel):
    id: str
    name: str


class ClubSummaryResponse(BaseModel):
    club: ClubBrief
    player_count: int
    match_count: int
    last_activity: Optional[date] = None
