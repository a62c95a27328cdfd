"""
Tests for career statistics derived from stored matches.

Two matches between a seven-player club:
  May 1  Lions (Arjun 30, Bilal 10, Chris 0) 40 beat Tigers (Dev 20, Eoin 5 & 2 wkts, Faf 0) 25
         man of the match Arjun
  May 8  Tigers (Bilal 12, Eoin 0) 12 lost to Lions (Arjun 5, Dev 8) 13
         man of the match Bilal
Gus is registered but has not played.

Run with: pytest tests/test_stats_aggregator.py -v
"""
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from clubhouse.database import Base
from clubhouse.models import Match, MatchPlayerStat
from clubhouse.gateway import PersistenceGateway
from clubhouse.engine.match_recorder import MatchRecorder
from clubhouse.engine.scoresheet import score_scoresheet
from clubhouse.engine.stats_aggregator import (
    StatsAggregator, PlayerCareerStats, MomAttribution, _fixed,
)
from clubhouse.exceptions import AggregationInputInconsistency, PlayerNotFoundError, ValidationError
from clubhouse.match_state import MatchConfig


@pytest.fixture
def test_db():
    """Create an in-memory test database."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = Session(engine)
    yield session
    session.close()


@pytest.fixture
def gateway(test_db):
    return PersistenceGateway(test_db)


@pytest.fixture
def club(gateway):
    return gateway.create_club("Riverside CC")


@pytest.fixture
def players(gateway, club):
    names = ["Arjun", "Bilal", "Chris", "Dev", "Eoin", "Faf", "Gus"]
    return {name: gateway.insert_player(club.id, name).id for name in names}


def record(gateway, club_id, match_id, match_date, lions, tigers, toss_decision, scores):
    players_by_name = {p.name: p.id for p in gateway.list_players(club_id)}

    def roster(names):
        return [gateway.roster_player(players_by_name[n], club_id) for n in names]

    config = MatchConfig(
        team_a_name="Lions",
        team_b_name="Tigers",
        team_a_players=roster(lions),
        team_b_players=roster(tigers),
        overs=5,
        toss_winner="Tigers",
        toss_decision=toss_decision,
        match_id=match_id,
        match_date=match_date,
    )
    state = score_scoresheet(config, {players_by_name[name]: counters for name, counters in scores.items()})
    return MatchRecorder(gateway).save(state, club_id)


@pytest.fixture
def season(gateway, club, players):
    record(
        gateway, club.id, "m-1", date(2024, 5, 1),
        ["Arjun", "Bilal", "Chris"], ["Dev", "Eoin", "Faf"], "bowl",
        {
            "Arjun": {"runs": 30, "fours": 3, "ones": 6},
            "Bilal": {"runs": 10, "sixes": 1},
            "Dev": {"runs": 20},
            "Eoin": {"runs": 5, "wickets": 2},
        },
    )
    record(
        gateway, club.id, "m-2", date(2024, 5, 8),
        ["Arjun", "Dev"], ["Bilal", "Eoin"], "bat",
        {
            "Bilal": {"runs": 12},
            "Arjun": {"runs": 5},
            "Dev": {"runs": 8},
        },
    )
    return players


@pytest.fixture
def aggregator(gateway):
    return StatsAggregator(gateway)


class TestFormatting:
    """Averages are fixed-point strings rounded half-up"""

    def test_half_up_rounding(self):
        assert _fixed(1, 8, 2) == "0.13"
        assert _fixed(5, 8, 2) == "0.63"
        assert _fixed(35, 2, 2) == "17.50"
        # Exact quotient, so 2.675 rounds up
        assert _fixed(107, 40, 2) == "2.68"

    def test_win_percentage(self):
        assert PlayerCareerStats("p", "P", total_matches=3, total_wins=2).win_percentage == "66.7%"
        assert PlayerCareerStats("p", "P", total_matches=3, total_wins=1).win_percentage == "33.3%"

    def test_sentinels_without_matches(self):
        stats = PlayerCareerStats("p", "P")
        assert stats.batting_average == "0.00"
        assert stats.bowling_average == "N/A"
        assert stats.win_percentage == "0.0%"


class TestPerPlayer:
    """One player's career"""

    def test_two_match_career(self, aggregator, season):
        stats = aggregator.per_player(season["Arjun"])

        assert stats.total_matches == 2
        assert stats.total_runs == 35
        assert stats.total_wickets == 0
        assert stats.total_wins == 2
        assert stats.man_of_match_count == 1
        assert stats.batting_average == "17.50"
        assert stats.bowling_average == "N/A"
        assert stats.win_percentage == "100.0%"
        assert stats.boundaries.fours == 3
        assert stats.boundaries.ones == 6

    def test_wins_follow_the_team_played_for(self, aggregator, season):
        bilal = aggregator.per_player(season["Bilal"])
        assert bilal.total_wins == 1
        assert bilal.win_percentage == "50.0%"
        assert bilal.man_of_match_count == 1
        assert bilal.boundaries.sixes == 1

    def test_bowling_average(self, aggregator, season):
        eoin = aggregator.per_player(season["Eoin"])
        assert eoin.total_wickets == 2
        assert eoin.bowling_average == "2.50"
        assert eoin.total_wins == 0

    def test_player_without_matches(self, aggregator, season):
        gus = aggregator.per_player(season["Gus"])
        assert gus.total_matches == 0
        assert gus.batting_average == "0.00"
        assert gus.to_dict()["player"] == {"id": season["Gus"], "name": "Gus"}

    def test_same_answer_every_time(self, aggregator, season):
        assert aggregator.per_player(season["Dev"]).to_dict() == aggregator.per_player(season["Dev"]).to_dict()

    def test_other_club_cannot_read(self, aggregator, gateway, season):
        other = gateway.create_club("Hillside CC")
        with pytest.raises(PlayerNotFoundError):
            aggregator.per_player(season["Arjun"], club_id=other.id)

    def test_deleted_match_drops_out(self, aggregator, gateway, club, season):
        gateway.delete_match("m-2", club_id=club.id)
        stats = aggregator.per_player(season["Arjun"])

        assert stats.total_matches == 1
        assert stats.total_runs == 30


class TestManOfMatchAttribution:

    def test_rename_keeps_the_award(self, aggregator, gateway, club, season):
        gateway.update_player_name(season["Arjun"], "Arjun Kumar", club_id=club.id)

        assert aggregator.per_player(season["Arjun"]).man_of_match_count == 1
        assert gateway.get_match("m-1").man_of_match == "Arjun Kumar"

    def test_id_attribution(self, gateway, season):
        by_id = StatsAggregator(gateway, MomAttribution.ID)
        assert by_id.per_player(season["Arjun"]).man_of_match_count == 1
        assert by_id.per_player(season["Dev"]).man_of_match_count == 0

    def test_modes_differ_when_stored_name_is_stale(self, gateway, test_db, season):
        match = test_db.get(Match, "m-1")
        match.man_of_match = "Somebody Else"
        test_db.commit()

        assert StatsAggregator(gateway, MomAttribution.NAME).per_player(season["Arjun"]).man_of_match_count == 0
        assert StatsAggregator(gateway, MomAttribution.ID).per_player(season["Arjun"]).man_of_match_count == 1


class TestClubLists:
    """All players and top performers"""

    def test_all_players_sorted_by_runs(self, aggregator, club, season):
        names = [s.name for s in aggregator.all_players(club.id)]
        assert names == ["Arjun", "Dev", "Bilal", "Eoin", "Chris", "Faf"]

    def test_include_inactive(self, aggregator, club, season):
        names = [s.name for s in aggregator.all_players(club.id, include_inactive=True)]
        assert names[-3:] == ["Chris", "Faf", "Gus"]

    def test_top_scorer(self, aggregator, club, season):
        assert [s.name for s in aggregator.top_performers(club.id)] == ["Arjun"]

    def test_top_performers_share_ties(self, aggregator, club, season):
        leaders = aggregator.top_performers(club.id, "man_of_match_count")
        assert [s.name for s in leaders] == ["Arjun", "Bilal"]

    def test_top_wicket_taker(self, aggregator, club, season):
        assert [s.name for s in aggregator.top_performers(club.id, "total_wickets")] == ["Eoin"]

    def test_nobody_on_zero_is_a_top_performer(self, aggregator, club, season):
        assert aggregator.top_performers(club.id, "threes") == []

    def test_empty_club(self, aggregator, club):
        assert aggregator.all_players(club.id) == []
        assert aggregator.top_performers(club.id) == []

    def test_unknown_metric(self, aggregator, club):
        with pytest.raises(ValueError):
            aggregator.top_performers(club.id, "strike_rate")


class TestHistory:

    def test_most_recent_first(self, aggregator, season):
        rows = aggregator.history(season["Dev"])
        assert [r.match_id for r in rows] == ["m-2", "m-1"]
        assert [r.team for r in rows] == ["Lions", "Tigers"]

    def test_limit(self, aggregator, season):
        assert [r.match_id for r in aggregator.history(season["Dev"], limit=1)] == ["m-2"]

    def test_limit_must_be_positive(self, aggregator, season):
        for limit in (0, -1):
            with pytest.raises(ValidationError) as exc_info:
                aggregator.history(season["Dev"], limit=limit)
            assert exc_info.value.errors[0]["field"] == "limit"

    def test_detailed(self, aggregator, season):
        data = aggregator.detailed(season["Bilal"], recent_limit=1)

        assert data["total_runs"] == 22
        assert len(data["recent_matches"]) == 1
        recent = data["recent_matches"][0]
        assert recent["team"] == "Tigers"
        assert recent["match"]["winner"] == "Lions"
        assert recent["match"]["man_of_match"] == "Bilal"


class TestIntegrity:
    """Stored rows must agree with their match"""

    def test_reconciles(self, aggregator, season):
        assert aggregator.reconcile_match("m-1") is True
        assert aggregator.reconcile_match("m-2") is True

    def test_row_for_a_team_not_in_the_match(self, aggregator, test_db, season):
        row = test_db.query(MatchPlayerStat).filter_by(match_id="m-1", player_id=season["Dev"]).one()
        row.team = "Ghosts"
        test_db.commit()

        with pytest.raises(AggregationInputInconsistency) as exc_info:
            aggregator.per_player(season["Dev"])
        assert exc_info.value.match_id == "m-1"

    def test_totals_that_do_not_add_up(self, aggregator, test_db, season):
        match = test_db.get(Match, "m-1")
        match.team_a_score = 99
        test_db.commit()

        with pytest.raises(AggregationInputInconsistency):
            aggregator.reconcile_match("m-1")

    def test_reads_refuse_rows_above_recorded_total(self, aggregator, test_db, club, season):
        match = test_db.get(Match, "m-1")
        match.team_a_score = 10
        test_db.commit()

        with pytest.raises(AggregationInputInconsistency) as exc_info:
            aggregator.per_player(season["Arjun"])
        assert exc_info.value.match_id == "m-1"
        with pytest.raises(AggregationInputInconsistency):
            aggregator.all_players(club.id)
        with pytest.raises(AggregationInputInconsistency):
            aggregator.detailed(season["Bilal"])
        with pytest.raises(AggregationInputInconsistency):
            aggregator.history(season["Chris"])

    def test_deleted_player_leaves_teammates_readable(self, aggregator, gateway, club, season):
        gateway.delete_player(season["Arjun"], club_id=club.id)

        assert aggregator.per_player(season["Bilal"]).total_runs == 22
        assert [s.name for s in aggregator.all_players(club.id)] == ["Dev", "Bilal", "Eoin", "Chris", "Faf"]
        # Rows now fall short of the match totals
        with pytest.raises(AggregationInputInconsistency):
            aggregator.reconcile_match("m-1")


class TestSummaries:

    def test_club_summary(self, aggregator, club, season):
        summary = aggregator.club_summary(club.id)

        assert summary["club"] == {"id": club.id, "name": "Riverside CC"}
        assert summary["player_count"] == 7
        assert summary["match_count"] == 2
        assert summary["last_activity"] == "2024-05-08"

    def test_new_club_summary(self, aggregator, club):
        summary = aggregator.club_summary(club.id)
        assert summary["match_count"] == 0
        assert summary["last_activity"] is None

    def test_platform_summary(self, aggregator, gateway, season):
        gateway.create_club("Hillside CC")
        summary = aggregator.platform_summary()

        assert summary["total_clubs"] == 2
        assert summary["total_players"] == 7
        assert summary["total_matches"] == 2
        assert {c["name"] for c in summary["recent_clubs"]} == {"Riverside CC", "Hillside CC"}
