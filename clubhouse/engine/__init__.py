from clubhouse.engine.match_builder import MatchBuilder
from clubhouse.engine.innings_engine import InningsEngine
from clubhouse.engine.outcome_resolver import OutcomeResolver
from clubhouse.engine.match_recorder import MatchRecorder
from clubhouse.engine.stats_aggregator import StatsAggregator

__all__ = ["MatchBuilder", "InningsEngine", "OutcomeResolver", "MatchRecorder", "StatsAggregator"]
