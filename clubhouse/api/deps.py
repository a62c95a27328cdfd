"""
Shared FastAPI dependencies
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from clubhouse.config import settings
from clubhouse.database import get_db
from clubhouse.gateway import PersistenceGateway
from clubhouse.engine.stats_aggregator import StatsAggregator, MomAttribution


def get_gateway(db: Session = Depends(get_db)) -> PersistenceGateway:
    return PersistenceGateway(db)


def get_aggregator(gateway: PersistenceGateway = Depends(get_gateway)) -> StatsAggregator:
    return StatsAggregator(gateway, MomAttribution(settings.MOM_ATTRIBUTION))
