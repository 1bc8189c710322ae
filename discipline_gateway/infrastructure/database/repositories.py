"""Data access layer for analysis entities"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from discipline_gateway.infrastructure.database.models import Analysis, AnalysisResultRecord, ConversionCache
from discipline_gateway.domain.models import ConversionEvent, CostResult, ScoreResult, RecommendationResult
from discipline_gateway.utils.date_utils import parse_timestamp


class AnalysisRepository:
    """Repository for wallet analyses"""

    def __init__(self, db: Session):
        self.db = db

    def create_analysis(
        self,
        user_id: str,
        wallet_address: str,
        blockchain: str,
        currency: str,
        last_fetch: Optional[datetime] = None,
    ) -> Analysis:
        """Persist analysis request to database"""
        db_analysis = Analysis(
            user_id=user_id,
            wallet_address=wallet_address,
            blockchain=blockchain,
            currency=currency,
            last_fetch=last_fetch,
        )
        self.db.add(db_analysis)
        self.db.flush()  # Get ID without committing
        return db_analysis

    def get_analysis_by_id(self, analysis_id: uuid.UUID) -> Optional[Analysis]:
        return self.db.query(Analysis).filter(Analysis.id == analysis_id).first()

    def get_analyses_by_user(self, user_id: str, limit: int = 50) -> List[Analysis]:
        """Fetch a user's analyses, newest first"""
        return (
            self.db.query(Analysis)
            .filter(Analysis.user_id == user_id)
            .order_by(Analysis.created_at.desc())
            .limit(limit)
            .all()
        )


class ResultRepository:
    """Repository for computed analysis results"""

    def __init__(self, db: Session):
        self.db = db

    def create_result(
        self,
        analysis_id: uuid.UUID,
        cost: CostResult,
        score: ScoreResult,
        recommendation: RecommendationResult,
        preview_visible: bool = True,
    ) -> AnalysisResultRecord:
        db_result = AnalysisResultRecord(
            analysis_id=analysis_id,
            cost_saved_or_lost=cost.cost_or_saved_amount,
            cost_type=cost.cost_type.value,
            currency=cost.currency,
            discipline_score=score.score,
            recommendation=recommendation.recommendation,
            preview_visible=preview_visible,
        )
        self.db.add(db_result)
        self.db.flush()
        return db_result

    def get_latest_result(self, analysis_id: uuid.UUID) -> Optional[AnalysisResultRecord]:
        return (
            self.db.query(AnalysisResultRecord)
            .filter(AnalysisResultRecord.analysis_id == analysis_id)
            .order_by(AnalysisResultRecord.created_at.desc())
            .first()
        )


class ConversionCacheRepository:
    """Repository for normalized conversions cached per wallet and chain"""

    def __init__(self, db: Session):
        self.db = db

    def save_conversions(
        self,
        wallet_address: str,
        blockchain: str,
        conversions: List[ConversionEvent],
    ) -> ConversionCache:
        db_cache = ConversionCache(
            wallet_address=wallet_address.lower(),
            blockchain=blockchain,
            transfers=[_conversion_to_json(c) for c in conversions],
        )
        self.db.add(db_cache)
        self.db.flush()
        return db_cache

    def get_latest_conversions(self, wallet_address: str, blockchain: str) -> List[ConversionEvent]:
        """Most recently cached conversions, oldest first; empty when nothing is cached"""
        cached = (
            self.db.query(ConversionCache)
            .filter(
                ConversionCache.wallet_address == wallet_address.lower(),
                ConversionCache.blockchain == blockchain,
            )
            .order_by(ConversionCache.created_at.desc())
            .first()
        )
        if not cached:
            return []

        conversions = [_conversion_from_json(item) for item in cached.transfers]
        return sorted(conversions, key=lambda c: c.timestamp)


def _conversion_to_json(conversion: ConversionEvent) -> Dict[str, Any]:
    return {
        "timestamp": conversion.timestamp.isoformat(),
        "amount": conversion.amount,
        "token": conversion.token,
        "to_address": conversion.to_address,
        "hash": conversion.hash,
    }


def _conversion_from_json(item: Dict[str, Any]) -> ConversionEvent:
    return ConversionEvent(
        timestamp=parse_timestamp(item["timestamp"]),
        amount=float(item["amount"]),
        token=item["token"],
        to_address=item["to_address"],
        hash=item["hash"],
    )
