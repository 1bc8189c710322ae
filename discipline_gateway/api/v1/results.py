"""POST/GET /v1/results - discipline rule cost, score and recommendation for an analysis"""

import time
import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from discipline_gateway.api.v1.schemas import (
    ResultsRequest,
    ResultsResponse,
    ScoreComponentsSchema,
    SimulationDetails,
    StoredResultResponse,
)
from discipline_gateway.api.dependencies import get_rate_provider, get_request_id
from discipline_gateway.domain.analysis import run_analysis
from discipline_gateway.domain.exceptions import AnalysisNotFoundError, InsufficientDataError, RateOracleError
from discipline_gateway.domain.rates import RateProvider
from discipline_gateway.domain.scoring import get_score_category
from discipline_gateway.infrastructure.database.session import get_db
from discipline_gateway.infrastructure.database.repositories import (
    AnalysisRepository,
    ConversionCacheRepository,
    ResultRepository,
)
from discipline_gateway.infrastructure.observability.metrics import record_results, rate_oracle_failures_counter
from discipline_gateway.infrastructure.observability.logging import log_results

router = APIRouter()


def _parse_analysis_id(analysis_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(analysis_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid analysis ID format")


@router.post("/results", response_model=ResultsResponse, status_code=201)
def create_results(
    request_body: ResultsRequest,
    request: Request,
    db: Session = Depends(get_db),
    rate_provider: RateProvider = Depends(get_rate_provider),
):
    """
    Compare the wallet's conversions with the monthly discipline rule.

    Flow:
    1. Load the analysis and its cached conversions
    2. Simulate the rule, price both series, score discipline, pick a recommendation
    3. Persist the result and return the full breakdown
    """
    start_time = time.time()
    request_id = get_request_id(request)
    analysis_uuid = _parse_analysis_id(request_body.analysis_id)

    try:
        analysis = AnalysisRepository(db).get_analysis_by_id(analysis_uuid)
        if analysis is None:
            raise AnalysisNotFoundError(f"Analysis {request_body.analysis_id} not found")

        conversions = ConversionCacheRepository(db).get_latest_conversions(
            analysis.wallet_address,
            analysis.blockchain,
        )
        if len(conversions) < 2:
            raise InsufficientDataError(
                "Insufficient conversion data. At least 2 conversions are required to calculate results."
            )

        report = run_analysis(
            conversions,
            request_body.wallet_balance,
            request_body.target_currency,
            rate_provider=rate_provider,
        )

        db_result = ResultRepository(db).create_result(
            analysis_id=analysis.id,
            cost=report.cost,
            score=report.score,
            recommendation=report.recommendation,
        )
        db.commit()

        duration_ms = (time.time() - start_time) * 1000
        record_results(report.score.score, report.cost.cost_type.value)
        log_results(
            request_id,
            str(analysis.id),
            report.score.score,
            report.cost.cost_type.value,
            report.cost.cost_or_saved_amount,
            duration_ms,
            result_id=str(db_result.id),
        )

        components = report.score.components
        return ResultsResponse(
            result_id=str(db_result.id),
            analysis_id=str(analysis.id),
            cost_or_saved_amount=report.cost.cost_or_saved_amount,
            currency=report.cost.currency,
            cost_type=report.cost.cost_type.value,
            discipline_score=report.score.score,
            score_label=get_score_category(report.score.score).label,
            score_explanation=report.score.explanation,
            score_components=ScoreComponentsSchema(
                frequency_score=components.frequency_score,
                consistency_score=components.consistency_score,
                timing_score=components.timing_score,
            ),
            recommendation=report.recommendation.recommendation,
            priority=report.detailed_recommendation.priority.value,
            actionable_tips=report.detailed_recommendation.actionable_tips,
            simulation_details=SimulationDetails(
                conversion_percentage=report.simulation.conversion_percentage,
                target_day_of_month=report.simulation.target_day_of_month,
                simulated_conversion_count=len(report.simulation.simulated_conversions),
                actual_conversion_count=len(conversions),
            ),
        )

    except AnalysisNotFoundError as e:
        db.rollback()
        logging.warning(f"Analysis not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Analysis not found")

    except InsufficientDataError as e:
        db.rollback()
        logging.warning(f"Insufficient data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except RateOracleError as e:
        rate_oracle_failures_counter.inc()
        db.rollback()
        logging.error(f"Rate oracle error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Exchange rate service unavailable")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/results", response_model=StoredResultResponse)
def get_results(
    analysis_id: str = Query(..., description="Analysis identifier"),
    db: Session = Depends(get_db),
):
    """Latest stored result for an analysis"""
    analysis_uuid = _parse_analysis_id(analysis_id)

    if AnalysisRepository(db).get_analysis_by_id(analysis_uuid) is None:
        raise HTTPException(status_code=404, detail="Analysis not found")

    result = ResultRepository(db).get_latest_result(analysis_uuid)
    if result is None:
        raise HTTPException(status_code=404, detail="No results found for this analysis")

    return StoredResultResponse(
        analysis_id=analysis_id,
        cost_or_saved_amount=result.cost_saved_or_lost,
        cost_type=result.cost_type,
        currency=result.currency,
        discipline_score=result.discipline_score,
        recommendation=result.recommendation,
        preview_visible=result.preview_visible,
        created_at=result.created_at.isoformat(),
    )
