"""POST/GET /v1/analyses - fetch a wallet's transfers and detect its conversion pattern"""

import time
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from discipline_gateway.api.v1.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    AnalysisItem,
    AnalysisListResponse,
    ConversionSchema,
)
from discipline_gateway.api.dependencies import get_transfer_client, get_request_id
from discipline_gateway.config import settings
from discipline_gateway.infrastructure.database.session import get_db
from discipline_gateway.infrastructure.database.repositories import AnalysisRepository, ConversionCacheRepository
from discipline_gateway.infrastructure.clients.transfers import AlchemyTransferClient
from discipline_gateway.domain.patterns import analyze_transfers
from discipline_gateway.domain.exceptions import (
    TransferSourceError,
    InvalidWalletAddressError,
    UnsupportedChainError,
)
from discipline_gateway.infrastructure.observability.metrics import record_analysis, transfer_fetch_failures_counter
from discipline_gateway.infrastructure.observability.logging import log_analysis

router = APIRouter()


@router.post("/analyses", response_model=AnalysisResponse, status_code=201)
async def create_analysis(
    request_body: AnalysisRequest,
    request: Request,
    db: Session = Depends(get_db),
    transfer_client: AlchemyTransferClient = Depends(get_transfer_client),
):
    """
    Analyze a wallet's stablecoin conversion pattern.

    Flow:
    1. Fetch recent USDC/USDT transfers from the transfer source
    2. Extract outbound conversions and detect frequency pattern
    3. Persist the analysis and cache the conversions for result calculation
    4. Return the pattern summary
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Fetch transfers
        transfers = await transfer_client.get_stablecoin_transfers(
            request_body.wallet_address,
            request_body.blockchain,
        )
        fetched_at = datetime.now(timezone.utc)

        # 2. Detect conversion pattern
        summary = analyze_transfers(
            transfers,
            request_body.wallet_address,
            policy=settings.missing_timestamp_policy,
            now=fetched_at,
        )

        # 3. Persist analysis and cached conversions
        db_analysis = AnalysisRepository(db).create_analysis(
            user_id=request_body.user_id,
            wallet_address=request_body.wallet_address,
            blockchain=request_body.blockchain,
            currency=request_body.currency,
            last_fetch=fetched_at,
        )
        ConversionCacheRepository(db).save_conversions(
            request_body.wallet_address,
            request_body.blockchain,
            summary.conversions,
        )
        db.commit()

        duration_ms = (time.time() - start_time) * 1000
        record_analysis(summary.frequency.value)
        log_analysis(
            request_id,
            str(db_analysis.id),
            request_body.blockchain,
            summary.transfer_count,
            summary.total_conversions,
            summary.frequency.value,
            duration_ms,
        )

        return AnalysisResponse(
            analysis_id=str(db_analysis.id),
            wallet_address=request_body.wallet_address,
            blockchain=request_body.blockchain,
            currency=request_body.currency,
            transfer_count=summary.transfer_count,
            conversions=[
                ConversionSchema(
                    timestamp=c.timestamp,
                    amount=c.amount,
                    token=c.token,
                    to_address=c.to_address,
                    hash=c.hash,
                )
                for c in summary.conversions
            ],
            total_conversions=summary.total_conversions,
            frequency=summary.frequency.value,
            average_amount=summary.average_amount,
            total_volume=summary.total_volume,
            average_days_between_conversions=summary.average_days_between_conversions,
            first_conversion_date=summary.first_conversion_date,
            last_conversion_date=summary.last_conversion_date,
        )

    except (InvalidWalletAddressError, UnsupportedChainError) as e:
        db.rollback()
        logging.warning(f"Invalid analysis request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except TransferSourceError as e:
        transfer_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Transfer source error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transfer data service unavailable")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/analyses", response_model=AnalysisListResponse)
def list_analyses(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Retrieve a user's analyses, newest first"""
    analyses = AnalysisRepository(db).get_analyses_by_user(user_id)

    return AnalysisListResponse(
        user_id=user_id,
        analyses=[
            AnalysisItem(
                analysis_id=str(a.id),
                wallet_address=a.wallet_address,
                blockchain=a.blockchain,
                currency=a.currency,
                created_at=a.created_at.isoformat(),
            )
            for a in analyses
        ],
    )
