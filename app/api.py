"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Union

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import (
    AnalysisResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UserPublic,
)
from datastore.errors import PersistenceError
from services.analysis import AnalysisService, EmptyDataset, build_default_analysis_service
from services.auth import AuthError, AuthService, build_default_auth_service
from services.scheduler import IngestionScheduler, build_default_scheduler

logger = logging.getLogger(__name__)

router = APIRouter()


def get_scheduler() -> IngestionScheduler:
    return build_default_scheduler()


def get_analysis_service() -> AnalysisService:
    return build_default_analysis_service()


def get_auth_service() -> AuthService:
    return build_default_auth_service()


@router.get(
    "/api/sensors/update",
    response_model=MessageResponse,
    summary="Run one feed ingestion cycle now.",
)
async def update_sensors(
    scheduler: IngestionScheduler = Depends(get_scheduler),
) -> MessageResponse:
    # The outcome is logged by the scheduler; the reply does not depend on it.
    await scheduler.trigger()
    return MessageResponse(message="Data updated from ThingSpeak")


@router.get(
    "/api/sensors/analysis",
    response_model=Union[AnalysisResponse, MessageResponse],
    summary="All stored readings with the predicted temperature.",
)
def sensor_analysis(
    analysis: AnalysisService = Depends(get_analysis_service),
) -> Union[AnalysisResponse, MessageResponse]:
    try:
        result = analysis.analyze()
    except PersistenceError as exc:
        logger.error("Error fetching analysis data", extra={"reason": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching analysis data",
        ) from exc

    if isinstance(result, EmptyDataset):
        return MessageResponse(message="No data")
    return AnalysisResponse(
        sensor_data=result.readings,
        predicted_temp=result.predicted_temperature,
    )


@router.post(
    "/api/auth/register",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="Register a user with email and password.",
)
def register(
    payload: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    try:
        auth.register(
            email=payload.email,
            password=payload.password,
            full_name=payload.full_name,
            phone=payload.phone,
        )
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MessageResponse(message="Registration successful")


@router.post(
    "/api/auth/login",
    response_model=LoginResponse,
    summary="Exchange email and password for an access token.",
)
def login(
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        token, user = auth.login(email=payload.email, password=payload.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return LoginResponse(token=token, user=UserPublic.model_validate(user.model_dump()))


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
