"""Pydantic schemas for persisted documents and the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import DoorStatus


class Reading(BaseModel):
    """A normalized sensor observation as stored and served."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    temperature: float = Field(..., allow_inf_nan=False)
    door_status: DoorStatus = Field(..., alias="doorStatus")
    timestamp: datetime


class UserRecord(BaseModel):
    """Stored user document, including the password hash."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    full_name: Optional[str] = Field(default=None, alias="fullName")
    email: str
    phone: Optional[str] = None
    hashed_password: str


class MessageResponse(BaseModel):
    message: str


class AnalysisResponse(BaseModel):
    """All stored readings in chronological order plus the prediction."""

    model_config = ConfigDict(populate_by_name=True)

    sensor_data: List[Reading] = Field(..., alias="sensorData")
    predicted_temp: float


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(default=None, alias="fullName")
    email: str = Field(..., min_length=1)
    phone: Optional[str] = None
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserPublic(BaseModel):
    """User fields safe to return to clients."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    full_name: Optional[str] = Field(default=None, alias="fullName")
    email: str
    phone: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    user: UserPublic
