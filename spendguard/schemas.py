"""Pydantic schemas for engine inputs and the value shapes handed to clients"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from spendguard.domain.models import AlertType, ExpenseCategory, RiskLevel


class ExpenseCreate(BaseModel):
    """New expense submitted by the application layer"""

    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Positive expense amount")
    category: ExpenseCategory
    occurred_at: datetime
    notes: Optional[str] = Field(None, max_length=500)


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    type: AlertType
    message: str
    is_read: bool
    triggered_at: datetime


class ForecastSnapshotOut(BaseModel):
    """Stored snapshot; estimated_days_left is 9999 for an infinite runway"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    balance: Decimal
    burn_rate: Decimal
    estimated_days_left: int
    risk_level: RiskLevel
    created_at: datetime


class RecommendationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    tip: str
    category: Optional[str] = None
    generated_at: datetime


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    title: str
    body: str
    is_read: bool
    created_at: datetime
