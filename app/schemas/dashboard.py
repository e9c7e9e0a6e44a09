"""
app/schemas/dashboard.py

Response schemas for dashboard endpoints.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class KPISummaryResponse(BaseModel):
    tenant_id: str
    start_date: date
    end_date: date
    total_gmv: float
    net_commission: float
    total_orders: int = Field(..., ge=0)
    avg_ticket: float


class DailySeriesPointResponse(BaseModel):
    day: date
    gmv: float
    net_commission: float
    orders: int = Field(..., ge=0)


class DailySeriesResponse(BaseModel):
    tenant_id: str
    start_date: date
    end_date: date
    points: list[DailySeriesPointResponse] = Field(default_factory=list)


class SubIdBreakdownEntryResponse(BaseModel):
    sub_id: str
    net_commission: float
    orders: int = Field(..., ge=0)


class SubIdBreakdownResponse(BaseModel):
    """
    Commission per sub id value; each order counts once.
    """

    tenant_id: str
    start_date: date
    end_date: date
    field: str
    entries: list[SubIdBreakdownEntryResponse] = Field(default_factory=list)


class ChannelBreakdownEntryResponse(BaseModel):
    channel: str
    gmv: float
    orders: int = Field(..., ge=0)


class ChannelBreakdownResponse(BaseModel):
    tenant_id: str
    start_date: date
    end_date: date
    entries: list[ChannelBreakdownEntryResponse] = Field(default_factory=list)


class StatusBreakdownEntryResponse(BaseModel):
    status: str
    net_commission: float
    gmv: float
    orders: int = Field(..., ge=0)


class StatusBreakdownResponse(BaseModel):
    """
    Commission per raw order status, including statuses outside the
    valid-status allowlist.
    """

    tenant_id: str
    start_date: date
    end_date: date
    entries: list[StatusBreakdownEntryResponse] = Field(default_factory=list)


class ClickCountEntryResponse(BaseModel):
    key: str
    clicks: int = Field(..., ge=0)


class ClickOverviewResponse(BaseModel):
    tenant_id: str
    start_date: date
    end_date: date
    total_clicks: int = Field(..., ge=0)
    unique_regions: int = Field(..., ge=0)
    unique_referrers: int = Field(..., ge=0)
    unique_sub_ids: int = Field(..., ge=0)
    daily: list[ClickCountEntryResponse] = Field(default_factory=list)
    regions: list[ClickCountEntryResponse] = Field(default_factory=list)
    referrers: list[ClickCountEntryResponse] = Field(default_factory=list)
