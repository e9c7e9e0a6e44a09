"""
app/api/routers/dashboard_router.py

Read-only dashboard endpoints.

Query dates are calendar dates in the display timezone; they are converted
to UTC bounds before stored purchase or click times are filtered. Order
views accept the optional ``status``, ``channel`` and ``sub_id1`` ..
``sub_id5`` filters.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import DateRange, get_dashboard_filters, get_tenant_id
from app.domain.affiliate_report import DashboardFilters
from app.schemas.dashboard import (
    ChannelBreakdownEntryResponse,
    ChannelBreakdownResponse,
    ClickCountEntryResponse,
    ClickOverviewResponse,
    DailySeriesPointResponse,
    DailySeriesResponse,
    KPISummaryResponse,
    StatusBreakdownEntryResponse,
    StatusBreakdownResponse,
    SubIdBreakdownEntryResponse,
    SubIdBreakdownResponse,
)
from app.services.dashboard_service import DashboardService, get_dashboard_service
from db.session import get_db

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/kpis", response_model=KPISummaryResponse)
def get_kpis(
    tenant_id: str = Depends(get_tenant_id),
    date_range: DateRange = Depends(),
    filters: DashboardFilters = Depends(get_dashboard_filters),
    db: Session = Depends(get_db),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> KPISummaryResponse:
    summary = dashboard.summary(
        db=db,
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        filters=filters,
    )
    return KPISummaryResponse(
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        total_gmv=summary.total_gmv,
        net_commission=summary.net_commission,
        total_orders=summary.total_orders,
        avg_ticket=summary.avg_ticket,
    )


@router.get("/daily", response_model=DailySeriesResponse)
def get_daily_series(
    tenant_id: str = Depends(get_tenant_id),
    date_range: DateRange = Depends(),
    filters: DashboardFilters = Depends(get_dashboard_filters),
    db: Session = Depends(get_db),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> DailySeriesResponse:
    points = dashboard.daily_series(
        db=db,
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        filters=filters,
    )
    return DailySeriesResponse(
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        points=[
            DailySeriesPointResponse(
                day=point.day,
                gmv=point.gmv,
                net_commission=point.net_commission,
                orders=point.orders,
            )
            for point in points
        ],
    )


@router.get("/sub-ids", response_model=SubIdBreakdownResponse)
def get_sub_id_breakdown(
    tenant_id: str = Depends(get_tenant_id),
    date_range: DateRange = Depends(),
    field: str = Query(default="sub_id1", description="sub_id1 .. sub_id5"),
    filters: DashboardFilters = Depends(get_dashboard_filters),
    db: Session = Depends(get_db),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> SubIdBreakdownResponse:
    try:
        entries = dashboard.sub_id_breakdown(
            db=db,
            tenant_id=tenant_id,
            start_date=date_range.start_date,
            end_date=date_range.end_date,
            field=field,
            filters=filters,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return SubIdBreakdownResponse(
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        field=field,
        entries=[
            SubIdBreakdownEntryResponse(
                sub_id=entry.sub_id,
                net_commission=entry.net_commission,
                orders=entry.orders,
            )
            for entry in entries
        ],
    )


@router.get("/channels", response_model=ChannelBreakdownResponse)
def get_channel_breakdown(
    tenant_id: str = Depends(get_tenant_id),
    date_range: DateRange = Depends(),
    filters: DashboardFilters = Depends(get_dashboard_filters),
    db: Session = Depends(get_db),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> ChannelBreakdownResponse:
    entries = dashboard.channel_breakdown(
        db=db,
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        filters=filters,
    )
    return ChannelBreakdownResponse(
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        entries=[
            ChannelBreakdownEntryResponse(channel=entry.channel, gmv=entry.gmv, orders=entry.orders)
            for entry in entries
        ],
    )


@router.get("/statuses", response_model=StatusBreakdownResponse)
def get_status_breakdown(
    tenant_id: str = Depends(get_tenant_id),
    date_range: DateRange = Depends(),
    filters: DashboardFilters = Depends(get_dashboard_filters),
    db: Session = Depends(get_db),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> StatusBreakdownResponse:
    entries = dashboard.status_breakdown(
        db=db,
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        filters=filters,
    )
    return StatusBreakdownResponse(
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        entries=[
            StatusBreakdownEntryResponse(
                status=entry.status,
                net_commission=entry.net_commission,
                gmv=entry.gmv,
                orders=entry.orders,
            )
            for entry in entries
        ],
    )


@router.get("/clicks", response_model=ClickOverviewResponse)
def get_click_overview(
    tenant_id: str = Depends(get_tenant_id),
    date_range: DateRange = Depends(),
    referrer_limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> ClickOverviewResponse:
    overview = dashboard.click_overview(
        db=db,
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        referrer_limit=referrer_limit,
    )

    def _entries(items) -> list[ClickCountEntryResponse]:
        return [ClickCountEntryResponse(key=item.key, clicks=item.clicks) for item in items]

    return ClickOverviewResponse(
        tenant_id=tenant_id,
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        total_clicks=overview.summary.total_clicks,
        unique_regions=overview.summary.unique_regions,
        unique_referrers=overview.summary.unique_referrers,
        unique_sub_ids=overview.summary.unique_sub_ids,
        daily=_entries(overview.daily),
        regions=_entries(overview.regions),
        referrers=_entries(overview.referrers),
    )
