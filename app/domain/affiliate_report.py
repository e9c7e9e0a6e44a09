"""
app/domain/affiliate_report.py

Domain models used by the affiliate report ingestion flow.

Every column of a recognized report maps onto one ``CanonicalField``; each
field carries the ``FieldKind`` that decides how its raw text is parsed.
Records are fixed per report family (``TransactionRecord`` and
``ClickRecord``) instead of free-form dicts keyed by header text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ReportType(str, Enum):
    """
    Report family detected from a header row.
    """

    TRANSACTIONS = "transactions"
    CLICKS = "clicks"
    UNRECOGNIZED = "unrecognized"


class FieldKind(str, Enum):
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DATETIME = "datetime"
    INTEGER = "integer"
    TEXT = "text"


class CanonicalField(str, Enum):
    """
    Locale-independent column names, each tagged with its value kind.
    """

    def __new__(cls, value: str, kind: FieldKind) -> "CanonicalField":
        member = str.__new__(cls, value)
        member._value_ = value
        member.kind = kind
        return member

    # Identification
    ORDER_ID = ("order_id", FieldKind.TEXT)
    ITEM_ID = ("item_id", FieldKind.INTEGER)
    CHECKOUT_ID = ("checkout_id", FieldKind.TEXT)

    # Timestamps
    PURCHASE_TIME = ("purchase_time", FieldKind.DATETIME)
    COMPLETE_TIME = ("complete_time", FieldKind.DATETIME)
    CLICK_TIME = ("click_time", FieldKind.DATETIME)

    # Status
    STATUS = ("status", FieldKind.TEXT)
    ORDER_STATUS = ("order_status", FieldKind.TEXT)
    CONVERSION_STATUS = ("conversion_status", FieldKind.TEXT)
    BUYER_TYPE = ("buyer_type", FieldKind.TEXT)

    # Shop and item
    SHOP_NAME = ("shop_name", FieldKind.TEXT)
    SHOP_ID = ("shop_id", FieldKind.TEXT)
    SHOP_TYPE = ("shop_type", FieldKind.TEXT)
    ITEM_NAME = ("item_name", FieldKind.TEXT)
    ITEM_MODEL_ID = ("item_model_id", FieldKind.TEXT)
    PRODUCT_TYPE = ("product_type", FieldKind.TEXT)
    PROMOTION_ID = ("promotion_id", FieldKind.TEXT)
    CATEGORY_L1 = ("category_l1", FieldKind.TEXT)
    CATEGORY_L2 = ("category_l2", FieldKind.TEXT)
    CATEGORY_L3 = ("category_l3", FieldKind.TEXT)
    ITEM_PRICE = ("item_price", FieldKind.CURRENCY)
    QTY = ("qty", FieldKind.INTEGER)
    ITEM_NOTES = ("item_notes", FieldKind.TEXT)

    # Offer and campaign
    ATTRIBUTION_TYPE = ("attribution_type", FieldKind.TEXT)
    CAMPAIGN_PARTNER_NAME = ("campaign_partner_name", FieldKind.TEXT)

    # Amounts
    ACTUAL_AMOUNT = ("actual_amount", FieldKind.CURRENCY)
    REFUND_AMOUNT = ("refund_amount", FieldKind.CURRENCY)

    # Commissions
    ITEM_SHOPEE_COMMISSION_RATE = ("item_shopee_commission_rate", FieldKind.PERCENTAGE)
    SHOPEE_COMMISSION = ("shopee_commission", FieldKind.CURRENCY)
    ITEM_SELLER_COMMISSION_RATE = ("item_seller_commission_rate", FieldKind.PERCENTAGE)
    BRAND_COMMISSION = ("brand_commission", FieldKind.CURRENCY)
    SELLER_COMMISSION = ("seller_commission", FieldKind.CURRENCY)
    ITEM_TOTAL_COMMISSION = ("item_total_commission", FieldKind.CURRENCY)
    GROSS_COMMISSION = ("gross_commission", FieldKind.CURRENCY)
    TOTAL_COMMISSION = ("total_commission", FieldKind.CURRENCY)
    MCN_NAME = ("mcn_name", FieldKind.TEXT)
    MCN_FEE_RATE = ("mcn_fee_rate", FieldKind.PERCENTAGE)
    MCN_FEE = ("mcn_fee", FieldKind.CURRENCY)
    RATE = ("rate", FieldKind.PERCENTAGE)
    NET_COMMISSION = ("net_commission", FieldKind.CURRENCY)

    # Tracking
    SUB_ID1 = ("sub_id1", FieldKind.TEXT)
    SUB_ID2 = ("sub_id2", FieldKind.TEXT)
    SUB_ID3 = ("sub_id3", FieldKind.TEXT)
    SUB_ID4 = ("sub_id4", FieldKind.TEXT)
    SUB_ID5 = ("sub_id5", FieldKind.TEXT)
    CHANNEL = ("channel", FieldKind.TEXT)

    # Clicks
    REGION = ("region", FieldKind.TEXT)
    REFERRER = ("referrer", FieldKind.TEXT)
    CLICK_PV = ("click_pv", FieldKind.INTEGER)


SUB_ID_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField.SUB_ID1,
    CanonicalField.SUB_ID2,
    CanonicalField.SUB_ID3,
    CanonicalField.SUB_ID4,
    CanonicalField.SUB_ID5,
)

REQUIRED_FIELDS: dict[ReportType, tuple[CanonicalField, ...]] = {
    ReportType.TRANSACTIONS: (CanonicalField.ORDER_ID, CanonicalField.ITEM_ID),
    ReportType.CLICKS: (CanonicalField.CLICK_TIME,),
}


@dataclass(frozen=True)
class TransactionRecord:
    """
    One item line of a transaction/commission report.
    """

    order_id: str
    item_id: int
    purchase_time: datetime | None = None
    complete_time: datetime | None = None
    click_time: datetime | None = None
    status: str | None = None
    order_status: str | None = None
    conversion_status: str | None = None
    buyer_type: str | None = None
    checkout_id: str | None = None
    shop_name: str | None = None
    shop_id: str | None = None
    shop_type: str | None = None
    item_name: str | None = None
    item_model_id: str | None = None
    product_type: str | None = None
    promotion_id: str | None = None
    category_l1: str | None = None
    category_l2: str | None = None
    category_l3: str | None = None
    item_price: float | None = None
    qty: int | None = None
    item_notes: str | None = None
    attribution_type: str | None = None
    campaign_partner_name: str | None = None
    actual_amount: float | None = None
    refund_amount: float | None = None
    item_shopee_commission_rate: float | None = None
    shopee_commission: float | None = None
    item_seller_commission_rate: float | None = None
    brand_commission: float | None = None
    seller_commission: float | None = None
    item_total_commission: float | None = None
    gross_commission: float | None = None
    total_commission: float | None = None
    mcn_name: str | None = None
    mcn_fee_rate: float | None = None
    mcn_fee: float | None = None
    rate: float | None = None
    net_commission: float | None = None
    sub_id1: str | None = None
    sub_id2: str | None = None
    sub_id3: str | None = None
    sub_id4: str | None = None
    sub_id5: str | None = None
    channel: str | None = None

    @property
    def natural_key(self) -> str:
        return f"{self.order_id}|{self.item_id}"


@dataclass(frozen=True)
class ClickRecord:
    """
    One click event. Identical rows are independent events.
    """

    click_time: datetime
    region: str | None = None
    referrer: str | None = None
    sub_id1: str | None = None
    sub_id2: str | None = None
    sub_id3: str | None = None
    sub_id4: str | None = None
    sub_id5: str | None = None
    click_pv: int = 1


@dataclass(frozen=True)
class RowValidationError:
    """
    One report row validation error detail.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


class IngestionStatus(str, Enum):
    """
    Per-file ingestion lifecycle. ``SUCCESS`` and ``ERROR`` are terminal.
    """

    IDLE = "idle"
    PARSING = "parsing"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run ingestion summary.

    ``rows_failed`` counts rows rejected as invalid plus records of failed
    batches. ``duplicates_removed`` counts records consolidated by the
    natural key; it is never folded into ``rows_failed``.
    """

    report_type: ReportType
    status: IngestionStatus
    rows_total: int
    rows_accepted: int
    rows_failed: int
    duplicates_removed: int
    validation_errors: list[RowValidationError] = field(default_factory=list)
    error_message: str | None = None


@dataclass(frozen=True)
class OrderAggregate:
    """
    All item lines of one order collapsed into a single value.
    """

    order_id: str
    gmv: float
    net_commission: float
    status: str | None
    day: str | None
    sub_ids: tuple[str | None, ...] = (None, None, None, None, None)
    channel: str | None = None


@dataclass(frozen=True)
class KPISummary:
    total_gmv: float
    net_commission: float
    total_orders: int
    avg_ticket: float


@dataclass(frozen=True)
class DailySeriesPoint:
    day: str
    gmv: float
    net_commission: float
    orders: int


@dataclass(frozen=True)
class SubIdBreakdownEntry:
    sub_id: str
    net_commission: float
    orders: int


@dataclass(frozen=True)
class ChannelBreakdownEntry:
    channel: str
    gmv: float
    orders: int


@dataclass(frozen=True)
class StatusBreakdownEntry:
    status: str
    net_commission: float
    gmv: float
    orders: int


@dataclass(frozen=True)
class DashboardFilters:
    """
    Optional narrowing of the orders a dashboard view is computed over.

    An empty tuple means "no filter" for that dimension. ``sub_ids`` holds
    one tuple of accepted values per sub id position (sub_id1 .. sub_id5).
    """

    statuses: tuple[str, ...] = ()
    channels: tuple[str, ...] = ()
    sub_ids: tuple[tuple[str, ...], ...] = ((), (), (), (), ())

    @property
    def is_empty(self) -> bool:
        return not (self.statuses or self.channels or any(self.sub_ids))


@dataclass(frozen=True)
class ClickSummary:
    total_clicks: int
    unique_regions: int
    unique_referrers: int
    unique_sub_ids: int


@dataclass(frozen=True)
class ClickCountEntry:
    key: str
    clicks: int


@dataclass(frozen=True)
class ClickOverview:
    summary: ClickSummary
    daily: list[ClickCountEntry]
    regions: list[ClickCountEntry]
    referrers: list[ClickCountEntry]
