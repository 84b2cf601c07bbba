"""Input record shapes for each batch file.

Batch files keep the upstream camelCase keys (``lotNo``, ``adminCognitoId``);
every model accepts either the camelCase alias or the snake_case field name.
Unknown keys, including a surrogate ``id``, are ignored.
"""

import re
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel


class EntityKind(StrEnum):
    ADMIN = "Admin"
    USER = "User"
    GRADE_CATEGORY_MAPPING = "GradeCategoryMapping"
    CATALOG = "Catalog"
    SELLING_PRICE = "SellingPrice"
    OUT_LOTS = "OutLots"
    STOCKS = "Stocks"
    STOCK_ASSIGNMENT = "StockAssignment"
    SHIPMENT = "Shipment"
    SHIPMENT_ITEM = "ShipmentItem"
    STOCK_HISTORY = "StockHistory"
    SHIPMENT_HISTORY = "ShipmentHistory"
    ADMIN_NOTIFICATION = "AdminNotification"
    CONTACT = "Contact"
    FAVORITE = "Favorite"
    REPORT = "Report"


_YEAR_FIRST = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
_YEAR_LAST = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SeedRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class AdminRecord(SeedRecord):
    admin_cognito_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone_number: str | None = None


class UserRecord(SeedRecord):
    user_cognito_id: str = Field(min_length=1)
    name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    role: str = "user"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class LotRecord(SeedRecord):
    lot_no: str = Field(min_length=1)
    broker: str
    grade: str
    selling_mark: str | None = None
    invoice_no: str | None = None
    sale_code: str | None = None
    bags: int
    net_weight: float
    total_weight: float | None = None
    producer_country: str | None = None
    manufacture_date: date | None = None
    admin_cognito_id: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("manufacture_date", mode="before")
    @classmethod
    def slash_dates(cls, v: Any) -> Any:
        """Accept ``YYYY/MM/DD`` and ``DD/MM/YYYY`` as written on auction sheets."""
        if not isinstance(v, str):
            return v
        if match := _YEAR_FIRST.match(v):
            year, month, day = (int(part) for part in match.groups())
            return date(year, month, day)
        if match := _YEAR_LAST.match(v):
            day, month, year = (int(part) for part in match.groups())
            return date(year, month, day)
        return v


class CatalogRecord(LotRecord):
    category: str
    asking_price: float | None = None
    reprint: str | None = None


class SellingPriceRecord(CatalogRecord):
    purchase_price: float | None = None


class OutLotsRecord(LotRecord):
    auction: str | None = None
    baseline_price: float | None = None


class StockRecord(SeedRecord):
    lot_no: str = Field(min_length=1)
    broker: str
    grade: str
    sale_code: str | None = None
    mark: str | None = None
    invoice_no: str | None = None
    bags: int
    weight: float
    purchase_value: float | None = None
    batch_number: str | None = None
    low_stock_threshold: float | None = None
    admin_cognito_id: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class StockAssignmentRecord(SeedRecord):
    lot_no: str = Field(min_length=1)
    user_cognito_id: str = Field(min_length=1)
    admin_cognito_id: str = Field(min_length=1)
    assigned_weight: float
    assigned_at: datetime = Field(default_factory=_utcnow)
    created_at: datetime = Field(default_factory=_utcnow)


class ShipmentLineRecord(SeedRecord):
    lot_no: str = Field(min_length=1)
    assigned_weight: float


class ShipmentRecord(SeedRecord):
    shipmark: str = Field(min_length=1)
    status: str = "Pending"
    vessel: str
    packaging_instructions: str
    consignee: str | None = None
    additional_instructions: str | None = None
    shipment_date: datetime = Field(default_factory=_utcnow)
    user_cognito_id: str = Field(min_length=1)
    admin_cognito_id: str | None = None
    stocks: list[ShipmentLineRecord] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class ShipmentItemRecord(SeedRecord):
    shipmark: str = Field(min_length=1)
    lot_no: str = Field(min_length=1)
    assigned_weight: float
    admin_cognito_id: str | None = None


class StockHistoryRecord(SeedRecord):
    lot_no: str = Field(min_length=1)
    action: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)
    user_cognito_id: str | None = None
    admin_cognito_id: str | None = None
    shipmark: str | None = None
    details: dict[str, Any] | None = None


class ShipmentHistoryRecord(SeedRecord):
    shipmark: str = Field(min_length=1)
    action: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)
    user_cognito_id: str | None = None
    admin_cognito_id: str | None = None
    details: dict[str, Any] | None = None


class AdminNotificationRecord(SeedRecord):
    admin_cognito_id: str = Field(min_length=1)
    message: str | None = None
    # Left untyped so a non-object value reaches the loader's own check.
    details: Any = None
    created_at: datetime = Field(default_factory=_utcnow)


class ContactRecord(SeedRecord):
    name: str | None = None
    email: str | None = None
    subject: str | None = None
    message: str | None = None
    privacy_consent: StrictBool | None = None
    user_cognito_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class FavoriteRecord(SeedRecord):
    user_cognito_id: str = Field(min_length=1)
    lot_no: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class ReportRecord(SeedRecord):
    title: str | None = None
    description: str | None = None
    file_url: str | None = None
    file_type: str | None = None
    admin_cognito_id: str = Field(min_length=1)
    user_cognito_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


RECORD_SCHEMAS: dict[EntityKind, type[SeedRecord]] = {
    EntityKind.ADMIN: AdminRecord,
    EntityKind.USER: UserRecord,
    EntityKind.CATALOG: CatalogRecord,
    EntityKind.SELLING_PRICE: SellingPriceRecord,
    EntityKind.OUT_LOTS: OutLotsRecord,
    EntityKind.STOCKS: StockRecord,
    EntityKind.STOCK_ASSIGNMENT: StockAssignmentRecord,
    EntityKind.SHIPMENT: ShipmentRecord,
    EntityKind.SHIPMENT_ITEM: ShipmentItemRecord,
    EntityKind.STOCK_HISTORY: StockHistoryRecord,
    EntityKind.SHIPMENT_HISTORY: ShipmentHistoryRecord,
    EntityKind.ADMIN_NOTIFICATION: AdminNotificationRecord,
    EntityKind.CONTACT: ContactRecord,
    EntityKind.FAVORITE: FavoriteRecord,
    EntityKind.REPORT: ReportRecord,
}
