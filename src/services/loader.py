"""Entity loader: admits one batch of records for a single entity kind.

Each kind has one async handler registered in ``HANDLERS``.  Handlers check
referential and uniqueness preconditions, then insert.  Whether a broken
precondition skips the record quietly or fails it with an error message is
declared in ``CHECK_POLICIES`` rather than decided inside the handlers.

Every record runs inside its own SAVEPOINT, so a failed record never leaves
partial rows behind and never aborts the rest of the batch.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake
from sqlalchemy import select
from sqlalchemy.exc import StatementError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from src.errors import (
    DuplicateError,
    MissingReferenceError,
    RecordSkipped,
    SeedError,
    ValidationError,
)
from src.models import (
    Admin,
    AdminNotification,
    Catalog,
    Contact,
    Favorite,
    GradeCategoryMapping,
    OutLots,
    Report,
    SellingPrice,
    Shipment,
    ShipmentHistory,
    ShipmentItem,
    Stock,
    StockAssignment,
    StockHistory,
    User,
)
from src.models.base import Base
from src.schemas.records import (
    RECORD_SCHEMAS,
    AdminNotificationRecord,
    AdminRecord,
    ContactRecord,
    EntityKind,
    FavoriteRecord,
    LotRecord,
    ReportRecord,
    SeedRecord,
    ShipmentHistoryRecord,
    ShipmentItemRecord,
    ShipmentRecord,
    StockAssignmentRecord,
    StockHistoryRecord,
    StockRecord,
    UserRecord,
)
from src.schemas.seed import BatchReport
from src.services.ledger import adjust_stock
from src.services.reference import validate_reference_fields

logger = logging.getLogger(__name__)

ENTITY_MODELS: dict[EntityKind, type[Base]] = {
    EntityKind.ADMIN: Admin,
    EntityKind.USER: User,
    EntityKind.GRADE_CATEGORY_MAPPING: GradeCategoryMapping,
    EntityKind.CATALOG: Catalog,
    EntityKind.SELLING_PRICE: SellingPrice,
    EntityKind.OUT_LOTS: OutLots,
    EntityKind.STOCKS: Stock,
    EntityKind.STOCK_ASSIGNMENT: StockAssignment,
    EntityKind.SHIPMENT: Shipment,
    EntityKind.SHIPMENT_ITEM: ShipmentItem,
    EntityKind.STOCK_HISTORY: StockHistory,
    EntityKind.SHIPMENT_HISTORY: ShipmentHistory,
    EntityKind.ADMIN_NOTIFICATION: AdminNotification,
    EntityKind.CONTACT: Contact,
    EntityKind.FAVORITE: Favorite,
    EntityKind.REPORT: Report,
}


class Policy(StrEnum):
    SKIP = "skip"
    FAIL = "fail"


# Anything not listed fails the record.
CHECK_POLICIES: dict[tuple[EntityKind, str], Policy] = {
    (EntityKind.STOCK_ASSIGNMENT, "missing_stock"): Policy.SKIP,
    (EntityKind.STOCK_ASSIGNMENT, "missing_user"): Policy.FAIL,
    (EntityKind.STOCK_ASSIGNMENT, "missing_admin"): Policy.FAIL,
    (EntityKind.STOCK_ASSIGNMENT, "non_positive_weight"): Policy.FAIL,
    (EntityKind.STOCK_ASSIGNMENT, "weight_exceeds_stock"): Policy.FAIL,
    (EntityKind.STOCK_ASSIGNMENT, "duplicate_pair"): Policy.SKIP,
    (EntityKind.SHIPMENT, "line_missing_stock"): Policy.SKIP,
    (EntityKind.SHIPMENT, "line_non_positive_weight"): Policy.SKIP,
    (EntityKind.SHIPMENT, "line_weight_exceeds_stock"): Policy.SKIP,
    (EntityKind.SHIPMENT, "line_duplicate_pair"): Policy.SKIP,
    (EntityKind.SHIPMENT_ITEM, "missing_shipment"): Policy.SKIP,
    (EntityKind.SHIPMENT_ITEM, "missing_stock"): Policy.SKIP,
    (EntityKind.SHIPMENT_ITEM, "non_positive_weight"): Policy.SKIP,
    (EntityKind.SHIPMENT_ITEM, "weight_exceeds_stock"): Policy.SKIP,
    (EntityKind.SHIPMENT_ITEM, "duplicate_pair"): Policy.SKIP,
    (EntityKind.STOCK_HISTORY, "missing_stock"): Policy.SKIP,
    (EntityKind.SHIPMENT_HISTORY, "missing_shipment"): Policy.SKIP,
    (EntityKind.FAVORITE, "duplicate_pair"): Policy.SKIP,
}

Handler = Callable[[AsyncSession, Any, BatchReport], Awaitable[None]]

HANDLERS: dict[EntityKind, Handler] = {}


def handles(*kinds: EntityKind) -> Callable[[Handler], Handler]:
    def register(func: Handler) -> Handler:
        for kind in kinds:
            HANDLERS[kind] = func
        return func

    return register


def policy_for(kind: EntityKind, check: str) -> Policy:
    return CHECK_POLICIES.get((kind, check), Policy.FAIL)


def breach(kind: EntityKind, check: str, error: SeedError) -> SeedError:
    """Return the exception to raise for a broken *check* under *kind*'s policy."""
    if policy_for(kind, check) is Policy.SKIP:
        return RecordSkipped(str(error))
    return error


def _note_line_breach(
    report: BatchReport, kind: EntityKind, check: str, error: SeedError
) -> None:
    """Count a skipped nested line, or fail the parent record if the policy says so."""
    exc = breach(kind, check, error)
    if not isinstance(exc, RecordSkipped):
        raise exc
    report.skipped += 1
    logger.warning("Skipping %s line: %s", kind, exc)


def _kg(weight: float) -> int | float:
    return int(weight) if float(weight).is_integer() else weight


def parse_record(kind: EntityKind, raw: Any) -> SeedRecord:
    """Validate *raw* against the record schema of *kind*.

    Raises ``ValidationError`` naming the first offending field and its value.
    """
    try:
        return RECORD_SCHEMAS[kind].model_validate(raw)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "record"
        raise ValidationError(
            field, first.get("input"), f"Invalid {field}: {first['msg']}"
        ) from None


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


M = TypeVar("M", bound=Base)


async def _find(
    session: AsyncSession, model: type[M], column: InstrumentedAttribute, value: Any
) -> M | None:
    result = await session.execute(select(model).where(column == value))
    return result.scalar_one_or_none()


async def _require_admin(
    session: AsyncSession, kind: EntityKind, admin_cognito_id: str | None, *, optional: bool = False
) -> Admin | None:
    if admin_cognito_id is None and optional:
        return None
    admin = await _find(session, Admin, Admin.admin_cognito_id, admin_cognito_id)
    if admin is None:
        raise breach(kind, "missing_admin", MissingReferenceError("adminCognitoId", admin_cognito_id))
    return admin


async def _require_user(
    session: AsyncSession, kind: EntityKind, user_cognito_id: str | None, *, optional: bool = False
) -> User | None:
    if user_cognito_id is None and optional:
        return None
    user = await _find(session, User, User.user_cognito_id, user_cognito_id)
    if user is None:
        raise breach(kind, "missing_user", MissingReferenceError("userCognitoId", user_cognito_id))
    return user


# ---------------------------------------------------------------------------
# Batch-level preconditions
# ---------------------------------------------------------------------------


def check_batch_preconditions(kind: EntityKind, records: Sequence[Any]) -> None:
    """Reject a whole batch before any row is written.

    Admin batches must not repeat an email address.
    """
    if kind is not EntityKind.ADMIN:
        return
    emails = [r.get("email") for r in records if isinstance(r, dict) and r.get("email")]
    duplicates = sorted({email for email in emails if emails.count(email) > 1})
    if duplicates:
        raise DuplicateError(f"Duplicate emails found in admin batch: {', '.join(duplicates)}")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


@handles(EntityKind.ADMIN)
async def load_admin(session: AsyncSession, record: AdminRecord, report: BatchReport) -> None:
    """Upsert keyed by ``adminCognitoId``."""
    admin = await _find(session, Admin, Admin.admin_cognito_id, record.admin_cognito_id)
    if admin is None:
        session.add(
            Admin(
                admin_cognito_id=record.admin_cognito_id,
                name=record.name,
                email=record.email,
                phone_number=record.phone_number,
            )
        )
    else:
        admin.name = record.name
        admin.email = record.email
        admin.phone_number = record.phone_number
    await session.flush()


@handles(EntityKind.USER)
async def load_user(session: AsyncSession, record: UserRecord, report: BatchReport) -> None:
    if await _find(session, User, User.user_cognito_id, record.user_cognito_id) is not None:
        raise DuplicateError(f"Duplicate userCognitoId {record.user_cognito_id}")
    session.add(User(**record.model_dump()))
    await session.flush()


async def _check_grade_category(session: AsyncSession, record: LotRecord) -> None:
    category = getattr(record, "category", None)
    if category is None:
        return
    mapping = await _find(session, GradeCategoryMapping, GradeCategoryMapping.grade, record.grade)
    if mapping is not None and mapping.category != category:
        raise ValidationError(
            "category",
            category,
            f"Invalid grade-category pair ({record.grade}, {category}); "
            f"{record.grade} is sold as {mapping.category}",
        )


@handles(EntityKind.CATALOG, EntityKind.SELLING_PRICE, EntityKind.OUT_LOTS, EntityKind.STOCKS)
async def load_lot(
    session: AsyncSession, record: LotRecord | StockRecord, report: BatchReport
) -> None:
    """Insert a lot-keyed row owned by an admin; ``lotNo`` is unique per table."""
    kind = EntityKind(report.kind)
    model = ENTITY_MODELS[kind]
    if isinstance(record, LotRecord):
        await _check_grade_category(session, record)
    await _require_admin(session, kind, record.admin_cognito_id)
    if await _find(session, model, model.lot_no, record.lot_no) is not None:
        raise breach(kind, "duplicate_lot_no", DuplicateError(f"Duplicate lotNo {record.lot_no}"))
    session.add(model(**record.model_dump()))
    await session.flush()


@handles(EntityKind.STOCK_ASSIGNMENT)
async def load_stock_assignment(
    session: AsyncSession, record: StockAssignmentRecord, report: BatchReport
) -> None:
    """Reserve part of a stock for a user and deduct it through the ledger."""
    kind = EntityKind.STOCK_ASSIGNMENT
    stock = await _find(session, Stock, Stock.lot_no, record.lot_no)
    if stock is None:
        raise breach(kind, "missing_stock", MissingReferenceError("lotNo", record.lot_no))
    await _require_user(session, kind, record.user_cognito_id)
    await _require_admin(session, kind, record.admin_cognito_id)

    weight = record.assigned_weight
    if weight <= 0:
        raise breach(
            kind,
            "non_positive_weight",
            ValidationError("assignedWeight", weight, "Zero or negative assignedWeight"),
        )
    if weight > stock.weight:
        raise breach(
            kind,
            "weight_exceeds_stock",
            ValidationError(
                "assignedWeight",
                weight,
                f"Assigned weight {_kg(weight)} exceeds stock weight {_kg(stock.weight)}",
            ),
        )

    existing = await session.execute(
        select(StockAssignment).where(
            StockAssignment.stock_id == stock.id,
            StockAssignment.user_cognito_id == record.user_cognito_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise breach(
            kind,
            "duplicate_pair",
            DuplicateError(
                f"Duplicate StockAssignment for lotNo {record.lot_no}, user {record.user_cognito_id}"
            ),
        )

    assignment = StockAssignment(
        stock_id=stock.id,
        user_cognito_id=record.user_cognito_id,
        assigned_weight=weight,
        assigned_at=record.assigned_at,
    )
    session.add(assignment)
    await session.flush()

    reason = f"Assigned {_kg(weight)} kg to user {record.user_cognito_id}"
    await adjust_stock(
        session,
        lot_no=record.lot_no,
        weight_change=-weight,
        reason=reason,
        admin_cognito_id=record.admin_cognito_id,
        operation_id=f"stock-assignment:{assignment.id}",
        user_cognito_id=record.user_cognito_id,
    )
    session.add(
        AdminNotification(
            admin_cognito_id=record.admin_cognito_id,
            message=reason,
            details={
                "lotNo": record.lot_no,
                "assignedWeight": weight,
                "userCognitoId": record.user_cognito_id,
            },
            created_at=record.created_at,
        )
    )
    await session.flush()


async def _add_shipment_item(
    session: AsyncSession,
    report: BatchReport,
    shipment: Shipment,
    lot_no: str,
    weight: float,
    reason: str,
    admin_cognito_id: str | None,
    check_prefix: str = "",
) -> None:
    """Attach one stock line to *shipment* and deduct its weight.

    For nested lines (``check_prefix="line_"``) a breach is counted against the
    shipment's report without failing the shipment itself.
    """
    kind = EntityKind(report.kind)

    def fail(check: str, error: SeedError) -> None:
        if check_prefix:
            _note_line_breach(report, kind, check_prefix + check, error)
        else:
            raise breach(kind, check, error)

    stock = await _find(session, Stock, Stock.lot_no, lot_no)
    if stock is None:
        return fail("missing_stock", MissingReferenceError("lotNo", lot_no))
    if weight <= 0:
        return fail(
            "non_positive_weight",
            ValidationError("assignedWeight", weight, f"Zero assignedWeight for lotNo {lot_no}"),
        )
    if weight > stock.weight:
        return fail(
            "weight_exceeds_stock",
            ValidationError(
                "assignedWeight",
                weight,
                f"assignedWeight {_kg(weight)} exceeds stock weight {_kg(stock.weight)}",
            ),
        )
    existing = await session.execute(
        select(ShipmentItem).where(
            ShipmentItem.shipment_id == shipment.id,
            ShipmentItem.stock_id == stock.id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        return fail(
            "duplicate_pair",
            DuplicateError(
                f"Duplicate ShipmentItem for shipmark {shipment.shipmark}, lotNo {lot_no}"
            ),
        )

    item = ShipmentItem(shipment_id=shipment.id, stock_id=stock.id, assigned_weight=weight)
    session.add(item)
    await session.flush()
    await adjust_stock(
        session,
        lot_no=lot_no,
        weight_change=-weight,
        reason=reason,
        admin_cognito_id=admin_cognito_id,
        operation_id=f"shipment-item:{item.id}",
        shipment_id=shipment.id,
    )


@handles(EntityKind.SHIPMENT)
async def load_shipment(session: AsyncSession, record: ShipmentRecord, report: BatchReport) -> None:
    """Insert the shipment header, then each nested stock line."""
    kind = EntityKind.SHIPMENT
    await _require_user(session, kind, record.user_cognito_id)
    await _require_admin(session, kind, record.admin_cognito_id, optional=True)
    if await _find(session, Shipment, Shipment.shipmark, record.shipmark) is not None:
        raise breach(
            kind, "duplicate_shipmark", DuplicateError(f"Duplicate shipmark {record.shipmark}")
        )

    shipment = Shipment(**record.model_dump(exclude={"stocks"}))
    session.add(shipment)
    await session.flush()

    for line in record.stocks:
        await _add_shipment_item(
            session,
            report,
            shipment,
            line.lot_no,
            line.assigned_weight,
            reason=f"Shipment {record.shipmark}",
            admin_cognito_id=record.admin_cognito_id,
            check_prefix="line_",
        )


@handles(EntityKind.SHIPMENT_ITEM)
async def load_shipment_item(
    session: AsyncSession, record: ShipmentItemRecord, report: BatchReport
) -> None:
    kind = EntityKind.SHIPMENT_ITEM
    shipment = await _find(session, Shipment, Shipment.shipmark, record.shipmark)
    if shipment is None:
        raise breach(kind, "missing_shipment", MissingReferenceError("shipmark", record.shipmark))
    await _require_admin(session, kind, record.admin_cognito_id, optional=True)
    await _add_shipment_item(
        session,
        report,
        shipment,
        record.lot_no,
        record.assigned_weight,
        reason=f"ShipmentItem {record.shipmark}",
        admin_cognito_id=record.admin_cognito_id,
    )


@handles(EntityKind.STOCK_HISTORY)
async def load_stock_history(
    session: AsyncSession, record: StockHistoryRecord, report: BatchReport
) -> None:
    """Import an informational audit row; it carries no weight delta."""
    kind = EntityKind.STOCK_HISTORY
    stock = await _find(session, Stock, Stock.lot_no, record.lot_no)
    if stock is None:
        raise breach(kind, "missing_stock", MissingReferenceError("lotNo", record.lot_no))
    await _require_user(session, kind, record.user_cognito_id, optional=True)
    await _require_admin(session, kind, record.admin_cognito_id, optional=True)

    shipment_id = None
    if record.shipmark is not None:
        shipment = await _find(session, Shipment, Shipment.shipmark, record.shipmark)
        if shipment is None:
            raise breach(
                kind, "missing_shipment", MissingReferenceError("shipmark", record.shipmark)
            )
        shipment_id = shipment.id

    session.add(
        StockHistory(
            stock_id=stock.id,
            action=record.action or "Seeded",
            timestamp=record.timestamp,
            user_cognito_id=record.user_cognito_id,
            admin_cognito_id=record.admin_cognito_id,
            shipment_id=shipment_id,
            details=record.details or {},
        )
    )
    await session.flush()


@handles(EntityKind.SHIPMENT_HISTORY)
async def load_shipment_history(
    session: AsyncSession, record: ShipmentHistoryRecord, report: BatchReport
) -> None:
    kind = EntityKind.SHIPMENT_HISTORY
    shipment = await _find(session, Shipment, Shipment.shipmark, record.shipmark)
    if shipment is None:
        raise breach(kind, "missing_shipment", MissingReferenceError("shipmark", record.shipmark))
    await _require_user(session, kind, record.user_cognito_id, optional=True)
    await _require_admin(session, kind, record.admin_cognito_id, optional=True)

    session.add(
        ShipmentHistory(
            shipment_id=shipment.id,
            action=record.action or "Seeded",
            timestamp=record.timestamp,
            user_cognito_id=record.user_cognito_id,
            admin_cognito_id=record.admin_cognito_id,
            details=record.details or {},
        )
    )
    await session.flush()


@handles(EntityKind.ADMIN_NOTIFICATION)
async def load_admin_notification(
    session: AsyncSession, record: AdminNotificationRecord, report: BatchReport
) -> None:
    await _require_admin(session, EntityKind.ADMIN_NOTIFICATION, record.admin_cognito_id)
    if not record.message:
        raise ValidationError("message", record.message, "Missing message")
    if not isinstance(record.details, dict) or not record.details:
        raise ValidationError("details", record.details, "Invalid or missing details")

    session.add(
        AdminNotification(
            admin_cognito_id=record.admin_cognito_id,
            message=record.message,
            details=record.details,
            created_at=record.created_at,
        )
    )
    await session.flush()


@handles(EntityKind.CONTACT)
async def load_contact(session: AsyncSession, record: ContactRecord, report: BatchReport) -> None:
    await _require_user(session, EntityKind.CONTACT, record.user_cognito_id, optional=True)
    for field in ("name", "email", "message"):
        if not getattr(record, field):
            raise ValidationError(field, getattr(record, field), f"Missing {field}")
    if record.privacy_consent is None:
        raise ValidationError("privacyConsent", None, "Invalid or missing privacyConsent")

    session.add(Contact(**record.model_dump()))
    await session.flush()


@handles(EntityKind.FAVORITE)
async def load_favorite(session: AsyncSession, record: FavoriteRecord, report: BatchReport) -> None:
    kind = EntityKind.FAVORITE
    await _require_user(session, kind, record.user_cognito_id)

    stock_id = None
    if record.lot_no is not None:
        stock = await _find(session, Stock, Stock.lot_no, record.lot_no)
        if stock is None:
            raise breach(kind, "missing_stock", MissingReferenceError("lotNo", record.lot_no))
        stock_id = stock.id

    existing = await session.execute(
        select(Favorite).where(
            Favorite.user_cognito_id == record.user_cognito_id,
            Favorite.stock_id == stock_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise breach(
            kind,
            "duplicate_pair",
            DuplicateError(
                f"Duplicate Favorite for user {record.user_cognito_id}, lotNo {record.lot_no}"
            ),
        )

    session.add(
        Favorite(
            user_cognito_id=record.user_cognito_id,
            stock_id=stock_id,
            created_at=record.created_at,
        )
    )
    await session.flush()


@handles(EntityKind.REPORT)
async def load_report(session: AsyncSession, record: ReportRecord, report: BatchReport) -> None:
    kind = EntityKind.REPORT
    await _require_admin(session, kind, record.admin_cognito_id)
    await _require_user(session, kind, record.user_cognito_id, optional=True)
    if not record.title:
        raise ValidationError("title", record.title, "Missing title")
    if not record.file_url:
        raise ValidationError("fileUrl", record.file_url, "Missing fileUrl")

    session.add(Report(**record.model_dump()))
    await session.flush()


async def insert_as_is(session: AsyncSession, kind: EntityKind, raw: Any) -> None:
    """Fallback for kinds without a handler: snake-case the keys and insert."""
    if not isinstance(raw, dict):
        raise ValidationError("record", raw, f"{kind} entry must be an object")
    model = ENTITY_MODELS[kind]
    try:
        row = model(**{to_snake(key): value for key, value in raw.items()})
    except TypeError as exc:
        raise ValidationError("record", raw, str(exc)) from None
    session.add(row)
    await session.flush()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def load_record(session: AsyncSession, kind: EntityKind, raw: Any, report: BatchReport) -> None:
    handler = HANDLERS.get(kind)
    if handler is None:
        await insert_as_is(session, kind, raw)
        return
    record = parse_record(kind, raw)
    validate_reference_fields(kind, record)
    await handler(session, record, report)


async def load_batch(
    session: AsyncSession, kind: EntityKind | str, records: Sequence[Any]
) -> BatchReport:
    """Load *records* of *kind* into the session's open transaction.

    Returns a fresh ``BatchReport``.  A single bad record increments ``skipped``
    (and, for hard failures, appends to ``errors``) and processing continues.
    A failed batch-level precondition marks the report ``failed`` and writes nothing.
    """
    kind = EntityKind(kind)
    report = BatchReport(kind=kind.value)

    try:
        check_batch_preconditions(kind, records)
    except SeedError as exc:
        logger.error("Rejected %s batch: %s", kind, exc)
        report.failed = True
        report.errors.append(f"Failed to seed {kind}: {exc}")
        return report

    for index, raw in enumerate(records):
        # Nested line skips only count once the record itself commits.
        lines = BatchReport(kind=kind.value)
        try:
            async with session.begin_nested():
                await load_record(session, kind, raw, lines)
        except RecordSkipped as exc:
            report.skipped += 1
            logger.warning("Skipping %s entry %d: %s", kind, index, exc)
        except (SeedError, StatementError) as exc:
            message = str(exc) if isinstance(exc, SeedError) else str(exc.orig or exc)
            report.skipped += 1
            report.errors.append(f"{kind} entry: {message}")
            logger.warning("Rejected %s entry %d: %s", kind, index, message)
        else:
            report.success += 1
            report.skipped += lines.skipped

    return report


__all__ = [
    "CHECK_POLICIES",
    "ENTITY_MODELS",
    "HANDLERS",
    "Policy",
    "breach",
    "load_batch",
    "parse_record",
]
