"""
API Routes for the Compliance Tracker.
Implements RESTful endpoints for records, the unified view, dashboard,
notifications and exports.
"""

import json
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Body, Cookie, Depends, Header, HTTPException, Query, Response
from pydantic import ValidationError

from compliance_tracker.api.models import (
    AlertResponse,
    CategoryInfo,
    HealthResponse,
    NotificationResponse,
    RecordListResponse,
    RemainingResponse,
    SendResponse,
)
from compliance_tracker.core.dashboard import compute_dashboard
from compliance_tracker.core.normalizer import normalize, normalize_collections
from compliance_tracker.core.records import (
    CATEGORY_KINDS,
    CATEGORY_LABELS,
    Category,
    UnknownCategoryError,
    applicable_expiry_date,
    resolve_category,
)
from compliance_tracker.core.remaining import remaining
from compliance_tracker.core.status import ComplianceState
from compliance_tracker.core.table import (
    PROCEDURE_SEARCH_FIELDS,
    RECORD_SEARCH_FIELDS,
    filter_by_status,
    filter_records,
    sort_records,
)
from compliance_tracker.export.report_generator import (
    PROCEDURE_COLUMNS,
    RECORD_COLUMNS,
    build_procedure_rows,
    build_record_rows,
    write_pdf,
    write_xlsx,
)
from compliance_tracker.notifications.markers import FileMarkerStore
from compliance_tracker.notifications.scanner import (
    ExpiryNotificationScanner,
    NotificationSession,
    SessionRegistry,
)
from compliance_tracker.notifications.sender import create_notification_sender
from compliance_tracker.storage.record_store import (
    InMemoryRecordStore,
    RecordNotFoundError,
    create_record_store,
)
from compliance_tracker.utils.config import get_api_config, get_tracker_config

logger = logging.getLogger(__name__)
router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SESSION_COOKIE = "compliance_session"

# Initialize components (singleton pattern)
_record_store = None
_scanner = None
_session_registry = None


def get_record_store() -> InMemoryRecordStore:
    global _record_store
    if _record_store is None:
        seed_file = get_tracker_config()["storage"].get("seed_file")
        _record_store = create_record_store(seed_file)
    return _record_store


def get_scanner() -> ExpiryNotificationScanner:
    global _scanner
    if _scanner is None:
        settings = get_tracker_config()["notifications"]
        _scanner = ExpiryNotificationScanner(
            marker_store=FileMarkerStore(settings.get("marker_file", "data/markers.json")),
            sender=create_notification_sender(settings.get("kafka_topic")),
            recipient=settings.get("recipient"),
            auto_send=bool(settings.get("auto_send", False)),
        )
    return _scanner


def get_session_registry() -> SessionRegistry:
    global _session_registry
    if _session_registry is None:
        settings = get_tracker_config()["notifications"]
        _session_registry = SessionRegistry(
            max_sessions=int(settings.get("max_sessions", 10000)),
            idle_ttl_seconds=float(settings.get("session_ttl_minutes", 720)) * 60,
        )
    return _session_registry


def _session_id(x_session_id: Optional[str], session_cookie: Optional[str]) -> Optional[str]:
    return (x_session_id or "").strip() or (session_cookie or "").strip() or None


def get_session(
    response: Response,
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    session_cookie: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    registry: SessionRegistry = Depends(get_session_registry)
) -> NotificationSession:
    """
    Session of the calling client.

    The X-Session-ID header wins, then the session cookie. A client with
    neither is issued a new random id in a cookie, so clients never share
    a session by default.
    """
    session_id = _session_id(x_session_id, session_cookie)
    if session_id is None:
        session_id = uuid.uuid4().hex
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return registry.get(session_id)


def get_app_version() -> str:
    return get_api_config().get('api', {}).get('version', '1.0.0')


def _display_settings() -> Dict[str, str]:
    display = get_tracker_config()["display"]
    return {
        "locale": display.get("locale", "en"),
        "currency": display.get("currency", "AED"),
    }


def _resolve(category: str) -> Category:
    try:
        return resolve_category(category)
    except UnknownCategoryError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _validation_detail(e: ValidationError) -> List[Dict[str, Any]]:
    return json.loads(e.json(include_url=False))


def _serialize(record: Any, locale: str, reference_date: Optional[date] = None) -> Dict[str, Any]:
    data = record.model_dump(mode="json")
    if data.get("kind") != "procedure":
        period = remaining(applicable_expiry_date(record), reference_date, locale)
        data["remaining"] = RemainingResponse(
            days=period.days,
            tier=period.tier.value,
            label=period.label,
        ).model_dump()
    return data


def _apply_view(
    records: List[Any],
    q: Optional[str],
    status: Optional[ComplianceState],
    sort: Optional[str],
    direction: str,
    fields,
    reference_date: Optional[date] = None
) -> List[Any]:
    records = filter_records(records, q, fields)
    records = filter_by_status(records, status)
    if sort:
        records = sort_records(records, sort, direction, reference_date)
    return records


def _unified_view(
    store: InMemoryRecordStore,
    q: Optional[str],
    status: Optional[ComplianceState],
    sort: Optional[str],
    direction: str,
    reference_date: date
):
    unified = normalize_collections(store.collections(), reference_date)
    return _apply_view(unified, q, status, sort, direction, RECORD_SEARCH_FIELDS, reference_date)


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=get_app_version(),
        timestamp=datetime.now(timezone.utc).isoformat()
    )


@router.get("/categories", response_model=List[CategoryInfo], tags=["Records"])
def list_categories():
    """List record collections with their labels and shapes."""
    return [
        CategoryInfo(id=category.value, label=CATEGORY_LABELS[category], kind=CATEGORY_KINDS[category])
        for category in Category
    ]


@router.get("/records", response_model=RecordListResponse, tags=["Records"])
def list_all_records(
    q: Optional[str] = Query(None, description="Free-text search"),
    status: Optional[ComplianceState] = Query(None, description="Compliance state filter"),
    sort: Optional[str] = Query(None, description="Column to sort by"),
    direction: Literal["asc", "desc"] = Query("asc"),
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """Unified view across every trackable collection."""
    try:
        today = date.today()
        records = _unified_view(store, q, status, sort, direction, today)
        locale = _display_settings()["locale"]
        return RecordListResponse(
            category=None,
            count=len(records),
            records=[_serialize(record, locale, today) for record in records]
        )
    except Exception as e:
        logger.error(f"Error building unified view: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/records/{category}", response_model=RecordListResponse, tags=["Records"])
def list_records(
    category: str,
    q: Optional[str] = Query(None, description="Free-text search"),
    status: Optional[ComplianceState] = Query(None, description="Compliance state filter"),
    sort: Optional[str] = Query(None, description="Column to sort by"),
    direction: Literal["asc", "desc"] = Query("asc"),
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """Records of one collection, filtered and sorted."""
    resolved = _resolve(category)
    is_procedure = CATEGORY_KINDS[resolved] == "procedure"
    fields = PROCEDURE_SEARCH_FIELDS if is_procedure else RECORD_SEARCH_FIELDS

    today = date.today()
    records = store.list(resolved)
    if is_procedure and status is not None:
        records = []
    else:
        records = _apply_view(records, q, status, sort, direction, fields, today)

    locale = _display_settings()["locale"]
    return RecordListResponse(
        category=resolved.value,
        count=len(records),
        records=[_serialize(record, locale, today) for record in records]
    )


@router.post("/records/{category}", status_code=201, tags=["Records"])
def create_record(
    category: str,
    fields: Dict[str, Any] = Body(...),
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """Create a record; the identifier is assigned by the store."""
    resolved = _resolve(category)
    try:
        record = store.create(resolved, fields)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))
    except Exception as e:
        logger.error(f"Error saving {resolved.value} record: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    return _serialize(record, _display_settings()["locale"], date.today())


@router.put("/records/{category}/{record_id}", tags=["Records"])
def update_record(
    category: str,
    record_id: int,
    fields: Dict[str, Any] = Body(...),
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """Update a record; derived statuses are recomputed from the new dates."""
    resolved = _resolve(category)
    try:
        record = store.update(resolved, record_id, fields)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))
    except Exception as e:
        logger.error(f"Error saving {resolved.value} record: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    return _serialize(record, _display_settings()["locale"], date.today())


@router.delete("/records/{category}/{record_id}", status_code=204, tags=["Records"])
def delete_record(
    category: str,
    record_id: int,
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """Delete a record by identifier."""
    resolved = _resolve(category)
    try:
        store.delete(resolved, record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))
    return Response(status_code=204)


@router.get("/dashboard", tags=["Dashboard"])
def dashboard(store: InMemoryRecordStore = Depends(get_record_store)):
    """Status counts, compliance rate, costs and expiry timeline."""
    try:
        return compute_dashboard(store.collections(), date.today())
    except Exception as e:
        logger.error(f"Error computing dashboard: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


def _alert_responses(alerts) -> List[AlertResponse]:
    return [
        AlertResponse(
            category=alert.category.value,
            record_id=alert.record_id,
            name=alert.name,
            number=alert.number,
            expiry_date=alert.expiry_date.isoformat(),
        )
        for alert in alerts
    ]


def _banner_response(scanner: ExpiryNotificationScanner, session: NotificationSession) -> NotificationResponse:
    banner = scanner.banner(session)
    return NotificationResponse(
        session_id=session.session_id,
        visible=banner.visible,
        count=len(banner.alerts),
        last_scan_date=banner.last_scan_date,
        alerts=_alert_responses(banner.alerts),
    )


@router.get("/notifications", response_model=NotificationResponse, tags=["Notifications"])
def notification_banner(
    session: NotificationSession = Depends(get_session),
    scanner: ExpiryNotificationScanner = Depends(get_scanner),
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """Banner state for the calling session, scanning first if today is not scanned yet."""
    scanner.run_if_due(store.collections())
    return _banner_response(scanner, session)


@router.post("/notifications/dismiss", response_model=NotificationResponse, tags=["Notifications"])
def dismiss_notification(
    session: NotificationSession = Depends(get_session),
    scanner: ExpiryNotificationScanner = Depends(get_scanner)
):
    """Hide the banner for the rest of this session."""
    scanner.dismiss(session)
    return _banner_response(scanner, session)


@router.delete("/notifications/session", status_code=204, tags=["Notifications"])
def end_notification_session(
    x_session_id: Optional[str] = Header(None, alias="X-Session-ID"),
    session_cookie: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    registry: SessionRegistry = Depends(get_session_registry)
):
    """End the calling session; its dismissal is forgotten."""
    session_id = _session_id(x_session_id, session_cookie)
    if session_id is not None:
        registry.end(session_id)
    response = Response(status_code=204)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.post("/notifications/send", response_model=SendResponse, tags=["Notifications"])
def send_notification(
    recipient: Optional[str] = Body(None, embed=True),
    scanner: ExpiryNotificationScanner = Depends(get_scanner)
):
    """Send the current alert set to the configured (or given) recipient."""
    target = recipient or scanner.recipient
    sent = scanner.send_alerts(target)
    return SendResponse(sent=sent, count=len(scanner.alerts), recipient=target)


@router.get("/export/records.xlsx", tags=["Export"])
def export_all_records(
    q: Optional[str] = Query(None),
    status: Optional[ComplianceState] = Query(None),
    sort: Optional[str] = Query(None),
    direction: Literal["asc", "desc"] = Query("asc"),
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """Spreadsheet of the unified view as currently filtered and sorted."""
    settings = _display_settings()
    today = date.today()
    records = _unified_view(store, q, status, sort, direction, today)
    rows = build_record_rows(records, today, locale=settings["locale"], currency=settings["currency"])
    sheet_name = get_api_config().get('export', {}).get('sheet_name', 'Records')
    content = write_xlsx(rows, sheet_name=sheet_name, columns=RECORD_COLUMNS)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="all_records.xlsx"'}
    )


@router.get("/export/records.pdf", tags=["Export"])
def export_records_report(
    q: Optional[str] = Query(None),
    status: Optional[ComplianceState] = Query(None),
    sort: Optional[str] = Query(None),
    direction: Literal["asc", "desc"] = Query("asc"),
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """PDF report of the unified view."""
    settings = _display_settings()
    today = date.today()
    records = _unified_view(store, q, status, sort, direction, today)
    rows = build_record_rows(records, today, locale=settings["locale"], currency=settings["currency"])
    title = get_api_config().get('export', {}).get('report_title', 'Compliance Records Report')
    try:
        content = write_pdf(rows, title=title)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Report generation failed: {e}")
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="records_report.pdf"'}
    )


@router.get("/export/{category}.xlsx", tags=["Export"])
def export_category(
    category: str,
    q: Optional[str] = Query(None),
    status: Optional[ComplianceState] = Query(None),
    sort: Optional[str] = Query(None),
    direction: Literal["asc", "desc"] = Query("asc"),
    store: InMemoryRecordStore = Depends(get_record_store)
):
    """Spreadsheet of one collection."""
    resolved = _resolve(category)
    settings = _display_settings()
    today = date.today()

    if CATEGORY_KINDS[resolved] == "procedure":
        procedures = filter_records(store.list(resolved), q, PROCEDURE_SEARCH_FIELDS)
        if sort:
            procedures = sort_records(procedures, sort, direction, today)
        rows = build_procedure_rows(procedures)
        columns = list(PROCEDURE_COLUMNS.values())
    else:
        unified = [normalize(record, resolved, today) for record in store.list(resolved)]
        unified = _apply_view(unified, q, status, sort, direction, RECORD_SEARCH_FIELDS, today)
        rows = build_record_rows(unified, today, locale=settings["locale"], currency=settings["currency"])
        columns = RECORD_COLUMNS

    content = write_xlsx(rows, sheet_name=CATEGORY_LABELS[resolved][:31], columns=columns)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{resolved.value}.xlsx"'}
    )
