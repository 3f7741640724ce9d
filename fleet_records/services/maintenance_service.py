# fleet_records/services/maintenance_service.py
"""
Maintenance schedule entries per vehicle. Status is whatever the caller
last set; nothing here recomputes due/overdue from dates or mileage.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from fleet_records.database import transaction
from fleet_records.errors import NotFound
from fleet_records.models.maintenance_item import MaintenanceItem
from fleet_records.schemas.maintenance import MaintenanceCreate, MaintenanceUpdate, MaintenanceFilter
from fleet_records.services import query_service
from fleet_records.services.patching import coerce, changed_fields, apply_fields
from fleet_records.utils.logger import get_logger

logger = get_logger(__name__)


class MaintenanceSortKey(str, Enum):
    NEXT_DUE_DATE = "next_due_date"
    NEXT_DUE_MILEAGE = "next_due_mileage"
    LAST_SERVICE_DATE = "last_service_date"
    MAINTENANCE_TYPE = "maintenance_type"
    STATUS = "status"
    CREATED_AT = "created_at"


MAINTENANCE_SORT_COLUMNS = {
    MaintenanceSortKey.NEXT_DUE_DATE: MaintenanceItem.next_due_date,
    MaintenanceSortKey.NEXT_DUE_MILEAGE: MaintenanceItem.next_due_mileage,
    MaintenanceSortKey.LAST_SERVICE_DATE: MaintenanceItem.last_service_date,
    MaintenanceSortKey.MAINTENANCE_TYPE: MaintenanceItem.maintenance_type,
    MaintenanceSortKey.STATUS: MaintenanceItem.status,
    MaintenanceSortKey.CREATED_AT: MaintenanceItem.created_at,
}


def create_maintenance_item(db: Session, data) -> MaintenanceItem:
    body = coerce(MaintenanceCreate, data)
    with transaction(db):
        if not query_service.fetch_vehicle(db, body.vehicle_id):
            raise NotFound(f"Vehicle {body.vehicle_id} not found")
        now = datetime.utcnow()
        item = MaintenanceItem(**body.model_dump(), created_at=now, updated_at=now)
        db.add(item)
        db.flush()
    logger.info(f"[VEHICLE] Maintenance item {item.id} ({item.maintenance_type}) "
                f"scheduled for vehicle {item.vehicle_id}")
    return item


def get_maintenance_item(db: Session, item_id: int) -> MaintenanceItem:
    item = db.get(MaintenanceItem, item_id)
    if not item:
        raise NotFound(f"Maintenance item {item_id} not found")
    return item


def list_vehicle_maintenance(db: Session, vehicle_id: int,
                             filters: Optional[MaintenanceFilter] = None) -> list[MaintenanceItem]:
    filters = filters or MaintenanceFilter()
    predicates = [MaintenanceItem.vehicle_id == vehicle_id]
    if filters.status:
        predicates.append(MaintenanceItem.status == filters.status)
    sort_key = query_service.parse_sort_key(MaintenanceSortKey, filters.sort_by, MaintenanceSortKey.NEXT_DUE_DATE)
    order = query_service.parse_sort_order(filters.order, query_service.SortOrder.ASC)
    stmt = (
        select(MaintenanceItem)
        .where(*predicates)
        .order_by(*query_service.order_by_clause(MAINTENANCE_SORT_COLUMNS[sort_key], order, MaintenanceItem.id))
    )
    return list(db.scalars(stmt).all())


def update_maintenance_item(db: Session, item_id: int, patch) -> MaintenanceItem:
    body = coerce(MaintenanceUpdate, patch)
    fields = changed_fields(body, not_null=("maintenance_type", "status"))
    with transaction(db):
        item = get_maintenance_item(db, item_id)
        apply_fields(item, fields)
    logger.info(f"[VEHICLE] Maintenance item {item_id} updated: {sorted(fields)}")
    return item
