# Fleet Records database models
# Import all models here for SQLAlchemy discovery

from fleet_records.models.vehicle import Vehicle                       # noqa
from fleet_records.models.report import Report                         # noqa
from fleet_records.models.document import Document                     # noqa
from fleet_records.models.note import Note                             # noqa
from fleet_records.models.maintenance_item import MaintenanceItem      # noqa
from fleet_records.models.status_history import StatusHistory          # noqa
