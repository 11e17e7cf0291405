# Fleet Ledger: database models
# Import all models here for SQLAlchemy discovery

from fleet_ledger.models.vehicle import Vehicle               # noqa
from fleet_ledger.models.trip import Trip                     # noqa
from fleet_ledger.models.expense import Expense               # noqa
from fleet_ledger.models.toll import Toll, TollRecord         # noqa
from fleet_ledger.models.audit_log import AuditLog            # noqa
