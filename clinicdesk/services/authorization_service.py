from __future__ import annotations

import logging

from clinicdesk.errors import NotAuthenticated, NotAuthorized
from clinicdesk.models.invoice import Invoice
from clinicdesk.models.subscription import Subscription

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Tenant checks that run before any computation or persistence."""

    def require_tenant(self, tenant_id: int | None) -> int:
        if not tenant_id:
            logger.debug("Rejected request without clinic context")
            raise NotAuthenticated()
        return tenant_id

    def owns(self, tenant_id: int, record: Invoice | Subscription) -> bool:
        result = record.clinic_id == tenant_id
        logger.debug("clinic=%s record_clinic=%s owns=%s", tenant_id, record.clinic_id, result)
        return result

    def ensure_owner(self, tenant_id: int | None, record: Invoice | Subscription) -> None:
        tenant_id = self.require_tenant(tenant_id)
        if not self.owns(tenant_id, record):
            raise NotAuthorized(type(record).__name__.lower(), tenant_id)
