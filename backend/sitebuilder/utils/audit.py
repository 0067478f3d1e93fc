# sitebuilder/utils/audit.py
import logging
from typing import Optional

from flask import g, has_request_context

logger = logging.getLogger("sitebuilder.actions")


def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: Optional[dict] = None
):
    """
    One record per state change. Persisted audit trails live outside this
    service; this only feeds the `sitebuilder.actions` logger.
    """
    actor_id = tenant_id = None
    if has_request_context():
        actor_id = getattr(g, "current_user_id", None)
        tenant = getattr(g, "current_tenant", None)
        tenant_id = tenant.id if tenant is not None else None

    logger.info(
        "%s %s=%s",
        action,
        entity_type,
        entity_id,
        extra={
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "actor_id": actor_id,
            "tenant_id": tenant_id,
            "payload": payload or {},
        },
    )
