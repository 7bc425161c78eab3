"""
Common mixins for multi-tenant models
"""
from sqlalchemy import Column, DateTime, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import declared_attr
from uuid import uuid4

from app.common.time_utils import utcnow


class TenantMixin:
    """Mixin for multi-tenant models that adds tenant_id and ensures tenant isolation"""

    @declared_attr
    def tenant_id(cls):
        return Column(
            Uuid(as_uuid=True),
            ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
            index=True
        )


class TimestampMixin:
    """Mixin for models that need timestamp tracking (UTC naive)"""

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False, index=True)


class SyncMixin:
    """
    Marca de sincronización offline/online.

    is_synced = False indica un cambio local pendiente de subir.
    """

    is_synced = Column(Boolean, default=False, onupdate=False, nullable=False, index=True)


class BaseMixin(TenantMixin, TimestampMixin, SyncMixin):
    """Combines tenant, timestamp and sync functionality for most business models"""

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    is_active = Column(Boolean, default=True, nullable=False)
