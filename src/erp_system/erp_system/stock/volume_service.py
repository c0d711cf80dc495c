from __future__ import annotations

from typing import Optional

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.datetime_utils import utc_now
from ..common.ids import new_id
from ..common.pagination import Page, PageParams
from ..common.validators import parse_enum, require_max_length, require_non_empty
from ..core.exceptions import (
    InvalidVolumeStatusError,
    ResourceNotFoundError,
    VolumeAlreadyExistsError,
    VolumeItemAlreadyExistsError,
    VolumeItemNotFoundError,
    VolumeNotFoundError,
)
from .model import Volume, VolumeStatus
from .repository import ItemRepository, VolumeRepository


class VolumeService:
    """Use case: shipping volumes that group stock items."""

    def __init__(self, volumes: VolumeRepository, items: ItemRepository, audit: Optional[AuditService] = None):
        self._volumes = volumes
        self._items = items
        self._audit = audit

    def _get(self, tenant_id: str, volume_id: str) -> Volume:
        volume = self._volumes.get_by_id(tenant_id=tenant_id, volume_id=volume_id)
        if not volume:
            raise VolumeNotFoundError("Volume not found")
        return volume

    def _save(self, volume: Volume, action: AuditAction, user_id: Optional[str], **kwargs) -> Volume:
        self._volumes.save(volume)
        if self._audit:
            self._audit.log(
                tenant_id=volume.tenant_id,
                user_id=user_id,
                action=action,
                entity=AuditEntity.VOLUME,
                entity_id=volume.id,
                new_data={"status": volume.status.value, "items": volume.item_count},
                **kwargs,
            )
        return volume

    def create_volume(
        self, *, tenant_id: str, code: str, notes: Optional[str] = None, created_by: Optional[str] = None
    ) -> Volume:
        code = require_non_empty(code, "Code").upper()
        require_max_length(code, "Code", 64)
        require_max_length(notes, "Notes", 1000)
        if self._volumes.get_by_code(tenant_id=tenant_id, code=code):
            raise VolumeAlreadyExistsError(f"Volume {code} already exists")
        volume = Volume(id=new_id(), tenant_id=tenant_id, code=code, notes=notes, created_by=created_by)
        self._volumes.save(volume)
        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=created_by,
                action=AuditAction.CREATE,
                entity=AuditEntity.VOLUME,
                entity_id=volume.id,
                new_data={"code": code},
            )
        return volume

    def add_item_to_volume(
        self, *, tenant_id: str, volume_id: str, item_id: str, user_id: Optional[str] = None
    ) -> Volume:
        volume = self._get(tenant_id, volume_id)
        if volume.status != VolumeStatus.OPEN:
            raise InvalidVolumeStatusError("Items can only be added to open volumes")
        if item_id in volume.item_ids:
            raise VolumeItemAlreadyExistsError("Item is already in this volume")
        if not self._items.get_by_id(tenant_id=tenant_id, item_id=item_id):
            raise ResourceNotFoundError("Item not found")
        volume.item_ids.append(item_id)
        volume.updated_at = utc_now()
        return self._save(volume, AuditAction.UPDATE, user_id, metadata={"addedItemId": item_id})

    def remove_item_from_volume(
        self, *, tenant_id: str, volume_id: str, item_id: str, user_id: Optional[str] = None
    ) -> Volume:
        volume = self._get(tenant_id, volume_id)
        if volume.status != VolumeStatus.OPEN:
            raise InvalidVolumeStatusError("Items can only be removed from open volumes")
        if item_id not in volume.item_ids:
            raise VolumeItemNotFoundError("Item is not in this volume")
        volume.item_ids.remove(item_id)
        volume.updated_at = utc_now()
        return self._save(volume, AuditAction.UPDATE, user_id, metadata={"removedItemId": item_id})

    def close_volume(self, *, tenant_id: str, volume_id: str, user_id: Optional[str] = None) -> Volume:
        volume = self._get(tenant_id, volume_id)
        volume.close()
        return self._save(volume, AuditAction.STATUS_CHANGE, user_id)

    def reopen_volume(self, *, tenant_id: str, volume_id: str, user_id: Optional[str] = None) -> Volume:
        volume = self._get(tenant_id, volume_id)
        volume.reopen()
        return self._save(volume, AuditAction.STATUS_CHANGE, user_id)

    def deliver_volume(self, *, tenant_id: str, volume_id: str, user_id: Optional[str] = None) -> Volume:
        volume = self._get(tenant_id, volume_id)
        volume.deliver()
        return self._save(volume, AuditAction.STATUS_CHANGE, user_id)

    def return_volume(self, *, tenant_id: str, volume_id: str, user_id: Optional[str] = None) -> Volume:
        volume = self._get(tenant_id, volume_id)
        volume.mark_returned()
        return self._save(volume, AuditAction.STATUS_CHANGE, user_id)

    def get_volume(self, *, tenant_id: str, volume_id: str) -> Volume:
        return self._get(tenant_id, volume_id)

    def list_volumes(self, *, tenant_id: str, params: PageParams, status: Optional[str] = None) -> Page[Volume]:
        status_enum = parse_enum(VolumeStatus, status, "Status") if status else None
        items, total = self._volumes.list_page(tenant_id=tenant_id, params=params, status=status_enum)
        return Page(items=items, total=total, params=params)
