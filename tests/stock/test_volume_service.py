from __future__ import annotations

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import (
    InvalidVolumeStatusError,
    ResourceNotFoundError,
    VolumeAlreadyExistsError,
    VolumeCannotBeClosedError,
    VolumeItemAlreadyExistsError,
    VolumeItemNotFoundError,
    VolumeNotFoundError,
)
from erp_system.stock.model import VolumeStatus


@pytest.fixture
def item(container, tenant, bins, variant):
    return container.item_service.register_item_entry(
        tenant_id=tenant.id, variant_id=variant.id, bin_id=bins["A"].id, quantity=1
    )


def test_create_volume(container, tenant):
    volumes = container.volume_service
    volume = volumes.create_volume(tenant_id=tenant.id, code=" vol-001 ")
    assert volume.code == "VOL-001"
    assert volume.status is VolumeStatus.OPEN
    with pytest.raises(VolumeAlreadyExistsError):
        volumes.create_volume(tenant_id=tenant.id, code="VOL-001")
    with pytest.raises(VolumeNotFoundError):
        volumes.get_volume(tenant_id=tenant.id, volume_id="missing")


def test_items_in_open_volume(container, tenant, item):
    volumes = container.volume_service
    volume = volumes.create_volume(tenant_id=tenant.id, code="V1")
    with pytest.raises(VolumeCannotBeClosedError):
        volumes.close_volume(tenant_id=tenant.id, volume_id=volume.id)
    with pytest.raises(ResourceNotFoundError):
        volumes.add_item_to_volume(tenant_id=tenant.id, volume_id=volume.id, item_id="ghost")

    filled = volumes.add_item_to_volume(tenant_id=tenant.id, volume_id=volume.id, item_id=item.id)
    assert filled.item_count == 1
    with pytest.raises(VolumeItemAlreadyExistsError):
        volumes.add_item_to_volume(tenant_id=tenant.id, volume_id=volume.id, item_id=item.id)

    emptied = volumes.remove_item_from_volume(tenant_id=tenant.id, volume_id=volume.id, item_id=item.id)
    assert emptied.item_ids == []
    with pytest.raises(VolumeItemNotFoundError):
        volumes.remove_item_from_volume(tenant_id=tenant.id, volume_id=volume.id, item_id=item.id)


def test_status_flow(container, tenant, item):
    volumes = container.volume_service
    volume = volumes.create_volume(tenant_id=tenant.id, code="V2")
    volumes.add_item_to_volume(tenant_id=tenant.id, volume_id=volume.id, item_id=item.id)

    with pytest.raises(InvalidVolumeStatusError):
        volumes.deliver_volume(tenant_id=tenant.id, volume_id=volume.id)

    closed = volumes.close_volume(tenant_id=tenant.id, volume_id=volume.id)
    assert closed.closed_at is not None
    with pytest.raises(InvalidVolumeStatusError):
        volumes.add_item_to_volume(tenant_id=tenant.id, volume_id=volume.id, item_id="other")

    reopened = volumes.reopen_volume(tenant_id=tenant.id, volume_id=volume.id)
    assert reopened.status is VolumeStatus.OPEN
    assert reopened.closed_at is None

    volumes.close_volume(tenant_id=tenant.id, volume_id=volume.id)
    delivered = volumes.deliver_volume(tenant_id=tenant.id, volume_id=volume.id)
    assert delivered.status is VolumeStatus.DELIVERED
    with pytest.raises(InvalidVolumeStatusError):
        volumes.reopen_volume(tenant_id=tenant.id, volume_id=volume.id)

    returned = volumes.return_volume(tenant_id=tenant.id, volume_id=volume.id)
    assert returned.status is VolumeStatus.RETURNED

    page = volumes.list_volumes(tenant_id=tenant.id, params=PageParams(), status="returned")
    assert [v.id for v in page.items] == [volume.id]
    assert volumes.list_volumes(tenant_id=tenant.id, params=PageParams(), status="OPEN").total == 0
