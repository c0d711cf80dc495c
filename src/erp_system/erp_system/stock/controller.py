from __future__ import annotations

from flask import Flask, request

from ..common.serialization import to_dto
from ..container import Container
from ..core.exceptions import ResourceNotFoundError
from ..http.auth import current_principal
from ..http.payload import listed, ok, page_params, paged, parse_body, query_bool
from ..rbac import permission_codes as perms
from .schemas import (
    BatchTransferBody,
    BinCapacityBody,
    BlockBinBody,
    ConfigureZoneBody,
    CreateVariantBody,
    CreateVolumeBody,
    CreateWarehouseBody,
    CreateZoneBody,
    ItemEntryBody,
    ItemExitBody,
    TransferItemBody,
    VolumeItemBody,
)


def bin_dto(bin) -> dict:
    return to_dto(
        bin,
        extra={
            "occupancy_percentage": bin.occupancy_percentage,
            "available_space": bin.available_space,
            "is_full": bin.is_full,
            "is_available": bin.is_available,
        },
    )


def volume_dto(volume) -> dict:
    return to_dto(volume, extra={"item_count": volume.item_count})


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    locations = container.location_service
    items = container.item_service
    volumes = container.volume_service

    # locations
    @app.route("/v1/stock/warehouses", methods=["POST"], endpoint="create_warehouse")
    @guards.permission(perms.STOCK_LOCATIONS_MANAGE)
    def create_warehouse():
        body = parse_body(CreateWarehouseBody)
        principal = current_principal()
        warehouse = locations.create_warehouse(
            tenant_id=principal.tenant_id, created_by=principal.user_id, **body.model_dump()
        )
        return ok(warehouse, status=201)

    @app.route("/v1/stock/warehouses", methods=["GET"], endpoint="list_warehouses")
    @guards.permission(perms.STOCK_LOCATIONS_READ)
    def list_warehouses():
        return listed(locations.list_warehouses(tenant_id=current_principal().tenant_id))

    @app.route("/v1/stock/warehouses/<warehouse_id>/zones", methods=["POST"], endpoint="create_zone")
    @guards.permission(perms.STOCK_LOCATIONS_MANAGE)
    def create_zone(warehouse_id: str):
        body = parse_body(CreateZoneBody)
        principal = current_principal()
        zone = locations.create_zone(
            tenant_id=principal.tenant_id,
            warehouse_id=warehouse_id,
            code=body.code,
            name=body.name,
            structure=body.structure.as_structure() if body.structure else None,
            created_by=principal.user_id,
        )
        return ok(zone, status=201)

    @app.route("/v1/stock/warehouses/<warehouse_id>/zones", methods=["GET"], endpoint="list_zones")
    @guards.permission(perms.STOCK_LOCATIONS_READ)
    def list_zones(warehouse_id: str):
        return listed(locations.list_zones(tenant_id=current_principal().tenant_id, warehouse_id=warehouse_id))

    @app.route("/v1/stock/zones/<zone_id>", methods=["GET"], endpoint="get_zone")
    @guards.permission(perms.STOCK_LOCATIONS_READ)
    def get_zone(zone_id: str):
        return ok(locations.get_zone(tenant_id=current_principal().tenant_id, zone_id=zone_id))

    @app.route("/v1/stock/zones/<zone_id>/structure/preview", methods=["POST"], endpoint="preview_zone_structure")
    @guards.permission(perms.STOCK_LOCATIONS_MANAGE)
    def preview_zone_structure(zone_id: str):
        body = parse_body(ConfigureZoneBody)
        return locations.preview_zone_structure(
            tenant_id=current_principal().tenant_id, zone_id=zone_id, structure=body.structure.as_structure()
        )

    @app.route("/v1/stock/zones/<zone_id>/structure", methods=["POST"], endpoint="configure_zone_structure")
    @guards.permission(perms.STOCK_LOCATIONS_MANAGE)
    def configure_zone_structure(zone_id: str):
        body = parse_body(ConfigureZoneBody)
        principal = current_principal()
        result = locations.configure_zone_structure(
            tenant_id=principal.tenant_id,
            zone_id=zone_id,
            structure=body.structure.as_structure(),
            configured_by=principal.user_id,
        )
        return {"zone": to_dto(result.zone), **result.summary()}

    @app.route("/v1/stock/bins", methods=["GET"], endpoint="list_bins")
    @guards.permission(perms.STOCK_LOCATIONS_READ)
    def list_bins():
        blocked = request.args.get("isBlocked")
        page = locations.list_bins(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            zone_id=request.args.get("zoneId"),
            is_blocked=None if blocked in (None, "") else query_bool("isBlocked"),
            only_available=query_bool("onlyAvailable"),
            search=request.args.get("search"),
        )
        return paged(page, bin_dto)

    @app.route("/v1/stock/bins/<bin_id>", methods=["GET"], endpoint="get_bin")
    @guards.permission(perms.STOCK_LOCATIONS_READ)
    def get_bin(bin_id: str):
        return ok(locations.get_bin(tenant_id=current_principal().tenant_id, bin_id=bin_id), bin_dto)

    @app.route("/v1/stock/bins/<bin_id>/block", methods=["PATCH"], endpoint="block_bin")
    @guards.permission(perms.STOCK_LOCATIONS_MANAGE)
    def block_bin(bin_id: str):
        body = parse_body(BlockBinBody)
        principal = current_principal()
        bin = locations.block_bin(
            tenant_id=principal.tenant_id, bin_id=bin_id, reason=body.reason, blocked_by=principal.user_id
        )
        return ok(bin, bin_dto)

    @app.route("/v1/stock/bins/<bin_id>/unblock", methods=["PATCH"], endpoint="unblock_bin")
    @guards.permission(perms.STOCK_LOCATIONS_MANAGE)
    def unblock_bin(bin_id: str):
        principal = current_principal()
        bin = locations.unblock_bin(tenant_id=principal.tenant_id, bin_id=bin_id, unblocked_by=principal.user_id)
        return ok(bin, bin_dto)

    @app.route("/v1/stock/bins/<bin_id>/capacity", methods=["PATCH"], endpoint="update_bin_capacity")
    @guards.permission(perms.STOCK_LOCATIONS_MANAGE)
    def update_bin_capacity(bin_id: str):
        body = parse_body(BinCapacityBody)
        principal = current_principal()
        bin = locations.update_bin_capacity(
            tenant_id=principal.tenant_id, bin_id=bin_id, capacity=body.capacity, updated_by=principal.user_id
        )
        return ok(bin, bin_dto)

    # variants and items
    @app.route("/v1/stock/variants", methods=["POST"], endpoint="create_variant")
    @guards.permission(perms.STOCK_VARIANTS_MANAGE)
    def create_variant():
        body = parse_body(CreateVariantBody)
        principal = current_principal()
        variant = items.create_variant(tenant_id=principal.tenant_id, created_by=principal.user_id, **body.model_dump())
        return ok(variant, status=201)

    @app.route("/v1/stock/variants", methods=["GET"], endpoint="list_variants")
    @guards.permission(perms.STOCK_ITEMS_READ)
    def list_variants():
        page = items.list_variants(
            tenant_id=current_principal().tenant_id, params=page_params(), search=request.args.get("search")
        )
        return paged(page)

    @app.route("/v1/stock/variants/<variant_id>", methods=["GET"], endpoint="get_variant")
    @guards.permission(perms.STOCK_ITEMS_READ)
    def get_variant(variant_id: str):
        return ok(items.get_variant(tenant_id=current_principal().tenant_id, variant_id=variant_id))

    @app.route("/v1/stock/items/entry", methods=["POST"], endpoint="register_item_entry")
    @guards.permission(perms.STOCK_ITEMS_MANAGE)
    def register_item_entry():
        body = parse_body(ItemEntryBody)
        principal = current_principal()
        item = items.register_item_entry(tenant_id=principal.tenant_id, user_id=principal.user_id, **body.model_dump())
        return ok(item, status=201)

    @app.route("/v1/stock/items/batch-transfer", methods=["POST"], endpoint="batch_transfer_items")
    @guards.permission(perms.STOCK_ITEMS_MANAGE)
    def batch_transfer_items():
        body = parse_body(BatchTransferBody)
        principal = current_principal()
        result = items.batch_transfer_items(tenant_id=principal.tenant_id, user_id=principal.user_id, **body.model_dump())
        return {
            "transferred": result["transferred"],
            "skipped": result["skipped"],
            "movements": [to_dto(m) for m in result["movements"]],
        }

    @app.route("/v1/stock/items", methods=["GET"], endpoint="list_items")
    @guards.permission(perms.STOCK_ITEMS_READ)
    def list_items():
        page = items.list_items(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            bin_id=request.args.get("binId"),
            variant_id=request.args.get("variantId"),
            status=request.args.get("status"),
        )
        return paged(page)

    @app.route("/v1/stock/items/<item_id>", methods=["GET"], endpoint="get_item")
    @guards.permission(perms.STOCK_ITEMS_READ)
    def get_item(item_id: str):
        return ok(items.get_item(tenant_id=current_principal().tenant_id, item_id=item_id))

    @app.route("/v1/stock/items/<item_id>/exit", methods=["POST"], endpoint="register_item_exit")
    @guards.permission(perms.STOCK_ITEMS_MANAGE)
    def register_item_exit(item_id: str):
        body = parse_body(ItemExitBody)
        principal = current_principal()
        movement = items.register_item_exit(
            tenant_id=principal.tenant_id, item_id=item_id, user_id=principal.user_id, **body.model_dump()
        )
        return ok(movement, status=201)

    @app.route("/v1/stock/items/<item_id>/transfer", methods=["POST"], endpoint="transfer_item")
    @guards.permission(perms.STOCK_ITEMS_MANAGE)
    def transfer_item(item_id: str):
        body = parse_body(TransferItemBody)
        principal = current_principal()
        movement = items.transfer_item(
            tenant_id=principal.tenant_id, item_id=item_id, user_id=principal.user_id, **body.model_dump()
        )
        return ok(movement, status=201)

    @app.route("/v1/stock/items/<item_id>/location-history", methods=["GET"], endpoint="item_location_history")
    @guards.permission(perms.STOCK_ITEMS_READ)
    def item_location_history(item_id: str):
        return listed(items.get_item_location_history(tenant_id=current_principal().tenant_id, item_id=item_id))

    # volumes
    @app.route("/v1/stock/volumes", methods=["POST"], endpoint="create_volume")
    @guards.permission(perms.STOCK_VOLUMES_MANAGE)
    def create_volume():
        body = parse_body(CreateVolumeBody)
        principal = current_principal()
        volume = volumes.create_volume(tenant_id=principal.tenant_id, created_by=principal.user_id, **body.model_dump())
        return ok(volume, volume_dto, status=201)

    @app.route("/v1/stock/volumes", methods=["GET"], endpoint="list_volumes")
    @guards.permission(perms.STOCK_ITEMS_READ)
    def list_volumes():
        page = volumes.list_volumes(
            tenant_id=current_principal().tenant_id, params=page_params(), status=request.args.get("status")
        )
        return paged(page, volume_dto)

    @app.route("/v1/stock/volumes/<volume_id>", methods=["GET"], endpoint="get_volume")
    @guards.permission(perms.STOCK_ITEMS_READ)
    def get_volume(volume_id: str):
        return ok(volumes.get_volume(tenant_id=current_principal().tenant_id, volume_id=volume_id), volume_dto)

    @app.route("/v1/stock/volumes/<volume_id>/items", methods=["POST"], endpoint="add_item_to_volume")
    @guards.permission(perms.STOCK_VOLUMES_MANAGE)
    def add_item_to_volume(volume_id: str):
        body = parse_body(VolumeItemBody)
        principal = current_principal()
        volume = volumes.add_item_to_volume(
            tenant_id=principal.tenant_id, volume_id=volume_id, item_id=body.item_id, user_id=principal.user_id
        )
        return ok(volume, volume_dto)

    @app.route("/v1/stock/volumes/<volume_id>/items/<item_id>", methods=["DELETE"], endpoint="remove_item_from_volume")
    @guards.permission(perms.STOCK_VOLUMES_MANAGE)
    def remove_item_from_volume(volume_id: str, item_id: str):
        principal = current_principal()
        volume = volumes.remove_item_from_volume(
            tenant_id=principal.tenant_id, volume_id=volume_id, item_id=item_id, user_id=principal.user_id
        )
        return ok(volume, volume_dto)

    transitions = {
        "close": volumes.close_volume,
        "reopen": volumes.reopen_volume,
        "deliver": volumes.deliver_volume,
        "return": volumes.return_volume,
    }

    @app.route("/v1/stock/volumes/<volume_id>/<action>", methods=["POST"], endpoint="change_volume_status")
    @guards.permission(perms.STOCK_VOLUMES_MANAGE)
    def change_volume_status(volume_id: str, action: str):
        handler = transitions.get(action)
        if handler is None:
            raise ResourceNotFoundError(f"Unknown volume action {action}")
        principal = current_principal()
        volume = handler(tenant_id=principal.tenant_id, volume_id=volume_id, user_id=principal.user_id)
        return ok(volume, volume_dto)
