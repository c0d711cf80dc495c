from __future__ import annotations

from datetime import datetime

import pytest

from erp_system.common.pagination import PageParams
from erp_system.core.exceptions import ResourceNotFoundError, ValidationError

NOW = datetime(2024, 6, 15, 12, 0)


def promote(container, tenant, variant, **overrides):
    data = dict(
        tenant_id=tenant.id,
        variant_id=variant.id,
        name="Winter sale",
        discount_type="PERCENTAGE",
        discount_value=10,
        start_date=datetime(2024, 6, 1),
        end_date=datetime(2024, 6, 30),
    )
    data.update(overrides)
    return container.promotion_service.create_variant_promotion(**data)


@pytest.mark.parametrize(
    "overrides",
    [
        {"discount_value": 120},
        {"discount_value": -1, "discount_type": "FIXED_VALUE"},
        {"discount_type": "bogo"},
        {"end_date": datetime(2024, 5, 1)},
    ],
)
def test_invalid_promotions(container, tenant, variant, overrides):
    with pytest.raises(ValidationError):
        promote(container, tenant, variant, **overrides)


def test_best_price_picks_lowest_valid_promotion(container, tenant, variant):
    promotions = container.promotion_service
    promote(container, tenant, variant)
    fixed = promote(container, tenant, variant, name="Flat", discount_type="fixed_value", discount_value=25)
    promote(container, tenant, variant, name="Later", discount_value=90, start_date=datetime(2024, 7, 1),
            end_date=datetime(2024, 7, 31))

    best = promotions.get_best_price(tenant_id=tenant.id, variant_id=variant.id, now=NOW)
    assert best == {
        "variantId": variant.id,
        "originalPrice": 100.0,
        "finalPrice": 75.0,
        "discount": 25.0,
        "promotionId": fixed.id,
        "promotionName": "Flat",
    }

    promotions.update_variant_promotion(tenant_id=tenant.id, promotion_id=fixed.id, changes={"is_active": False})
    assert promotions.get_best_price(tenant_id=tenant.id, variant_id=variant.id, now=NOW)["finalPrice"] == 90.0

    assert promotions.get_best_price(
        tenant_id=tenant.id, variant_id=variant.id, now=datetime(2025, 1, 1)
    )["promotionId"] is None


def test_update_keeps_rules(container, tenant, variant):
    promotions = container.promotion_service
    promotion = promote(container, tenant, variant)
    with pytest.raises(ValidationError):
        promotions.update_variant_promotion(
            tenant_id=tenant.id, promotion_id=promotion.id, changes={"discount_value": 150}
        )
    with pytest.raises(ValidationError):
        promotions.update_variant_promotion(
            tenant_id=tenant.id, promotion_id=promotion.id, changes={"end_date": datetime(2024, 1, 1)}
        )
    renamed = promotions.update_variant_promotion(
        tenant_id=tenant.id, promotion_id=promotion.id, changes={"name": "Summer sale"}
    )
    assert renamed.name == "Summer sale"
    assert promotions.get_variant_promotion(tenant_id=tenant.id, promotion_id=promotion.id).discount_value == 10


def test_list_and_delete(container, tenant, variant):
    promotions = container.promotion_service
    active = promote(container, tenant, variant)
    promote(container, tenant, variant, name="Paused", is_active=False)

    page = promotions.list_variant_promotions(
        tenant_id=tenant.id, params=PageParams(), variant_id=variant.id, active_only=True
    )
    assert [p.id for p in page.items] == [active.id]

    promotions.delete_variant_promotion(tenant_id=tenant.id, promotion_id=active.id)
    with pytest.raises(ResourceNotFoundError):
        promotions.get_variant_promotion(tenant_id=tenant.id, promotion_id=active.id)
    with pytest.raises(ResourceNotFoundError):
        promote(container, tenant, variant, variant_id="ghost")
