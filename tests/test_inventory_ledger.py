import pytest

from fieldserve.errors import InsufficientStockError, NotFoundError
from fieldserve.services.inventory import (
    InventoryLedger,
    check_usage_create,
    check_usage_update,
    expected_stock,
)


@pytest.fixture()
def ledger(store):
    return InventoryLedger(store)


@pytest.fixture()
def filter_product(store):
    return store.create_product({
        "name": "HVAC Air Filter",
        "sku": "HVF-001",
        "unit_price": 24.99,
        "stock_quantity": 4,
        "low_stock_threshold": 5,
    })


@pytest.fixture()
def thermostat(store):
    return store.create_product({
        "name": "Thermostat",
        "sku": "THR-001",
        "unit_price": 89.99,
        "stock_quantity": 15,
        "low_stock_threshold": 3,
    })


def test_record_usage_draws_stock(store, ledger, thermostat):
    usage, product = ledger.record_usage(1, thermostat.id, 2)
    assert usage.quantity == 2
    assert product.stock_quantity == 13
    assert not product.is_low_stock
    assert store.get_product(thermostat.id).stock_quantity == 13


def test_check_usage_create_rejects_without_mutation(store, filter_product):
    with pytest.raises(InsufficientStockError) as excinfo:
        check_usage_create(store, filter_product.id, 5)
    assert excinfo.value.available_quantity == 4
    assert store.get_product(filter_product.id).stock_quantity == 4
    assert store.get_product_usages() == []


def test_check_usage_create_unknown_product(store):
    with pytest.raises(NotFoundError):
        check_usage_create(store, 42, 1)


def test_adjust_same_product_applies_delta(store, ledger, thermostat):
    usage, _ = ledger.record_usage(1, thermostat.id, 2)
    updated, product = ledger.adjust_usage(usage.id, {"quantity": 5})
    assert updated.quantity == 5
    assert product.stock_quantity == 10
    updated, product = ledger.adjust_usage(usage.id, {"quantity": 1})
    assert product.stock_quantity == 14


def test_check_usage_update_only_checks_increase(store, ledger, filter_product):
    usage, _ = ledger.record_usage(1, filter_product.id, 3)
    # One unit left on the shelf: growing the draw from 3 to 4 is fine, to 5 is not.
    check_usage_update(store, store.get_product_usage(usage.id), {"quantity": 4})
    with pytest.raises(InsufficientStockError) as excinfo:
        check_usage_update(store, store.get_product_usage(usage.id), {"quantity": 5})
    assert excinfo.value.available_quantity == 1


def test_adjust_to_other_product_moves_the_draw(store, ledger, filter_product, thermostat):
    usage, _ = ledger.record_usage(1, filter_product.id, 2)
    check_usage_update(store, usage, {"product_id": thermostat.id, "quantity": 3})
    updated, product = ledger.adjust_usage(usage.id, {"product_id": thermostat.id, "quantity": 3})
    assert updated.product_id == thermostat.id
    assert product.id == thermostat.id
    assert product.stock_quantity == 12
    assert store.get_product(filter_product.id).stock_quantity == 4


def test_check_usage_update_other_product_needs_full_quantity(store, ledger, filter_product, thermostat):
    usage, _ = ledger.record_usage(1, thermostat.id, 2)
    with pytest.raises(InsufficientStockError):
        check_usage_update(store, usage, {"product_id": filter_product.id, "quantity": 5})


def test_release_usage_restores_stock(store, ledger, thermostat):
    usage, _ = ledger.record_usage(1, thermostat.id, 4)
    assert ledger.release_usage(usage.id)
    assert store.get_product(thermostat.id).stock_quantity == 15
    assert store.get_product_usage(usage.id) is None
    assert ledger.release_usage(usage.id) is False


def test_adjust_missing_usage_returns_none(ledger):
    assert ledger.adjust_usage(99, {"quantity": 1}) is None


def test_stock_matches_shelf_minus_live_usage(store, ledger, filter_product, thermostat):
    a, _ = ledger.record_usage(1, thermostat.id, 2)
    b, _ = ledger.record_usage(2, thermostat.id, 3)
    ledger.adjust_usage(a.id, {"quantity": 4})
    ledger.adjust_usage(b.id, {"product_id": filter_product.id, "quantity": 1})
    ledger.record_usage(3, filter_product.id, 2)
    ledger.release_usage(a.id)

    assert store.get_product(thermostat.id).stock_quantity == expected_stock(store, thermostat.id, 15)
    assert store.get_product(filter_product.id).stock_quantity == expected_stock(store, filter_product.id, 4)
    assert store.get_product(thermostat.id).stock_quantity == 15
    assert store.get_product(filter_product.id).stock_quantity == 1
