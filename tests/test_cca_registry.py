"""Tests for the depreciation-class registry."""
from decimal import Decimal

import pytest

from corpbooks.core.exceptions import ClassNotFoundError, ConfigurationError
from corpbooks.models.fiscal_schemas import DepreciationClass
from corpbooks.services.cca_registry import DEFAULT_CCA_CLASSES, DepreciationClassRegistry


@pytest.mark.parametrize(
    "class_id,rate",
    [
        ("1", "0.04"),
        ("8", "0.20"),
        ("10", "0.30"),
        ("12", "1.00"),
        ("50", "0.55"),
        ("53", "0.50"),
    ],
)
def test_default_rates(registry, class_id, rate):
    assert registry.rate(class_id) == Decimal(rate)


def test_description_lookup(registry):
    assert registry.description("1") == "Buildings acquired after 1987"


def test_unknown_class_is_an_error_not_zero(registry):
    with pytest.raises(ClassNotFoundError) as exc_info:
        registry.rate("999")
    assert exc_info.value.code == "DEP500"
    assert exc_info.value.status_code == 404
    assert "999" not in registry
    assert registry.exists("999") is False


def test_list_all_sorted_numerically(registry):
    ids = [c.class_id for c in registry.list_all()]
    assert ids[:4] == ["1", "3", "8", "10"]
    assert len(ids) == len(DEFAULT_CCA_CLASSES) == len(registry)


def test_registry_is_read_only(registry):
    with pytest.raises(TypeError):
        registry._classes["99"] = DepreciationClass(class_id="99", rate="0.1", description="x")


def test_alternate_table_is_independent_of_default():
    custom = DepreciationClassRegistry.from_table([("A", "0.25", "Test class")])
    assert custom.rate("A") == Decimal("0.25")
    assert "A" not in DepreciationClassRegistry.default()
    assert custom.list_all()[0].class_id == "A"


def test_duplicate_class_rejected():
    with pytest.raises(ConfigurationError):
        DepreciationClassRegistry.from_table([("1", "0.1", "a"), ("1", "0.2", "b")])


def test_rate_outside_unit_interval_rejected():
    with pytest.raises(ConfigurationError) as exc_info:
        DepreciationClassRegistry.from_table([("1", "1.5", "too fast")])
    assert exc_info.value.code == "SYS401"
