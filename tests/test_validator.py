"""
Validation rule tests.

Each rule is evaluated independently, so these tests check both the
messages and which keys are present.
"""
import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from shipping_estimator.engine.models import (
    DestinationZone,
    Dimensions,
    PackageDescription,
    ShippingMethod,
)
from shipping_estimator.engine.validator import (
    WEIGHT_LIMITS,
    summarize_errors,
    validate,
    weight_limit_info,
)


def make_package(method=ShippingMethod.STANDARD, weight=2.5, dims=(25, 20, 10), zone=DestinationZone.DOMESTIC):
    return PackageDescription(
        shipping_method=method,
        weight=weight,
        dimensions=Dimensions(*dims),
        destination_zone=zone,
    )


@pytest.mark.parametrize("method", list(ShippingMethod))
@pytest.mark.parametrize("zone", list(DestinationZone))
def test_valid_package_has_no_errors(method, zone):
    assert validate(make_package(method=method, weight=1.0, zone=zone)) == {}


@pytest.mark.parametrize("method", list(ShippingMethod))
def test_weight_bounds_are_inclusive(method):
    limits = WEIGHT_LIMITS[method]
    assert validate(make_package(method=method, weight=limits["min"])) == {}
    assert validate(make_package(method=method, weight=limits["max"])) == {}


def test_weight_below_minimum():
    errors = validate(make_package(weight=0.05))
    assert errors == {"weight": "Weight must be at least 0.1kg for standard shipping"}


@pytest.mark.parametrize("method,weight,max_label", [
    (ShippingMethod.STANDARD, 20.5, "20"),
    (ShippingMethod.EXPRESS, 10.01, "10"),
    (ShippingMethod.OVERNIGHT, 6, "5"),
])
def test_weight_above_maximum(method, weight, max_label):
    errors = validate(make_package(method=method, weight=weight))
    assert list(errors) == ["weight"]
    assert errors["weight"] == f"Weight cannot exceed {max_label}kg for {method.value} shipping"


@pytest.mark.parametrize("weight", [0, -3])
def test_non_positive_weight(weight):
    errors = validate(make_package(weight=weight))
    assert errors == {"weight": "Weight must be a positive number"}


@pytest.mark.parametrize("weight", [float("nan"), float("inf")])
def test_non_finite_weight(weight):
    errors = validate(make_package(weight=weight))
    assert errors == {"weight": "Weight must be a positive number"}


@pytest.mark.parametrize("length", [float("nan"), float("inf")])
def test_non_finite_dimension(length):
    errors = validate(make_package(dims=(length, 20, 10)))
    assert errors["length"] == "Length must be a positive number"


def test_all_zero_reports_four_errors():
    """Weight and every dimension fail; a zero sum is within the total limit."""
    errors = validate(make_package(weight=0, dims=(0, 0, 0)))
    assert set(errors) == {"weight", "length", "width", "height"}
    assert errors["length"] == "Length must be a positive number"
    assert errors["width"] == "Width must be a positive number"
    assert errors["height"] == "Height must be a positive number"


def test_dimension_over_limit():
    errors = validate(make_package(dims=(201, 10, 10)))
    assert errors == {"length": "Length cannot exceed 200cm"}


def test_dimension_at_limit_passes():
    assert validate(make_package(dims=(200, 100, 100))) == {}


def test_combined_dimensions_only():
    """Each side passes on its own but the sum is 450."""
    errors = validate(make_package(dims=(150, 150, 150)))
    assert errors == {"dimensions": "Combined dimensions (L+W+H) cannot exceed 400cm"}


def test_combined_dimensions_reported_with_individual_errors():
    errors = validate(make_package(dims=(250, 100, 100)))
    assert set(errors) == {"length", "dimensions"}


def test_unrecognized_enumerations():
    pkg = make_package(method="freight", zone="lunar")
    errors = validate(pkg)
    assert errors == {
        "shippingMethod": "Please select a shipping method",
        "destinationZone": "Please select a destination zone",
    }


def test_unrecognized_method_still_checks_positive_weight():
    errors = validate(make_package(method="", weight=0))
    assert set(errors) == {"shippingMethod", "weight"}


def test_weight_limit_info():
    assert weight_limit_info(ShippingMethod.STANDARD) == "0.1kg - 20kg"
    assert weight_limit_info("overnight") == "0.1kg - 5kg"


def test_summarize_errors():
    assert summarize_errors({"weight": "x"}) == \
        "Please fix 1 validation error before calculating shipping cost."
    assert summarize_errors({"weight": "x", "length": "y"}) == \
        "Please fix 2 validation errors before calculating shipping cost."
