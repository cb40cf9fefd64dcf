"""
Package validation rules.

Every rule is evaluated on each call and every violation is reported,
keyed by the form field it belongs to. An empty mapping means the package
is ready for pricing.
"""
import math

from .models import (
    DestinationZone,
    PackageDescription,
    ShippingMethod,
    ValidationErrors,
)


# Weight limits (kg) for each shipping method
WEIGHT_LIMITS = {
    ShippingMethod.STANDARD: {"min": 0.1, "max": 20},
    ShippingMethod.EXPRESS: {"min": 0.1, "max": 10},
    ShippingMethod.OVERNIGHT: {"min": 0.1, "max": 5},
}

MAX_DIMENSION_CM = 200
MAX_TOTAL_DIMENSION_CM = 400

DIMENSION_FIELDS = ("length", "width", "height")


def weight_limit_info(method) -> str:
    """Human-readable weight range for a method, e.g. '0.1kg - 20kg'."""
    limits = WEIGHT_LIMITS[ShippingMethod(method)]
    return f"{limits['min']:g}kg - {limits['max']:g}kg"


def _is_member(enum_cls, value) -> bool:
    return isinstance(value, enum_cls)


def _validate_weight(pkg: PackageDescription) -> str | None:
    weight = pkg.weight
    if not weight or not math.isfinite(weight) or weight <= 0:
        return "Weight must be a positive number"

    # Range checks need a known method; the method error covers the rest
    if not _is_member(ShippingMethod, pkg.shipping_method):
        return None

    limits = WEIGHT_LIMITS[pkg.shipping_method]
    method = pkg.shipping_method.value
    if weight < limits["min"]:
        return f"Weight must be at least {limits['min']:g}kg for {method} shipping"
    if weight > limits["max"]:
        return f"Weight cannot exceed {limits['max']:g}kg for {method} shipping"
    return None


def _validate_dimension(name: str, value: float) -> str | None:
    label = name.capitalize()
    if not value or not math.isfinite(value) or value <= 0:
        return f"{label} must be a positive number"
    if value > MAX_DIMENSION_CM:
        return f"{label} cannot exceed {MAX_DIMENSION_CM}cm"
    return None


def validate(pkg: PackageDescription) -> ValidationErrors:
    """
    Validate a package description.

    Returns:
        Mapping of field name -> message for every violated rule. Only
        failing fields are present.
    """
    errors: ValidationErrors = {}

    if not _is_member(ShippingMethod, pkg.shipping_method):
        errors["shippingMethod"] = "Please select a shipping method"

    weight_error = _validate_weight(pkg)
    if weight_error:
        errors["weight"] = weight_error

    for name in DIMENSION_FIELDS:
        dimension_error = _validate_dimension(name, getattr(pkg.dimensions, name))
        if dimension_error:
            errors[name] = dimension_error

    if not _is_member(DestinationZone, pkg.destination_zone):
        errors["destinationZone"] = "Please select a destination zone"

    # Checked on its own, on top of any per-dimension errors
    if pkg.dimensions.total > MAX_TOTAL_DIMENSION_CM:
        errors["dimensions"] = (
            f"Combined dimensions (L+W+H) cannot exceed {MAX_TOTAL_DIMENSION_CM}cm"
        )

    return errors


def summarize_errors(errors: ValidationErrors) -> str:
    """Aggregate message shown when a submission is rejected."""
    count = len(errors)
    plural = "s" if count > 1 else ""
    return (
        f"Please fix {count} validation error{plural} before calculating shipping cost."
    )
