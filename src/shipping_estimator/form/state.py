"""
Form state for the shipping calculator page.

Holds the draft package a user is editing, the last validation errors and
the last computed result. One instance per user session.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..engine.models import (
    DestinationZone,
    Dimensions,
    PackageDescription,
    PricingResult,
    ShippingMethod,
    ValidationErrors,
)
from ..engine.pricing_engine import PricingEngine
from ..engine.validator import DIMENSION_FIELDS, summarize_errors, validate

logger = logging.getLogger(__name__)

FORM_FIELDS = ("shippingMethod", "weight", "destinationZone")


def _initial_form_data() -> dict:
    return {
        "shippingMethod": ShippingMethod.STANDARD.value,
        "weight": 0.0,
        "dimensions": {"length": 0.0, "width": 0.0, "height": 0.0},
        "destinationZone": DestinationZone.LOCAL.value,
    }


@dataclass
class ShippingFormState:
    """Mutable draft plus the outcome of the last submission."""
    form_data: dict = field(default_factory=_initial_form_data)
    errors: ValidationErrors = field(default_factory=dict)
    loading: bool = False
    shipping_result: Optional[PricingResult] = None
    show_validation: bool = False

    def update_field(self, name: str, value):
        """Set a top-level field and clear its error."""
        if name not in FORM_FIELDS:
            raise KeyError(f"Unknown form field: {name}")
        self.form_data[name] = value
        self.errors.pop(name, None)

    def update_dimensions(self, dimension: str, value: float):
        """Set one dimension and clear its error."""
        if dimension not in DIMENSION_FIELDS:
            raise KeyError(f"Unknown dimension: {dimension}")
        self.form_data["dimensions"][dimension] = value
        self.errors.pop(dimension, None)

    def reset_form(self):
        """Return to the initial empty form."""
        self.form_data = _initial_form_data()
        self.errors = {}
        self.loading = False
        self.shipping_result = None
        self.show_validation = False

    def clear_results(self):
        self.shipping_result = None

    def current_package(self) -> PackageDescription:
        """Snapshot the draft as an immutable package description."""
        data = self.form_data
        dims = data["dimensions"]
        return PackageDescription(
            shipping_method=data["shippingMethod"],
            weight=float(data["weight"] or 0),
            dimensions=Dimensions(
                length=float(dims["length"] or 0),
                width=float(dims["width"] or 0),
                height=float(dims["height"] or 0),
            ),
            destination_zone=data["destinationZone"],
        )

    def error_summary(self) -> Optional[str]:
        if not self.errors:
            return None
        return summarize_errors(self.errors)

    async def calculate_shipping(self, engine: PricingEngine) -> Optional[PricingResult]:
        """
        Validate the draft and, if it is clean, price it.

        Returns the result, or None when validation failed (errors are left
        on the state for display).
        """
        self.show_validation = True
        pkg = self.current_package()
        self.errors = validate(pkg)

        if self.errors:
            logger.info("Validation errors: %s", self.errors)
            return None

        self.loading = True
        try:
            result = await engine.calculate_price(pkg)
        finally:
            self.loading = False

        self.shipping_result = result
        return result

    def package_summary(self) -> dict[str, str]:
        """Display values for the package summary panel."""
        data = self.form_data
        dims = data["dimensions"]
        length = dims["length"] or 0
        width = dims["width"] or 0
        height = dims["height"] or 0

        summary = {
            "Method": (data["shippingMethod"] or "Not selected").upper(),
            "Weight": f"{data['weight'] or 0:g} kg",
            "Dimensions": f"{length:g} × {width:g} × {height:g} cubic cm",
            "Zone": (data["destinationZone"] or "Not selected").upper(),
            "Volume": f"{length * width * height / 1000:.2f} L",
        }
        if self.show_validation and self.errors:
            count = len(self.errors)
            summary["Status"] = f"{count} Error{'s' if count > 1 else ''}"
        return summary
