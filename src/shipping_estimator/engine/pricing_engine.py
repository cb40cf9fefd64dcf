"""
Pricing Engine - shipping cost resolution with a local fallback.

Resolution order:
1. Ask the remote pricing service for a quote
2. On any service failure, evaluate the local fallback formula

The fallback formula is pure arithmetic and always succeeds, so a caller
holding a validated package always gets a result back.
"""
import logging
from typing import Awaitable, Callable, Optional

from ..config.settings import get_settings, Settings
from ..services.pricing_client import PricingServiceClient, PricingServiceError
from .models import (
    CostBreakdown,
    DestinationZone,
    PackageDescription,
    PricingResult,
    ShippingMethod,
)

logger = logging.getLogger(__name__)


BASE_RATE = 15.00

ZONE_MULTIPLIERS = {
    DestinationZone.LOCAL: 1.0,
    DestinationZone.DOMESTIC: 1.5,
    DestinationZone.INTERNATIONAL: 2.0,
}

METHOD_MULTIPLIERS = {
    ShippingMethod.STANDARD: 1.0,
    ShippingMethod.EXPRESS: 1.8,
    ShippingMethod.OVERNIGHT: 2.5,
}

DELIVERY_DAYS = {
    ShippingMethod.STANDARD: 7,
    ShippingMethod.EXPRESS: 3,
    ShippingMethod.OVERNIGHT: 1,
}

# (max volume in liters, category, multiplier); last tier is unbounded
SIZE_TIERS = [
    (5, "Small", 1.0),
    (20, "Medium", 1.2),
    (50, "Large", 1.5),
    (None, "Extra Large", 2.0),
]

WEIGHT_SURCHARGE_FREE_KG = 1.0
WEIGHT_SURCHARGE_PER_KG = 2.5

# Every table must cover every enum member
assert set(ZONE_MULTIPLIERS) == set(DestinationZone)
assert set(METHOD_MULTIPLIERS) == set(ShippingMethod)
assert set(DELIVERY_DAYS) == set(ShippingMethod)


def _lookup(table: dict, key, name: str):
    """Table lookup that refuses values outside the enumeration."""
    assert key in table, f"Unrecognized {name}: {key!r}"
    return table[key]


def size_tier(volume: float) -> tuple[str, float]:
    """Resolve (category, multiplier) for a volume in liters."""
    for limit, category, multiplier in SIZE_TIERS:
        if limit is None or volume <= limit:
            return category, multiplier
    raise AssertionError("SIZE_TIERS must end with an unbounded tier")


def weight_surcharge(weight: float) -> float:
    """Flat charge per kg above the free allowance."""
    return max(0.0, (weight - WEIGHT_SURCHARGE_FREE_KG) * WEIGHT_SURCHARGE_PER_KG)


def calculate_fallback(pkg: PackageDescription) -> PricingResult:
    """
    Evaluate the local pricing formula.

    Deterministic and side-effect free. The package is assumed valid;
    unrecognized method/zone values raise AssertionError.
    """
    zone_multiplier = _lookup(ZONE_MULTIPLIERS, pkg.destination_zone, "destination zone")
    method_multiplier = _lookup(METHOD_MULTIPLIERS, pkg.shipping_method, "shipping method")
    delivery_days = _lookup(DELIVERY_DAYS, pkg.shipping_method, "shipping method")

    volume = pkg.dimensions.volume_liters
    category, size_multiplier = size_tier(volume)
    surcharge = weight_surcharge(pkg.weight)

    cost = round(BASE_RATE * zone_multiplier * size_multiplier * method_multiplier + surcharge, 2)

    result = PricingResult(
        shipping_cost=cost,
        estimated_delivery_days=delivery_days,
        breakdown=CostBreakdown(
            base_rate=BASE_RATE,
            zone_multiplier=zone_multiplier,
            size_multiplier=size_multiplier,
            package_size_category=category,
            weight_surcharge=surcharge,
            weight=pkg.weight,
            shipping_method=pkg.shipping_method.value,
            destination_zone=pkg.destination_zone.value,
            method_multiplier=method_multiplier,
            volume=volume,
        ),
        source="fallback",
    )

    result.add_trace("Base Rate", "Flat base rate", f"${BASE_RATE:.2f}")
    result.add_trace("Zone", f"{pkg.destination_zone.value} multiplier", f"{zone_multiplier}x")
    result.add_trace("Size", f"{volume:.2f} L → {category}", f"{size_multiplier}x")
    result.add_trace("Method", f"{pkg.shipping_method.value} multiplier", f"{method_multiplier}x")
    result.add_trace("Weight Surcharge", f"{pkg.weight}kg", f"${surcharge:.2f}")
    result.add_trace("Total", "Rounded shipping cost", f"${cost:.2f}")

    return result


async def with_fallback(
    primary: Callable[[PackageDescription], Awaitable[PricingResult]],
    fallback: Callable[[PackageDescription], PricingResult],
    pkg: PackageDescription,
) -> PricingResult:
    """
    Run the remote attempt and map service failures to the fallback.

    Only PricingServiceError is recovered; anything else is a bug and
    propagates.
    """
    try:
        return await primary(pkg)
    except PricingServiceError as e:
        logger.warning("Using local estimate due to pricing service unavailability: %s", e.message)
        result = fallback(pkg)
        result.add_warning(f"Pricing service unavailable ({e.message}); local estimate used")
        return result


class PricingEngine:
    """
    Shipping price resolution: remote pricing service first, local formula
    when the service cannot answer.

    The engine keeps no per-call state, so concurrent calls are independent.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[PricingServiceClient] = None,
    ):
        """Initialize engine with settings and an optional service client."""
        self.settings = settings or get_settings()

        if client is not None:
            self.client = client
        elif self.settings.remote_pricing_enabled:
            self.client = PricingServiceClient(
                base_url=self.settings.pricing_service_url,
                timeout=self.settings.pricing_service_timeout,
            )
        else:
            self.client = None

    async def calculate_price(self, pkg: PackageDescription) -> PricingResult:
        """
        Calculate a shipping price.

        Args:
            pkg: A package that already passed validation

        Returns:
            PricingResult from the service, or from the fallback formula
            with a warning attached
        """
        logger.info("Calculating shipping cost for %s", pkg.to_payload())

        if self.client is None:
            logger.info("Remote pricing disabled; using local estimate")
            result = calculate_fallback(pkg)
        else:
            result = await with_fallback(self.client.fetch_quote, calculate_fallback, pkg)
            if result.source == "service":
                result.add_trace("Pricing Service", "Quote from remote service", self.client.endpoint)

        logger.debug(
            "Shipping calculated: %.2f (%d days, source=%s)",
            result.shipping_cost, result.estimated_delivery_days, result.source,
        )
        return result


_engine: Optional[PricingEngine] = None


def get_engine() -> PricingEngine:
    """Get the shared engine built from global settings."""
    global _engine
    if _engine is None:
        _engine = PricingEngine()
    return _engine


async def calculate_price(pkg: PackageDescription) -> PricingResult:
    """Calculate a shipping price with the shared engine."""
    return await get_engine().calculate_price(pkg)
