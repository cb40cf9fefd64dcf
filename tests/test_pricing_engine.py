"""
Pricing engine tests: the fallback formula and the remote/fallback
composition.
"""
import asyncio
import os
import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from shipping_estimator.config.settings import Settings
from shipping_estimator.engine import PricingEngine, calculate_fallback
from shipping_estimator.engine.models import (
    DestinationZone,
    Dimensions,
    PackageDescription,
    PricingResult,
    ShippingMethod,
)
from shipping_estimator.engine.pricing_engine import size_tier, weight_surcharge, with_fallback
from shipping_estimator.services.pricing_client import PricingServiceClient, PricingServiceError


def make_package(method=ShippingMethod.STANDARD, weight=2.5, dims=(25, 20, 10), zone=DestinationZone.DOMESTIC):
    return PackageDescription(
        shipping_method=method,
        weight=weight,
        dimensions=Dimensions(*dims),
        destination_zone=zone,
    )


def service_body(cost=42.0, days=2):
    return {
        "shippingCost": cost,
        "estimatedDeliveryDays": days,
        "breakdown": {
            "baseRate": 20.0,
            "zoneMultiplier": 1.0,
            "sizeMultiplier": 1.0,
            "packageSizeCategory": "Small",
            "weightSurcharge": 0.0,
            "weight": 2.5,
            "shippingMethod": "standard",
            "destinationZone": "domestic",
        },
    }


def engine_with(handler) -> PricingEngine:
    settings = Settings(project_root=Path("."), pricing_service_url="http://pricing.test")
    client = PricingServiceClient(
        base_url=settings.pricing_service_url,
        transport=httpx.MockTransport(handler),
    )
    return PricingEngine(settings, client=client)


# ============================================================================
# FALLBACK FORMULA
# ============================================================================

def test_worked_example():
    """standard, 2.5kg, 25x20x10, domestic -> 26.25 in 7 days."""
    result = calculate_fallback(make_package())

    assert result.shipping_cost == 26.25
    assert result.estimated_delivery_days == 7
    assert result.source == "fallback"

    b = result.breakdown
    assert b.base_rate == 15.0
    assert b.zone_multiplier == 1.5
    assert b.size_multiplier == 1.0
    assert b.method_multiplier == 1.0
    assert b.package_size_category == "Small"
    assert b.weight_surcharge == pytest.approx(3.75)
    assert b.volume == pytest.approx(5.0)
    assert (b.weight, b.shipping_method, b.destination_zone) == (2.5, "standard", "domestic")


@pytest.mark.parametrize("method,days,expected", [
    # base 15 x local 1.0 x Small 1.0 x method + surcharge 0
    (ShippingMethod.STANDARD, 7, 15.0),
    (ShippingMethod.EXPRESS, 3, 27.0),
    (ShippingMethod.OVERNIGHT, 1, 37.5),
])
def test_method_multiplier_and_delivery_days(method, days, expected):
    result = calculate_fallback(make_package(method=method, weight=1.0, zone=DestinationZone.LOCAL))
    assert result.shipping_cost == expected
    assert result.estimated_delivery_days == days


def test_international_large_package():
    # volume 40*30*30/1000 = 36 L -> Large 1.5; 15 * 2.0 * 1.5 * 1.8 = 81, surcharge (4-1)*2.5 = 7.5
    result = calculate_fallback(make_package(
        method=ShippingMethod.EXPRESS, weight=4, dims=(40, 30, 30), zone=DestinationZone.INTERNATIONAL,
    ))
    assert result.breakdown.package_size_category == "Large"
    assert result.shipping_cost == 88.5


@pytest.mark.parametrize("volume,category,multiplier", [
    (0, "Small", 1.0),
    (5, "Small", 1.0),
    (5.001, "Medium", 1.2),
    (20, "Medium", 1.2),
    (50, "Large", 1.5),
    (50.5, "Extra Large", 2.0),
])
def test_size_tiers(volume, category, multiplier):
    assert size_tier(volume) == (category, multiplier)


def test_weight_surcharge_floor():
    assert weight_surcharge(0.5) == 0.0
    assert weight_surcharge(1.0) == 0.0
    assert weight_surcharge(3.0) == 5.0


def test_cost_rounded_to_two_places():
    # medium (1.2) x express (1.8) x 15 = 32.4, surcharge (1.37-1)*2.5 = 0.925
    result = calculate_fallback(make_package(
        method=ShippingMethod.EXPRESS, weight=1.37, dims=(30, 30, 20), zone=DestinationZone.LOCAL,
    ))
    assert result.shipping_cost == round(result.shipping_cost, 2)
    assert result.shipping_cost >= 0


def test_fallback_is_deterministic():
    pkg = make_package(method=ShippingMethod.OVERNIGHT, weight=4.2, dims=(60, 40, 30))
    first = calculate_fallback(pkg)
    second = calculate_fallback(pkg)
    assert first.to_payload() == second.to_payload()
    assert first.get_trace_text() == second.get_trace_text()


def test_zero_volume_prices_as_small():
    result = calculate_fallback(make_package(dims=(0, 0, 0)))
    assert result.breakdown.package_size_category == "Small"


def test_unrecognized_zone_is_a_programming_error():
    with pytest.raises(AssertionError):
        calculate_fallback(make_package(zone="lunar"))


# ============================================================================
# REMOTE + FALLBACK
# ============================================================================

def test_service_result_used_when_available():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.read()
        return httpx.Response(200, json=service_body())

    result = asyncio.run(engine_with(handler).calculate_price(make_package()))

    assert seen["path"] == "/api/calculate-shipping"
    assert b'"shippingMethod":"standard"' in seen["body"].replace(b" ", b"")
    assert result.source == "service"
    assert result.shipping_cost == 42.0
    assert result.estimated_delivery_days == 2
    assert result.warnings == []


@pytest.mark.parametrize("response", [
    httpx.Response(503, text="down"),
    httpx.Response(200, text="not json"),
    httpx.Response(200, json={"shippingCost": 10}),
    httpx.Response(200, json=[1, 2, 3]),
    httpx.Response(200, json={**service_body(), "breakdown": []}),
    httpx.Response(200, json={**service_body(), "breakdown": None}),
    httpx.Response(200, json=service_body(cost="NaN")),
    httpx.Response(200, json=service_body(cost="Infinity")),
    httpx.Response(200, json=service_body(cost=-1)),
    httpx.Response(200, json=service_body(days=2.7)),
    httpx.Response(200, json=service_body(days=True)),
    httpx.Response(200, json=service_body(days="3")),
    httpx.Response(
        200,
        content=b'{"shippingCost": 42.0, "estimatedDeliveryDays": Infinity, "breakdown": {}}',
        headers={"Content-Type": "application/json"},
    ),
])
def test_service_failures_fall_back(response):
    result = asyncio.run(engine_with(lambda request: response).calculate_price(make_package()))

    assert result.source == "fallback"
    assert result.shipping_cost == 26.25
    assert len(result.warnings) == 1
    assert "local estimate used" in result.warnings[0]


def test_service_result_parsing():
    """Whole-number floats are accepted; costs are rounded to cents."""
    result = PricingResult.from_payload(service_body(cost=12.346, days=3.0))
    assert result.estimated_delivery_days == 3
    assert isinstance(result.estimated_delivery_days, int)
    assert result.shipping_cost == 12.35

    with pytest.raises(ValueError):
        PricingResult.from_payload(service_body(days=2.7))
    with pytest.raises(ValueError):
        PricingResult.from_payload({**service_body(), "breakdown": "n/a"})


def test_transport_error_falls_back():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = asyncio.run(engine_with(handler).calculate_price(make_package()))
    assert result.source == "fallback"
    assert result.shipping_cost == 26.25


def test_remote_disabled_uses_formula_without_warning():
    engine = PricingEngine(Settings(project_root=Path("."), pricing_service_url=""))
    assert engine.client is None

    result = asyncio.run(engine.calculate_price(make_package()))
    assert result.source == "fallback"
    assert result.warnings == []


def test_with_fallback_does_not_mask_programming_errors():
    async def broken(pkg):
        raise KeyError("boom")

    with pytest.raises(KeyError):
        asyncio.run(with_fallback(broken, calculate_fallback, make_package()))


def test_with_fallback_maps_service_error():
    async def unavailable(pkg):
        raise PricingServiceError("HTTP error! status: 500", status_code=500)

    result = asyncio.run(with_fallback(unavailable, calculate_fallback, make_package()))
    assert result.source == "fallback"
    assert "status: 500" in result.warnings[0]


def test_concurrent_calls_are_independent():
    engine = PricingEngine(Settings(project_root=Path("."), pricing_service_url=""))
    packages = [
        make_package(method=ShippingMethod.STANDARD),
        make_package(method=ShippingMethod.OVERNIGHT, weight=3),
    ]

    async def run_all():
        return await asyncio.gather(*(engine.calculate_price(p) for p in packages))

    results = asyncio.run(run_all())
    assert [r.estimated_delivery_days for r in results] == [7, 1]
    assert results[0] is not results[1]
