"""Engine subpackage - validation and pricing logic."""
from .pricing_engine import PricingEngine, calculate_fallback, calculate_price
from .models import (
    CostBreakdown,
    DestinationZone,
    Dimensions,
    PackageDescription,
    PricingResult,
    ShippingMethod,
)
from .validator import validate

__all__ = [
    'PricingEngine', 'calculate_fallback', 'calculate_price', 'validate',
    'CostBreakdown', 'DestinationZone', 'Dimensions', 'PackageDescription',
    'PricingResult', 'ShippingMethod',
]
