"""
Data models for the shipping estimator.

Uses dataclasses for structured, type-safe data representation.
Enumerated fields are string-valued enums so they serialize as plain
strings on the wire.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class ShippingMethod(str, Enum):
    """Delivery speed selected for the package."""
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"


class DestinationZone(str, Enum):
    """Destination locality of the package."""
    LOCAL = "local"
    DOMESTIC = "domestic"
    INTERNATIONAL = "international"


# Field names used as keys in validation error mappings
ValidationErrors = dict[str, str]


def coerce_enum(enum_cls, value):
    """Map a raw value to its enum member, keeping unknown values as-is."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _to_float(value) -> float:
    """Form inputs arrive as blanks or strings; blanks count as 0."""
    if value is None or value == "":
        return 0.0
    return float(value)


@dataclass(frozen=True)
class Dimensions:
    """Package dimensions in centimeters."""
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def volume_liters(self) -> float:
        return (self.length * self.width * self.height) / 1000

    @property
    def total(self) -> float:
        return self.length + self.width + self.height

    def to_dict(self) -> dict:
        return {"length": self.length, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class PackageDescription:
    """
    A package to be priced.

    `shipping_method` and `destination_zone` hold enum members once the
    record is valid; raw strings are kept for unrecognized values so the
    validator can report them.
    """
    shipping_method: Union[ShippingMethod, str]
    weight: float
    dimensions: Dimensions
    destination_zone: Union[DestinationZone, str]

    def __post_init__(self):
        # Frozen, so normalize through object.__setattr__
        object.__setattr__(self, "shipping_method", coerce_enum(ShippingMethod, self.shipping_method))
        object.__setattr__(self, "destination_zone", coerce_enum(DestinationZone, self.destination_zone))

    def to_payload(self) -> dict:
        """Request body sent to the pricing service."""
        return {
            "shippingMethod": _enum_value(self.shipping_method),
            "weight": self.weight,
            "dimensions": self.dimensions.to_dict(),
            "destinationZone": _enum_value(self.destination_zone),
        }

    @classmethod
    def from_payload(cls, payload: dict) -> 'PackageDescription':
        """Build a package from the camelCase wire shape."""
        dims = payload.get("dimensions") or {}
        return cls(
            shipping_method=payload.get("shippingMethod") or "",
            weight=_to_float(payload.get("weight")),
            dimensions=Dimensions(
                length=_to_float(dims.get("length")),
                width=_to_float(dims.get("width")),
                height=_to_float(dims.get("height")),
            ),
            destination_zone=payload.get("destinationZone") or "",
        )


def _enum_value(value) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _whole_number(value) -> int:
    """Integer from a JSON number; bools and fractional values are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"Expected an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class CostBreakdown:
    """Every factor that produced a shipping cost, kept for display and audit."""
    base_rate: float
    zone_multiplier: float
    size_multiplier: float
    package_size_category: str
    weight_surcharge: float
    weight: float
    shipping_method: str
    destination_zone: str
    # Not always reported by the remote service
    method_multiplier: Optional[float] = None
    volume: Optional[float] = None

    def to_payload(self) -> dict:
        payload = {
            "baseRate": self.base_rate,
            "zoneMultiplier": self.zone_multiplier,
            "sizeMultiplier": self.size_multiplier,
            "packageSizeCategory": self.package_size_category,
            "weightSurcharge": self.weight_surcharge,
            "weight": self.weight,
            "shippingMethod": self.shipping_method,
            "destinationZone": self.destination_zone,
        }
        if self.method_multiplier is not None:
            payload["methodMultiplier"] = self.method_multiplier
        if self.volume is not None:
            payload["volume"] = self.volume
        return payload

    @classmethod
    def from_payload(cls, payload: dict) -> 'CostBreakdown':
        method_multiplier = payload.get("methodMultiplier")
        volume = payload.get("volume")
        return cls(
            base_rate=float(payload["baseRate"]),
            zone_multiplier=float(payload["zoneMultiplier"]),
            size_multiplier=float(payload["sizeMultiplier"]),
            package_size_category=str(payload["packageSizeCategory"]),
            weight_surcharge=float(payload["weightSurcharge"]),
            weight=float(payload["weight"]),
            shipping_method=str(payload["shippingMethod"]),
            destination_zone=str(payload["destinationZone"]),
            method_multiplier=float(method_multiplier) if method_multiplier is not None else None,
            volume=float(volume) if volume is not None else None,
        )

    def as_rows(self) -> list[dict]:
        """Label/value rows for the breakdown table."""
        rows = [
            {"Factor": "Base Rate", "Value": f"${self.base_rate:.2f}"},
            {"Factor": "Zone Multiplier", "Value": f"{self.zone_multiplier}x ({self.destination_zone})"},
            {"Factor": "Size Multiplier", "Value": f"{self.size_multiplier}x ({self.package_size_category})"},
        ]
        if self.method_multiplier is not None:
            rows.append({"Factor": "Method Multiplier", "Value": f"{self.method_multiplier}x"})
        rows.extend([
            {"Factor": "Package Size Category", "Value": self.package_size_category},
            {"Factor": "Weight Surcharge", "Value": f"${self.weight_surcharge:.2f}"},
            {"Factor": "Weight", "Value": f"{self.weight}kg"},
            {"Factor": "Shipping Method", "Value": self.shipping_method.upper()},
            {"Factor": "Destination Zone", "Value": self.destination_zone.upper()},
        ])
        return rows


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class PricingResult:
    """Complete result of a shipping price calculation."""
    shipping_cost: float
    estimated_delivery_days: int
    breakdown: CostBreakdown
    source: str = "fallback"  # "service" or "fallback"
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a result-level warning."""
        self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_payload(self) -> dict:
        """Response body in the pricing service wire shape."""
        return {
            "shippingCost": self.shipping_cost,
            "estimatedDeliveryDays": self.estimated_delivery_days,
            "breakdown": self.breakdown.to_payload(),
        }

    @classmethod
    def from_payload(cls, payload: dict, source: str = "service") -> 'PricingResult':
        """
        Parse a pricing service response body.

        Raises:
            ValueError: if the body does not have the PricingResult shape.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
        try:
            cost = float(payload["shippingCost"])
            days = _whole_number(payload["estimatedDeliveryDays"])
            raw_breakdown = payload["breakdown"]
            if not isinstance(raw_breakdown, dict):
                raise ValueError(f"Expected breakdown object, got {type(raw_breakdown).__name__}")
            breakdown = CostBreakdown.from_payload(raw_breakdown)
        except (KeyError, TypeError, AttributeError, OverflowError) as e:
            raise ValueError(f"Malformed pricing response: {e!r}") from e

        if not math.isfinite(cost) or cost < 0:
            raise ValueError(f"Invalid shipping cost in response: {cost}")
        if days <= 0:
            raise ValueError(f"Non-positive delivery estimate in response: {days}")

        return cls(
            shipping_cost=round(cost, 2),
            estimated_delivery_days=days,
            breakdown=breakdown,
            source=source,
        )
