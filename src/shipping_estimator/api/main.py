from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from shipping_estimator import __version__
from shipping_estimator.api.errors import InvalidPackageError, register_error_handlers
from shipping_estimator.config.logging import configure_logging
from shipping_estimator.config.settings import get_settings
from shipping_estimator.engine import PackageDescription, PricingEngine, calculate_fallback, validate
from shipping_estimator.engine.pricing_engine import get_engine
from shipping_estimator.engine.validator import WEIGHT_LIMITS, weight_limit_info

configure_logging(get_settings().log_level)

app = FastAPI(
    title="Shipping Estimator API",
    description="Package validation and shipping cost estimation",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


class DimensionsIn(BaseModel):
    length: float = 0
    width: float = 0
    height: float = 0


class PackageIn(BaseModel):
    """Package description in the camelCase wire shape."""
    # Plain strings so unknown values reach the validator
    shippingMethod: str = ""
    weight: float = 0
    dimensions: DimensionsIn = DimensionsIn()
    destinationZone: str = ""

    def to_package(self) -> PackageDescription:
        return PackageDescription.from_payload(self.model_dump())


def get_quote_engine() -> PricingEngine:
    return get_engine()


def _validated(req: PackageIn) -> PackageDescription:
    pkg = req.to_package()
    errors = validate(pkg)
    if errors:
        raise InvalidPackageError(errors)
    return pkg


@app.get("/")
async def root():
    return {"status": "online", "message": "Shipping Estimator API Active"}


@app.post("/api/calculate-shipping")
async def calculate_shipping(req: PackageIn):
    """Pricing service endpoint, answered with the local formula."""
    pkg = _validated(req)
    return calculate_fallback(pkg).to_payload()


@app.post("/api/validate")
async def validate_package(req: PackageIn):
    errors = validate(req.to_package())
    return {"valid": not errors, "errors": errors}


@app.post("/api/quote")
async def quote(req: PackageIn, engine: PricingEngine = Depends(get_quote_engine)):
    """Validate, then price through the engine (remote service, then fallback)."""
    pkg = _validated(req)
    result = await engine.calculate_price(pkg)
    return {
        **result.to_payload(),
        "source": result.source,
        "warnings": result.warnings,
    }


@app.get("/api/weight-limits")
async def weight_limits():
    return {
        method.value: {**limits, "label": weight_limit_info(method)}
        for method, limits in WEIGHT_LIMITS.items()
    }
