from datetime import date
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..engine.errors import CONFIGURATION, PackageNotFound, ResolutionError
from ..engine.models import ResolutionRequest
from ..engine.price_lookup import pivot_matrix
from ..services.price_comparison import compare_prices
from .state import package_service, resolution_service

app = FastAPI(
    title="Quote Pricing API",
    description="Package price resolution for travel quotes",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


ERROR_STATUS = {
    'PackageNotFound': 404,
    'PackageVersionChanged': 409,
    'PackageInactive': 409,
    'TransportError': 502,
}


@app.exception_handler(ResolutionError)
async def resolution_error_handler(request: Request, exc: ResolutionError):
    status = ERROR_STATUS.get(exc.kind, 422 if exc.category == CONFIGURATION else 400)
    return JSONResponse(status_code=status, content={"error": exc.to_dict()})


class ResolveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    number_of_people: int = Field(alias="numberOfPeople", ge=1)
    number_of_nights: int = Field(alias="numberOfNights", ge=1)
    arrival_date: date = Field(alias="arrivalDate")
    expected_version: Optional[int] = Field(default=None, alias="expectedVersion")


class RecalculatePreviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    package_id: str = Field(alias="packageId")
    linked_version: Optional[int] = Field(default=None, alias="linkedVersion")
    current_price: float = Field(alias="currentPrice", ge=0)
    number_of_people: int = Field(alias="numberOfPeople", ge=1)
    number_of_nights: int = Field(alias="numberOfNights", ge=1)
    arrival_date: date = Field(alias="arrivalDate")


def _get_package_or_404(package_id: str):
    package = package_service.get_package(package_id)
    if package is None or package.status == 'deleted':
        raise PackageNotFound(package_id)
    return package


@app.get("/")
async def root():
    return {"status": "online", "message": "Quote Pricing API Active"}


@app.get("/api/packages")
async def list_packages(include_inactive: bool = True):
    return [
        {
            "id": p.package_id,
            "name": p.name,
            "destination": p.destination,
            "currency": p.currency,
            "version": p.version,
            "status": p.status,
        }
        for p in package_service.list_packages(include_inactive=include_inactive)
    ]


@app.get("/api/packages/{package_id}")
async def get_package(package_id: str):
    return _get_package_or_404(package_id).to_dict()


@app.get("/api/packages/{package_id}/matrix")
async def get_matrix(package_id: str):
    package = _get_package_or_404(package_id)
    df = pivot_matrix(package)
    # Basic JSON cleaning
    df = df.astype(object).where(df.notna(), None)
    return {
        "packageId": package.package_id,
        "currency": package.currency,
        "rows": df.to_dict(orient="records"),
    }


@app.post("/api/packages/{package_id}/validate")
async def validate_package(package_id: str):
    package = _get_package_or_404(package_id)
    result = package_service.validate_package(package)
    return {"valid": result.valid, "errors": result.errors, "warnings": result.warnings}


@app.post("/api/packages/{package_id}/resolve")
async def resolve_price(package_id: str, req: ResolveRequest):
    resolution = resolution_service.resolve_request(ResolutionRequest(
        package_id=package_id,
        number_of_people=req.number_of_people,
        number_of_nights=req.number_of_nights,
        arrival_date=req.arrival_date,
        expected_version=req.expected_version,
    ))
    return resolution.to_wire()


@app.post("/api/quotes/recalculate-preview")
async def recalculate_preview(req: RecalculatePreviewRequest):
    resolution = resolution_service.resolve_request(ResolutionRequest(
        package_id=req.package_id,
        number_of_people=req.number_of_people,
        number_of_nights=req.number_of_nights,
        arrival_date=req.arrival_date,
    ))
    try:
        comparison = compare_prices(req.current_price, resolution, req.linked_version)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "comparison": comparison.to_dict(),
        "priceCalculation": resolution.to_wire(),
    }
