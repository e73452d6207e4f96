"""Package router - public pricing lookups"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .catalogue import INSPECTION_PACKAGES, get_package
from .schemas import PackageInfo, PackagePriceResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Packages"])


def _invalid_package() -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": "Invalid package type"})


@router.get("/packages", response_model=list[PackageInfo])
async def list_packages():
    """Full catalogue for the pricing section"""
    return list(INSPECTION_PACKAGES)


# An empty id never reaches the templated route below
@router.get("/package", include_in_schema=False)
@router.get("/package/", include_in_schema=False)
async def get_package_without_type():
    return _invalid_package()


@router.get("/package/{package_type}", response_model=PackagePriceResponse)
async def get_package_price(package_type: str):
    """Price and display name for basic, standard or premium"""
    package = get_package(package_type)
    if package is None:
        logger.warning(f"Unknown package type requested: {package_type!r}")
        return _invalid_package()
    return PackagePriceResponse(price=package.price, name=package.name)
