"""Package domain schemas"""

from typing import Optional

from pydantic import BaseModel


class PackageInfo(BaseModel):
    """One catalogue entry, shaped the way the pricing section consumes it"""

    id: str
    name: str
    price: float
    originalPrice: Optional[float] = None
    description: str
    duration: str
    features: list[str]
    popular: bool = False

    class Config:
        frozen = True


class PackagePriceResponse(BaseModel):
    price: float
    name: str
