"""Inspection package catalogue - static, loaded at import time"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import InspectionPackage
from .schemas import PackageInfo

logger = logging.getLogger(__name__)

INSPECTION_PACKAGES: tuple[PackageInfo, ...] = (
    PackageInfo(
        id="basic",
        name="Basic Inspection",
        price=45,
        originalPrice=60,
        description="Essential safety and mechanical check",
        duration="1-2 hours",
        features=[
            "Engine Performance Check",
            "Brake System Inspection",
            "Tire Condition Assessment",
            "Fluid Levels Check",
            "Battery & Electrical Test",
            "Basic Safety Features",
            "Digital Report within 24hrs",
            "30-day Report Validity",
        ],
    ),
    PackageInfo(
        id="standard",
        name="Standard Inspection",
        price=85,
        originalPrice=110,
        description="Comprehensive vehicle evaluation",
        duration="2-3 hours",
        popular=True,
        features=[
            "Everything in Basic Package",
            "Transmission Inspection",
            "Suspension & Steering Check",
            "Air Conditioning System",
            "Exhaust System Analysis",
            "Interior & Exterior Assessment",
            "Road Test Evaluation",
            "Detailed Photo Documentation",
            "Priority Scheduling",
            "60-day Report Validity",
        ],
    ),
    PackageInfo(
        id="premium",
        name="Premium Inspection",
        price=150,
        originalPrice=200,
        description="Complete diagnostic evaluation",
        duration="3-4 hours",
        features=[
            "Everything in Standard Package",
            "Advanced Diagnostic Scan",
            "Engine Compression Test",
            "Cooling System Pressure Test",
            "Paint & Body Condition Report",
            "Market Value Assessment",
            "Maintenance History Review",
            "Same-day Report Delivery",
            "Phone Consultation Included",
            "90-day Report Validity",
            "Free Re-inspection (if needed)",
        ],
    ),
)

PACKAGES_BY_ID = {package.id: package for package in INSPECTION_PACKAGES}
PACKAGE_IDS = tuple(PACKAGES_BY_ID)


def get_package(package_id: Optional[str]) -> Optional[PackageInfo]:
    """Exact, case-sensitive lookup; ``Premium`` is not ``premium``"""
    return PACKAGES_BY_ID.get(package_id or "")


def seed_packages(db: Session) -> int:
    """Upsert the catalogue into inspection_packages. Returns rows written."""
    written = 0
    for package in INSPECTION_PACKAGES:
        row = db.query(InspectionPackage).filter(InspectionPackage.code == package.id).first()
        if row is None:
            row = InspectionPackage(code=package.id)
            db.add(row)
        row.name = package.name
        row.price = package.price
        row.original_price = package.originalPrice
        row.description = package.description
        row.duration = package.duration
        row.features = list(package.features)
        row.popular = package.popular
        row.is_active = True
        written += 1
    db.commit()
    logger.info(f"📦 Seeded {written} inspection packages")
    return written
