"""
Create the booking tables and load the inspection package catalogue.
Run: python seed_packages.py
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from app import models  # noqa: F401
from app.database import Base, SessionLocal, engine
from app.domain.packages.catalogue import seed_packages

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


def main():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        count = seed_packages(db)
        logger.info(f"✅ {count} packages in inspection_packages")
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to seed packages: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
