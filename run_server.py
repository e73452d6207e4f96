"""
Booking API Server Runner
Run this as a separate process: python run_server.py
"""

import logging
import sys
from pathlib import Path

import uvicorn

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from app.config import PORT

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info(f"🚀 Starting booking API on port {PORT}...")
    try:
        uvicorn.run("app.main:app", host="0.0.0.0", port=PORT)
    except KeyboardInterrupt:
        logger.info("👋 Booking API stopped by user")
    except Exception as e:
        logger.error(f"❌ Booking API crashed: {e}")
        sys.exit(1)
