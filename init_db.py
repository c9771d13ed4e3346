import sys

from loguru import logger

from app.core.database import init_db

if __name__ == "__main__":
    # Pass --recreate to drop the case tracker tables before creating them again
    recreate = "--recreate" in sys.argv[1:]
    try:
        init_db(recreate=recreate)
        logger.info(f"Case tracker schema ready (recreated: {recreate})")
    except Exception as e:
        logger.error(f"Failed to initialize case tracker schema: {e}")
        raise
