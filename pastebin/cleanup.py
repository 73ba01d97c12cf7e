"""
One-shot cleanup sweep: physically removes every expired paste.

Run on a schedule owned outside the service (cron, CronJob, ...):

    python -m pastebin.cleanup
"""
import logging
import sys

from pastebin.config import settings
from pastebin.database import connect_store
from pastebin.exceptions import StoreError
from pastebin.service import PasteService

logger = logging.getLogger("pastebin.cleanup")


def sweep_once() -> int:
    store = connect_store(settings.REDIS_URL)
    if store.using_fallback:
        # An in-memory store here is a fresh, empty process-local one
        logger.warning("Redis not available; nothing to clean up")
        return 0
    return PasteService.from_settings(store).cleanup_expired_pastes()


def main() -> int:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        removed = sweep_once()
    except StoreError as e:
        logger.error(f"Cleanup failed: {e}")
        return 1
    logger.info(f"Cleanup finished: {removed} expired paste(s) removed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
