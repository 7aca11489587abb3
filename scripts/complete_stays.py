import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import structlog

from booking_engine.db.engine import engine
from booking_engine.logging_config import setup_logging
from booking_engine.services.bookings import complete_finished_bookings

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    """
    Mark every CONFIRMED booking whose check-out day has arrived as COMPLETED.

    Safe to run repeatedly; meant to be scheduled once a day.
    """
    logger.info("completion_sweep_started")

    try:
        completed = complete_finished_bookings(engine)
        logger.info("completion_sweep_finished", completed=completed)
    except Exception:
        logger.exception("completion_sweep_failed")
        raise


if __name__ == "__main__":
    main()
