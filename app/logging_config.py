import logging
from datetime import datetime

import pytz

from app.config import settings

CAMPUS_TIMEZONE = pytz.timezone("Asia/Kolkata")


class CampusTimeFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        # Render timestamps in campus local time
        record_time = datetime.fromtimestamp(record.created, CAMPUS_TIMEZONE)
        return record_time.strftime(datefmt) if datefmt else record_time.isoformat()


def setup_logging(level: str | None = None) -> logging.Logger:
    logger = logging.getLogger()
    if not logger.handlers:
        formatter = CampusTimeFormatter(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    return logger
