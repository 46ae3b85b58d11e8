from __future__ import annotations

import logging

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.db.base import Base
from app.db.session import engine

# Import models to register with SQLAlchemy
import app.models  # noqa: F401

logger = logging.getLogger(__name__)


def main() -> int:
    configure_logging(get_settings().log_level)

    # Create tables and indexes
    Base.metadata.create_all(bind=engine)

    logger.info("DB initialized: %s", ", ".join(sorted(Base.metadata.tables)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
