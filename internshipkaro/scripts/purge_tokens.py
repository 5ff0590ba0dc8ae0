"""
CLI entrypoint for the refresh-token ledger purge. Run from cron, e.g.:

  python -m internshipkaro.scripts.purge_tokens

Or hourly: 0 * * * * cd /path/to/internshipkaro && .venv/bin/python -m internshipkaro.scripts.purge_tokens
"""

import logging
import sys

from internshipkaro.core.config import get_settings
from internshipkaro.core.database import build_engine, build_session_factory
from internshipkaro.services.refresh_tokens import purge_refresh_tokens

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete refresh-token rows expired or revoked longer than TOKEN_PURGE_GRACE_HOURS ago."""
    settings = get_settings()
    engine = build_engine(settings)
    db = build_session_factory(engine)()
    try:
        deleted = purge_refresh_tokens(db, settings)
        logger.info("Purge completed: tokens_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Purge job failed: %s", e)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
