from __future__ import annotations

import logging

from app.infrastructure.db.engine import Base, get_engine
from app.infrastructure.db.models import accounts  # noqa: F401  registers the tables on Base.metadata
from app.shared.config import get_settings


logger = logging.getLogger(__name__)


def create_auth_schema(engine) -> list[str]:
    Base.metadata.create_all(engine)
    return sorted(Base.metadata.tables)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    if not settings.postgres_dsn:
        raise SystemExit("POSTGRES_DSN is required.")
    tables = create_auth_schema(get_engine(settings.postgres_dsn))
    logger.info("init_schema: ensured tables=%s", ",".join(tables))


if __name__ == "__main__":
    main()
