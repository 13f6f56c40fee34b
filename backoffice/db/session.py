from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from backoffice.core.config import get_settings


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``; one session per request or startup task."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@lru_cache
def get_engine() -> Engine:
    """Process-wide engine built from settings on first use."""
    settings = get_settings()
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        echo=settings.database_echo,
    )
