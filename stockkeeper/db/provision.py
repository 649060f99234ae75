from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockkeeper.core.config import settings
from stockkeeper.core.security import hash_password
from stockkeeper.db.base import Base
from stockkeeper.models.user import User, UserRole, UserStatus


logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def run_migrations() -> None:
    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "migrations"))
    alembic_cfg.attributes["configure_logger"] = False
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed successfully")


def create_schema(engine: Engine) -> None:
    import stockkeeper.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def seed_default_admin(db: Session) -> User | None:
    """Create the bootstrap admin, but only when no admin account exists at all."""

    has_admin = db.query(User.id).filter(User.role == UserRole.ADMIN).first()
    if has_admin:
        return None

    admin = User(
        username=settings.default_admin_username,
        password_hash=hash_password(settings.default_admin_password),
        role=UserRole.ADMIN,
        status=UserStatus.ACTIVE,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.warning(
        "Created default admin account %r. Change its password after the first login.",
        admin.username,
    )
    return admin


def provision(engine: Engine, db: Session) -> None:
    """Bring the schema up to date, then make sure an admin can log in."""

    migrated = False
    if settings.run_migrations and ALEMBIC_INI.exists():
        try:
            run_migrations()
            migrated = True
        except Exception:
            logger.exception("Alembic upgrade failed; falling back to metadata.create_all")
    if not migrated:
        create_schema(engine)

    try:
        seed_default_admin(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to seed the default admin account")
        raise
