"""Database initialization and seeding for leaveflow.

Creates the tables and the approver directory the workflow catalog refers to.
"""

from typing import Iterable, List

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from leaveflow.common.logger import get_logger
from leaveflow.core.approval.models import Approver
from leaveflow.db.base import Base
from leaveflow.db.models import User

logger = get_logger("db_seed")


def seed_users(db: Session, approvers: Iterable[Approver]) -> List[User]:
    """
    Create directory entries for the given approvers.

    Idempotent - existing users are returned unchanged.

    Args:
        db: Database session
        approvers: Approvers to register

    Returns:
        The User rows, existing or new
    """
    users = []
    created = 0

    for approver in approvers:
        existing = db.get(User, approver.id)
        if existing:
            users.append(existing)
            continue

        user = User(id=approver.id, name=approver.name, role=approver.role)
        db.add(user)
        users.append(user)
        created += 1

    db.commit()
    if created:
        logger.info(f"Seeded {created} approvers")
    return users


def init_db(engine: Engine, db: Session, approvers: Iterable[Approver] = ()) -> None:
    """Create all tables and seed the approver directory."""
    Base.metadata.create_all(bind=engine)
    seed_users(db, approvers)
