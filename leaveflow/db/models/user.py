from sqlalchemy import Column, String

from leaveflow.db.base import Base


class User(Base):
    """Directory entry for a person who can approve leave."""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    role = Column(String(100), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<User {self.id} {self.name} ({self.role})>"
