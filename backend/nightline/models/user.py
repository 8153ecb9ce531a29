"""
User model with secure password storage.

`session_version` is embedded in every access token; bumping it on logout
invalidates all tokens issued before.
"""

from sqlalchemy import Column, Integer, String, CheckConstraint

from nightline.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    phone = Column(String(32), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    session_version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("role IN ('user', 'promoter', 'admin', 'owner')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
