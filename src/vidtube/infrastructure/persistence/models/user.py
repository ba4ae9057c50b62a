"""SQLAlchemy model for the users table.

Users are uniquely identified by username and by email. Both are stored
lowercased so lookups are case-insensitive.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.infrastructure.persistence.database import Base


class UserModel(Base):
    """SQLAlchemy model for the users table.

    Attributes:
        id: Primary key (UUID string).
        username: Unique lowercase handle.
        email: Unique lowercase email address.
        fullname: Display name.
        avatar: URL of the avatar image.
        cover_image: URL of the cover image, empty when none was uploaded.
        password_hash: Argon2 hash of the password. Never plaintext.
        refresh_token_hash: SHA-256 digest of the single current refresh token,
            None when the user has no active session.
        created_at: Timestamp when the user was created.
        updated_at: Timestamp when the user was last updated.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="User ID (UUID)",
    )
    username: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        comment="Lowercase username",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Lowercase email address",
    )
    fullname: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    avatar: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        comment="Avatar URL",
    )
    cover_image: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        default="",
        server_default="",
        comment="Cover image URL",
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Hashed password (argon2)",
    )
    refresh_token_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="SHA-256 digest of the current refresh token",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    videos: Mapped[list["VideoModel"]] = relationship(  # noqa: F821
        "VideoModel",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, email={self.email})>"
