"""Community post."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Mapped, mapped_column

from community.extensions import db


class Post(db.Model):
    __tablename__ = "post"
    __table_args__ = (db.Index("ix_post_created_at_seq", "created_at", "seq"),)

    # Insertion sequence; breaks created_at ties.
    seq: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(db.String(255), nullable=False)
    content: Mapped[str] = mapped_column(db.Text, nullable=False)
    author: Mapped[str] = mapped_column(db.String(255), nullable=False)
    # Assigned by the database at write time, never by the client.
    created_at: Mapped[datetime] = mapped_column(
        db.DateTime(timezone=True), server_default=func.now(), nullable=False
    )
