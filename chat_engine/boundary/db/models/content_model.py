"""
Portfolio content ORM model.

The searchable corpus: project write-ups and general "about" entries with
their precomputed embeddings. The engine only ever reads this table; it is
populated by the content pipeline outside this service.

Dependencies: sqlalchemy, chat_engine.boundary.db.base
System role: Read-only retrieval corpus
"""

from typing import Any

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from chat_engine.boundary.db.base import Base, TimestampMixin


class ContentItemModel(Base, TimestampMixin):
    """
    Corpus entry searched by the hybrid search engine.

    Attributes:
        seq: Serial primary key, the corpus insertion order used for tie-breaks
        content_id: Identifier of the source item (project slug, info id)
        content_type: 'project', 'general_info', ...
        title: Display title, searched lexically
        body: Main text, searched lexically
        summary: Optional short summary, searched lexically
        payload: Structured content handed to the generator
        item_metadata: Free-form metadata (category, keywords, image, ...)
        embedding: Precomputed embedding vector (list of floats)
    """

    __tablename__ = "content_items"
    __table_args__ = (
        UniqueConstraint("content_id", "content_type", name="uq_content_items_identity"),
    )

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content_id: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    summary: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    item_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    embedding: Mapped[list[float] | None] = mapped_column(
        JSON(none_as_null=True),
        nullable=True,
        default=None,
    )
