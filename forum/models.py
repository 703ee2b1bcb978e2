from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forum.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Timestamps shared by every entity
# ---------------------------------------------------------------------------
class TimestampMixin:
    # Python-side defaults so the values are populated on the instance
    # right after flush, without a refresh round-trip.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    modified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=True
    )


# ---------------------------------------------------------------------------
# Member
# ---------------------------------------------------------------------------
class Member(TimestampMixin, Base):
    __tablename__ = "member"

    id: Mapped[int] = mapped_column("member_id", Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    nickname: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)

    # Relationships: lazy="noload"; related rows are fetched through repositories
    articles: Mapped[List["Article"]] = relationship(
        "Article", back_populates="member", lazy="noload"
    )


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class Article(TimestampMixin, Base):
    __tablename__ = "article"

    __table_args__ = (
        Index("ix_article_member_id_created_at", "member_id", "created_at"),
    )

    id: Mapped[int] = mapped_column("article_id", Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    member_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("member.member_id", ondelete="CASCADE"), nullable=False, index=True
    )

    member: Mapped["Member"] = relationship("Member", back_populates="articles", lazy="noload")
    comments: Mapped[List["ArticleComment"]] = relationship(
        "ArticleComment", back_populates="article", lazy="noload"
    )
    reactions: Mapped[List["Reaction"]] = relationship(
        "Reaction", back_populates="article", lazy="noload"
    )


# ---------------------------------------------------------------------------
# ArticleComment
# ---------------------------------------------------------------------------
class ArticleComment(TimestampMixin, Base):
    __tablename__ = "article_comment"

    __table_args__ = (
        # Comment thread of an article in posting order
        Index("ix_article_comment_article_id_created_at", "article_id", "created_at"),
    )

    id: Mapped[int] = mapped_column("article_comment_id", Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("article.article_id", ondelete="CASCADE"), nullable=False
    )
    member_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("member.member_id", ondelete="CASCADE"), nullable=False, index=True
    )

    article: Mapped["Article"] = relationship("Article", back_populates="comments", lazy="noload")
    member: Mapped["Member"] = relationship("Member", lazy="noload")
    replies: Mapped[List["ArticleCommentReply"]] = relationship(
        "ArticleCommentReply", back_populates="article_comment", lazy="noload"
    )

    def update_content(self, content: str) -> None:
        self.content = content


# ---------------------------------------------------------------------------
# ArticleCommentReply
# ---------------------------------------------------------------------------
class ArticleCommentReply(TimestampMixin, Base):
    __tablename__ = "article_comment_reply"

    __table_args__ = (
        Index("ix_article_comment_reply_comment_id_created_at", "article_comment_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        "article_comment_reply_id", Integer, primary_key=True, autoincrement=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    article_comment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("article_comment.article_comment_id", ondelete="CASCADE"),
        nullable=False,
    )
    member_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("member.member_id", ondelete="CASCADE"), nullable=False, index=True
    )

    article_comment: Mapped["ArticleComment"] = relationship(
        "ArticleComment", back_populates="replies", lazy="noload"
    )
    member: Mapped["Member"] = relationship("Member", lazy="noload")

    def update_content(self, content: str) -> None:
        self.content = content


# ---------------------------------------------------------------------------
# Reaction
# ---------------------------------------------------------------------------
class Reaction(TimestampMixin, Base):
    """A member's like on an article.  Created once, only ever deleted."""

    __tablename__ = "reaction"

    __table_args__ = (
        UniqueConstraint("member_id", "article_id", name="uq_reaction_member_article"),
    )

    id: Mapped[int] = mapped_column("reaction_id", Integer, primary_key=True, autoincrement=True)

    member_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("member.member_id", ondelete="CASCADE"), nullable=False
    )
    article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("article.article_id", ondelete="CASCADE"), nullable=False, index=True
    )

    member: Mapped["Member"] = relationship("Member", lazy="noload")
    article: Mapped["Article"] = relationship("Article", back_populates="reactions", lazy="noload")


# ---------------------------------------------------------------------------
# Constructors: identifiers are assigned by the store on flush
# ---------------------------------------------------------------------------

def new_member(email: str, nickname: str) -> Member:
    return Member(email=email, nickname=nickname)


def new_article(content: str, member: Member) -> Article:
    return Article(content=content, member_id=member.id)


def new_comment(content: str, article: Article, member: Member) -> ArticleComment:
    return ArticleComment(content=content, article_id=article.id, member_id=member.id)


def new_reply(content: str, comment: ArticleComment, member: Member) -> ArticleCommentReply:
    return ArticleCommentReply(
        content=content, article_comment_id=comment.id, member_id=member.id
    )


def new_reaction(member: Member, article: Article) -> Reaction:
    return Reaction(member_id=member.id, article_id=article.id)
