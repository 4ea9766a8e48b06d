"""Pydantic schemas for blogs, comments and likes.

Learn: Separate "Create" schemas (input) from "Read" schemas (output).
Update schemas are all-optional: only fields the client sends are applied
(model_dump(exclude_unset=True) in the routes).
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from inkwell.schemas.taxonomy import CategorySummary, TagSummary
from inkwell.schemas.user import AuthorRead


class BlogStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# ─── Blogs ──────────────────────────────────────────────

class BlogCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=100)
    content: str = Field(..., min_length=1)
    summary: Optional[str] = Field(None, max_length=200)
    cover_image: Optional[str] = Field(None, max_length=1024)
    status: BlogStatus = BlogStatus.DRAFT
    category_id: Optional[uuid.UUID] = None
    tag_ids: list[uuid.UUID] = Field(default_factory=list)


class BlogUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=5, max_length=100)
    content: Optional[str] = Field(None, min_length=1)
    summary: Optional[str] = Field(None, max_length=200)
    cover_image: Optional[str] = Field(None, max_length=1024)
    status: Optional[BlogStatus] = None
    is_featured: Optional[bool] = None
    category_id: Optional[uuid.UUID] = None
    tag_ids: Optional[list[uuid.UUID]] = None


class BlogRead(BaseModel):
    id: uuid.UUID
    title: str
    slug: str
    content: str
    summary: Optional[str] = None
    cover_image: Optional[str] = None
    status: str
    view_count: int
    is_featured: bool
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    author_id: uuid.UUID
    category_id: Optional[uuid.UUID] = None
    author: AuthorRead
    category: Optional[CategorySummary] = None
    tags: list[TagSummary] = []

    model_config = {"from_attributes": True}


class BlogSummary(BaseModel):
    id: uuid.UUID
    title: str
    slug: str
    summary: Optional[str] = None
    cover_image: Optional[str] = None

    model_config = {"from_attributes": True}


# ─── Comments ───────────────────────────────────────────

class CommentCreate(BaseModel):
    blog_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=2000)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentAuthor(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: Optional[str] = None

    model_config = {"from_attributes": True}


class CommentRead(BaseModel):
    id: uuid.UUID
    content: str
    is_hidden: bool
    created_at: datetime
    updated_at: datetime
    blog_id: uuid.UUID
    user_id: uuid.UUID
    user: CommentAuthor

    model_config = {"from_attributes": True}


# ─── Likes ──────────────────────────────────────────────

class LikeToggle(BaseModel):
    blog_id: uuid.UUID


class LikeToggleResult(BaseModel):
    liked: bool
    message: str


class LikeCount(BaseModel):
    blog_id: uuid.UUID
    like_count: int


class LikeStatus(BaseModel):
    blog_id: uuid.UUID
    liked: bool


class LikedBlog(BaseModel):
    liked_at: datetime
    blog: BlogSummary
