# models.py — Database models for the Opsdesk project workspace
# - Integer primary keys (matches the ids used on the wire)
# - Companies own users and projects (tenant boundary)
# - Boards are ordered columns of a project, cards are ordered within a board
# - Cards are soft-deleted, boards are hard-deleted

from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, String, DateTime, Boolean, Integer,
    Enum as SQLEnum, ForeignKey, Text, Index, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, PyEnum):
    """Company-level role. Company admins bypass project-role checks."""
    ADMIN = "admin"
    STAFF = "staff"
    ACCOUNTANT = "accountant"


class ProjectRole(str, PyEnum):
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class ProjectStatus(str, PyEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class Priority(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# ============================================================
# COMPANIES & USERS
# ============================================================

class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    soft_delete = Column(Boolean, nullable=False, default=False)

    users = relationship("User", back_populates="company")
    projects = relationship("Project", back_populates="company")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    password_hash = Column(String, nullable=True)
    role = Column(SQLEnum(UserRole), default=UserRole.STAFF, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    soft_delete = Column(Boolean, nullable=False, default=False)

    company = relationship("Company", back_populates="users")


# ============================================================
# PROJECTS
# ============================================================

class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(SQLEnum(ProjectStatus), default=ProjectStatus.ACTIVE, nullable=False)
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    color_code = Column(String, nullable=True)  # "#RRGGBB"
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    soft_delete = Column(Boolean, nullable=False, default=False)

    company = relationship("Company", back_populates="projects")
    members = relationship("ProjectMember", back_populates="project")
    boards = relationship("Board", back_populates="project", order_by="Board.position")

    __table_args__ = (
        Index("idx_project_company", "company_id", "soft_delete"),
    )


class ProjectMember(Base):
    __tablename__ = "project_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(SQLEnum(ProjectRole), default=ProjectRole.MEMBER, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    project = relationship("Project", back_populates="members")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member"),
    )


# ============================================================
# KANBAN (Boards = columns, Cards = work items)
# ============================================================

class Board(Base):
    """Ordered column of a project. `version` guards concurrent reindexes."""
    __tablename__ = "boards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    is_done_column = Column(Boolean, nullable=False, default=False)  # Cards moved here are completed
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="boards")
    cards = relationship("Card", back_populates="board", order_by="Card.position", passive_deletes=True)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_board_project_pos", "project_id", "position"),
    )


class Card(Base):
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)  # Order within board, soft-deleted rows keep theirs
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    soft_delete = Column(Boolean, nullable=False, default=False)

    board = relationship("Board", back_populates="cards")
    assignees = relationship("CardAssignee", back_populates="card", passive_deletes=True)

    __table_args__ = (
        Index("idx_card_board_pos", "board_id", "soft_delete", "position"),
    )


class CardAssignee(Base):
    __tablename__ = "card_assignees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    card_id = Column(Integer, ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    card = relationship("Card", back_populates="assignees")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("card_id", "user_id", name="uq_card_assignee"),
    )
