# infrastructure/storage/tables.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

CONTEXT_ROW_ID = 1


class Base(DeclarativeBase):
    pass


class ProjectRow(Base):
    __tablename__ = "projects"
    name: Mapped[str] = mapped_column(sa.String(255), primary_key=True)
    test_url: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    prod_url: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    conf: Mapped[str] = mapped_column(sa.Text, nullable=False, default="{}")


class ActionRow(Base):
    __tablename__ = "actions"
    project_name: Mapped[str] = mapped_column(sa.String(255), sa.ForeignKey("projects.name"), primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(255), primary_key=True)
    verb: Mapped[str] = mapped_column(sa.String(10), nullable=False)
    url: Mapped[str] = mapped_column(sa.Text, nullable=False)
    static_body: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    headers: Mapped[str] = mapped_column(sa.Text, nullable=False, default="{}")
    body_example: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    response_example: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)


class HistoryRow(Base):
    __tablename__ = "history"
    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    # soft reference: deleting an action keeps its history
    action_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    url: Mapped[str] = mapped_column(sa.Text, nullable=False)
    body: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    headers: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    response: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    status_code: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    duration: Mapped[float] = mapped_column(sa.Float, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.func.current_timestamp(), nullable=False)


class ContextRow(Base):
    __tablename__ = "context"
    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True)
    value: Mapped[str] = mapped_column(sa.Text, nullable=False, default="{}")
    version: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)


class FlowRow(Base):
    __tablename__ = "flows"
    name: Mapped[str] = mapped_column(sa.String(255), primary_key=True)
    run_action_args: Mapped[str] = mapped_column(sa.Text, nullable=False)


class TestSuiteRow(Base):
    __tablename__ = "test_suites"
    name: Mapped[str] = mapped_column(sa.String(255), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.func.current_timestamp(), nullable=False)


class TestSuiteInstanceRow(Base):
    __tablename__ = "test_suite_instances"
    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    test_suite_name: Mapped[str] = mapped_column(sa.String(255), sa.ForeignKey("test_suites.name"), nullable=False)
    flow_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    expect: Mapped[str] = mapped_column(sa.Text, nullable=False)
    target: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="extracted")
