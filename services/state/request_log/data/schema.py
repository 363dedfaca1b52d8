"""SQLAlchemy table definitions owned by Request Log Service."""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)

metadata = MetaData()

request_logs = Table(
    "request_logs",
    metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=True),
    Column("request_id", String(36), nullable=False),
    Column("server_hostname", String(255), nullable=False),
    Column("timestamp", DateTime(timezone=True), nullable=False),
    Column("client_ip", String(45), nullable=False),
    UniqueConstraint("request_id", name="uq_request_logs_request_id"),
)

Index("idx_timestamp", request_logs.c.timestamp.desc())
Index("idx_server_hostname", request_logs.c.server_hostname)
