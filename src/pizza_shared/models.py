"""
SQLAlchemy ORM models for the pizza service.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from .constants import OrderStatus, Roles

MONEY = Numeric(14, 6)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class User(Base):
    __tablename__ = "pizza_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Case-sensitive: "A@jwt.com" and "a@jwt.com" are different accounts.
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    roles: Mapped[list[UserRole]] = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserRole.id",
        lazy="selectin",
    )
    sessions: Mapped[list[AuthSession]] = relationship(
        "AuthSession", back_populates="user", cascade="all, delete-orphan"
    )
    orders: Mapped[list[Order]] = relationship("Order", back_populates="diner")

    def has_role(self, role: Roles, object_id: int | None = None) -> bool:
        return any(
            assignment.role == role.value
            and (object_id is None or assignment.object_id == object_id)
            for assignment in self.roles
        )


class UserRole(Base):
    __tablename__ = "pizza_user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", "object_id", name="uq_user_role_scope"),
        Index("ix_user_role_object", "role", "object_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("pizza_users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    # Franchise id for franchisee assignments, NULL for global roles.
    object_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    user: Mapped[User] = relationship("User", back_populates="roles")


class AuthSession(Base):
    __tablename__ = "pizza_auth_sessions"

    token_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("pizza_users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    issued_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    user: Mapped[User] = relationship("User", back_populates="sessions", lazy="joined")


class Franchise(Base):
    __tablename__ = "pizza_franchises"
    # Ids are never reused, so order snapshots cannot point at a later franchise.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    stores: Mapped[list[Store]] = relationship(
        "Store",
        back_populates="franchise",
        cascade="all, delete-orphan",
        order_by="Store.id",
        lazy="selectin",
    )
    pending_admins: Mapped[list[PendingFranchiseAdmin]] = relationship(
        "PendingFranchiseAdmin",
        back_populates="franchise",
        cascade="all, delete-orphan",
        order_by="PendingFranchiseAdmin.id",
        lazy="selectin",
    )


class PendingFranchiseAdmin(Base):
    """Admin email named at franchise creation that has no account yet."""

    __tablename__ = "pizza_pending_franchise_admins"
    __table_args__ = (UniqueConstraint("franchise_id", "email", name="uq_pending_admin"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    franchise_id: Mapped[int] = mapped_column(
        ForeignKey("pizza_franchises.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)

    franchise: Mapped[Franchise] = relationship("Franchise", back_populates="pending_admins")


class Store(Base):
    __tablename__ = "pizza_stores"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    franchise_id: Mapped[int] = mapped_column(
        ForeignKey("pizza_franchises.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    total_revenue: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    franchise: Mapped[Franchise] = relationship("Franchise", back_populates="stores")


class Order(Base):
    __tablename__ = "pizza_orders"
    __table_args__ = (
        Index("ix_order_diner", "diner_id", "id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    diner_id: Mapped[int] = mapped_column(ForeignKey("pizza_users.id"), nullable=False)
    # Snapshots, not foreign keys: order history outlives a closed franchise.
    franchise_id: Mapped[int] = mapped_column(Integer, nullable=False)
    store_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=OrderStatus.CREATED.value
    )
    total: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    diner: Mapped[User] = relationship("User", back_populates="orders")
    items: Mapped[list[OrderItem]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )


class OrderItem(Base):
    __tablename__ = "pizza_order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("pizza_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_id: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    order: Mapped[Order] = relationship("Order", back_populates="items")
