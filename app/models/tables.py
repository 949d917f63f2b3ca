"""
Database models.

Design principles:
  - Campaigns and domains are configuration, mutable through the dashboard
  - access_logs is append-only (never updated; removed only by cascade
    when its campaign is deleted)
  - Slug uniqueness is two-tier and enforced here, not by the resolver:
      * (slug, domain_id) unique among domain-bound campaigns
      * slug unique among campaigns with no domain binding
"""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Configuration tables
# ---------------------------------------------------------------------------

class Domain(Base):
    __tablename__ = "domains"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(100), nullable=False, index=True)
    entry_domain = Column(String(255), nullable=False, unique=True)   # normalised: lowercase, no www.
    offer_domain = Column(String(255), nullable=True)
    is_verified = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    campaigns = relationship("Campaign", back_populates="domain")


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(String(100), nullable=False, index=True)
    domain_id = Column(UUID(as_uuid=True), ForeignKey("domains.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False)

    # Targets
    destination_url = Column(Text, nullable=False)   # shown when allowed
    safe_page_url = Column(Text, nullable=False)     # shown when blocked

    # Policy flags
    is_active = Column(Boolean, default=True, nullable=False)
    block_bots = Column(Boolean, default=True, nullable=False)
    block_desktop = Column(Boolean, default=False, nullable=False)
    blocked_countries = Column(ARRAY(String(2)), default=list, nullable=False)
    enable_origin_lock = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    domain = relationship("Domain", back_populates="campaigns")
    access_logs = relationship("AccessLog", back_populates="campaign", passive_deletes=True)

    __table_args__ = (
        Index("uq_campaigns_slug_domain", "slug", "domain_id", unique=True),
        Index(
            "uq_campaigns_slug_global",
            "slug",
            unique=True,
            postgresql_where=text("domain_id IS NULL"),
        ),
    )


# ---------------------------------------------------------------------------
# Event tables (append-only)
# ---------------------------------------------------------------------------

class AccessLog(Base):
    """One row per resolved request on an active campaign."""
    __tablename__ = "access_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    campaign_id = Column(
        UUID(as_uuid=True),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
    )

    # --- Request facts ---
    user_agent = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    referer = Column(Text, nullable=True)
    country = Column(String(2), nullable=True)
    device_type = Column(String(20), nullable=True)     # mobile, tablet, desktop, unknown

    # --- Detector output ---
    is_bot = Column(Boolean, default=False)
    bot_reason = Column(String(255), nullable=True)

    # --- Outcome ---
    was_blocked = Column(Boolean, default=False)
    block_reason = Column(String(255), nullable=True)   # "Layer N (...): ..."

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    campaign = relationship("Campaign", back_populates="access_logs")

    __table_args__ = (
        Index("ix_access_logs_campaign_created", "campaign_id", "created_at"),
        Index("ix_access_logs_created", "created_at"),
    )
