"""
Landing page view model
One row per page load reported by the client
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func
from core.database import Base
from models.lead import format_ts


class PageView(Base):
    __tablename__ = "page_views"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Request metadata (derived server-side)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)

    # Referral / campaign context
    referrer = Column(Text, nullable=True)
    utm_source = Column(Text, nullable=True)
    utm_medium = Column(Text, nullable=True)
    utm_campaign = Column(Text, nullable=True)
    page_url = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "referrer": self.referrer,
            "utm_source": self.utm_source,
            "utm_medium": self.utm_medium,
            "utm_campaign": self.utm_campaign,
            "page_url": self.page_url,
            "created_at": format_ts(self.created_at),
        }
