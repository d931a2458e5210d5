"""
Waitlist lead model
"""
from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.sql import func
from core.database import Base

SQLITE_TS_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_ts(value):
    if value is None:
        return None
    if hasattr(value, "strftime"):
        return value.strftime(SQLITE_TS_FORMAT)
    return str(value)


class Lead(Base):
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)  # format not validated, duplicates allowed
    ab_variant = Column(Text, nullable=True)  # headline the visitor saw

    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "ab_variant": self.ab_variant,
            "created_at": format_ts(self.created_at),
        }
