from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from database import Base

UNKNOWN = "Unknown"


class Visit(Base):
    __tablename__ = 'visits'

    id = Column(Integer, primary_key=True)
    ip_address = Column(String(64), nullable=False, unique=True, index=True)  # Normalized client address
    user_agent = Column(Text, nullable=True)  # Latest observed value
    origin = Column(String(512), nullable=True)  # Latest observed Origin header
    # Geo fields are resolved once when the row is created and never refreshed
    country = Column(String(100), nullable=False, default=UNKNOWN, server_default=UNKNOWN)
    city = Column(String(100), nullable=False, default=UNKNOWN, server_default=UNKNOWN)
    region = Column(String(100), nullable=False, default=UNKNOWN, server_default=UNKNOWN)
    isp = Column(String(255), nullable=False, default=UNKNOWN, server_default=UNKNOWN)
    visit_count = Column(Integer, nullable=False, default=1, server_default="1")
    first_seen = Column(DateTime(timezone=True), nullable=False, default=func.now(), server_default=func.now())
    last_seen = Column(DateTime(timezone=True), nullable=False, default=func.now(), server_default=func.now())

    # Rows are never deleted; this is an append-forever analytics table
