"""
Database models for the Press Briefing API
"""

from sqlalchemy import BigInteger, Column, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Singleton key of the API configuration row
PRESS_CONFIG_ID = "default"


class PressConfigRow(Base):
    __tablename__ = "press_config"

    id = Column(String, primary_key=True, default=PRESS_CONFIG_ID)
    serp_api_key = Column(Text, nullable=True)
    reader_api_key = Column(Text, nullable=True)
    deepseek_api_key = Column(Text, nullable=True)
    deepseek_api_base = Column(Text, nullable=True)
    deepseek_model = Column(Text, nullable=True)
    updated = Column(BigInteger, nullable=True)  # epoch ms


class FeedCacheRow(Base):
    __tablename__ = "cache"

    id = Column(String, primary_key=True)
    updated = Column(BigInteger, nullable=False)  # epoch ms
    data = Column(Text, nullable=False)  # JSON list of news items
