"""
Database module for the lead search API
Handles SQL and Redis connections
"""

from .connection import get_db, create_tables, create_redis_client, engine, SessionLocal
from .models import Base, SearchSession, LeadFeedbackEvent, IcpProfileRecord

__all__ = [
    "get_db", "create_tables", "create_redis_client", "engine", "SessionLocal",
    "Base", "SearchSession", "LeadFeedbackEvent", "IcpProfileRecord"
]
