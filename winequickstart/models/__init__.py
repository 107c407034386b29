"""SQLAlchemy database models."""
from winequickstart.models.base import Base
from winequickstart.models.keyword import KeywordOpportunity
from winequickstart.models.page import WinePage

__all__ = [
    "Base",
    "KeywordOpportunity",
    "WinePage",
]
