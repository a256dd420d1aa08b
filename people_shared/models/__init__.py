"""
Pydantic models for data validation and serialization
"""

from .person import (
    ANONYMOUS_CREATOR,
    ENRICHABLE_FIELDS,
    LookupCandidate,
    PersonRecord,
    WorkAction,
    WorkMessage,
)

__all__ = [
    "ANONYMOUS_CREATOR",
    "ENRICHABLE_FIELDS",
    "LookupCandidate",
    "PersonRecord",
    "WorkAction",
    "WorkMessage",
]
