"""
Pydantic models for person records and enrichment work items
"""

from enum import Enum
from typing import Optional, Any, Dict, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Fields the enrichment pipeline is allowed to overwrite.
# Identifier and creator attribution are never in this list.
ENRICHABLE_FIELDS: Tuple[str, ...] = (
    "email",
    "phone",
    "street_address",
    "city",
    "zipcode",
    "last_name",
    "first_name",
    "description",
)

ANONYMOUS_CREATOR = "Anonymous"


def _normalize_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


# =============================================
# PERSON RECORD
# =============================================

class PersonRecord(BaseModel):
    """
    A person stored in the record store

    Wire names are camelCase (fName, streetAddress, ...); attributes are
    snake_case. Both are accepted on input.
    """
    model_config = ConfigDict(populate_by_name=True)

    # Identity (store-assigned, opaque)
    id: Optional[str] = Field(None, description="Store-assigned identifier")

    # Contact
    email: Optional[str] = Field(None, description="Email address")
    first_name: Optional[str] = Field(None, alias="fName", description="First name")
    last_name: Optional[str] = Field(None, alias="lName", description="Last name")
    phone: Optional[str] = Field(None, description="Phone number")

    # Address
    street_address: Optional[str] = Field(None, alias="streetAddress", description="Street address")
    city: Optional[str] = Field(None, description="City")
    zipcode: Optional[str] = Field(None, description="Postal code")

    # Profile
    join_date: Optional[str] = Field(None, alias="joinDate", description="Join date")
    description: Optional[str] = Field(None, description="Free-text description")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Profile image URL")

    # Creator attribution
    created_by: Optional[str] = Field(ANONYMOUS_CREATOR, alias="createdBy", description="Creator display name")
    created_by_id: Optional[str] = Field(None, alias="createdById", description="Creator id")

    @field_validator("id", "created_by_id", mode="before")
    @classmethod
    def _normalize_ids(cls, value: Any) -> Optional[str]:
        return _normalize_id(value)

    @field_validator("zipcode", "phone", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    def to_document(self) -> Dict[str, Any]:
        """camelCase representation used for JSON documents"""
        return self.model_dump(by_alias=True)


# =============================================
# LOOKUP RESULTS
# =============================================

class LookupCandidate(BaseModel):
    """
    One match returned by the people search service
    Carries the same contact fields as PersonRecord
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: Optional[str] = None
    phone: Optional[str] = None
    street_address: Optional[str] = Field(None, alias="streetAddress")
    city: Optional[str] = None
    zipcode: Optional[str] = None
    last_name: Optional[str] = Field(None, alias="lName")
    first_name: Optional[str] = Field(None, alias="fName")
    description: Optional[str] = None

    @field_validator("zipcode", "phone", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


# =============================================
# WORK MESSAGES
# =============================================

class WorkAction(str, Enum):
    """Recognized work message actions"""

    PROCESS_PERSON = "processPerson"


class WorkMessage(BaseModel):
    """
    A queued instruction to enrich one person

    action is kept as a plain string so that unknown actions from newer
    producers can still be parsed, logged and discarded.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str = Field(..., description="Action tag")
    person_id: str = Field(..., alias="personId", description="Person to process")

    @field_validator("person_id", mode="before")
    @classmethod
    def _normalize_person_id(cls, value: Any) -> Optional[str]:
        return _normalize_id(value)

    @property
    def is_process_person(self) -> bool:
        return self.action == WorkAction.PROCESS_PERSON.value

    def to_stream_fields(self) -> Dict[str, str]:
        return {"action": self.action, "personId": self.person_id}
