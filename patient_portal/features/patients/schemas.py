# Patient Management Feature - Schemas

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, ValidationInfo, field_validator

from patient_portal.shared.schemas import CamelModel


Gender = Literal["Male", "Female", "Other"]

MIN_AGE = 0
MAX_AGE = 150


# ============== Emergency Contact ==============

class EmergencyContact(CamelModel):
    """Schema for a patient's emergency contact."""
    name: str
    relationship: str
    phone: str


class EmergencyContactInput(EmergencyContact):
    """Emergency contact as entered in the patient form."""
    
    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Emergency contact name is required")
        return v
    
    @field_validator("relationship")
    @classmethod
    def validate_relationship(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Relationship is required")
        return v
    
    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Phone number is required")
        return v


# ============== Patient ==============

class Patient(CamelModel):
    """Patient record as stored by the server."""
    id: int
    name: str
    age: int
    gender: Gender
    medical_history: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    medications: List[str] = Field(default_factory=list)
    emergency_contact: Optional[EmergencyContact] = None
    created_at: Optional[datetime] = None


def _check_name(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError("Name is required")
    return v


def _check_age(v: Optional[int]) -> Optional[int]:
    if v is None:
        return v
    if v < MIN_AGE:
        raise ValueError(f"Age must be at least {MIN_AGE}")
    if v > MAX_AGE:
        raise ValueError(f"Age must be at most {MAX_AGE}")
    return v


# ============== Create Patient ==============

class CreatePatientRequest(CamelModel):
    """Request schema for creating a new patient."""
    name: str
    age: int
    gender: Gender
    medical_history: Optional[List[str]] = None
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    emergency_contact: Optional[EmergencyContactInput] = None
    
    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)
    
    @field_validator("age")
    @classmethod
    def validate_age(cls, v):
        return _check_age(v)
    
    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ============== Update Patient ==============

class UpdatePatientRequest(CamelModel):
    """Request schema for updating a patient. Only fields that were set are sent."""
    name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[Gender] = None
    medical_history: Optional[List[str]] = None
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    emergency_contact: Optional[EmergencyContactInput] = None
    
    @field_validator("name", "age", "gender")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        # These may be left out, but never cleared
        if v is None:
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return v
    
    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)
    
    @field_validator("age")
    @classmethod
    def validate_age(cls, v):
        return _check_age(v)
    
    def to_payload(self) -> dict:
        payload = self.model_dump(by_alias=True, exclude_unset=True, mode="json")
        # An explicit null list means "no change"; a null contact clears it
        return {
            key: value for key, value in payload.items()
            if value is not None or key == "emergencyContact"
        }
