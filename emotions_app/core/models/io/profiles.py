"""
Profile I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SignupBase(BaseModel):
    """Fields collected by the signup form for both roles."""

    email: str = Field(description="Contact email")
    first_name: str = Field(description="Given name")
    last_name: str = Field(description="Family name")
    country: Optional[str] = Field(default=None, description="Country of residence")
    gender: Optional[str] = Field(default=None)
    phone_number: Optional[str] = Field(default=None)
    avatar_url: Optional[str] = Field(default=None)

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}".strip()


class PatientSignup(SignupBase):
    """Schema for registering the caller as a patient."""

    date_of_birth: Optional[datetime] = None
    emergency_contact: Optional[str] = None


class MentorSignup(SignupBase):
    """Schema for registering the caller as a mood mentor."""

    specialty: Optional[str] = None
    bio: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0)
    languages: List[str] = Field(default_factory=list)


class PatientProfileUpdate(BaseModel):
    """Partial update of a patient profile."""

    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    phone_number: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    emergency_contact: Optional[str] = None
    is_active: Optional[bool] = None


class MentorProfileUpdate(BaseModel):
    """Partial update of a mood mentor profile."""

    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    phone_number: Optional[str] = None
    specialty: Optional[str] = None
    bio: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0)
    languages: Optional[List[str]] = None
    is_active: Optional[bool] = None


class PatientProfileRead(BaseModel):
    """Schema for reading a patient profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    full_name: str
    email: str
    avatar_url: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    phone_number: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    emergency_contact: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class MentorProfileRead(BaseModel):
    """Schema for reading a mood mentor profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    full_name: str
    email: str
    specialty: Optional[str] = None
    bio: Optional[str] = None
    experience_years: Optional[int] = None
    languages: List[str] = Field(default_factory=list)
    avatar_url: Optional[str] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class MentorPublicProfile(MentorProfileRead):
    """Mentor profile with its published review summary."""

    average_rating: Optional[float] = Field(default=None, description="Mean rating of published reviews")
    review_count: int = 0


class SignupAttemptStatus(BaseModel):
    """Rate limit state of a signup email."""

    email: str
    remaining_attempts: int
    timeout_seconds: int
