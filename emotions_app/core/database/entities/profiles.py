"""
Profile entity models.

Patients and mood mentors each own one profile row keyed by the user id
issued by the identity provider.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import Field

from ..base import Base, dump_json, load_json, new_id, utc_now


class ProfileBase(Base):
    """Fields shared by patient and mentor profiles."""

    full_name: str = Field(max_length=255, description="Display name")
    email: str = Field(max_length=320, index=True, description="Contact email, stored lowercase")
    avatar_url: Optional[str] = Field(default=None, max_length=1024)
    gender: Optional[str] = Field(default=None, max_length=32)
    country: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    is_active: bool = Field(default=True, index=True)


class PatientProfile(ProfileBase, table=True):
    """Entity for patient profiles.

    Table: patient_profiles
    """

    __tablename__ = "patient_profiles"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=64, unique=True, index=True)
    date_of_birth: Optional[datetime] = Field(default=None)
    emergency_contact: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"PatientProfile(id={self.id}, user_id={self.user_id})"


class MoodMentorProfile(ProfileBase, table=True):
    """Entity for mood mentor profiles.

    Table: mood_mentor_profiles
    """

    __tablename__ = "mood_mentor_profiles"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(max_length=64, unique=True, index=True)
    specialty: Optional[str] = Field(default=None, max_length=255, index=True)
    bio: Optional[str] = Field(default=None)
    experience_years: Optional[int] = Field(default=None, ge=0)
    languages: str = Field(default="[]", description="JSON list of spoken languages")
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def get_languages_list(self) -> List[str]:
        return load_json(self.languages, [])

    def set_languages_list(self, languages: List[str]) -> None:
        self.languages = dump_json(languages)

    def __repr__(self) -> str:
        return f"MoodMentorProfile(id={self.id}, user_id={self.user_id})"
