"""
Profile Service.

Registration, lookup and update of patient and mood mentor profiles.
Registration validates the signup data and applies the per-email signup
rate limit before anything is written.
"""

from __future__ import annotations

from typing import List, Optional, Union

from emotions_app.core.database.entities.profiles import MoodMentorProfile, PatientProfile
from emotions_app.core.database.repositories.bundle import RepositoryBundle
from emotions_app.core.exceptions import (
    ConflictError,
    DomainValidationError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
)
from emotions_app.core.logging_config import get_logger
from emotions_app.core.models.domain.enums import UserRole
from emotions_app.core.models.domain.identity import CurrentUser
from emotions_app.core.models.domain.rate_limit import AttemptRateLimiter
from emotions_app.core.models.domain.signup import normalize_email, validate_signup
from emotions_app.core.models.io.profiles import (
    MentorProfileRead,
    MentorProfileUpdate,
    MentorPublicProfile,
    MentorSignup,
    PatientProfileRead,
    PatientProfileUpdate,
    PatientSignup,
    SignupAttemptStatus,
)
from emotions_app.core.monitoring import log_domain_event

from .notifications import NotificationService

logger = get_logger(__name__)


def to_mentor_read(profile: MoodMentorProfile) -> MentorProfileRead:
    data = profile.model_dump()
    data["languages"] = profile.get_languages_list()
    return MentorProfileRead.model_validate(data)


async def display_name(repos: RepositoryBundle, user_id: str) -> str:
    """Best-effort display name for notifications."""
    patient = await repos.patients.get_by_user_id(user_id)
    if patient is not None:
        return patient.full_name
    mentor = await repos.mentors.get_by_user_id(user_id)
    if mentor is not None:
        return mentor.full_name
    return "A user"


class ProfileService:
    def __init__(
        self,
        repos: RepositoryBundle,
        rate_limiter: AttemptRateLimiter,
        notifications: NotificationService,
    ) -> None:
        self.repos = repos
        self.rate_limiter = rate_limiter
        self.notifications = notifications

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _guard_signup(self, data: Union[PatientSignup, MentorSignup], role: UserRole) -> str:
        email = normalize_email(data.email)
        if not self.rate_limiter.check(email):
            retry_after = self.rate_limiter.timeout_remaining(email)
            logger.warning(f"Signup rate limit reached for {email}")
            raise RateLimitExceededError(
                f"Too many signup attempts. Try again in {max(1, retry_after // 60)} minutes.",
                retry_after_seconds=retry_after,
            )
        errors = validate_signup(data.email, data.first_name, data.last_name, data.country, role.value)
        if errors:
            raise DomainValidationError("; ".join(errors), context={"errors": errors})
        return email

    async def _ensure_unregistered(self, user_id: str, email: str) -> None:
        if await self.repos.patients.get_by_user_id(user_id) or await self.repos.mentors.get_by_user_id(user_id):
            raise ConflictError(f"User {user_id} already has a profile")
        if await self.repos.patients.get_by_email(email) or await self.repos.mentors.get_by_email(email):
            raise ConflictError(f"Email {email} is already registered")

    async def register_patient(self, user: CurrentUser, data: PatientSignup) -> PatientProfileRead:
        email = self._guard_signup(data, UserRole.patient)
        await self._ensure_unregistered(user.id, email)
        profile = await self.repos.patients.create(
            PatientProfile(
                user_id=user.id,
                full_name=data.full_name,
                email=email,
                avatar_url=data.avatar_url,
                gender=data.gender,
                country=data.country,
                phone_number=data.phone_number,
                date_of_birth=data.date_of_birth,
                emergency_contact=data.emergency_contact,
            )
        )
        self.rate_limiter.reset(email)
        log_domain_event("profile.patient_registered", user_id=user.id)
        await self.notifications.notify_welcome(user.id, data.first_name.strip())
        return PatientProfileRead.model_validate(profile)

    async def register_mentor(self, user: CurrentUser, data: MentorSignup) -> MentorProfileRead:
        email = self._guard_signup(data, UserRole.mood_mentor)
        await self._ensure_unregistered(user.id, email)
        profile = MoodMentorProfile(
            user_id=user.id,
            full_name=data.full_name,
            email=email,
            avatar_url=data.avatar_url,
            gender=data.gender,
            country=data.country,
            phone_number=data.phone_number,
            specialty=data.specialty,
            bio=data.bio,
            experience_years=data.experience_years,
        )
        profile.set_languages_list(data.languages)
        profile = await self.repos.mentors.create(profile)
        self.rate_limiter.reset(email)
        log_domain_event("profile.mentor_registered", user_id=user.id)
        await self.notifications.notify_welcome(user.id, data.first_name.strip())
        return to_mentor_read(profile)

    def signup_status(self, email: str) -> SignupAttemptStatus:
        key = normalize_email(email)
        return SignupAttemptStatus(
            email=key,
            remaining_attempts=self.rate_limiter.remaining_attempts(key),
            timeout_seconds=self.rate_limiter.timeout_remaining(key),
        )

    # ------------------------------------------------------------------
    # Lookup and update
    # ------------------------------------------------------------------

    async def _patient(self, user_id: str) -> PatientProfile:
        profile = await self.repos.patients.get_by_user_id(user_id)
        if profile is None:
            raise NotFoundError.for_entity("Patient profile", user_id)
        return profile

    async def _mentor(self, user_id: str) -> MoodMentorProfile:
        profile = await self.repos.mentors.get_by_user_id(user_id)
        if profile is None:
            raise NotFoundError.for_entity("Mood mentor profile", user_id)
        return profile

    async def get_patient(self, user_id: str) -> PatientProfileRead:
        return PatientProfileRead.model_validate(await self._patient(user_id))

    async def get_mentor(self, user_id: str) -> MentorProfileRead:
        return to_mentor_read(await self._mentor(user_id))

    @staticmethod
    def _ensure_owner(user: CurrentUser, user_id: str) -> None:
        if user.id != user_id and not user.is_admin:
            raise PermissionDeniedError("You can only update your own profile")

    async def update_patient(self, user: CurrentUser, user_id: str, patch: PatientProfileUpdate) -> PatientProfileRead:
        self._ensure_owner(user, user_id)
        profile = await self._patient(user_id)
        for key, value in patch.model_dump(exclude_unset=True).items():
            setattr(profile, key, value)
        profile = await self.repos.patients.update(profile)
        return PatientProfileRead.model_validate(profile)

    async def update_mentor(self, user: CurrentUser, user_id: str, patch: MentorProfileUpdate) -> MentorProfileRead:
        self._ensure_owner(user, user_id)
        profile = await self._mentor(user_id)
        changes = patch.model_dump(exclude_unset=True)
        languages = changes.pop("languages", None)
        for key, value in changes.items():
            setattr(profile, key, value)
        if languages is not None:
            profile.set_languages_list(languages)
        profile = await self.repos.mentors.update(profile)
        return to_mentor_read(profile)

    async def list_mentors(
        self,
        specialty: Optional[str] = None,
        active_only: bool = True,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[MentorProfileRead]:
        rows = await self.repos.mentors.search(
            specialty=specialty, active_only=active_only, search=search, limit=limit, offset=offset
        )
        return [to_mentor_read(row) for row in rows]

    async def get_mentor_public_profile(self, user_id: str) -> MentorPublicProfile:
        profile = await self._mentor(user_id)
        review_count, average = await self.repos.reviews.rating_summary(mentor_id=user_id)
        data = to_mentor_read(profile).model_dump()
        return MentorPublicProfile(
            **data,
            average_rating=round(average, 1) if average is not None else None,
            review_count=review_count,
        )
