"""Initial schema for the Emotions App

Revision ID: 20260101_000000
Revises: None
Create Date: 2026-01-01 00:00:00.000000

Creates every table used by the service:
- Profiles (patients, mood mentors)
- Appointments and call sessions
- Support groups, waiting list, group sessions and attendance
- Mentor reviews, responses, private notes and request links
- Conversations, messages and notifications
- Mood entries, stress assessments and assessment metrics

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260101_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _profile_columns() -> list:
    return [
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("avatar_url", sa.String(1024), nullable=True),
        sa.Column("gender", sa.String(32), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""

    # Create patient_profiles table
    op.create_table(
        "patient_profiles",
        *_profile_columns(),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("date_of_birth", sa.DateTime(), nullable=True),
        sa.Column("emergency_contact", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_patient_profiles_user_id", "user_id", unique=True),
        sa.Index("ix_patient_profiles_email", "email"),
        sa.Index("ix_patient_profiles_is_active", "is_active"),
        sa.Index("ix_patient_profiles_created_at", "created_at"),
    )

    # Create mood_mentor_profiles table
    op.create_table(
        "mood_mentor_profiles",
        *_profile_columns(),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("specialty", sa.String(255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("experience_years", sa.Integer(), nullable=True),
        sa.Column("languages", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_mood_mentor_profiles_user_id", "user_id", unique=True),
        sa.Index("ix_mood_mentor_profiles_email", "email"),
        sa.Index("ix_mood_mentor_profiles_is_active", "is_active"),
        sa.Index("ix_mood_mentor_profiles_specialty", "specialty"),
        sa.Index("ix_mood_mentor_profiles_created_at", "created_at"),
    )

    # Create appointments table
    op.create_table(
        "appointments",
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("meeting_type", sa.String(16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("patient_id", sa.String(64), nullable=False),
        sa.Column("mentor_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("meeting_link", sa.String(1024), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_by", sa.String(64), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("review_submitted", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_appointments_date", "date"),
        sa.Index("ix_appointments_patient_id", "patient_id"),
        sa.Index("ix_appointments_mentor_id", "mentor_id"),
        sa.Index("ix_appointments_status", "status"),
        sa.Index("ix_appointments_created_at", "created_at"),
    )

    # Create support_groups table
    op.create_table(
        "support_groups",
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("group_type", sa.String(32), nullable=False),
        sa.Column("meeting_type", sa.String(16), nullable=False),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("meeting_schedule", sa.Text(), nullable=False),
        sa.Column("group_rules", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("room_url", sa.String(1024), nullable=True),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("mentor_id", sa.String(64), nullable=False),
        sa.Column("current_participants", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_support_groups_group_type", "group_type"),
        sa.Index("ix_support_groups_mentor_id", "mentor_id"),
        sa.Index("ix_support_groups_is_active", "is_active"),
    )

    # Create group_members table
    op.create_table(
        "group_members",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("group_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.Column("last_activity", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["group_id"], ["support_groups.id"]),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
        sa.Index("ix_group_members_group_id", "group_id"),
        sa.Index("ix_group_members_user_id", "user_id"),
    )

    # Create group_waiting_list table
    op.create_table(
        "group_waiting_list",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("group_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("personal_message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("priority_score", sa.Integer(), nullable=False),
        sa.Column("applied_at", sa.DateTime(), nullable=False),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.Column("processed_by", sa.String(64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["group_id"], ["support_groups.id"]),
        sa.Index("ix_group_waiting_list_group_id", "group_id"),
        sa.Index("ix_group_waiting_list_user_id", "user_id"),
        sa.Index("ix_group_waiting_list_status", "status"),
    )

    # Create group_sessions table
    op.create_table(
        "group_sessions",
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recording_url", sa.String(1024), nullable=True),
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("group_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("meeting_link", sa.String(1024), nullable=True),
        sa.Column("created_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["group_id"], ["support_groups.id"]),
        sa.Index("ix_group_sessions_session_date", "session_date"),
        sa.Index("ix_group_sessions_group_id", "group_id"),
        sa.Index("ix_group_sessions_status", "status"),
    )

    # Create session_attendance table
    op.create_table(
        "session_attendance",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("group_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=True),
        sa.Column("left_at", sa.DateTime(), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("marked_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["session_id"], ["group_sessions.id"]),
        sa.UniqueConstraint("session_id", "user_id", name="uq_session_attendance_session_user"),
        sa.Index("ix_session_attendance_session_id", "session_id"),
        sa.Index("ix_session_attendance_group_id", "group_id"),
        sa.Index("ix_session_attendance_user_id", "user_id"),
        sa.Index("ix_session_attendance_created_at", "created_at"),
    )

    # Create mentor_reviews table
    op.create_table(
        "mentor_reviews",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("appointment_id", sa.String(64), nullable=False),
        sa.Column("mentor_id", sa.String(64), nullable=False),
        sa.Column("patient_id", sa.String(64), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_mentor_reviews_appointment_id", "appointment_id", unique=True),
        sa.Index("ix_mentor_reviews_mentor_id", "mentor_id"),
        sa.Index("ix_mentor_reviews_patient_id", "patient_id"),
        sa.Index("ix_mentor_reviews_status", "status"),
        sa.Index("ix_mentor_reviews_created_at", "created_at"),
    )

    # Create review_responses table
    op.create_table(
        "review_responses",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("review_id", sa.String(64), nullable=False),
        sa.Column("mentor_id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["review_id"], ["mentor_reviews.id"]),
        sa.Index("ix_review_responses_review_id", "review_id", unique=True),
        sa.Index("ix_review_responses_mentor_id", "mentor_id"),
    )

    # Create review_notes table
    op.create_table(
        "review_notes",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("review_id", sa.String(64), nullable=False),
        sa.Column("mentor_id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["review_id"], ["mentor_reviews.id"]),
        sa.Index("ix_review_notes_review_id", "review_id"),
        sa.Index("ix_review_notes_mentor_id", "mentor_id"),
    )

    # Create review_request_links table
    op.create_table(
        "review_request_links",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("mentor_id", sa.String(64), nullable=False),
        sa.Column("patient_id", sa.String(64), nullable=True),
        sa.Column("appointment_id", sa.String(64), nullable=True),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("email_sent", sa.Boolean(), nullable=False),
        sa.Column("email_sent_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_review_request_links_mentor_id", "mentor_id"),
        sa.Index("ix_review_request_links_patient_id", "patient_id"),
        sa.Index("ix_review_request_links_token", "token", unique=True),
    )

    # Create conversations table
    op.create_table(
        "conversations",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("patient_id", sa.String(64), nullable=False),
        sa.Column("mentor_id", sa.String(64), nullable=False),
        sa.Column("appointment_id", sa.String(64), nullable=True),
        sa.Column("last_message_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("patient_id", "mentor_id", name="uq_conversations_patient_mentor"),
        sa.Index("ix_conversations_patient_id", "patient_id"),
        sa.Index("ix_conversations_mentor_id", "mentor_id"),
        sa.Index("ix_conversations_appointment_id", "appointment_id"),
        sa.Index("ix_conversations_last_message_at", "last_message_at"),
    )

    # Create conversation_participants table
    op.create_table(
        "conversation_participants",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("conversation_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("last_read_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"]),
        sa.UniqueConstraint(
            "conversation_id", "user_id", name="uq_conversation_participants_conversation_user"
        ),
        sa.Index("ix_conversation_participants_conversation_id", "conversation_id"),
        sa.Index("ix_conversation_participants_user_id", "user_id"),
    )

    # Create messages table
    op.create_table(
        "messages",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("conversation_id", sa.String(64), nullable=False),
        sa.Column("sender_id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"]),
        sa.Index("ix_messages_conversation_id", "conversation_id"),
        sa.Index("ix_messages_sender_id", "sender_id"),
        sa.Index("ix_messages_created_at", "created_at"),
    )

    # Create notifications table
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("action_url", sa.String(1024), nullable=True),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_notifications_user_id", "user_id"),
        sa.Index("ix_notifications_type", "type"),
        sa.Index("ix_notifications_is_read", "is_read"),
        sa.Index("ix_notifications_created_at", "created_at"),
    )

    # Create mood_entries table
    op.create_table(
        "mood_entries",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("mood", sa.String(64), nullable=False),
        sa.Column("mood_type", sa.String(16), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("tags", sa.Text(), nullable=False),
        sa.Column("activities", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_mood_entries_user_id", "user_id"),
        sa.Index("ix_mood_entries_mood_type", "mood_type"),
        sa.Index("ix_mood_entries_created_at", "created_at"),
    )

    # Create stress_assessments table
    op.create_table(
        "stress_assessments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("stress_score", sa.Float(), nullable=False),
        sa.Column("health_percentage", sa.Float(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("responses", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_stress_assessments_user_id", "user_id"),
        sa.Index("ix_stress_assessments_created_at", "created_at"),
    )

    # Create user_assessment_metrics table
    op.create_table(
        "user_assessment_metrics",
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("stress_level", sa.Float(), nullable=False),
        sa.Column("consistency", sa.Float(), nullable=False),
        sa.Column("last_assessment_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )

    # Create active_sessions table
    op.create_table(
        "active_sessions",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("appointment_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("device_id", sa.String(128), nullable=True),
        sa.Column("is_audio_only", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        sa.Column("last_heartbeat", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_active_sessions_appointment_id", "appointment_id"),
        sa.Index("ix_active_sessions_user_id", "user_id"),
        sa.Index("ix_active_sessions_status", "status"),
        sa.Index("ix_active_sessions_last_heartbeat", "last_heartbeat"),
    )

    # Create session_events table
    op.create_table(
        "session_events",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("appointment_id", sa.String(64), nullable=False),
        sa.Column("event_type", sa.String(32), nullable=False),
        sa.Column("initiated_by", sa.String(16), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_session_events_appointment_id", "appointment_id"),
        sa.Index("ix_session_events_created_at", "created_at"),
    )


def downgrade() -> None:
    """Drop all tables, children before parents."""
    for table in (
        "session_events",
        "active_sessions",
        "user_assessment_metrics",
        "stress_assessments",
        "mood_entries",
        "notifications",
        "messages",
        "conversation_participants",
        "conversations",
        "review_request_links",
        "review_notes",
        "review_responses",
        "mentor_reviews",
        "session_attendance",
        "group_sessions",
        "group_waiting_list",
        "group_members",
        "support_groups",
        "appointments",
        "mood_mentor_profiles",
        "patient_profiles",
    ):
        op.drop_table(table)
