"""initial schema: profiles, aircraft, occurrences, assessments, investigations, attachments, audit

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated: bool = True):
    cols = [sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now())]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()))
    return cols


def _profile_fk(name: str, index: bool = False):
    return sa.Column(
        name,
        sa.Integer(),
        sa.ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=index,
    )


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(50), nullable=False, index=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)

    op.create_table(
        "aircraft",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("registration", sa.String(20), nullable=False),
        sa.Column("type", sa.String(100), nullable=True),
        sa.Column("model", sa.String(100), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_aircraft_registration", "aircraft", ["registration"], unique=True)

    op.create_table(
        "occurrences",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("occurrence_number", sa.String(32), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("occurrence_date", sa.DateTime(), nullable=True, index=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="new", index=True),
        sa.Column("severity", sa.String(20), nullable=False, server_default="low", index=True),
        sa.Column("occurrence_type", sa.String(50), nullable=True, index=True),
        _profile_fk("reporter_id", index=True),
        _profile_fk("assigned_to", index=True),
        sa.Column(
            "aircraft_id",
            sa.Integer(),
            sa.ForeignKey("aircraft.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("deleted_at", sa.DateTime(), nullable=True, index=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_occurrences_occurrence_number", "occurrences", ["occurrence_number"], unique=True
    )
    op.create_index("ix_occurrences_status_severity", "occurrences", ["status", "severity"])

    op.create_table(
        "occurrences_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "occurrence_id",
            sa.Integer(),
            sa.ForeignKey("occurrences.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("flight_phase", sa.String(50), nullable=True),
        sa.Column("weather_conditions", sa.String(255), nullable=True),
        sa.Column("narrative", sa.Text(), nullable=True),
        sa.Column("details_json", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_occurrences_details_occurrence_id", "occurrences_details", ["occurrence_id"], unique=True
    )

    op.create_table(
        "occurrence_assessments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "occurrence_id",
            sa.Integer(),
            sa.ForeignKey("occurrences.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "status", sa.String(30), nullable=False, server_default="pending_assessment", index=True
        ),
        sa.Column("assessment_date", sa.DateTime(), nullable=True),
        sa.Column("incident_classification", sa.String(30), nullable=True),
        sa.Column("reasoning", sa.Text(), nullable=True),
        _profile_fk("assigned_investigator_id", index=True),
        sa.Column("date_assigned", sa.Date(), nullable=True),
        sa.Column("completion_due_date", sa.Date(), nullable=True, index=True),
        sa.Column("cfi_approved", sa.Boolean(), nullable=False),
        sa.Column("cfi_approval_date", sa.Date(), nullable=True),
        _profile_fk("created_by"),
        _profile_fk("updated_by"),
        *_timestamps(),
    )
    op.create_index(
        "ix_occurrence_assessments_occurrence_id",
        "occurrence_assessments",
        ["occurrence_id"],
        unique=True,
    )

    op.create_table(
        "investigations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "occurrence_id",
            sa.Integer(),
            sa.ForeignKey("occurrences.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("stage", sa.String(30), nullable=False, server_default="not_started", index=True),
        _profile_fk("lead_investigator_id", index=True),
        sa.Column("findings", sa.Text(), nullable=True),
        sa.Column("root_causes", sa.Text(), nullable=True),
        sa.Column("contributing_factors", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True, index=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_investigations_occurrence_id", "investigations", ["occurrence_id"], unique=True
    )
    op.create_index(
        "ix_investigations_stage_updated", "investigations", ["stage", "updated_at"]
    )

    op.create_table(
        "interviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "investigation_id",
            sa.Integer(),
            sa.ForeignKey("investigations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("date", sa.DateTime(), nullable=False, index=True),
        sa.Column("interviewee", sa.String(255), nullable=False),
        _profile_fk("interviewer_id"),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        *_timestamps(updated=False),
    )

    op.create_table(
        "communications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "investigation_id",
            sa.Integer(),
            sa.ForeignKey("investigations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("date", sa.DateTime(), nullable=False, index=True),
        sa.Column("channel", sa.String(20), nullable=False, server_default="email"),
        sa.Column("participants", sa.String(500), nullable=True),
        sa.Column("subject", sa.String(255), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="sent"),
        _profile_fk("created_by"),
        *_timestamps(updated=False),
    )

    op.create_table(
        "attachments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "occurrence_id",
            sa.Integer(),
            sa.ForeignKey("occurrences.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(120), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("public_url", sa.Text(), nullable=True),
        _profile_fk("uploaded_by", index=True),
        *_timestamps(),
    )

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=True, index=True),
        sa.Column("action", sa.String(64), nullable=False, index=True),
        sa.Column("entity_type", sa.String(50), nullable=True),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_audit_events_entity", "audit_events", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("audit_events")
    op.drop_table("attachments")
    op.drop_table("communications")
    op.drop_table("interviews")
    op.drop_table("investigations")
    op.drop_table("occurrence_assessments")
    op.drop_table("occurrences_details")
    op.drop_table("occurrences")
    op.drop_table("aircraft")
    op.drop_table("profiles")
