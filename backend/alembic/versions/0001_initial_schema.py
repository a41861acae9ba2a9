"""Initial clinic portal schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("ADMIN", "VETERINARIAN", "STAFF", name="userrole")
user_status = sa.Enum("INVITED", "ACTIVE", "SUSPENDED", name="userstatus")
pet_type = sa.Enum("DOG", "CAT", "OTHER", name="pettype")
dose_status = sa.Enum("GIVEN", "MISSED", "SKIPPED", name="dosestatus")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "clinics",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False, unique=True),
        sa.Column("phone", sa.String(length=32)),
        sa.Column("email", sa.String(length=320)),
        sa.Column("street", sa.String(length=255)),
        sa.Column("city", sa.String(length=120)),
        sa.Column("state", sa.String(length=64)),
        sa.Column("zip_code", sa.String(length=16)),
        sa.Column("license_number", sa.String(length=64)),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "clinic_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("clinics.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("status", user_status, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "clients",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "clinic_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("clinics.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=320)),
        sa.Column("phone", sa.String(length=32)),
        sa.Column("street", sa.String(length=255)),
        sa.Column("city", sa.String(length=120)),
        sa.Column("state", sa.String(length=64)),
        sa.Column("zip_code", sa.String(length=16)),
        sa.Column("notes", sa.String(length=1024)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_clients_clinic_id", "clients", ["clinic_id"])

    op.create_table(
        "pets",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "clinic_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("clinics.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "client_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("external_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("species", pet_type, nullable=False),
        sa.Column("breed", sa.String(length=120)),
        sa.Column("weight", sa.String(length=32)),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("microchip_number", sa.String(length=64)),
        sa.Column("notes", sa.String(length=1024)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_pets_clinic_id", "pets", ["clinic_id"])

    op.create_table(
        "discharges",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "clinic_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("clinics.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "pet_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("pets.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "vet_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column("pet_name", sa.String(length=120), nullable=False),
        sa.Column("pet_species", pet_type, nullable=False),
        sa.Column("pet_weight", sa.String(length=32)),
        sa.Column("diagnosis", sa.String(length=512)),
        sa.Column("notes", sa.String(length=4096)),
        sa.Column("visit_date", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_discharges_clinic_id", "discharges", ["clinic_id"])
    op.create_index("ix_discharges_pet_id", "discharges", ["pet_id"])

    op.create_table(
        "discharge_medications",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "discharge_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("discharges.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("med_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_tapered", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("dosage", sa.String(length=120)),
        sa.Column("frequency", sa.Float()),
        sa.Column("times", sa.JSON(), nullable=False),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("total_doses", sa.Integer()),
        sa.Column(
            "is_every_other_day", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("instructions", sa.String(length=2048), nullable=False, server_default=""),
        sa.Column(
            "allow_client_to_adjust_time",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
    )
    op.create_index(
        "ix_discharge_medications_discharge_id",
        "discharge_medications",
        ["discharge_id"],
    )

    op.create_table(
        "taper_stages",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "medication_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("discharge_medications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("dosage", sa.String(length=120), nullable=False),
        sa.Column("frequency", sa.Float(), nullable=False),
        sa.Column("times", sa.JSON(), nullable=False),
        sa.Column("total_doses", sa.Integer()),
        sa.Column(
            "is_every_other_day", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
    )

    op.create_table(
        "dose_records",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "discharge_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("discharges.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("medication_id", sa.String(length=64)),
        sa.Column("medication_name", sa.String(length=255), nullable=False),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("given_at", sa.DateTime(timezone=True)),
        sa.Column("status", dose_status, nullable=False),
        sa.Column("dosage", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("frequency", sa.Float(), nullable=False, server_default="1"),
        sa.Column("instructions", sa.String(length=2048), nullable=False, server_default=""),
        sa.Column("logged_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("symptom_appetite", sa.Integer()),
        sa.Column("symptom_energy", sa.Integer()),
        sa.Column("symptom_is_panting", sa.Boolean()),
        sa.Column("symptom_notes", sa.String(length=1024)),
        sa.Column("symptom_recorded_at", sa.DateTime(timezone=True)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "(status = 'GIVEN' AND given_at IS NOT NULL)"
            " OR (status != 'GIVEN' AND given_at IS NULL)",
            name="ck_dose_records_given_at_matches_status",
        ),
    )
    op.create_index(
        "ix_dose_records_discharge_scheduled",
        "dose_records",
        ["discharge_id", "scheduled_time"],
    )

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "clinic_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("clinics.id", ondelete="SET NULL"),
        ),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
        ),
        sa.Column("event_type", sa.String(length=120), nullable=False),
        sa.Column("entity_id", sa.String(length=64)),
        sa.Column("description", sa.String(length=1024)),
        sa.Column("payload", sa.JSON()),
        sa.Column("ip_address", sa.String(length=64)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("audit_events")
    op.drop_index("ix_dose_records_discharge_scheduled", table_name="dose_records")
    op.drop_table("dose_records")
    op.drop_table("taper_stages")
    op.drop_index(
        "ix_discharge_medications_discharge_id", table_name="discharge_medications"
    )
    op.drop_table("discharge_medications")
    op.drop_index("ix_discharges_pet_id", table_name="discharges")
    op.drop_index("ix_discharges_clinic_id", table_name="discharges")
    op.drop_table("discharges")
    op.drop_index("ix_pets_clinic_id", table_name="pets")
    op.drop_table("pets")
    op.drop_index("ix_clients_clinic_id", table_name="clients")
    op.drop_table("clients")
    op.drop_table("users")
    op.drop_table("clinics")
    bind = op.get_bind()
    for enum in (dose_status, pet_type, user_status, user_role):
        enum.drop(bind, checkfirst=True)
