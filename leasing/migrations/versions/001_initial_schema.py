"""Initial schema: units, owners, contracts, schedules, payments and tickets.

Enum columns are stored as VARCHAR holding the enum member names.

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-06-01 12:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "condominiums",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, comment="Display name"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "units",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("condominium_id", sa.Integer(), nullable=True),
        sa.Column("unit_number", sa.String(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column(
            "current_contract_id",
            sa.Integer(),
            nullable=True,
            comment="Contract currently occupying the unit (null = available)",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["condominium_id"], ["condominiums.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_units_condominium_id", "condominium_id"),
    )

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "unit_owners",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("owner_name", sa.String(length=255), nullable=False),
        sa.Column("owner_email", sa.String(length=255), nullable=True),
        sa.Column("owner_phone", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("idx_unit_owner_active", "unit_id", "is_active"),
    )

    op.create_table(
        "rental_contracts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=True),
        sa.Column("client_id", sa.Integer(), nullable=True),
        sa.Column("tenant_name", sa.String(length=255), nullable=False),
        sa.Column("tenant_email", sa.String(length=255), nullable=True),
        sa.Column("tenant_phone", sa.String(length=50), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("monthly_rent", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="MXN"),
        sa.Column("lease_duration_months", sa.Integer(), nullable=False),
        sa.Column(
            "security_deposit", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"
        ),
        sa.Column("rental_purpose", sa.String(length=50), nullable=False, server_default="living"),
        sa.Column(
            "status",
            sa.Enum("ACTIVE", "COMPLETED", "CANCELLED", native_enum=False),
            nullable=False,
            server_default="ACTIVE",
        ),
        sa.Column("has_pet", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("pet_name", sa.String(length=120), nullable=True),
        sa.Column("pet_photo_url", sa.Text(), nullable=True),
        sa.Column("pet_description", sa.Text(), nullable=True),
        sa.Column("provisioning_key", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.ForeignKeyConstraint(["owner_id"], ["unit_owners.id"]),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provisioning_key"),
        sa.Index("ix_rental_contracts_unit_id", "unit_id"),
        sa.Index("idx_contract_unit_status", "unit_id", "status"),
    )

    op.create_table(
        "rental_tenants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("id_photo_url", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contract_id"], ["rental_contracts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_rental_tenants_contract_id", "contract_id"),
    )

    op.create_table(
        "payment_schedules",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column(
            "service_type",
            sa.Enum(
                "RENT", "WATER", "ELECTRICITY", "INTERNET", "GAS", "MAINTENANCE", "OTHER",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column(
            "charge_kind",
            sa.Enum("FIXED", "VARIABLE", native_enum=False),
            nullable=False,
            server_default="FIXED",
        ),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("day_of_month", sa.Integer(), nullable=False),
        sa.Column(
            "payment_frequency",
            sa.Enum("MONTHLY", "BIMONTHLY", native_enum=False),
            nullable=False,
            server_default="MONTHLY",
        ),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="MXN"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contract_id"], ["rental_contracts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_payment_schedules_contract_id", "contract_id"),
    )

    op.create_table(
        "payment_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("schedule_id", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False, server_default="rent"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="MXN"),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("paid_date", sa.Date(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("PENDING", "PAID", "VERIFIED", "REJECTED", native_enum=False),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("paid_by", sa.Enum("TENANT", "OWNER", native_enum=False), nullable=True),
        sa.Column("receipt_url", sa.Text(), nullable=True),
        sa.Column("tenant_notes", sa.Text(), nullable=True),
        sa.Column("owner_notes", sa.Text(), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            server_default="1",
            comment="Optimistic concurrency token, bumped on every transition",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contract_id"], ["rental_contracts.id"]),
        sa.ForeignKeyConstraint(["schedule_id"], ["payment_schedules.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_payment_records_contract_id", "contract_id"),
        sa.Index("idx_payment_contract_status", "contract_id", "status"),
        sa.Index("idx_payment_schedule_due", "schedule_id", "due_date"),
        sa.Index("idx_payment_due_date", "due_date"),
    )

    op.create_table(
        "payment_receipts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("payment_id", sa.Integer(), nullable=True),
        sa.Column("receipt_url", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("uploaded_by", sa.String(length=20), nullable=False, server_default="tenant"),
        sa.Column(
            "status",
            sa.Enum("PENDING", "APPROVED", "REJECTED", native_enum=False),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contract_id"], ["rental_contracts.id"]),
        sa.ForeignKeyConstraint(["payment_id"], ["payment_records.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_payment_receipts_contract_id", "contract_id"),
    )

    op.create_table(
        "maintenance_tickets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="open"),
        sa.Column("priority", sa.String(length=20), nullable=False, server_default="medium"),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("scheduled_time", sa.String(length=5), nullable=True, comment="HH:MM"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_maintenance_tickets_unit_id", "unit_id"),
    )


def downgrade() -> None:
    for table in (
        "maintenance_tickets",
        "payment_receipts",
        "payment_records",
        "payment_schedules",
        "rental_tenants",
        "rental_contracts",
        "unit_owners",
        "clients",
        "units",
        "condominiums",
    ):
        op.drop_table(table)
