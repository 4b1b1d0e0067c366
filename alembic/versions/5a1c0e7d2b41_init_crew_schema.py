"""init crew schema

Revision ID: 5a1c0e7d2b41
Revises:
Create Date: 2026-10-19 09:12:31.408552

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5a1c0e7d2b41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # ===== Masters =====
    op.create_table(
        "ranks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ranks_code"), "ranks", ["code"], unique=True)

    op.create_table(
        "countries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=3), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )

    op.create_table(
        "ports",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=10), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("country_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["country_id"], ["countries.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )
    op.create_index(op.f("ix_ports_country_id"), "ports", ["country_id"], unique=False)

    op.create_table(
        "vessel_types",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )

    op.create_table(
        "vessels",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("vessel_type_id", sa.Integer(), nullable=True),
        sa.Column("principal", sa.String(length=150), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.ForeignKeyConstraint(["vessel_type_id"], ["vessel_types.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vessels_code"), "vessels", ["code"], unique=True)
    op.create_index(op.f("ix_vessels_vessel_type_id"), "vessels", ["vessel_type_id"], unique=False)

    # ===== Crew =====
    op.create_table(
        "crew_members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("crew_code", sa.String(length=20), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("middle_name", sa.String(length=50), nullable=True),
        sa.Column("rank_id", sa.Integer(), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("sex", sa.String(length=6), nullable=True),
        sa.Column("mobile_number", sa.String(length=11), nullable=True),
        sa.Column("landline_number", sa.String(length=11), nullable=True),
        sa.Column("email", sa.String(length=150), nullable=True),
        sa.Column("city", sa.String(length=50), nullable=True),
        sa.Column("province", sa.String(length=50), nullable=True),
        sa.Column("sss_number", sa.String(length=10), nullable=True),
        sa.Column("tin_number", sa.String(length=12), nullable=True),
        sa.Column("philhealth_number", sa.String(length=12), nullable=True),
        sa.Column("hdmf_number", sa.String(length=12), nullable=True),
        sa.Column("passport_number", sa.String(length=9), nullable=True),
        sa.Column("passport_issue_date", sa.Date(), nullable=True),
        sa.Column("passport_expiry_date", sa.Date(), nullable=True),
        sa.Column("seaman_book_number", sa.String(length=9), nullable=True),
        sa.Column("seaman_book_issue_date", sa.Date(), nullable=True),
        sa.Column("seaman_book_expiry_date", sa.Date(), nullable=True),
        sa.Column("profile_image", sa.LargeBinary(), nullable=True),
        sa.Column("profile_image_content_type", sa.String(length=50), nullable=True),
        sa.Column("crew_status_id", sa.SmallInteger(), server_default=sa.text("2"), nullable=False),
        sa.Column("current_vessel_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.CheckConstraint("crew_status_id IN (1, 2)", name="ck_crew_status"),
        sa.ForeignKeyConstraint(["rank_id"], ["ranks.id"]),
        sa.ForeignKeyConstraint(["current_vessel_id"], ["vessels.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_crew_members_crew_code"), "crew_members", ["crew_code"], unique=True)
    op.create_index(op.f("ix_crew_members_rank_id"), "crew_members", ["rank_id"], unique=False)
    op.create_index(op.f("ix_crew_members_current_vessel_id"), "crew_members", ["current_vessel_id"], unique=False)

    op.create_table(
        "crew_movements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("crew_id", sa.Integer(), nullable=False),
        sa.Column("vessel_id", sa.Integer(), nullable=False),
        sa.Column("rank_id", sa.Integer(), nullable=False),
        sa.Column("transaction_type", sa.SmallInteger(), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("port_id", sa.Integer(), nullable=True),
        sa.Column("country_id", sa.Integer(), nullable=True),
        sa.Column("sign_on_movement_id", sa.Integer(), nullable=True),
        sa.Column("promoted_at", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("transaction_type IN (1, 2)", name="ck_movement_type"),
        sa.ForeignKeyConstraint(["crew_id"], ["crew_members.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["vessel_id"], ["vessels.id"]),
        sa.ForeignKeyConstraint(["rank_id"], ["ranks.id"]),
        sa.ForeignKeyConstraint(["port_id"], ["ports.id"]),
        sa.ForeignKeyConstraint(["country_id"], ["countries.id"]),
        sa.ForeignKeyConstraint(["sign_on_movement_id"], ["crew_movements.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sign_on_movement_id"),
    )
    op.create_index(op.f("ix_crew_movements_crew_id"), "crew_movements", ["crew_id"], unique=False)
    op.create_index(op.f("ix_crew_movements_vessel_id"), "crew_movements", ["vessel_id"], unique=False)
    op.create_index("ix_movements_crew_vessel", "crew_movements", ["crew_id", "vessel_id"], unique=False)

    # ===== Wages =====
    op.create_table(
        "wage_descriptions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("wage_code", sa.String(length=20), nullable=False),
        sa.Column("wage_name", sa.String(length=100), nullable=False),
        sa.Column("payable_on_board", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_wage_descriptions_wage_code"), "wage_descriptions", ["wage_code"], unique=True)

    op.create_table(
        "salary_scales",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("vessel_type_id", sa.Integer(), nullable=False),
        sa.Column("rank_id", sa.Integer(), nullable=False),
        sa.Column("wage_id", sa.Integer(), nullable=False),
        sa.Column("wage_amount", sa.Numeric(12, 2), nullable=False),
        sa.CheckConstraint("wage_amount >= 0", name="ck_salary_scale_amount"),
        sa.ForeignKeyConstraint(["vessel_type_id"], ["vessel_types.id"]),
        sa.ForeignKeyConstraint(["rank_id"], ["ranks.id"]),
        sa.ForeignKeyConstraint(["wage_id"], ["wage_descriptions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("year", "vessel_type_id", "rank_id", "wage_id", name="uq_salary_scale_line"),
    )
    op.create_index(op.f("ix_salary_scales_year"), "salary_scales", ["year"], unique=False)

    op.create_table(
        "forex_rates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.SmallInteger(), nullable=False),
        sa.Column("exchange_rate", sa.Numeric(10, 4), nullable=False),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_forex_month"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("year", "month", name="uq_forex_year_month"),
    )

    # ===== Government deduction rates =====
    op.create_table(
        "sss_rates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("salary_from", sa.Numeric(12, 2), nullable=False),
        sa.Column("salary_to", sa.Numeric(12, 2), nullable=False),
        sa.Column("regular_ss", sa.Numeric(12, 2), nullable=False),
        sa.Column("mutual_fund", sa.Numeric(12, 2), nullable=False),
        sa.Column("ee_rate", sa.Numeric(6, 4), nullable=False),
        sa.Column("er_rate", sa.Numeric(6, 4), nullable=False),
        sa.Column("er_ss", sa.Numeric(12, 2), nullable=False),
        sa.Column("er_mf", sa.Numeric(12, 2), nullable=False),
        sa.Column("ec", sa.Numeric(12, 2), nullable=False),
        sa.Column("ee_ss", sa.Numeric(12, 2), nullable=False),
        sa.Column("ee_mf", sa.Numeric(12, 2), nullable=False),
        sa.CheckConstraint("salary_from <= salary_to", name="ck_sss_band"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sss_rates_year"), "sss_rates", ["year"], unique=False)

    op.create_table(
        "philhealth_rates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("salary_from", sa.Numeric(12, 2), nullable=False),
        sa.Column("salary_to", sa.Numeric(12, 2), nullable=False),
        sa.Column("premium", sa.Numeric(12, 2), nullable=False),
        sa.Column("premium_rate", sa.Numeric(6, 4), nullable=False),
        sa.CheckConstraint("salary_from <= salary_to", name="ck_philhealth_band"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_philhealth_rates_year"), "philhealth_rates", ["year"], unique=False)

    # ===== Payroll / deductions / remittance =====
    op.create_table(
        "payroll_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("crew_id", sa.Integer(), nullable=False),
        sa.Column("vessel_id", sa.Integer(), nullable=False),
        sa.Column("payroll_month", sa.SmallInteger(), nullable=False),
        sa.Column("payroll_year", sa.Integer(), nullable=False),
        sa.Column("basic_wage", sa.Numeric(12, 2), nullable=False),
        sa.Column("fixed_ot", sa.Numeric(12, 2), nullable=False),
        sa.Column("guaranteed_ot", sa.Numeric(12, 2), nullable=False),
        sa.Column("dollar_gross", sa.Numeric(12, 2), nullable=False),
        sa.Column("peso_gross", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_deduction", sa.Numeric(14, 2), nullable=False),
        sa.Column("net_wage", sa.Numeric(14, 2), nullable=False),
        sa.ForeignKeyConstraint(["crew_id"], ["crew_members.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["vessel_id"], ["vessels.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_payroll_history_crew_id"), "payroll_history", ["crew_id"], unique=False)
    op.create_index("ix_payroll_crew_period", "payroll_history", ["crew_id", "payroll_year", "payroll_month"], unique=False)

    for table, name_col in (("deduction_entries", "deduction_name"), ("remittance_entries", "allottee_name")):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("crew_id", sa.Integer(), nullable=False),
            sa.Column("month", sa.SmallInteger(), nullable=False),
            sa.Column("year", sa.Integer(), nullable=False),
            sa.Column(name_col, sa.String(length=100), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("remarks", sa.Text(), nullable=True),
            sa.Column("status", sa.SmallInteger(), server_default=sa.text("0"), nullable=False),
            sa.ForeignKeyConstraint(["crew_id"], ["crew_members.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f(f"ix_{table}_crew_id"), table, ["crew_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "remittance_entries", "deduction_entries", "payroll_history",
        "philhealth_rates", "sss_rates", "forex_rates", "salary_scales", "wage_descriptions",
        "crew_movements", "crew_members", "vessels", "vessel_types", "ports", "countries", "ranks",
    ):
        op.drop_table(table)
