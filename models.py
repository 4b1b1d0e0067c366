# models.py
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    Numeric,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from database import Base


# crew_status_id
CREW_ON_BOARD = 1
CREW_OFF_BOARD = 2

# transaction_type
SIGN_ON = 1
SIGN_OFF = 2


def utcnow():
    return datetime.now(timezone.utc)


# =========================================
# =============== Master ==================
# =========================================

class Rank(Base):
    __tablename__ = "ranks"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    def __repr__(self):
        return f"<Rank(code={self.code}, name={self.name})>"


class Country(Base):
    __tablename__ = "countries"

    id = Column(Integer, primary_key=True)
    code = Column(String(3), unique=True, nullable=False)
    name = Column(String(100), nullable=False)

    ports = relationship("Port", back_populates="country")

    def __repr__(self):
        return f"<Country(code={self.code})>"


class Port(Base):
    __tablename__ = "ports"

    id = Column(Integer, primary_key=True)
    code = Column(String(10), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    country_id = Column(Integer, ForeignKey("countries.id", ondelete="RESTRICT"), nullable=False, index=True)

    country = relationship("Country", back_populates="ports")

    def __repr__(self):
        return f"<Port(code={self.code}, name={self.name})>"


class VesselType(Base):
    __tablename__ = "vessel_types"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(100), nullable=False)


class Vessel(Base):
    __tablename__ = "vessels"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, index=True, nullable=False)
    name = Column(String(150), nullable=False)
    vessel_type_id = Column(Integer, ForeignKey("vessel_types.id"), nullable=True, index=True)
    principal = Column(String(150), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    vessel_type = relationship("VesselType")

    def __repr__(self):
        return f"<Vessel(code={self.code}, name={self.name})>"


# =========================================
# ================ Crew ===================
# =========================================

class CrewMember(Base):
    __tablename__ = "crew_members"

    id = Column(Integer, primary_key=True)
    crew_code = Column(String(20), unique=True, index=True, nullable=False)
    last_name = Column(String(50), nullable=False)
    first_name = Column(String(50), nullable=False)
    middle_name = Column(String(50), nullable=True)
    rank_id = Column(Integer, ForeignKey("ranks.id"), nullable=True, index=True)
    birth_date = Column(Date, nullable=True)
    sex = Column(String(6), nullable=True)

    # contact
    mobile_number = Column(String(11), nullable=True)
    landline_number = Column(String(11), nullable=True)
    email = Column(String(150), nullable=True)
    city = Column(String(50), nullable=True)
    province = Column(String(50), nullable=True)

    # government ids
    sss_number = Column(String(10), nullable=True)
    tin_number = Column(String(12), nullable=True)
    philhealth_number = Column(String(12), nullable=True)
    hdmf_number = Column(String(12), nullable=True)

    # travel documents
    passport_number = Column(String(9), nullable=True)
    passport_issue_date = Column(Date, nullable=True)
    passport_expiry_date = Column(Date, nullable=True)
    seaman_book_number = Column(String(9), nullable=True)
    seaman_book_issue_date = Column(Date, nullable=True)
    seaman_book_expiry_date = Column(Date, nullable=True)

    profile_image = Column(LargeBinary, nullable=True)
    profile_image_content_type = Column(String(50), nullable=True)

    crew_status_id = Column(SmallInteger, nullable=False, default=CREW_OFF_BOARD,
                            server_default=text(str(CREW_OFF_BOARD)))
    current_vessel_id = Column(Integer, ForeignKey("vessels.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    rank = relationship("Rank")
    current_vessel = relationship("Vessel")
    movements = relationship(
        "Movement",
        back_populates="crew",
        order_by="Movement.transaction_date",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("crew_status_id IN (1, 2)", name="ck_crew_status"),
    )

    @property
    def full_name(self):
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)

    @property
    def is_on_board(self) -> bool:
        return self.crew_status_id == CREW_ON_BOARD

    def __repr__(self):
        return f"<CrewMember(code={self.crew_code}, status={self.crew_status_id})>"


class Movement(Base):
    """
    One row per sign-on / sign-off.
    A sign-on is open while no sign-off row points at it (sign_on_movement_id).
    """
    __tablename__ = "crew_movements"

    id = Column(Integer, primary_key=True)
    crew_id = Column(Integer, ForeignKey("crew_members.id", ondelete="CASCADE"), nullable=False, index=True)
    vessel_id = Column(Integer, ForeignKey("vessels.id"), nullable=False, index=True)
    rank_id = Column(Integer, ForeignKey("ranks.id"), nullable=False)
    transaction_type = Column(SmallInteger, nullable=False)
    transaction_date = Column(Date, nullable=False)
    port_id = Column(Integer, ForeignKey("ports.id"), nullable=True)
    country_id = Column(Integer, ForeignKey("countries.id"), nullable=True)
    sign_on_movement_id = Column(Integer, ForeignKey("crew_movements.id", ondelete="SET NULL"),
                                 nullable=True, unique=True)
    promoted_at = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    crew = relationship("CrewMember", back_populates="movements")
    vessel = relationship("Vessel")
    rank = relationship("Rank")
    port = relationship("Port")
    country = relationship("Country")
    sign_on = relationship("Movement", remote_side=[id], back_populates="sign_off", uselist=False)
    sign_off = relationship("Movement", back_populates="sign_on", uselist=False)

    __table_args__ = (
        CheckConstraint("transaction_type IN (1, 2)", name="ck_movement_type"),
        Index("ix_movements_crew_vessel", "crew_id", "vessel_id"),
    )

    @property
    def is_open(self) -> bool:
        return self.transaction_type == SIGN_ON and self.sign_off is None

    def __repr__(self):
        return f"<Movement(crew_id={self.crew_id}, vessel_id={self.vessel_id}, type={self.transaction_type})>"


# =========================================
# ================ Wages ==================
# =========================================

class WageDescription(Base):
    __tablename__ = "wage_descriptions"

    id = Column(Integer, primary_key=True)
    wage_code = Column(String(20), unique=True, index=True, nullable=False)
    wage_name = Column(String(100), nullable=False)
    payable_on_board = Column(Boolean, nullable=False, default=False, server_default=text("false"))


class SalaryScale(Base):
    __tablename__ = "salary_scales"

    id = Column(Integer, primary_key=True)
    year = Column(Integer, nullable=False, index=True)
    vessel_type_id = Column(Integer, ForeignKey("vessel_types.id"), nullable=False)
    rank_id = Column(Integer, ForeignKey("ranks.id"), nullable=False)
    wage_id = Column(Integer, ForeignKey("wage_descriptions.id"), nullable=False)
    wage_amount = Column(Numeric(12, 2), nullable=False)

    vessel_type = relationship("VesselType")
    rank = relationship("Rank")
    wage = relationship("WageDescription")

    __table_args__ = (
        UniqueConstraint("year", "vessel_type_id", "rank_id", "wage_id", name="uq_salary_scale_line"),
        CheckConstraint("wage_amount >= 0", name="ck_salary_scale_amount"),
    )


class ForexRate(Base):
    __tablename__ = "forex_rates"

    id = Column(Integer, primary_key=True)
    year = Column(Integer, nullable=False)
    month = Column(SmallInteger, nullable=False)
    exchange_rate = Column(Numeric(10, 4), nullable=False)

    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_forex_year_month"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_forex_month"),
    )


# =========================================
# ======= Government deduction rates ======
# =========================================

class SSSRate(Base):
    __tablename__ = "sss_rates"

    id = Column(Integer, primary_key=True)
    year = Column(Integer, nullable=False, index=True)
    salary_from = Column(Numeric(12, 2), nullable=False)
    salary_to = Column(Numeric(12, 2), nullable=False)
    regular_ss = Column(Numeric(12, 2), nullable=False, default=0)
    mutual_fund = Column(Numeric(12, 2), nullable=False, default=0)
    ee_rate = Column(Numeric(6, 4), nullable=False, default=0)
    er_rate = Column(Numeric(6, 4), nullable=False, default=0)
    er_ss = Column(Numeric(12, 2), nullable=False, default=0)
    er_mf = Column(Numeric(12, 2), nullable=False, default=0)
    ec = Column(Numeric(12, 2), nullable=False, default=0)
    ee_ss = Column(Numeric(12, 2), nullable=False, default=0)
    ee_mf = Column(Numeric(12, 2), nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("salary_from <= salary_to", name="ck_sss_band"),
    )


class PhilhealthRate(Base):
    __tablename__ = "philhealth_rates"

    id = Column(Integer, primary_key=True)
    year = Column(Integer, nullable=False, index=True)
    salary_from = Column(Numeric(12, 2), nullable=False)
    salary_to = Column(Numeric(12, 2), nullable=False)
    premium = Column(Numeric(12, 2), nullable=False, default=0)
    premium_rate = Column(Numeric(6, 4), nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("salary_from <= salary_to", name="ck_philhealth_band"),
    )


# =========================================
# ===== Payroll / deductions / remittance ==
# =========================================

class PayrollHistory(Base):
    """Posted payroll; every amount is computed upstream and stored as is"""
    __tablename__ = "payroll_history"

    id = Column(Integer, primary_key=True)
    crew_id = Column(Integer, ForeignKey("crew_members.id", ondelete="CASCADE"), nullable=False, index=True)
    vessel_id = Column(Integer, ForeignKey("vessels.id"), nullable=False)
    payroll_month = Column(SmallInteger, nullable=False)
    payroll_year = Column(Integer, nullable=False)
    basic_wage = Column(Numeric(12, 2), nullable=False, default=0)
    fixed_ot = Column(Numeric(12, 2), nullable=False, default=0)
    guaranteed_ot = Column(Numeric(12, 2), nullable=False, default=0)
    dollar_gross = Column(Numeric(12, 2), nullable=False, default=0)
    peso_gross = Column(Numeric(14, 2), nullable=False, default=0)
    total_deduction = Column(Numeric(14, 2), nullable=False, default=0)
    net_wage = Column(Numeric(14, 2), nullable=False, default=0)

    crew = relationship("CrewMember")
    vessel = relationship("Vessel")

    __table_args__ = (
        Index("ix_payroll_crew_period", "crew_id", "payroll_year", "payroll_month"),
    )


class DeductionEntry(Base):
    __tablename__ = "deduction_entries"

    id = Column(Integer, primary_key=True)
    crew_id = Column(Integer, ForeignKey("crew_members.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(SmallInteger, nullable=False)
    year = Column(Integer, nullable=False)
    deduction_name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    remarks = Column(Text, nullable=True)
    status = Column(SmallInteger, nullable=False, default=0, server_default=text("0"))

    crew = relationship("CrewMember")


class RemittanceEntry(Base):
    __tablename__ = "remittance_entries"

    id = Column(Integer, primary_key=True)
    crew_id = Column(Integer, ForeignKey("crew_members.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(SmallInteger, nullable=False)
    year = Column(Integer, nullable=False)
    allottee_name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    remarks = Column(Text, nullable=True)
    status = Column(SmallInteger, nullable=False, default=0, server_default=text("0"))

    crew = relationship("CrewMember")
