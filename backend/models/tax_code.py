from sqlalchemy import Column, Integer, String, Numeric
from database import Base


class TaxCode(Base):
    __tablename__ = "tax_codes"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), nullable=False, unique=True)
    description = Column(String(255), nullable=True)
    rate = Column(Numeric(6, 4), nullable=False, default=0)  # 0.19 for 19%
