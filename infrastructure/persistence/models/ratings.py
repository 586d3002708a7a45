from datetime import datetime
from decimal import Decimal

from sqlalchemy import DECIMAL, Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
	pass


class ProviderRatingDB(Base):
	__tablename__ = 'provider_ratings'

	provider_key: Mapped[str] = mapped_column(String(64), primary_key=True)
	rating: Mapped[Decimal] = mapped_column(DECIMAL(precision=3, scale=2), nullable=False)
	source: Mapped[str] = mapped_column(String(50), nullable=False, default='trustpilot')
	updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class BaselineHistoryDB(Base):
	__tablename__ = 'baseline_history'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	from_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	to_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	rate: Mapped[Decimal] = mapped_column(DECIMAL(precision=18, scale=8), nullable=False)
	source: Mapped[str] = mapped_column(String(32), nullable=False)
	is_degraded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
	resolved_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

	__table_args__ = (
		Index('idx_baseline_pair', 'from_currency', 'to_currency'),
	)
