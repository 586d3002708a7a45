from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from domain.models.quote import BaselineRate, BaselineSource
from infrastructure.persistence.models.ratings import BaselineHistoryDB


class BaselineHistoryRepository:
	def __init__(self, db_session: AsyncSession):
		self.db_session = db_session

	async def save(self, baseline: BaselineRate) -> None:
		self.db_session.add(
			BaselineHistoryDB(
				from_currency=baseline.from_currency,
				to_currency=baseline.to_currency,
				rate=baseline.rate,
				source=baseline.source.value,
				is_degraded=baseline.is_degraded,
				resolved_at=baseline.resolved_at.replace(tzinfo=None),
			)
		)

	async def recent(self, from_currency: str, to_currency: str, limit: int = 20) -> list[BaselineRate]:
		stmt = (
			select(BaselineHistoryDB)
			.filter(
				BaselineHistoryDB.from_currency == from_currency,
				BaselineHistoryDB.to_currency == to_currency,
			)
			.order_by(BaselineHistoryDB.resolved_at.desc())
			.limit(limit)
		)
		result = await self.db_session.execute(stmt)
		return [
			BaselineRate(
				from_currency=r.from_currency,
				to_currency=r.to_currency,
				rate=r.rate,
				resolved_at=r.resolved_at,
				source=BaselineSource(r.source),
				is_degraded=r.is_degraded,
			)
			for r in result.scalars().all()
		]
