from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from domain.models.quote import normalize_key
from infrastructure.persistence.models.ratings import ProviderRatingDB


class ProviderRatingRepository:
	def __init__(self, db_session: AsyncSession):
		self.db_session = db_session

	async def load_map(self) -> dict[str, Decimal]:
		result = await self.db_session.execute(select(ProviderRatingDB))
		return {row.provider_key: row.rating for row in result.scalars().all()}

	async def seed(self, ratings: dict[str, Decimal], source: str = 'trustpilot') -> int:
		"""Insert ratings for providers not yet present. Existing rows are left untouched."""
		existing_keys = (
			(await self.db_session.execute(select(ProviderRatingDB.provider_key))).scalars().all()
		)
		now = datetime.now(tz=UTC).replace(tzinfo=None)
		new_rows = [
			ProviderRatingDB(provider_key=normalize_key(key), rating=value, source=source, updated_at=now)
			for key, value in ratings.items()
			if normalize_key(key) not in existing_keys
		]
		if new_rows:
			self.db_session.add_all(new_rows)
		return len(new_rows)
