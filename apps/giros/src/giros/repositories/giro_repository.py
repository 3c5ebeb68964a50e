"""Giro persistence operations."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from giros.db.models.giro import Giro


class GiroRepository:
    """Repository for giro rows."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, giro_id: UUID) -> Giro | None:
        return self._session.get(Giro, giro_id)

    def get_for_update(self, giro_id: UUID) -> Giro | None:
        """Fetch and lock one giro so concurrent transitions serialize."""

        statement = (
            select(Giro)
            .where(Giro.id == giro_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._session.scalar(statement)

    def add(self, giro: Giro) -> Giro:
        self._session.add(giro)
        self._session.flush()
        return giro
