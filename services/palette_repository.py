from __future__ import annotations
import json
import logging
from typing import List, Optional

from sqlalchemy import BigInteger, Column, Integer, String, create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, Session

from domain.dtos import Palette

log = logging.getLogger(__name__)

Base = declarative_base()

class PaletteRow(Base):
    __tablename__ = 'palettes'
    id = Column(Integer, primary_key=True)
    namespace = Column(String, index=True, nullable=False)
    position = Column(Integer, nullable=False)  # 0 = most recent
    name = Column(String, nullable=False)
    colors_json = Column(String, nullable=False)
    created = Column(BigInteger, nullable=False)  # ms since epoch

class PaletteRepository:
    """Saved palettes for one namespace, most recent first, capped at max_entries.

    Store failures are logged and reported through the return value; they never raise.
    """

    def __init__(self, db_url: str, namespace: str, max_entries: int = 100,
                 engine: Optional[Engine] = None) -> None:
        self.namespace = namespace
        self.max_entries = max_entries
        self.engine = engine or create_engine(db_url, future=True)
        Base.metadata.create_all(self.engine)

    def with_namespace(self, namespace: str) -> "PaletteRepository":
        return PaletteRepository(str(self.engine.url), namespace, self.max_entries, engine=self.engine)

    def _load(self) -> List[Palette]:
        with Session(self.engine) as s:
            rows = s.scalars(select(PaletteRow)
                             .where(PaletteRow.namespace == self.namespace)
                             .order_by(PaletteRow.position)).all()
            return [self._from_row(r) for r in rows]

    def load(self) -> List[Palette]:
        try:
            return self._load()
        except (SQLAlchemyError, ValueError, TypeError) as e:
            log.error("Storage load failed: %s", e)
            return []

    def save_all(self, palettes: List[Palette]) -> bool:
        try:
            with Session(self.engine) as s:
                s.execute(delete(PaletteRow).where(PaletteRow.namespace == self.namespace))
                s.add_all([PaletteRow(namespace=self.namespace, position=i, name=p.name,
                                      colors_json=json.dumps([c.hex for c in p.colors]),
                                      created=p.created)
                           for i, p in enumerate((palettes or [])[:self.max_entries])])
                s.commit()
            return True
        except SQLAlchemyError as e:
            log.error("Storage save failed: %s", e)
            return False

    def add(self, palette: Palette) -> bool:
        # never rewrite the namespace from a list that failed to load
        try:
            palettes = self._load()
        except (SQLAlchemyError, ValueError, TypeError) as e:
            log.error("Storage load failed, palette not added: %s", e)
            return False
        return self.save_all([palette, *palettes])

    def delete_at(self, index: int) -> bool:
        """Drop the palette at position index (0 = most recent). False if out of range or unreadable."""
        try:
            palettes = self._load()
        except (SQLAlchemyError, ValueError, TypeError) as e:
            log.error("Storage load failed, nothing deleted: %s", e)
            return False
        if index < 0 or index >= len(palettes):
            return False
        del palettes[index]
        return self.save_all(palettes)

    def clear(self) -> bool:
        return self.save_all([])

    @staticmethod
    def _from_row(row: PaletteRow) -> Palette:
        return Palette.from_dict({'name': row.name, 'colors': json.loads(row.colors_json),
                                  'created': row.created})
