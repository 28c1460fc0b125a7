from typing import Iterable, Optional, Type, TypeVar
from sqlalchemy.orm import Query, Session, selectinload

M = TypeVar("M")


class SqlStore:
    """Persistence gateway over a SQLAlchemy session.

    Every write commits immediately; one store is used per request.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, model: Type[M], id: str, includes: Iterable[str] = (), for_update: bool = False) -> Optional[M]:
        q = self.db.query(model)
        for name in includes:
            q = q.options(selectinload(getattr(model, name)))
        if for_update:
            # Row lock on backends that support it; sqlite ignores the clause
            q = q.with_for_update().populate_existing()
        return q.filter(model.id == id).one_or_none()

    def add(self, entity: M) -> M:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: M) -> M:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def remove(self, entity) -> None:
        self.db.delete(entity)
        self.db.commit()

    def exists(self, model, id: str) -> bool:
        return self.db.query(model.id).filter(model.id == id).first() is not None

    def query(self, model: Type[M]) -> Query:
        return self.db.query(model)

    def rollback(self) -> None:
        self.db.rollback()
