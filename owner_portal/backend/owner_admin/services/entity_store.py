# backend/owner_admin/services/entity_store.py
from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from ..db import Base

M = TypeVar("M", bound=Base)


class EntityStore(Generic[M]):
    """
    Document-style CRUD over one mapped model.

    Filters are keyword equality on column attributes; a list/tuple/set value
    means membership (IN). Every write commits on its own: there are no
    multi-row transactions, so callers order dependent writes themselves.
    """

    def __init__(self, db: Session, model: type[M]) -> None:
        self.db = db
        self.model = model

    def _conditions(self, filters: dict[str, Any]) -> list[Any]:
        conds = []
        for key, value in filters.items():
            col = getattr(self.model, key)
            if isinstance(value, (list, tuple, set, frozenset)):
                conds.append(col.in_(list(value)))
            elif value is None:
                conds.append(col.is_(None))
            else:
                conds.append(col == value)
        return conds

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _execute(self, stmt: Any) -> Any:
        try:
            res = self.db.execute(stmt)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return res

    # ---- reads ----
    def find_one(self, **filters: Any) -> Optional[M]:
        q = select(self.model).where(*self._conditions(filters)).limit(1)
        return self.db.scalars(q).first()

    def find(self, *, order_by: Any = None, limit: Optional[int] = None, **filters: Any) -> list[M]:
        q = select(self.model).where(*self._conditions(filters))
        if order_by is not None:
            q = q.order_by(order_by)
        if limit is not None:
            q = q.limit(int(limit))
        return list(self.db.scalars(q).all())

    def count(self, **filters: Any) -> int:
        q = select(func.count()).select_from(self.model).where(*self._conditions(filters))
        return int(self.db.scalar(q) or 0)

    def get(self, id: Any) -> Optional[M]:
        return self.db.get(self.model, id)

    # ---- writes ----
    def create(self, **values: Any) -> M:
        row = self.model()
        for k, v in values.items():
            setattr(row, k, v)
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return row

    def save(self, row: M) -> M:
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return row

    def update_by_id(self, id: Any, patch: dict[str, Any]) -> Optional[M]:
        row = self.get(id)
        if row is None:
            return None
        for k, v in patch.items():
            setattr(row, k, v)
        return self.save(row)

    def delete_by_id(self, id: Any) -> Optional[M]:
        """Delete and return the removed row (None when nothing matched)."""
        row = self.get(id)
        if row is None:
            return None
        self.db.delete(row)
        self._commit()
        return row

    def delete_many(self, **filters: Any) -> int:
        stmt = delete(self.model).where(*self._conditions(filters))
        res = self._execute(stmt)
        # bulk statements bypass loaded instances and their collections
        self.db.expire_all()
        return int(res.rowcount or 0)

    def update_many(self, patch: dict[str, Any], **filters: Any) -> int:
        stmt = update(self.model).where(*self._conditions(filters)).values(**patch)
        res = self._execute(stmt)
        # bulk statements bypass loaded instances and their collections
        self.db.expire_all()
        return int(res.rowcount or 0)
