"""
Store for the landing page: waitlist leads and page views.

One Store is built at startup, kept on ``app.state.store`` and handed to the
routers through the ``get_store`` dependency. Every method opens its own
short-lived session, so calls are safe to run concurrently on worker threads
(``asyncio.to_thread``). Each call is atomic on its own; nothing here spans
both tables.
"""
from typing import Dict, List, Optional

from fastapi import Request
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from core.config import logger
from core.database import create_db_engine, init_db, make_session_factory, resolve_database_url
from core.errors import StorageError, ValidationError
from models.lead import Lead
from models.page_view import PageView

PAGE_VIEW_FIELDS = ("ip_address", "user_agent", "referrer", "utm_source", "utm_medium", "utm_campaign", "page_url")


class Store:
    def __init__(self, database_url: str, echo: bool = False):
        self.url = resolve_database_url(database_url)
        self.engine = create_db_engine(self.url, echo=echo)
        self.SessionLocal = make_session_factory(self.engine)

    def create_schema(self):
        try:
            init_db(self.engine)
        except SQLAlchemyError as ex:
            raise StorageError(f"schema init failed: {ex}") from ex

    def close(self):
        self.engine.dispose()

    # ============ Writes ============

    def insert_lead(self, name: Optional[str], email: Optional[str], variant: Optional[str] = None) -> int:
        if not name or not email or not str(name).strip() or not str(email).strip():
            raise ValidationError("Name and email are required.")
        variant = str(variant).strip() if variant is not None else None
        db = self.SessionLocal()
        try:
            lead = Lead(name=name, email=email, ab_variant=variant or None)
            db.add(lead)
            db.commit()
            return lead.id
        except SQLAlchemyError as ex:
            db.rollback()
            raise StorageError(f"insert lead failed: {ex}") from ex
        finally:
            db.close()

    def insert_page_view(self, **fields) -> int:
        unknown = set(fields) - set(PAGE_VIEW_FIELDS)
        if unknown:
            raise TypeError(f"unknown page view fields: {sorted(unknown)}")
        db = self.SessionLocal()
        try:
            view = PageView(**fields)
            db.add(view)
            db.commit()
            return view.id
        except SQLAlchemyError as ex:
            db.rollback()
            raise StorageError(f"insert page view failed: {ex}") from ex
        finally:
            db.close()

    # ============ Reads ============

    def _scalar(self, stmt, what: str):
        db = self.SessionLocal()
        try:
            return db.execute(stmt).scalar_one()
        except SQLAlchemyError as ex:
            raise StorageError(f"{what} failed: {ex}") from ex
        finally:
            db.close()

    def count_leads(self) -> int:
        return int(self._scalar(select(func.count()).select_from(Lead), "count leads") or 0)

    def count_page_views(self) -> int:
        return int(self._scalar(select(func.count()).select_from(PageView), "count page views") or 0)

    def lead_variant_counts(self) -> Dict[str, int]:
        """Lead count per headline variant. Leads without a variant are left out."""
        stmt = (
            select(Lead.ab_variant, func.count())
            .where(Lead.ab_variant.isnot(None), Lead.ab_variant != "")
            .group_by(Lead.ab_variant)
        )
        db = self.SessionLocal()
        try:
            return {variant: int(count) for variant, count in db.execute(stmt).all()}
        except SQLAlchemyError as ex:
            raise StorageError(f"variant counts failed: {ex}") from ex
        finally:
            db.close()

    def _recent(self, model, limit: int, what: str) -> List[dict]:
        stmt = select(model).order_by(model.created_at.desc(), model.id.desc()).limit(max(0, int(limit)))
        db = self.SessionLocal()
        try:
            return [row.to_dict() for row in db.execute(stmt).scalars().all()]
        except SQLAlchemyError as ex:
            raise StorageError(f"{what} failed: {ex}") from ex
        finally:
            db.close()

    def recent_leads(self, limit: int = 50) -> List[dict]:
        return self._recent(Lead, limit, "recent leads")

    def recent_page_views(self, limit: int = 50) -> List[dict]:
        return self._recent(PageView, limit, "recent page views")


def open_store(database_url: str, echo: bool = False) -> Store:
    store = Store(database_url, echo=echo)
    store.create_schema()
    logger.info(f"[store] Connected to {store.url}")
    return store


def get_store(request: Request) -> Store:
    """
    Dependency for FastAPI routes to get the process-wide store
    Usage:
        @router.get("/items")
        async def list_items(store: Store = Depends(get_store)):
            ...
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StorageError("store is not open")
    return store
