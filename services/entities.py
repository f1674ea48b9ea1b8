"""
Shared create/read/update/delete flow for catalogue entities.

Writes are sparse: only fields present on the payload model (not ``None``) are
sent to the store, so an update never clears a column it was not given.
Media attachments go to the image CDN in the background.
"""

import logging
import uuid
from typing import Any, Dict, Optional, Sequence, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import InstrumentedAttribute

from services.assets import AssetClient, MediaUpload, asset_public_id
from services.background import TaskRunner
from services.errors import NotFoundError, ValidationError
from services.store import RecordStore, page_bounds

logger = logging.getLogger(__name__)


def sparse_values(payload: BaseModel, exclude: Sequence[str] = ()) -> Dict[str, Any]:
    """Column values for the fields that were actually supplied.

    A blank form field counts as not supplied.
    """
    values = payload.model_dump(exclude_none=True, exclude=set(exclude))
    return {field: value for field, value in values.items() if value != ""}


class EntityService:
    model: Type[Any]
    label: str
    folder: str
    required_field: str
    list_columns: Sequence[InstrumentedAttribute] = ()
    default_limit = 10

    def __init__(self, store: RecordStore, assets: AssetClient, tasks: TaskRunner):
        self.store = store
        self.assets = assets
        self.tasks = tasks

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_statement(self):
        columns = self.list_columns or self.model.__table__.columns
        return select(*columns)

    def detail_statement(self, entity_id: uuid.UUID):
        return select(*self.model.__table__.columns).where(self.model.id == entity_id)

    def paging(self, page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
        """Fall back to page 1 and the default limit for missing or bad values."""
        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else self.default_limit
        return page, limit

    async def list(self, page: Optional[int] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        offset, count = page_bounds(*self.paging(page, limit))
        rows = await self.store.fetch_all(self.list_statement().offset(offset).limit(count))
        return {"data": rows}

    async def get(self, entity_id: uuid.UUID) -> Dict[str, Any]:
        row = await self.store.fetch_one(self.detail_statement(entity_id))
        if row is None:
            raise NotFoundError(f"{self.label} {entity_id} does not exist")
        return {"data": row}

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def require(self, payload: BaseModel) -> None:
        if not getattr(payload, self.required_field, None):
            raise ValidationError(f"Payload must have field: {self.required_field}")

    async def insert_row(self, payload: BaseModel, exclude: Sequence[str] = ()) -> uuid.UUID:
        self.require(payload)
        entity_id = uuid.uuid4()
        values = {"id": entity_id, **sparse_values(payload, exclude)}
        await self.store.execute(insert(self.model).values(**values))
        logger.info(f"✅ Created {self.label.lower()} {entity_id}")
        return entity_id

    async def create(self, payload: BaseModel, media: Optional[MediaUpload] = None) -> Dict[str, Any]:
        entity_id = await self.insert_row(payload)
        self.sync_media(entity_id, media)
        return {"message": f"{self.label} {getattr(payload, self.required_field)} created", "id": str(entity_id)}

    async def update(self, entity_id: uuid.UUID, payload: BaseModel, media: Optional[MediaUpload] = None) -> Dict[str, Any]:
        values = sparse_values(payload)
        if values:
            stmt = update(self.model).where(self.model.id == entity_id).values(**values).returning(self.model.id)
            rows = await self.store.execute(stmt)
        else:
            rows = await self.store.fetch_all(select(self.model.id).where(self.model.id == entity_id))

        if not rows:
            raise NotFoundError(f"{self.label} {entity_id} does not exist")

        self.sync_media(entity_id, media)
        return {"message": f"{self.label} {entity_id} updated successfully"}

    async def delete_row(self, entity_id: uuid.UUID, *returning: InstrumentedAttribute) -> Dict[str, Any]:
        stmt = delete(self.model).where(self.model.id == entity_id).returning(self.model.id, *returning)
        rows = await self.store.execute(stmt)
        if not rows:
            raise NotFoundError(f"{self.label} {entity_id} does not exist")
        return rows[0]

    async def delete(self, entity_id: uuid.UUID) -> Dict[str, Any]:
        await self.delete_row(entity_id)
        self.drop_media(entity_id)
        return {"message": f"{self.label} {entity_id} deleted"}

    # -------------------------------------------------------------------------
    # Media side effects
    # -------------------------------------------------------------------------

    def sync_media(self, entity_id: uuid.UUID, media: Optional[MediaUpload]) -> None:
        if media is None:
            return
        self.tasks.submit(
            self.assets.upload(media, self.folder, entity_id),
            name=f"upload-{self.folder}-{entity_id}",
        )

    def drop_media(self, entity_id: uuid.UUID) -> None:
        self.tasks.submit(
            self.assets.delete(self.folder, asset_public_id(entity_id)),
            name=f"delete-{self.folder}-{entity_id}",
        )
