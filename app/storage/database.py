"""SQLAlchemy-backed store.

Every public method opens its own session; anything that touches more than
one row (cascade delete, main-image swaps, feature upserts) runs inside a
single ``session.begin()`` block so a failure rolls the whole step back.
"""
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlalchemy.sql import text
from structlog import get_logger

from app.models import Base
from app.models.inquiry import Inquiry
from app.models.property import Property, PropertyFeatures, PropertyImage
from app.models.user import User
from app.schemas.inquiry import InquiryCreate, InquiryResponse
from app.schemas.property import (
    PropertyCreate,
    PropertyDetailResponse,
    PropertyFeaturesResponse,
    PropertyFeaturesUpdate,
    PropertyImageCreate,
    PropertyImageResponse,
    PropertyResponse,
    PropertyUpdate,
    SellerPropertyResponse,
)
from app.schemas.search import PropertyFilters
from app.schemas.user import UserCreate, UserInDB
from app.storage.base import Storage, UnknownSellerError, UsernameTakenError, utcnow
from app.storage.filters import filter_conditions
from app.utils.retry import retry

logger = get_logger()

FEATURE_COLUMNS = [
    "has_pool", "has_garden", "has_garage", "has_balcony",
    "has_air_conditioning", "has_gym", "has_security_system", "has_fireplace",
]


class DatabaseStorage(Storage):
    def __init__(self, engine: AsyncEngine, auto_create: bool = False):
        self.engine = engine
        self.auto_create = auto_create
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    # The database container may still be starting when the app boots
    @retry(tries=5, delay=1, backoff=2, exceptions=(OSError, OperationalError))
    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured", tables=sorted(Base.metadata.tables))

    async def startup(self) -> None:
        if self.auto_create:
            await self.create_tables()

    async def close(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def _hydrate(self, session, rows: List[Property]) -> List[PropertyDetailResponse]:
        if not rows:
            return []
        ids = [row.id for row in rows]

        images: Dict[int, List[PropertyImageResponse]] = defaultdict(list)
        result = await session.execute(
            select(PropertyImage).where(PropertyImage.property_id.in_(ids)).order_by(PropertyImage.id)
        )
        for image in result.scalars():
            images[image.property_id].append(PropertyImageResponse.model_validate(image))

        result = await session.execute(select(PropertyFeatures).where(PropertyFeatures.property_id.in_(ids)))
        features = {f.property_id: PropertyFeaturesResponse.model_validate(f) for f in result.scalars()}

        return [
            PropertyDetailResponse(
                **PropertyResponse.model_validate(row).model_dump(),
                images=images.get(row.id, []),
                features=features.get(row.id),
            )
            for row in rows
        ]

    # Users
    async def get_user(self, user_id: int) -> Optional[UserInDB]:
        async with self._sessions() as session:
            user = await session.get(User, user_id)
            return UserInDB.model_validate(user) if user else None

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        async with self._sessions() as session:
            result = await session.execute(select(User).where(User.username == username))
            user = result.scalars().first()
            return UserInDB.model_validate(user) if user else None

    async def create_user(self, data: UserCreate) -> UserInDB:
        try:
            async with self._sessions() as session, session.begin():
                user = User(**data.model_dump())
                session.add(user)
                await session.flush()
                created = UserInDB.model_validate(user)
        except IntegrityError as e:
            raise UsernameTakenError(data.username) from e
        logger.info("User created", user_id=created.id, backend="database")
        return created

    # Properties
    async def get_properties(self, filters: Optional[PropertyFilters] = None) -> List[PropertyDetailResponse]:
        filters = filters or PropertyFilters()
        query = select(Property)
        if filters.features:
            query = query.join(PropertyFeatures, PropertyFeatures.property_id == Property.id)
        conditions = filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(Property.id)

        async with self._sessions() as session:
            result = await session.execute(query)
            return await self._hydrate(session, list(result.scalars()))

    async def get_property(self, property_id: int) -> Optional[PropertyDetailResponse]:
        async with self._sessions() as session:
            row = await session.get(Property, property_id)
            if row is None:
                return None
            hydrated = await self._hydrate(session, [row])
            return hydrated[0]

    async def create_property(
        self, data: PropertyCreate, features: Optional[PropertyFeaturesUpdate] = None
    ) -> PropertyResponse:
        now = utcnow()
        async with self._sessions() as session, session.begin():
            # Checked here so SQLite without FK enforcement rejects it like Postgres
            if await session.get(User, data.seller_id) is None:
                raise UnknownSellerError(data.seller_id)
            row = Property(
                **data.model_dump(include=set(PropertyCreate.model_fields)),
                views=0,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            await session.flush()
            if features is not None:
                await self._upsert_features(session, row.id, features)
            return PropertyResponse.model_validate(row)

    async def update_property(
        self, property_id: int, data: PropertyUpdate, features: Optional[PropertyFeaturesUpdate] = None
    ) -> Optional[PropertyResponse]:
        changes = data.changes()
        async with self._sessions() as session, session.begin():
            row = await session.get(Property, property_id)
            if row is None:
                return None
            if "seller_id" in changes and await session.get(User, changes["seller_id"]) is None:
                raise UnknownSellerError(changes["seller_id"])
            for field, value in changes.items():
                setattr(row, field, value)
            row.updated_at = utcnow()
            await session.flush()
            if features is not None:
                await self._upsert_features(session, property_id, features)
            return PropertyResponse.model_validate(row)

    async def delete_property(self, property_id: int) -> bool:
        # Explicit deletes so the cascade holds even where FK enforcement is off (SQLite)
        async with self._sessions() as session, session.begin():
            await session.execute(delete(PropertyFeatures).where(PropertyFeatures.property_id == property_id))
            await session.execute(delete(PropertyImage).where(PropertyImage.property_id == property_id))
            await session.execute(delete(Inquiry).where(Inquiry.property_id == property_id))
            result = await session.execute(delete(Property).where(Property.id == property_id))
            deleted = result.rowcount > 0
        if deleted:
            logger.info("Property deleted", property_id=property_id)
        return deleted

    async def increment_property_views(self, property_id: int) -> None:
        async with self._sessions() as session, session.begin():
            await session.execute(
                update(Property).where(Property.id == property_id).values(views=Property.views + 1)
                .execution_options(synchronize_session=False)
            )

    async def get_properties_by_seller(self, seller_id: int) -> List[SellerPropertyResponse]:
        inquiry_count = func.count(Inquiry.id)
        query = (
            select(Property, inquiry_count)
            .outerjoin(Inquiry, Inquiry.property_id == Property.id)
            .where(Property.seller_id == seller_id)
            .group_by(Property.id)
            .order_by(Property.id)
        )
        async with self._sessions() as session:
            result = await session.execute(query)
            return [
                SellerPropertyResponse(**PropertyResponse.model_validate(row).model_dump(), inquiry_count=count)
                for row, count in result.all()
            ]

    # Images
    async def add_property_image(self, data: PropertyImageCreate) -> PropertyImageResponse:
        async with self._sessions() as session, session.begin():
            result = await session.execute(
                select(PropertyImage).where(PropertyImage.property_id == data.property_id)
            )
            existing = list(result.scalars())
            is_main = data.is_main or not existing
            if is_main:
                for image in existing:
                    image.is_main = False
            row = PropertyImage(
                property_id=data.property_id,
                image_url=data.image_url,
                is_main=is_main,
                created_at=utcnow(),
            )
            session.add(row)
            await session.flush()
            return PropertyImageResponse.model_validate(row)

    async def get_property_images(self, property_id: int) -> List[PropertyImageResponse]:
        async with self._sessions() as session:
            result = await session.execute(
                select(PropertyImage).where(PropertyImage.property_id == property_id).order_by(PropertyImage.id)
            )
            return [PropertyImageResponse.model_validate(image) for image in result.scalars()]

    async def delete_property_image(self, image_id: int) -> bool:
        async with self._sessions() as session, session.begin():
            image = await session.get(PropertyImage, image_id)
            if image is None:
                return False
            property_id, was_main = image.property_id, image.is_main
            await session.delete(image)
            await session.flush()
            if was_main:
                result = await session.execute(
                    select(PropertyImage)
                    .where(PropertyImage.property_id == property_id)
                    .order_by(PropertyImage.id)
                    .limit(1)
                )
                survivor = result.scalars().first()
                if survivor is not None:
                    survivor.is_main = True
            return True

    async def set_main_property_image(self, image_id: int, property_id: int) -> bool:
        async with self._sessions() as session, session.begin():
            result = await session.execute(
                select(PropertyImage).where(PropertyImage.property_id == property_id)
            )
            images = list(result.scalars())
            if not any(image.id == image_id for image in images):
                return False
            for image in images:
                image.is_main = image.id == image_id
            return True

    # Features
    async def get_property_features(self, property_id: int) -> Optional[PropertyFeaturesResponse]:
        async with self._sessions() as session:
            result = await session.execute(
                select(PropertyFeatures).where(PropertyFeatures.property_id == property_id)
            )
            row = result.scalars().first()
            return PropertyFeaturesResponse.model_validate(row) if row else None

    async def update_property_features(
        self, property_id: int, data: PropertyFeaturesUpdate
    ) -> PropertyFeaturesResponse:
        async with self._sessions() as session, session.begin():
            return await self._upsert_features(session, property_id, data)

    async def _upsert_features(
        self, session, property_id: int, data: PropertyFeaturesUpdate
    ) -> PropertyFeaturesResponse:
        changes = data.changes()
        result = await session.execute(
            select(PropertyFeatures).where(PropertyFeatures.property_id == property_id)
        )
        row = result.scalars().first()
        if row is None:
            row = PropertyFeatures(
                property_id=property_id,
                **{column: changes.get(column, False) for column in FEATURE_COLUMNS},
            )
            session.add(row)
        else:
            for column, value in changes.items():
                setattr(row, column, value)
        await session.flush()
        return PropertyFeaturesResponse.model_validate(row)

    # Inquiries
    async def create_inquiry(self, data: InquiryCreate) -> InquiryResponse:
        async with self._sessions() as session, session.begin():
            row = Inquiry(**data.model_dump(), is_viewed=False, created_at=utcnow())
            session.add(row)
            await session.flush()
            return InquiryResponse.model_validate(row)

    async def get_inquiries_by_property(self, property_id: int) -> List[InquiryResponse]:
        async with self._sessions() as session:
            result = await session.execute(
                select(Inquiry).where(Inquiry.property_id == property_id).order_by(Inquiry.id)
            )
            return [InquiryResponse.model_validate(row) for row in result.scalars()]

    async def get_inquiries_by_seller(self, seller_id: int) -> List[InquiryResponse]:
        async with self._sessions() as session:
            result = await session.execute(select(Property.id).where(Property.seller_id == seller_id))
            property_ids = list(result.scalars())
            if not property_ids:
                return []
            result = await session.execute(
                select(Inquiry).where(Inquiry.property_id.in_(property_ids)).order_by(Inquiry.id)
            )
            return [InquiryResponse.model_validate(row) for row in result.scalars()]

    async def mark_inquiry_as_viewed(self, inquiry_id: int) -> bool:
        async with self._sessions() as session, session.begin():
            result = await session.execute(
                update(Inquiry).where(Inquiry.id == inquiry_id).values(is_viewed=True)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0
