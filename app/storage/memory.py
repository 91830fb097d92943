"""Dict-backed store for demos and tests.

Single process only and not safe under concurrent mutation of the same
property: nothing here is locked.
"""
from typing import Dict, List, Optional

from structlog import get_logger

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
from app.storage.filters import matches_filters

logger = get_logger()


class MemoryStorage(Storage):
    def __init__(self):
        self._users: Dict[int, UserInDB] = {}
        self._properties: Dict[int, PropertyResponse] = {}
        # keyed by property id
        self._features: Dict[int, PropertyFeaturesResponse] = {}
        self._images: Dict[int, List[PropertyImageResponse]] = {}
        self._inquiries: Dict[int, InquiryResponse] = {}

        self._next_user_id = 1
        self._next_property_id = 1
        self._next_features_id = 1
        self._next_image_id = 1
        self._next_inquiry_id = 1

    def _hydrate(self, prop: PropertyResponse) -> PropertyDetailResponse:
        features = self._features.get(prop.id)
        return PropertyDetailResponse(
            **prop.model_dump(),
            images=[image.model_copy() for image in self._images.get(prop.id, [])],
            features=features.model_copy() if features else None,
        )

    # Users
    async def get_user(self, user_id: int) -> Optional[UserInDB]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        for user in self._users.values():
            if user.username == username:
                return user.model_copy()
        return None

    async def create_user(self, data: UserCreate) -> UserInDB:
        if any(user.username == data.username for user in self._users.values()):
            raise UsernameTakenError(data.username)
        user = UserInDB(id=self._next_user_id, **data.model_dump())
        self._next_user_id += 1
        self._users[user.id] = user
        logger.info("User created", user_id=user.id, backend="memory")
        return user.model_copy()

    # Properties
    async def get_properties(self, filters: Optional[PropertyFilters] = None) -> List[PropertyDetailResponse]:
        filters = filters or PropertyFilters()
        return [
            self._hydrate(prop)
            for prop in self._properties.values()
            if matches_filters(prop, self._features.get(prop.id), filters)
        ]

    async def get_property(self, property_id: int) -> Optional[PropertyDetailResponse]:
        prop = self._properties.get(property_id)
        if prop is None:
            return None
        return self._hydrate(prop)

    async def create_property(
        self, data: PropertyCreate, features: Optional[PropertyFeaturesUpdate] = None
    ) -> PropertyResponse:
        if data.seller_id not in self._users:
            raise UnknownSellerError(data.seller_id)
        now = utcnow()
        prop = PropertyResponse(
            id=self._next_property_id,
            views=0,
            created_at=now,
            updated_at=now,
            **data.model_dump(include=set(PropertyCreate.model_fields)),
        )
        self._next_property_id += 1
        self._properties[prop.id] = prop
        if features is not None:
            self._upsert_features(prop.id, features)
        return prop.model_copy()

    async def update_property(
        self, property_id: int, data: PropertyUpdate, features: Optional[PropertyFeaturesUpdate] = None
    ) -> Optional[PropertyResponse]:
        existing = self._properties.get(property_id)
        if existing is None:
            return None
        changes = data.changes()
        if "seller_id" in changes and changes["seller_id"] not in self._users:
            raise UnknownSellerError(changes["seller_id"])
        updated = existing.model_copy(update={**changes, "updated_at": utcnow()})
        self._properties[property_id] = updated
        if features is not None:
            self._upsert_features(property_id, features)
        return updated.model_copy()

    async def delete_property(self, property_id: int) -> bool:
        if property_id not in self._properties:
            return False
        self._features.pop(property_id, None)
        self._images.pop(property_id, None)
        for inquiry_id in [i.id for i in self._inquiries.values() if i.property_id == property_id]:
            del self._inquiries[inquiry_id]
        del self._properties[property_id]
        return True

    async def increment_property_views(self, property_id: int) -> None:
        prop = self._properties.get(property_id)
        if prop is not None:
            self._properties[property_id] = prop.model_copy(update={"views": prop.views + 1})

    async def get_properties_by_seller(self, seller_id: int) -> List[SellerPropertyResponse]:
        counts: Dict[int, int] = {}
        for inquiry in self._inquiries.values():
            counts[inquiry.property_id] = counts.get(inquiry.property_id, 0) + 1
        return [
            SellerPropertyResponse(**prop.model_dump(), inquiry_count=counts.get(prop.id, 0))
            for prop in self._properties.values()
            if prop.seller_id == seller_id
        ]

    # Images
    async def add_property_image(self, data: PropertyImageCreate) -> PropertyImageResponse:
        images = self._images.setdefault(data.property_id, [])
        is_main = data.is_main or not images
        if is_main:
            for image in images:
                image.is_main = False
        image = PropertyImageResponse(
            id=self._next_image_id,
            property_id=data.property_id,
            image_url=data.image_url,
            is_main=is_main,
            created_at=utcnow(),
        )
        self._next_image_id += 1
        images.append(image)
        return image.model_copy()

    async def get_property_images(self, property_id: int) -> List[PropertyImageResponse]:
        return [image.model_copy() for image in self._images.get(property_id, [])]

    async def delete_property_image(self, image_id: int) -> bool:
        for images in self._images.values():
            for index, image in enumerate(images):
                if image.id != image_id:
                    continue
                del images[index]
                if image.is_main and images:
                    images[0].is_main = True
                return True
        return False

    async def set_main_property_image(self, image_id: int, property_id: int) -> bool:
        images = self._images.get(property_id, [])
        if not any(image.id == image_id for image in images):
            return False
        for image in images:
            image.is_main = image.id == image_id
        return True

    # Features
    async def get_property_features(self, property_id: int) -> Optional[PropertyFeaturesResponse]:
        features = self._features.get(property_id)
        return features.model_copy() if features else None

    async def update_property_features(
        self, property_id: int, data: PropertyFeaturesUpdate
    ) -> PropertyFeaturesResponse:
        return self._upsert_features(property_id, data).model_copy()

    def _upsert_features(self, property_id: int, data: PropertyFeaturesUpdate) -> PropertyFeaturesResponse:
        existing = self._features.get(property_id)
        if existing is not None:
            features = existing.model_copy(update=data.changes())
        else:
            features = PropertyFeaturesResponse(
                id=self._next_features_id,
                property_id=property_id,
                **data.changes(),
            )
            self._next_features_id += 1
        self._features[property_id] = features
        return features

    # Inquiries
    async def create_inquiry(self, data: InquiryCreate) -> InquiryResponse:
        inquiry = InquiryResponse(
            id=self._next_inquiry_id,
            is_viewed=False,
            created_at=utcnow(),
            **data.model_dump(),
        )
        self._next_inquiry_id += 1
        self._inquiries[inquiry.id] = inquiry
        return inquiry.model_copy()

    async def get_inquiries_by_property(self, property_id: int) -> List[InquiryResponse]:
        return [i.model_copy() for i in self._inquiries.values() if i.property_id == property_id]

    async def get_inquiries_by_seller(self, seller_id: int) -> List[InquiryResponse]:
        owned = {prop.id for prop in self._properties.values() if prop.seller_id == seller_id}
        if not owned:
            return []
        return [i.model_copy() for i in self._inquiries.values() if i.property_id in owned]

    async def mark_inquiry_as_viewed(self, inquiry_id: int) -> bool:
        inquiry = self._inquiries.get(inquiry_id)
        if inquiry is None:
            return False
        inquiry.is_viewed = True
        return True
