from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Values the listing forms send for "no preference"
ANY_SENTINELS = {"any", "any type", "any_type", "any listing", "any_listing", "any status", "any_status"}


class PropertyFilters(BaseModel):
    location: Optional[str] = Field(None, description="Substring of address, city, state or zip code")
    property_type: Optional[str] = None
    listing_type: Optional[str] = None
    status: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_bedrooms: Optional[int] = None
    min_bathrooms: Optional[Decimal] = None
    min_square_feet: Optional[int] = None
    min_year_built: Optional[int] = None
    features: Optional[List[str]] = Field(None, description="Feature names that must all be present")

    @field_validator("location", "property_type", "listing_type", "status")
    @classmethod
    def blank_or_any_is_unset(cls, v):
        if v is None:
            return None
        v = v.strip()
        if not v or v.lower() in ANY_SENTINELS:
            return None
        return v

    @field_validator(
        "min_price", "max_price", "min_bedrooms", "min_bathrooms", "min_square_feet", "min_year_built",
        mode="before",
    )
    @classmethod
    def blank_or_any_number_is_unset(cls, v):
        # query strings arrive raw; "" and "any" mean no threshold
        if isinstance(v, str) and (not v.strip() or v.strip().lower() in ANY_SENTINELS):
            return None
        return v

    @field_validator("features")
    @classmethod
    def drop_blank_features(cls, v):
        if v is None:
            return None
        names = [name.strip() for name in v if name and name.strip()]
        return names or None

    class Config:
        json_schema_extra = {
            "example": {
                "location": "austin",
                "property_type": "House",
                "listing_type": "For Sale",
                "min_price": "100000",
                "max_price": "600000",
                "min_bedrooms": 3,
                "features": ["Pool", "Garage"]
            }
        }
