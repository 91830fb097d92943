"""Property search predicates.

The same filter set is evaluated two ways: ``matches_filters`` checks one
in-memory property, ``filter_conditions`` renders SQL conditions for the
relational store. Callers AND everything together; a ``None`` field on
``PropertyFilters`` means the predicate is skipped.

Location matching lowercases both sides. Python and Postgres (UTF-8 locale)
fold accented letters, so "ZÜRICH" matches "zürich". SQLite's ``lower()`` only
folds ASCII, so on SQLite accented locations match case-sensitively.
"""
from typing import List, Optional

from sqlalchemy import false, func, or_

from app.models.property import Property, PropertyFeatures
from app.schemas.property import FEATURE_FLAGS, PropertyFeaturesResponse, PropertyResponse
from app.schemas.search import PropertyFilters

LOCATION_FIELDS = ("address", "city", "state", "zip_code")


def matches_filters(
    prop: PropertyResponse,
    features: Optional[PropertyFeaturesResponse],
    filters: PropertyFilters,
) -> bool:
    if filters.location is not None:
        needle = filters.location.lower()
        if not any(needle in getattr(prop, field).lower() for field in LOCATION_FIELDS):
            return False

    if filters.property_type is not None and prop.property_type != filters.property_type:
        return False
    if filters.listing_type is not None and prop.listing_type != filters.listing_type:
        return False
    if filters.status is not None and prop.status != filters.status:
        return False

    if filters.min_price is not None and prop.price < filters.min_price:
        return False
    if filters.max_price is not None and prop.price > filters.max_price:
        return False
    if filters.min_bedrooms is not None and prop.bedrooms < filters.min_bedrooms:
        return False
    if filters.min_bathrooms is not None and prop.bathrooms < filters.min_bathrooms:
        return False
    if filters.min_square_feet is not None and prop.square_feet < filters.min_square_feet:
        return False
    if filters.min_year_built is not None:
        if prop.year_built is None or prop.year_built < filters.min_year_built:
            return False

    if filters.features:
        if features is None:
            return False
        for name in filters.features:
            flag = FEATURE_FLAGS.get(name)
            if flag is None or not getattr(features, flag):
                return False

    return True


def filter_conditions(filters: PropertyFilters) -> List:
    """SQL counterpart of ``matches_filters``.

    Feature conditions reference ``PropertyFeatures``; the query must inner
    join that table whenever ``filters.features`` is non-empty.
    """
    conditions = []

    if filters.location is not None:
        needle = filters.location.lower()
        conditions.append(or_(*[
            func.lower(getattr(Property, field)).contains(needle, autoescape=True)
            for field in LOCATION_FIELDS
        ]))

    if filters.property_type is not None:
        conditions.append(Property.property_type == filters.property_type)
    if filters.listing_type is not None:
        conditions.append(Property.listing_type == filters.listing_type)
    if filters.status is not None:
        conditions.append(Property.status == filters.status)

    if filters.min_price is not None:
        conditions.append(Property.price >= filters.min_price)
    if filters.max_price is not None:
        conditions.append(Property.price <= filters.max_price)
    if filters.min_bedrooms is not None:
        conditions.append(Property.bedrooms >= filters.min_bedrooms)
    if filters.min_bathrooms is not None:
        conditions.append(Property.bathrooms >= filters.min_bathrooms)
    if filters.min_square_feet is not None:
        conditions.append(Property.square_feet >= filters.min_square_feet)
    if filters.min_year_built is not None:
        # NULL year_built never satisfies >=
        conditions.append(Property.year_built >= filters.min_year_built)

    for name in filters.features or []:
        flag = FEATURE_FLAGS.get(name)
        if flag is None:
            conditions.append(false())
        else:
            conditions.append(getattr(PropertyFeatures, flag).is_(True))

    return conditions
