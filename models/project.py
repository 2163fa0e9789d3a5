# models/project.py

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.enums import BaseStrEnum


# -------------------------------------------------
# Nested shapes
# -------------------------------------------------
class Location(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class ReservationInfo(BaseModel):
    text: Optional[str] = None
    hyperlink: Optional[str] = None


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class ProjectBase(BaseModel):
    name: str
    address: Optional[str] = None
    county_name: Optional[str] = None
    country_id: Optional[str] = None
    location: Optional[Location] = None
    gallery: Optional[List[str]] = None
    commercialConditions: Optional[str] = None
    delivery_date: Optional[datetime] = None
    deliveryDateDescr: Optional[str] = None
    deliveryType: Optional[str] = None
    downPaymentMethod: Optional[str] = None
    installments: Optional[int] = None
    promiseSignatureType: Optional[str] = None
    reservationInfo: Optional[ReservationInfo] = None
    reservationValue: Optional[float] = Field(None, ge=0)


# -------------------------------------------------
# Create
# -------------------------------------------------
class ProjectCreate(ProjectBase):
    """
    Used when creating a single project.
    The organization comes from the caller; geography ids are
    resolved from county_name.
    """
    real_estate_company_id: Optional[str] = None


# -------------------------------------------------
# Read (Supabase → API response)
# -------------------------------------------------
class ProjectRead(ProjectBase):
    id: str
    organization_id: str
    real_estate_company_id: Optional[str] = None
    county_id: Optional[str] = None
    region_id: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    # Normalize UUID → str always
    @field_validator("id", "organization_id", mode="before")
    @classmethod
    def normalize_id(cls, v):
        if isinstance(v, UUID):
            return str(v)
        return v


# -------------------------------------------------
# Update (PATCH)
# -------------------------------------------------
class ProjectUpdate(BaseModel):
    # ids, tenant and timestamps are not editable
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    address: Optional[str] = None
    county_name: Optional[str] = None
    location: Optional[Location] = None
    gallery: Optional[List[str]] = None
    commercialConditions: Optional[str] = None
    delivery_date: Optional[datetime] = None
    deliveryDateDescr: Optional[str] = None
    deliveryType: Optional[str] = None
    downPaymentMethod: Optional[str] = None
    installments: Optional[int] = None
    promiseSignatureType: Optional[str] = None
    reservationInfo: Optional[ReservationInfo] = None
    reservationValue: Optional[float] = Field(None, ge=0)


# =================================================
# Spreadsheet import catalogue
# =================================================
class FieldKind(BaseStrEnum):
    string = "string"
    descriptive = "descriptive"   # free text; dates become YYYY-MM-DD
    date = "date"                 # compared with a tolerance window
    integer = "integer"
    number = "number"
    identifier = "identifier"     # *_id: quotes stripped before comparing
    object = "object"             # filled from dotted headers (location.lat)
    string_list = "string_list"


KEY_FIELD = "name"

# Never mapped from a sheet, never part of an update
IMMUTABLE_FIELDS = frozenset({
    "_id",
    "id",
    "real_estate_company_id",
    "organization_id",
    "createdAt",
    "county_id",
    "region_id",
})

DATE_FIELDS = frozenset({"updatedAt", "delivery_date"})
DESCRIPTIVE_FIELDS = frozenset({"address", "deliveryDateDescr"})

# field → kind, in export column order
PROJECT_IMPORT_FIELDS: Dict[str, FieldKind] = {
    "name": FieldKind.string,
    "address": FieldKind.descriptive,
    "county_name": FieldKind.string,
    "country_id": FieldKind.identifier,
    "commercialConditions": FieldKind.string,
    "delivery_date": FieldKind.date,
    "deliveryDateDescr": FieldKind.descriptive,
    "deliveryType": FieldKind.string,
    "downPaymentMethod": FieldKind.string,
    "installments": FieldKind.integer,
    "promiseSignatureType": FieldKind.string,
    "reservationValue": FieldKind.number,
    "reservationInfo": FieldKind.object,
    "location": FieldKind.object,
    "gallery": FieldKind.string_list,
}

# Sub-fields of object kinds, addressable as "<field>.<key>" headers
PROJECT_OBJECT_FIELDS: Dict[str, Dict[str, FieldKind]] = {
    "location": {"lat": FieldKind.number, "lng": FieldKind.number},
    "reservationInfo": {"text": FieldKind.string, "hyperlink": FieldKind.string},
}

# Minimums enforced on import (mirrors the schema constraint)
PROJECT_FIELD_MINIMUMS: Dict[str, float] = {
    "reservationValue": 0,
}


def mappable_field_paths() -> List[str]:
    """Every header target a sheet may use: plain fields plus dotted sub-fields."""
    paths = []
    for field, kind in PROJECT_IMPORT_FIELDS.items():
        if kind is FieldKind.object:
            paths.extend(f"{field}.{key}" for key in PROJECT_OBJECT_FIELDS[field])
        else:
            paths.append(field)
    return paths
