# models/project_import.py

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


# -------------------------------------------------
# dbOperations: the reviewable change-set
# -------------------------------------------------
class InsertOperation(BaseModel):
    # Full new document: fields + _id + organization_id + timestamps
    document: Dict[str, Any]


class UpdateFilter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")


class UpdateSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    set_fields: Dict[str, Any] = Field(alias="$set")


class UpdateOperation(BaseModel):
    filter: UpdateFilter
    update: UpdateSpec


class DbOperations(BaseModel):
    insert: List[InsertOperation] = []
    update: List[UpdateOperation] = []


# -------------------------------------------------
# Analyze
# -------------------------------------------------
class AnalyzeResult(BaseModel):
    message: Optional[str] = None
    dbOperations: DbOperations = Field(default_factory=DbOperations)
    # [{<_id>: {name, ...fields}}]: human-readable view of the same change-set
    projectsToCreate: List[Dict[str, Dict[str, Any]]] = []
    projectsToUpdate: List[Dict[str, Dict[str, Any]]] = []
    missingCounties: List[str] = []
    errors: List[str] = []
    logs: List[str] = []


# -------------------------------------------------
# Apply
# -------------------------------------------------
class ApplyRequest(BaseModel):
    dbOperations: DbOperations


class ApplyResult(BaseModel):
    inserted: int = 0
    updated: int = 0
    errors: List[str] = []


# -------------------------------------------------
# Mapping / preview helpers
# -------------------------------------------------
class ImportField(BaseModel):
    path: str
    kind: str
    key: bool = False


class MappingPreview(BaseModel):
    headers: List[str]
    mapping: Dict[str, str]
    unmapped: List[str] = []
    ignored: List[str] = []
    sample_rows: List[Dict[str, Any]] = []
    total_rows: int = 0
