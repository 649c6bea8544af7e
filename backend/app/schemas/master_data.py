from pydantic import BaseModel, Field
from typing import Any, List


class MasterDataField(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    value: Any


class MasterDataUpdate(BaseModel):
    fields: List[MasterDataField] = Field(..., min_length=1)
