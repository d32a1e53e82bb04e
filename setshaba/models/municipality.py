"""
Municipality reference data models.
"""

from typing import List, Optional

from pydantic import BaseModel


class MunicipalitySummary(BaseModel):
    id: str
    name: str
    province: Optional[str] = None


class MunicipalityPayload(BaseModel):
    municipality: MunicipalitySummary


class MunicipalityListPayload(BaseModel):
    municipalities: List[MunicipalitySummary]
