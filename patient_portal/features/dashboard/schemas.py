# Dashboard Feature - Schemas

from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    """Patient counts shown above the patient list."""
    total: int = 0
    male: int = 0
    female: int = 0
    other: int = 0
