# Dashboard Feature

from patient_portal.features.dashboard.controller import DashboardController
from patient_portal.features.dashboard.schemas import DashboardStatsResponse

__all__ = ["DashboardController", "DashboardStatsResponse"]
