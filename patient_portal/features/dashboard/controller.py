# Dashboard Feature - Controller

import asyncio
import inspect
from typing import Awaitable, Callable, Optional, Union

from patient_portal.core.logging import logger
from patient_portal.features.dashboard import state
from patient_portal.features.dashboard.schemas import DashboardStatsResponse
from patient_portal.features.dashboard.state import PatientList
from patient_portal.features.patients.schemas import (
    CreatePatientRequest,
    Patient,
    UpdatePatientRequest,
)
from patient_portal.features.patients.service import PatientService
from patient_portal.shared.exceptions import (
    ApiError,
    AuthError,
    PortalException,
    ValidationError,
)
from patient_portal.shared.schemas import validate_input


LOAD_ERROR = "Failed to load patients. Please check if the API server is running."
ADD_ERROR = "Failed to add patient"
UPDATE_ERROR = "Failed to update patient"
DELETE_ERROR = "Failed to delete patient"

Confirmation = Union[bool, Callable[[int], Union[bool, Awaitable[bool]]]]


class DashboardController:
    """
    Keeps the visible patient list in step with the server.

    The list is loaded wholesale by load_all() and afterwards patched from
    each successful mutation's response instead of being re-fetched. A failed
    call never changes the list; its message lands in `error`.
    """

    def __init__(self, patients: PatientService):
        self._service = patients
        self._patients: PatientList = ()
        self.error: Optional[str] = None
        self.loading = False
        self.saving = False
        self._generation = 0
        self._load_task: Optional[asyncio.Task] = None

    @property
    def patients(self) -> PatientList:
        return self._patients

    def find(self, patient_id: int) -> Optional[Patient]:
        return next((p for p in self._patients if p.id == patient_id), None)

    def stats(self) -> DashboardStatsResponse:
        return DashboardStatsResponse(
            total=len(self._patients),
            male=sum(1 for p in self._patients if p.gender == "Male"),
            female=sum(1 for p in self._patients if p.gender == "Female"),
            other=sum(1 for p in self._patients if p.gender == "Other"),
        )

    def reset(self) -> None:
        """Forget everything, e.g. when the session ends. A load in flight is discarded."""
        self._generation += 1
        self._patients = ()
        self.error = None
        self.loading = False
        self.saving = False

    async def load_all(self) -> bool:
        """
        Replace the local list with the server's.

        A newer call cancels an older one still in flight; only the newest
        load may apply its result.

        Returns:
            bool: True if this call's result was applied
        """
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()

        self._generation += 1
        generation = self._generation
        task = asyncio.ensure_future(self._service.list())
        self._load_task = task
        self.loading = True

        try:
            patients = await task
        except asyncio.CancelledError:
            if task.cancelled() and generation != self._generation:
                logger.debug("Superseded patient list load cancelled")
                return False
            raise
        except AuthError:
            return False
        except PortalException as e:
            if generation == self._generation:
                self.error = LOAD_ERROR
                logger.error(f"Error loading patients: {e.detail}")
            return False
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            return False

        self._patients = state.replace_all(patients)
        self.error = None
        return True

    async def add(self, data: Union[CreatePatientRequest, dict]) -> Optional[Patient]:
        """Create a patient and append the server's record to the list."""
        try:
            request = validate_input(CreatePatientRequest, data)
            self.saving = True
            patient = await self._service.create(request)
        except PortalException as e:
            self._report_failure(e, ADD_ERROR)
            return None
        finally:
            self.saving = False

        self._patients = state.append(self._patients, patient)
        self.error = None
        return patient

    async def edit(self, patient_id: int, data: Union[UpdatePatientRequest, dict]) -> Optional[Patient]:
        """Update a patient and swap the server's record into its slot."""
        try:
            request = validate_input(UpdatePatientRequest, data)
            self.saving = True
            patient = await self._service.update(patient_id, request)
        except PortalException as e:
            self._report_failure(e, UPDATE_ERROR)
            return None
        finally:
            self.saving = False

        self._patients = state.replace(self._patients, patient)
        self.error = None
        return patient

    async def remove(self, patient_id: int, confirm: Confirmation) -> bool:
        """
        Delete a patient after explicit confirmation.

        Args:
            patient_id: Patient to delete
            confirm: True, or a callable (sync or async) asked with the patient
                id that must return True for the delete to be issued

        Returns:
            bool: True if the patient was deleted
        """
        if not await self._confirmed(confirm, patient_id):
            logger.debug(f"Delete of patient {patient_id} not confirmed")
            return False

        try:
            await self._service.delete(patient_id)
        except PortalException as e:
            self._report_failure(e, DELETE_ERROR)
            return False

        self._patients = state.remove(self._patients, patient_id)
        self.error = None
        return True

    async def _confirmed(self, confirm: Confirmation, patient_id: int) -> bool:
        if not callable(confirm):
            return confirm is True

        answer = confirm(patient_id)
        if inspect.isawaitable(answer):
            answer = await answer
        return answer is True

    def _report_failure(self, error: PortalException, fallback: str) -> None:
        if isinstance(error, AuthError):
            # Handled globally by the session expiry observer
            logger.info(f"{fallback}: session expired")
            return

        if isinstance(error, ValidationError):
            message = error.detail
        elif isinstance(error, ApiError) and error.server_message:
            message = error.server_message
        else:
            message = fallback

        self.error = message
        logger.error(f"{fallback}: {error.detail}")
