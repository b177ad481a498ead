# Patient Management Feature - Service

from typing import List, Union

from patient_portal.core.http import ApiClient
from patient_portal.core.logging import logger
from patient_portal.features.patients.schemas import (
    CreatePatientRequest,
    Patient,
    UpdatePatientRequest,
)
from patient_portal.shared.exceptions import ApiError
from patient_portal.shared.schemas import (
    HealthResponse,
    MessageResponse,
    parse_response,
    validate_input,
)


class PatientService:
    """
    Typed calls against the /patients resource.
    
    Every call is a full round trip; nothing is cached here. Errors from the
    API client (AuthError, ApiError, NetworkError) propagate unchanged.
    """
    
    RESOURCE = "/patients"
    
    def __init__(self, client: ApiClient):
        self.client = client
    
    async def list(self) -> List[Patient]:
        """Get all patients."""
        data = await self.client.get(self.RESOURCE)
        if not isinstance(data, list):
            raise ApiError("Unexpected response from server: Patient list")
        return [parse_response(Patient, item) for item in data]
    
    async def get_by_id(self, patient_id: int) -> Patient:
        """Get a patient by id."""
        data = await self.client.get(f"{self.RESOURCE}/{patient_id}")
        return parse_response(Patient, data)
    
    async def create(self, request: Union[CreatePatientRequest, dict]) -> Patient:
        """Create a patient; the server assigns id and createdAt."""
        request = validate_input(CreatePatientRequest, request)
        data = await self.client.post(self.RESOURCE, request.to_payload())
        patient = parse_response(Patient, data)
        logger.info(f"Created patient {patient.id}")
        return patient
    
    async def update(self, patient_id: int, request: Union[UpdatePatientRequest, dict]) -> Patient:
        """Update a patient, sending only the fields that were set."""
        request = validate_input(UpdatePatientRequest, request)
        data = await self.client.put(f"{self.RESOURCE}/{patient_id}", request.to_payload())
        patient = parse_response(Patient, data)
        logger.info(f"Updated patient {patient_id}")
        return patient
    
    async def delete(self, patient_id: int) -> MessageResponse:
        """Delete a patient."""
        data = await self.client.delete(f"{self.RESOURCE}/{patient_id}")
        logger.info(f"Deleted patient {patient_id}")
        if data is None:
            return MessageResponse(message="Patient deleted")
        return parse_response(MessageResponse, data)
    
    async def health(self) -> HealthResponse:
        """Check that the API server is up."""
        data = await self.client.get("/health")
        return parse_response(HealthResponse, data)
