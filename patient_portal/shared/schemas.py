from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from patient_portal.shared.exceptions import ApiError, ValidationError


ModelT = TypeVar("ModelT", bound=BaseModel)


class CamelModel(BaseModel):
    """Base model whose JSON field names are camelCase."""
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    """Generic message response."""
    
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str
    timestamp: str


def validation_messages(exc: PydanticValidationError) -> List[str]:
    """Turn pydantic errors into user-facing messages."""
    messages = []
    for error in exc.errors():
        if error.get("type") == "value_error" and "error" in error.get("ctx", {}):
            messages.append(str(error["ctx"]["error"]))
        else:
            field = ".".join(str(part) for part in error.get("loc", ()))
            messages.append(f"{field}: {error.get('msg')}" if field else error.get("msg", "Invalid value"))
    return messages


def validate_input(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate user input before it is sent anywhere.
    
    Raises:
        ValidationError: With the first message as detail and all messages in errors
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        messages = validation_messages(e)
        raise ValidationError(messages[0], errors=messages) from e


def parse_response(model: Type[ModelT], data: Any) -> ModelT:
    """Parse a response body, raising ApiError when the server sent something unexpected."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ApiError(f"Unexpected response from server: {model.__name__}") from e
