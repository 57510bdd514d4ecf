from typing import Dict, Optional


class VXAcademyError(Exception):
    """Base class for errors that are reported to clients through the response envelope."""
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(VXAcademyError):
    status_code = 404

    def __init__(self, entity: str, entity_id=None, message: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        if message is None:
            message = f"{entity} with ID {entity_id} not found." if entity_id is not None else f"{entity} not found."
        super().__init__(message)


class ValidationError(VXAcademyError):
    """Raised before any write. `errors` maps field name to a message so forms can highlight inputs."""
    status_code = 422

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors={field: message})


class ConflictError(VXAcademyError):
    status_code = 409


class AttemptLimitExceeded(VXAcademyError):
    status_code = 403

    def __init__(self, assessment_id: int, max_retakes: int):
        self.assessment_id = assessment_id
        self.max_retakes = max_retakes
        super().__init__(
            f"Maximum number of attempts ({max_retakes}) reached for assessment {assessment_id}."
        )
