class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class TimetableValidationError(AppError):
    """Raised when a slot reference or its content is rejected before any write."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class UnknownGroupError(AppError):
    """Raised when a group id that is not part of the school layout is passed explicitly."""
    def __init__(self, group_id: str):
        super().__init__(f"Grupo '{group_id}' não existe na configuração", status_code=404, details={"grupoId": group_id})

class ResourceNotFoundError(AppError):
    """Raised when a write targets a resource that does not exist."""
    def __init__(self, resource_type: str, resource_id):
        super().__init__(f"{resource_type} {resource_id} não encontrado", status_code=404, details={"id": resource_id})

class PersistenceError(AppError):
    """Raised when a multi-row replace could not be committed and was rolled back."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
