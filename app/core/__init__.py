"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the domain apps. Nothing in here knows
about conversations or messages.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer (logging, transactions)
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and kinds
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - PermissionDeniedError: Authorization failures
    - ConflictError: State conflicts (duplicates, etc.)
    - ExternalServiceError: Collaborator failures

API error rendering (import from core.handlers):
    - api_exception_handler: DRF EXCEPTION_HANDLER

Protocols (import from core.protocols):
    - UserDirectory, UserSummary, UserDirectoryError

Subjects (import from core.subjects):
    - SubjectRef: {kind, id} reference to a registered model row
    - subjects: Process-wide SubjectRegistry
"""
