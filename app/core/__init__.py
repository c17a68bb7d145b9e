"""
Core Application - Shared Base Classes

Project-wide building blocks with no webhook-specific logic.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and details
    - ValidationError: Malformed input
    - ConflictError: State conflicts (duplicates, etc.)
    - ExternalServiceError: Database, broker and third-party failures
"""
