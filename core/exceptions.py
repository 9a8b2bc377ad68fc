"""
API Error Taxonomy
Domain services raise these; the api_view decorator turns them into
JSON error envelopes with the matching HTTP status.
"""

from typing import Dict, List, Optional


class ApiError(Exception):
    """Base class for errors that surface to the API caller"""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, List[str]]] = None):
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(self.message)


class InvalidInput(ApiError):
    """Malformed or semantically invalid request payload"""
    status_code = 400
    default_message = 'Invalid input'


class NotFound(ApiError):
    """Referenced entity does not exist (or is not visible to the caller)"""
    status_code = 404
    default_message = 'Resource not found'


class Forbidden(ApiError):
    """Acting user lacks the required relationship to the entity"""
    status_code = 403
    default_message = 'You do not have permission to perform this action'


class InvalidState(ApiError):
    """Operation not valid for the entity's current lifecycle state"""
    status_code = 400
    default_message = 'Operation not allowed in the current state'


class Unauthorized(ApiError):
    status_code = 401
    default_message = 'Authentication required'


class Internal(ApiError):
    status_code = 500
    default_message = 'Internal server error'
