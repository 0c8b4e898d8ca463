# gamification/exceptions.py
"""
Domain errors raised by the rewards engine.

They are DRF APIExceptions so core.exceptions.custom_exception_handler
renders them with their status code and machine readable ``code``.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class EngineError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The action could not be applied."
    default_code = "ENGINE_ERROR"


class AlreadyCompleted(EngineError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Mission already completed."
    default_code = "ALREADY_COMPLETED"


class NotEligible(EngineError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "This action is not eligible for rewards."
    default_code = "NOT_ELIGIBLE"


class RateLimited(EngineError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Daily limit reached. Try again tomorrow."
    default_code = "RATE_LIMITED"

    def __init__(self, detail=None, code=None, retry_after=None):
        super().__init__(detail, code)
        self.retry_after = retry_after


class TransientStoreFailure(EngineError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Progress store is temporarily unavailable. Please retry."
    default_code = "STORE_UNAVAILABLE"
