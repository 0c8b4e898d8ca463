from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("ecoact.core")


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        body = {
            "success": False,
            "status_code": response.status_code,
            "code": getattr(exc, "default_code", None),
            "errors": response.data,
        }
        detail = getattr(exc, "detail", None)
        if hasattr(detail, "code"):
            body["code"] = detail.code
        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            body["retry_after"] = retry_after

        headers = {}
        for name in ("WWW-Authenticate", "Retry-After"):
            if response.has_header(name):
                headers[name] = response[name]
        if retry_after is not None:
            headers["Retry-After"] = str(retry_after)
        return Response(body, status=response.status_code, headers=headers)

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "code": "internal_error",
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
