import logging
import sysconfig
import traceback
from pathlib import Path

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions
from rest_framework.exceptions import APIException, ErrorDetail, ValidationError
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler as drf_exception_handler

from jsonapi_resources.exceptions import InternalServerError
from jsonapi_resources.settings import get_configuration

logger = logging.getLogger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

_LIBRARY_PATHS = tuple(
    {
        str(Path(path).resolve())
        for key in ("stdlib", "platstdlib", "purelib", "platlib")
        if (path := sysconfig.get_paths().get(key))
    }
)


def exception_handler(exc, context):
    """Return the exceptions as JSON:API error documents.

    Exceptions that are allowed by the ``exception_class_allowlist`` are not rescued:
    DRF re-raises them, so the application can handle them elsewhere.

    See: https://jsonapi.org/format/#error-objects
    """
    configuration = get_configuration()
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(*exc.args)
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied(*exc.args)

    response = drf_exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, ValidationError):
            errors = get_validation_errors(exc, exc.detail, configuration)
        else:
            errors = [get_error_object(exc, response.status_code, configuration)]

        response.data = {"errors": errors}
        response.content_type = JSONAPI_MEDIA_TYPE
        return response

    if configuration.exception_class_allowed(exc):
        return None

    logger.exception("Internal server error: %s", exc, exc_info=exc)
    error = InternalServerError()
    data = get_error_object(error, error.status_code, configuration)

    meta = {}
    if configuration.include_backtraces_in_errors:
        meta["exception"] = str(exc)
        meta["backtrace"] = traceback.format_tb(exc.__traceback__)
    if configuration.include_application_backtraces_in_errors:
        meta["application_backtrace"] = get_application_backtrace(exc)
    if meta:
        data["meta"] = meta

    return Response(
        {"errors": [data]}, status=error.status_code, content_type=JSONAPI_MEDIA_TYPE
    )


def get_error_object(exc: APIException, status_code: int, configuration) -> dict:
    """Build the JSON:API error object for a DRF exception."""
    detail = exc.detail if isinstance(exc.detail, ErrorDetail) else None
    code = detail.code if detail is not None else exc.default_code
    return {
        "status": str(status_code),
        "code": _format_code(code, status_code, configuration),
        "title": str(exc.default_detail),
        "detail": str(exc.detail),
    }


def get_validation_errors(exc: ValidationError, detail, configuration, field_name=None) -> list:
    """Flatten the tree of DRF validation messages into JSON:API error objects.
    Each error points to the offending attribute.
    """
    result = []
    if isinstance(detail, dict):
        for name, errors in detail.items():
            full_name = f"{field_name}/{name}" if field_name else name
            result.extend(get_validation_errors(exc, errors, configuration, full_name))
    elif isinstance(detail, list):
        for i, error in enumerate(detail):
            full_name = f"{field_name}/{i}" if isinstance(error, dict) else field_name
            result.extend(get_validation_errors(exc, error, configuration, full_name))
    elif isinstance(detail, ErrorDetail):
        error = {
            "status": str(exc.status_code),
            "code": _format_code(detail.code, exc.status_code, configuration),
            "title": str(exc.default_detail),
            "detail": str(detail),
        }
        if field_name == api_settings.NON_FIELD_ERRORS_KEY:
            error["source"] = {"pointer": "/data"}
        elif field_name is not None:
            key_formatter = configuration.key_formatter
            pointer = "/".join(key_formatter.format(part) for part in field_name.split("/"))
            error["source"] = {"pointer": f"/data/attributes/{pointer}"}
        result.append(error)
    else:
        raise TypeError(f"Invalid value for get_validation_errors(): {detail!r}")

    return result


def get_application_backtrace(exc: BaseException) -> list[str]:
    """Only include the frames of the application itself, not the libraries it uses."""
    frames = [
        frame
        for frame in traceback.extract_tb(exc.__traceback__)
        if not str(Path(frame.filename).resolve()).startswith(_LIBRARY_PATHS)
    ]
    return traceback.format_list(frames)


def _format_code(code, status_code, configuration) -> str:
    if configuration.use_text_errors:
        return str(code).upper()
    return str(status_code)
