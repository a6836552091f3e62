"""Additional exception classes"""
from rest_framework import status
from rest_framework.exceptions import APIException


class UnknownFormatterError(LookupError):
    """The configured key or route format has no registered formatter."""

    def __init__(self, format_name):
        super().__init__(f"No formatter registered for format {format_name!r}")
        self.format_name = format_name


class UnknownProcessorError(LookupError):
    """The configured processor name has no registered processor class."""

    def __init__(self, processor_name):
        super().__init__(f"No processor registered as {processor_name!r}")
        self.processor_name = processor_name


class InternalServerError(APIException):
    """Render an HTTP 500 for exceptions that were rescued by the exception handler."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal Server Error"
    default_code = "internal_server_error"
