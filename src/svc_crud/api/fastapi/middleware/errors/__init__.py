from .catchall import CatchAllExceptionMiddleware
from .error_handlers import format_validation_errors, register_error_handlers

__all__ = ["CatchAllExceptionMiddleware", "format_validation_errors", "register_error_handlers"]
