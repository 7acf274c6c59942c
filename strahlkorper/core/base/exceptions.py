"""
Exception hierarchy for Strahlkorper.

This module defines all custom exceptions used throughout the package,
providing clear error messages and proper inheritance structure.
"""

from typing import Optional, Any, Dict, Union


class StrahlkorperError(Exception):
    """Base exception for all Strahlkorper errors.

    This is the root exception class that all other Strahlkorper exceptions
    inherit from. It provides enhanced error reporting with optional
    context information.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        """Initialize Strahlkorper error.

        Parameters
        ----------
        message : str
            Primary error message
        details : dict, optional
            Additional context information
        cause : Exception, optional
            Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        base_msg = self.message

        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            base_msg += f" (Details: {details_str})"

        if self.cause:
            base_msg += f" (Caused by: {self.cause})"

        return base_msg

    def add_detail(self, key: str, value: Any) -> "StrahlkorperError":
        """Add detail information to the error.

        Parameters
        ----------
        key : str
            Detail key
        value : Any
            Detail value

        Returns
        -------
        StrahlkorperError
            Self for method chaining
        """
        self.details[key] = value
        return self

    def get_detail(self, key: str, default: Any = None) -> Any:
        """Get detail information from the error."""
        return self.details.get(key, default)


class ValidationError(StrahlkorperError, ValueError):
    """Raised when input validation fails.

    Also a ``ValueError`` so that callers catching builtin exceptions
    still see malformed input as such.
    """

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None, **kwargs):
        """Initialize validation error.

        Parameters
        ----------
        message : str
            Validation error message
        field : str, optional
            Name of the field that failed validation
        value : Any, optional
            Value that failed validation
        **kwargs
            Additional arguments for base class
        """
        details = kwargs.pop('details', {})
        if field is not None:
            details['field'] = field
        if value is not None:
            details['value'] = value

        super().__init__(message, details=details, **kwargs)
        self.field = field
        self.value = value


class InvalidResolutionError(ValidationError):
    """Raised when a spectral resolution ``(l_max, m_max)`` is not usable."""

    def __init__(self, message: str, l_max: Optional[Any] = None,
                 m_max: Optional[Any] = None, **kwargs):
        details = kwargs.pop('details', {})
        details['l_max'] = l_max
        details['m_max'] = m_max
        super().__init__(message, details=details, **kwargs)
        self.l_max = l_max
        self.m_max = m_max


class SampleCountMismatchError(ValidationError):
    """Raised when collocation samples do not match the grid size."""

    def __init__(self, message: str, expected: Optional[int] = None,
                 actual: Optional[int] = None, **kwargs):
        details = kwargs.pop('details', {})
        if expected is not None:
            details['expected'] = expected
        if actual is not None:
            details['actual'] = actual
        super().__init__(message, details=details, **kwargs)
        self.expected = expected
        self.actual = actual


class SizeMismatchError(ValidationError):
    """Raised when a coefficient vector has the wrong length."""

    def __init__(self, message: str, expected: Optional[int] = None,
                 actual: Optional[int] = None, **kwargs):
        details = kwargs.pop('details', {})
        if expected is not None:
            details['expected'] = expected
        if actual is not None:
            details['actual'] = actual
        super().__init__(message, details=details, **kwargs)
        self.expected = expected
        self.actual = actual


class IndexOutOfRangeError(ValidationError, IndexError):
    """Raised when an ``(l, m)`` mode lies outside the stored band."""

    def __init__(self, message: str, l: Optional[int] = None,
                 m: Optional[int] = None, **kwargs):
        details = kwargs.pop('details', {})
        if l is not None:
            details['l'] = l
        if m is not None:
            details['m'] = m
        super().__init__(message, details=details, **kwargs)
        self.l = l
        self.m = m


class ConfigurationError(StrahlkorperError):
    """Raised when configuration is invalid or missing.

    This exception is used for configuration-related errors such as
    missing required parameters, invalid values, or malformed config files.
    """

    def __init__(self, message: str, config_file: Optional[str] = None,
                 parameter: Optional[str] = None, **kwargs):
        """Initialize configuration error.

        Parameters
        ----------
        message : str
            Configuration error message
        config_file : str, optional
            Path to the configuration file with issues
        parameter : str, optional
            Name of the problematic parameter
        **kwargs
            Additional arguments for base class
        """
        details = kwargs.pop('details', {})
        if config_file is not None:
            details['config_file'] = config_file
        if parameter is not None:
            details['parameter'] = parameter

        super().__init__(message, details=details, **kwargs)
        self.config_file = config_file
        self.parameter = parameter


class ProviderError(StrahlkorperError):
    """Raised when a provider operation fails.

    This exception is used when optional backends (healpy, ...) encounter
    errors or are not available.
    """

    def __init__(self, message: str, provider: Optional[str] = None,
                 operation: Optional[str] = None, **kwargs):
        details = kwargs.pop('details', {})
        if provider is not None:
            details['provider'] = provider
        if operation is not None:
            details['operation'] = operation

        super().__init__(message, details=details, **kwargs)
        self.provider = provider
        self.operation = operation


class GeometryError(StrahlkorperError):
    """Raised when geometric operations fail.

    This exception is used for errors in coordinate transformations,
    geometric calculations, or spatial operations.
    """

    def __init__(self, message: str, coordinate_system: Optional[str] = None,
                 operation: Optional[str] = None, **kwargs):
        details = kwargs.pop('details', {})
        if coordinate_system is not None:
            details['coordinate_system'] = coordinate_system
        if operation is not None:
            details['operation'] = operation

        super().__init__(message, details=details, **kwargs)
        self.coordinate_system = coordinate_system
        self.operation = operation


class FrameMismatchError(GeometryError):
    """Raised when quantities defined in different frames are combined."""

    def __init__(self, message: str, expected: Optional[Any] = None,
                 actual: Optional[Any] = None, **kwargs):
        details = kwargs.pop('details', {})
        if expected is not None:
            details['expected'] = expected
        if actual is not None:
            details['actual'] = actual
        super().__init__(message, details=details, **kwargs)
        self.expected = expected
        self.actual = actual


class StrahlkorperIOError(StrahlkorperError):
    """Raised when input/output operations fail.

    This exception is used for file I/O errors while persisting or
    restoring surfaces.
    """

    def __init__(self, message: str, file_path: Optional[str] = None,
                 operation: Optional[str] = None, **kwargs):
        """Initialize I/O error.

        Parameters
        ----------
        message : str
            I/O error message
        file_path : str, optional
            Path to the file involved in the error
        operation : str, optional
            I/O operation that failed ('read', 'write', etc.)
        **kwargs
            Additional arguments for base class
        """
        details = kwargs.pop('details', {})
        if file_path is not None:
            details['file_path'] = file_path
        if operation is not None:
            details['operation'] = operation

        super().__init__(message, details=details, **kwargs)
        self.file_path = file_path
        self.operation = operation


# Utility functions for error handling
def reraise_with_context(exception: Exception, context: str,
                        additional_details: Optional[Dict[str, Any]] = None,
                        error_type: Optional[type] = None) -> None:
    """Re-raise an exception with additional context.

    Package errors keep their type and gain the context; any other
    exception is wrapped in ``error_type`` (StrahlkorperError by default).

    Parameters
    ----------
    exception : Exception
        Original exception
    context : str
        Additional context message
    additional_details : dict, optional
        Additional details to include
    error_type : type, optional
        StrahlkorperError subclass used to wrap foreign exceptions

    Raises
    ------
    StrahlkorperError
        Enhanced exception with context
    """
    if isinstance(exception, StrahlkorperError):
        enhanced_message = f"{context}: {exception.message}"
        if additional_details:
            exception.details.update(additional_details)
        exception.message = enhanced_message
        raise exception
    else:
        message = f"{context}: {str(exception)}"
        details = dict(additional_details or {})
        details['original_exception_type'] = type(exception).__name__
        raise (error_type or StrahlkorperError)(message, details=details, cause=exception)


def validate_positive(value: Union[int, float], name: str) -> Union[int, float]:
    """Validate that a numeric value is positive.

    Parameters
    ----------
    value : int or float
        Value to check
    name : str
        Name of the parameter for error messages

    Returns
    -------
    int or float
        The value if it's positive

    Raises
    ------
    ValidationError
        If value is not positive
    """
    if not value > 0:
        raise ValidationError(f"Parameter '{name}' must be positive, got {value}",
                            field=name, value=value)
    return value
