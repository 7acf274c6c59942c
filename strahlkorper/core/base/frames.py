"""
Coordinate frame tags.

Surfaces carry the frame in which their center and coefficients are
defined. Frames are plain runtime tags compared at interface boundaries;
there is no transformation machinery between them here.
"""

from enum import Enum
from typing import Union

from .exceptions import FrameMismatchError, ValidationError


class Frame(str, Enum):
    """Frames a surface may be defined in."""

    INERTIAL = "Inertial"
    GRID = "Grid"
    DISTORTED = "Distorted"
    LOGICAL = "Logical"

    @classmethod
    def coerce(cls, value: Union["Frame", str]) -> "Frame":
        """Return ``value`` as a Frame, accepting member names or values.

        Raises
        ------
        ValidationError
            If ``value`` does not name a known frame
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value == member.value or value.upper() == member.name:
                    return member
        raise ValidationError(
            f"Unknown frame {value!r}; expected one of {[m.value for m in cls]}",
            field="frame", value=value,
        )

    def __str__(self) -> str:
        return self.value


def require_same_frame(expected: Frame, actual: Union[Frame, str], operation: str = "") -> None:
    """Raise FrameMismatchError unless ``actual`` names the same frame as ``expected``."""
    actual = Frame.coerce(actual)
    if actual is not expected:
        raise FrameMismatchError(
            f"Frame mismatch{' in ' + operation if operation else ''}: "
            f"expected {expected}, got {actual}",
            expected=str(expected), actual=str(actual), operation=operation or None,
        )
