"""
Base data structure interface.

Defines the serialization and validation contract shared by the
package's persistent types.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
import copy


class DataStructure(ABC):
    """Abstract base class for all data structures.

    This class defines the interface that all Strahlkorper data structures
    must implement, ensuring consistent behavior across the package.
    """

    @abstractmethod
    def validate(self) -> bool:
        """Validate the data structure.

        Returns
        -------
        bool
            True if valid

        Raises
        ------
        ValidationError
            If an invariant does not hold
        """
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation.

        Returns
        -------
        dict
            Dictionary representation of the data structure
        """
        pass

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataStructure":
        """Create from dictionary representation.

        Parameters
        ----------
        data : dict
            Dictionary containing data structure information

        Returns
        -------
        DataStructure
            New instance created from dictionary
        """
        pass

    def copy(self) -> "DataStructure":
        """Create a deep copy of the data structure."""
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._repr_info()})"

    def _repr_info(self) -> str:
        """Information for string representation."""
        return ""
