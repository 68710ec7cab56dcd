"""
Write-once values for builder fields.
"""

from typing import Generic, Optional, TypeVar

from workflow_builder.core.errors import BuilderStateError

T = TypeVar("T")


class ModifyOnce(Generic[T]):
    """
    A value that starts from a default and may be set at most once.
    
    States:
    - unset: `get()` returns the default
    - set: `get()` returns the assigned value; further `set()` calls fail
    """
    
    def __init__(self, default: Optional[T] = None, field_name: Optional[str] = None):
        self._default = default
        self._value: Optional[T] = None
        self._modified = False
        self._field_name = field_name
    
    @property
    def is_modified(self) -> bool:
        """Check if the value has already been set."""
        return self._modified
    
    def get(self) -> Optional[T]:
        """Get the assigned value, or the default if none was assigned."""
        return self._value if self._modified else self._default
    
    def set(self, value: Optional[T]) -> None:
        """
        Assign the value.
        
        Raises:
            BuilderStateError: If the value was already assigned
        """
        if self._modified:
            label = f"'{self._field_name}' " if self._field_name else ""
            raise BuilderStateError(
                f"Property {label}can only be set once",
                field_name=self._field_name,
            )
        
        self._value = value
        self._modified = True
    
    def __repr__(self) -> str:
        state = "set" if self._modified else "unset"
        return f"ModifyOnce({self.get()!r}, {state})"
