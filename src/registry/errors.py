class RegistryError(Exception):
    """Base exception for the active-timer registry."""


class StoreUnavailable(RegistryError):
    """Raised when the registry database cannot be opened or created."""


class RecordNotFound(RegistryError):
    """Raised when a lookup targets a record that is not registered."""

    def __init__(self, record_id: int):
        super().__init__(f"Timer {record_id} not found")
        self.record_id = record_id
