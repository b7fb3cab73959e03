"""Protocols for instance persistence backends."""

from typing import Any, Dict, Optional, Protocol


class InstanceBackend(Protocol):
    """Protocol for instance record backends.

    ``write`` must replace the stored record in one step: a concurrent
    ``read`` returns either the previous record or the new one.
    """

    def read(self, instance_id: str) -> Optional[Dict[str, Any]]:
        ...

    def write(self, instance_id: str, record: Dict[str, Any]) -> None:
        ...

    def delete(self, instance_id: str) -> None:
        ...
