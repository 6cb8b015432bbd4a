from typing import Dict, Optional

from .board import DRAW
from .errors import InvalidName, NameTaken


class IdentityRegistry:
    """Live mapping of connection id -> display name.

    A name may be held by one live connection at a time. Once that
    connection is released the name is free again, so a reconnecting
    player can register under the same name.
    """

    def __init__(self, min_length: int = 2, max_length: int = 32):
        self.min_length = min_length
        self.max_length = max_length
        self._names: Dict[str, str] = {}
        self._connections: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._names)

    def validate(self, raw_name) -> str:
        name = (raw_name or '').strip() if isinstance(raw_name, str) else ''
        if len(name) < self.min_length:
            raise InvalidName(f'Name must be at least {self.min_length} characters')
        if len(name) > self.max_length:
            raise InvalidName(f'Name must be at most {self.max_length} characters')
        if name.lower() == DRAW:
            raise InvalidName('That name is reserved')
        return name

    def check_available(self, connection_id: str, name: str) -> None:
        holder = self._connections.get(name)
        if holder is not None and holder != connection_id:
            raise NameTaken()

    def register(self, connection_id: str, raw_name) -> str:
        name = self.validate(raw_name)
        self.check_available(connection_id, name)
        previous = self._names.get(connection_id)
        if previous is not None and previous != name:
            self._connections.pop(previous, None)
        self._names[connection_id] = name
        self._connections[name] = connection_id
        return name

    def resolve(self, connection_id: str) -> Optional[str]:
        return self._names.get(connection_id)

    def release(self, connection_id: str) -> Optional[str]:
        name = self._names.pop(connection_id, None)
        if name is not None and self._connections.get(name) == connection_id:
            del self._connections[name]
        return name

    def find_connection(self, name: str) -> Optional[str]:
        return self._connections.get(name)
