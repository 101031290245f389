"""Access key value object."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import ServerError


def _count(value: Any, what: str) -> int:
    """Validate a byte count reported by the server."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ServerError(f"Invalid {what}: {value!r}")
    return value


def wire_id(value: Any) -> str:
    """Validate a key id reported by the server and return it as text."""
    if isinstance(value, bool) or not isinstance(value, (str, int)) or value == '':
        raise ServerError(f"Access key entry has an invalid id: {value!r}")
    return str(value)


@dataclass(frozen=True)
class KeyRecord:
    """One access key on the management server plus its usage.
    
    ``secret``, ``port``, ``cipher`` and ``access_uri`` are passed through
    exactly as the server sent them.
    
    Attributes:
        id: Server-assigned identifier, never changes
        name: Human readable label, may be empty
        secret: Credential used by the key
        port: Port the key listens on
        cipher: Encryption method of the key
        access_uri: Ready-to-use connection string
        bytes_used: Cumulative transfer, 0 when the server has no metrics for the key
        data_limit_bytes: Transfer cap, None means unlimited
    """
    
    id: str
    name: str
    secret: str
    port: Any
    cipher: str
    access_uri: str
    bytes_used: int = 0
    data_limit_bytes: Optional[int] = None
    
    def __post_init__(self):
        _count(self.bytes_used, 'bytes_used')
        if self.data_limit_bytes is not None:
            _count(self.data_limit_bytes, 'data_limit_bytes')
    
    @classmethod
    def from_wire(cls, entry: Any, bytes_used: int = 0, with_limit: bool = True) -> 'KeyRecord':
        """Build a record from a key entry of the management API.
        
        Args:
            entry: Key object as returned by the server
            bytes_used: Transfer count looked up in the metrics response
            with_limit: Whether to read the entry's ``dataLimit`` field
        
        Returns:
            KeyRecord for the entry
        
        Raises:
            ServerError: If the entry lacks a required field or has an invalid id
        """
        if not isinstance(entry, dict):
            raise ServerError("Access key entry is not an object", entry)
        
        missing = [f for f in ('id', 'password', 'port', 'method', 'accessUrl') if f not in entry]
        if missing:
            raise ServerError(f"Access key entry missing fields: {', '.join(missing)}", entry)
        
        data_limit = None
        if with_limit and entry.get('dataLimit') is not None:
            limit = entry['dataLimit']
            if not isinstance(limit, dict) or 'bytes' not in limit:
                raise ServerError("Malformed dataLimit on access key", entry)
            data_limit = _count(limit['bytes'], 'dataLimit.bytes')
        
        return cls(
            id=wire_id(entry['id']),
            name=entry.get('name') or '',
            secret=entry['password'],
            port=entry['port'],
            cipher=entry['method'],
            access_uri=entry['accessUrl'],
            bytes_used=_count(bytes_used, 'transfer count'),
            data_limit_bytes=data_limit,
        )
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert record to a plain dictionary for output."""
        return asdict(self)
