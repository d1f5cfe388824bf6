"""Service registry - the static routing and authentication table."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from core.exceptions import UnknownService


class CredentialLocation(Enum):
    """Where an upstream expects its credential."""

    HEADER = "header"
    QUERY = "query"


@dataclass(frozen=True)
class ServiceEntry:
    """Routing and credential data for one upstream service."""

    name: str
    base_url: str
    credential_location: CredentialLocation
    credential_key: str
    credential_value: str = field(repr=False)
    extra_headers: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if not self.credential_value:
            raise ValueError(f"Service {self.name!r} has no credential")


class ServiceRegistry:
    """Read-only mapping of service name to ServiceEntry.

    Built once at startup; insertion order is preserved for listing.
    """

    def __init__(self, entries: Iterable[ServiceEntry] = ()) -> None:
        table: dict[str, ServiceEntry] = {}
        for entry in entries:
            if entry.name in table:
                raise ValueError(f"Duplicate service: {entry.name}")
            table[entry.name] = entry
        self._entries = MappingProxyType(table)

    def get(self, name: str) -> ServiceEntry | None:
        return self._entries.get(name)

    def lookup(self, name: str) -> ServiceEntry:
        """Return the entry for ``name`` or raise UnknownService."""
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownService(name, self.list_services())
        return entry

    def list_services(self) -> list[str]:
        return list(self._entries)

    def secrets(self) -> list[str]:
        """All credential values, for redaction."""
        return [entry.credential_value for entry in self._entries.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[ServiceEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
