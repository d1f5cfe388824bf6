"""Header construction for upstream requests."""

from core.registry import CredentialLocation, ServiceEntry


class HeaderBuilder:
    """Build upstream headers for a service entry."""

    def build(self, entry: ServiceEntry) -> dict[str, str]:
        """JSON content type, static service headers, and the credential when header-borne."""
        upstream: dict[str, str] = {"Content-Type": "application/json"}
        upstream.update(entry.extra_headers)
        if entry.credential_location is CredentialLocation.HEADER:
            upstream[entry.credential_key] = self._credential_value(entry)
        return upstream

    @staticmethod
    def _credential_value(entry: ServiceEntry) -> str:
        if entry.credential_key.lower() == "authorization":
            return f"Bearer {entry.credential_value}"
        return entry.credential_value
