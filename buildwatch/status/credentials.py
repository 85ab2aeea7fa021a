"""Credential store interface for Jenkins API tokens."""

from abc import ABC, abstractmethod


def token_key(username: str) -> str:
    """Storage key for a user's API token."""
    return f"jenkinsApiToken.{username}"


class BaseCredentialStore(ABC):
    """
    Secure-at-rest token storage keyed by username.

    Backed by the host's secret store; buildwatch never persists tokens itself.
    """

    @abstractmethod
    async def get(self, username: str) -> str | None:
        """Return the stored token for `username`, or None."""
        pass

    @abstractmethod
    async def set(self, username: str, token: str) -> None:
        """Store `token` for `username`, replacing any previous token."""
        pass


class MemoryCredentialStore(BaseCredentialStore):
    """
    Process-lifetime store.

    Use for tests and for hosts that inject the token from their
    environment at startup.
    """

    def __init__(self, tokens: dict[str, str] | None = None) -> None:
        self._secrets: dict[str, str] = {}
        for username, token in (tokens or {}).items():
            if username and token:
                self._secrets[token_key(username)] = token

    async def get(self, username: str) -> str | None:
        return self._secrets.get(token_key(username))

    async def set(self, username: str, token: str) -> None:
        self._secrets[token_key(username)] = token
