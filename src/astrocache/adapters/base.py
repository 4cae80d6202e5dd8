"""Base protocols for remote key-value stores."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class RemoteStore(Protocol):
    """Sync remote store interface.

    Implementations never raise on an unreachable backend: they switch to
    a disabled mode where reads miss and writes do nothing.
    """

    @property
    def enabled(self) -> bool:
        """Whether operations reach the backend."""
        ...

    def connect(self) -> bool:
        """Check the backend, entering disabled mode if it is unreachable."""
        ...

    def get(self, key: str) -> bytes | None:
        """Get the bytes stored under ``key``."""
        ...

    def set(self, key: str, data: bytes, ttl_ms: int) -> None:
        """Store ``data`` under ``key``, expiring after ``ttl_ms``."""
        ...

    def delete(self, key: str) -> None:
        """Delete ``key``."""
        ...

    def delete_prefix(self, prefix: str) -> None:
        """Delete every key starting with ``prefix``."""
        ...

    def clear(self) -> None:
        """Delete every key owned by this store."""
        ...

    def close(self) -> None:
        """Release the backend connection."""
        ...


@runtime_checkable
class AsyncRemoteStore(Protocol):
    """Async remote store interface."""

    @property
    def enabled(self) -> bool:
        """Whether operations reach the backend."""
        ...

    async def connect(self) -> bool:
        """Check the backend, entering disabled mode if it is unreachable."""
        ...

    async def get(self, key: str) -> bytes | None:
        """Get the bytes stored under ``key``."""
        ...

    async def set(self, key: str, data: bytes, ttl_ms: int) -> None:
        """Store ``data`` under ``key``, expiring after ``ttl_ms``."""
        ...

    async def delete(self, key: str) -> None:
        """Delete ``key``."""
        ...

    async def delete_prefix(self, prefix: str) -> None:
        """Delete every key starting with ``prefix``."""
        ...

    async def clear(self) -> None:
        """Delete every key owned by this store."""
        ...

    async def close(self) -> None:
        """Release the backend connection."""
        ...
