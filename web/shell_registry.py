import asyncio
import logging
import time
from collections import OrderedDict

import config
from db import SessionFactory, get_db_session
from exceptions import SessionMismatchException
from services.identity import IdentityProvider, get_identity_provider
from services.shell import ViewShell

logger = logging.getLogger(__name__)


class ShellRegistry:
    """
    One mounted ViewShell per client, keyed by the X-Shell-Id header.

    All shells share the process-wide identity provider, a sign-out in one
    shell reaches every other shell of the same session.

    A signed-in shell only answers requests carrying its access token. Shells
    idle longer than WEBAPP_SHELL_IDLE_MINUTES, and the least recently used ones
    beyond WEBAPP_MAX_SHELLS, are unmounted so their bus listeners go away.
    """

    def __init__(self,
                 identity: IdentityProvider | None = None,
                 session_factory: SessionFactory = get_db_session,
                 max_shells: int | None = None,
                 idle_minutes: int | None = None):
        self.identity = identity or get_identity_provider()
        self.session_factory = session_factory
        self.max_shells = max_shells or config.WEBAPP_MAX_SHELLS
        self.idle_seconds = (idle_minutes or config.WEBAPP_SHELL_IDLE_MINUTES) * 60
        # Least recently used first
        self._shells: OrderedDict[str, ViewShell] = OrderedDict()
        self._last_seen: dict[str, float] = {}
        # Only requests for the same id wait on each other while a shell mounts
        self._mount_locks: dict[str, asyncio.Lock] = {}
        self._mount_waiters: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._shells)

    def __contains__(self, shell_id: str) -> bool:
        return shell_id in self._shells

    async def get_or_mount(self, shell_id: str, access_token: str | None = None) -> ViewShell:
        """
        Raises:
            SessionMismatchException: Shell is signed in and the token is not its own
        """
        shell = self._shells.get(shell_id)
        if shell is None:
            shell = await self._mount(shell_id, access_token)
        self._touch(shell_id, shell)
        await self._evict()

        await shell.auth.ensure_active()
        if shell.auth.is_authenticated and access_token != shell.auth.access_token:
            logger.warning(f"[Registry] Rejected request for shell {shell_id}: access token mismatch")
            raise SessionMismatchException()
        return shell

    async def drop(self, shell_id: str, access_token: str | None = None) -> None:
        shell = self._shells.get(shell_id)
        if shell is None:
            return
        if shell.auth.is_authenticated and access_token != shell.auth.access_token:
            raise SessionMismatchException()
        await self._unmount(shell_id)
        logger.info(f"[Registry] Dropped shell {shell_id}")

    async def close_all(self) -> None:
        for shell_id in list(self._shells):
            await self._unmount(shell_id)

    async def _mount(self, shell_id: str, access_token: str | None) -> ViewShell:
        mount_lock = self._mount_locks.setdefault(shell_id, asyncio.Lock())
        self._mount_waiters[shell_id] = self._mount_waiters.get(shell_id, 0) + 1
        try:
            async with mount_lock:
                shell = self._shells.get(shell_id)
                if shell is not None:
                    return shell
                shell = ViewShell(self.identity, self.session_factory)
                try:
                    await shell.mount(access_token)
                except Exception:
                    shell.auth.close()
                    raise
                self._shells[shell_id] = shell
                logger.info(f"[Registry] Mounted shell {shell_id} ({len(self._shells)} open)")
                return shell
        finally:
            self._mount_waiters[shell_id] -= 1
            if self._mount_waiters[shell_id] == 0:
                del self._mount_waiters[shell_id]
                del self._mount_locks[shell_id]

    def _touch(self, shell_id: str, shell: ViewShell) -> None:
        self._shells[shell_id] = shell
        self._shells.move_to_end(shell_id)
        self._last_seen[shell_id] = time.monotonic()

    async def _evict(self) -> None:
        deadline = time.monotonic() - self.idle_seconds
        expired = [shell_id for shell_id, seen in self._last_seen.items() if seen < deadline]
        for shell_id in expired:
            await self._unmount(shell_id)
            logger.info(f"[Registry] Evicted idle shell {shell_id}")
        while len(self._shells) > self.max_shells:
            shell_id = next(iter(self._shells))
            await self._unmount(shell_id)
            logger.info(f"[Registry] Evicted least recently used shell {shell_id}")

    async def _unmount(self, shell_id: str) -> None:
        shell = self._shells.pop(shell_id, None)
        self._last_seen.pop(shell_id, None)
        if shell is not None:
            await shell.unmount()


_registry: ShellRegistry | None = None


def get_registry() -> ShellRegistry:
    global _registry
    if _registry is None:
        _registry = ShellRegistry()
    return _registry
