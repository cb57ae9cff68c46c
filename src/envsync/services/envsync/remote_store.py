"""Remote store adapter and reader.

The adapter wraps a transport (the vercel CLI or the REST API) and turns
transport exceptions into plain results, so nothing past this module has to
handle transport errors:

- list_names / fetch_all return None on failure
- add returns an AddOutcome distinguishing an existing key from a failure
- remove returns False on failure

``RemoteStore.read`` implements the degrading read: full fetch first, then
names-only listing with every value opaque, then an empty snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

import structlog

from envsync.integrations.vercel.exceptions import VercelEnvExistsError, VercelError
from envsync.services.envsync.models import OPAQUE, Environment, Known, ValueState

logger = structlog.get_logger()


class RemoteTransport(Protocol):
    """Operations a remote backend must provide. Failures raise VercelError."""

    def get_version(self) -> str: ...

    def pull_env(self, environment: str) -> dict[str, str]: ...

    def list_env_names(self, environment: str) -> list[str]: ...

    def add_env(self, key: str, environment: str, value: str) -> None: ...

    def remove_env(self, key: str, environment: str) -> None: ...


class AddOutcome(StrEnum):
    """Result of a remote add."""

    ADDED = "added"
    EXISTS = "exists"
    FAILED = "failed"


class RemoteReadStatus(StrEnum):
    """How much of the remote store a read could see."""

    FULL = "full"
    """All names and values were fetched."""

    NAMES_ONLY = "names_only"
    """Only names were listed; every value is opaque."""

    UNAVAILABLE = "unavailable"
    """Nothing could be read; the remote side is treated as empty."""


@dataclass
class RemoteSnapshot:
    """Result of reading one environment from the remote store."""

    environment: Environment
    values: dict[str, ValueState] = field(default_factory=dict)
    status: RemoteReadStatus = RemoteReadStatus.FULL
    warning: str | None = None

    @property
    def degraded(self) -> bool:
        """True when values could not be fetched."""
        return self.status is not RemoteReadStatus.FULL


DEFAULT_REMOTE_NAMESPACES: dict[Environment, str] = {env: env.value for env in Environment}


class RemoteStore:
    """Environment-scoped view of a remote transport.

    Args:
        transport: Backend performing the actual calls.
        namespaces: Remote environment name per Environment.
    """

    def __init__(
        self,
        transport: RemoteTransport,
        namespaces: Mapping[Environment, str] | None = None,
    ) -> None:
        self._transport = transport
        self._namespaces = dict(namespaces or DEFAULT_REMOTE_NAMESPACES)

    def namespace(self, environment: Environment) -> str:
        """Remote environment name for environment."""
        return self._namespaces.get(environment, environment.value)

    def version(self) -> str | None:
        """Backend version string, or None if the backend is unusable."""
        try:
            return self._transport.get_version()
        except VercelError as e:
            logger.warning("remote_version_check_failed", error=str(e))
            return None

    def fetch_all(self, environment: Environment) -> dict[str, str] | None:
        """Fetch all names and values, or None on failure."""
        try:
            return self._transport.pull_env(self.namespace(environment))
        except VercelError as e:
            logger.warning("remote_fetch_failed", environment=str(environment), error=str(e))
            return None

    def list_names(self, environment: Environment) -> list[str] | None:
        """List names only, or None on failure."""
        try:
            return self._transport.list_env_names(self.namespace(environment))
        except VercelError as e:
            logger.warning("remote_list_failed", environment=str(environment), error=str(e))
            return None

    def add(self, key: str, environment: Environment, value: str) -> AddOutcome:
        """Create key in environment."""
        log = logger.bind(environment=str(environment), key=key)
        try:
            self._transport.add_env(key, self.namespace(environment), value)
        except VercelEnvExistsError:
            log.info("remote_add_collision")
            return AddOutcome.EXISTS
        except VercelError as e:
            log.error("remote_add_failed", error=str(e))
            return AddOutcome.FAILED
        return AddOutcome.ADDED

    def remove(self, key: str, environment: Environment) -> bool:
        """Delete key from environment. Returns False on failure."""
        try:
            self._transport.remove_env(key, self.namespace(environment))
        except VercelError as e:
            logger.error(
                "remote_remove_failed", environment=str(environment), key=key, error=str(e)
            )
            return False
        return True

    def read(self, environment: Environment) -> RemoteSnapshot:
        """Read environment, degrading instead of failing.

        Tries a full fetch, then a names-only listing with opaque values.
        If both fail the snapshot is empty and carries a warning.
        """
        values = self.fetch_all(environment)
        if values is not None:
            return RemoteSnapshot(
                environment=environment,
                values={key: Known(value) for key, value in values.items()},
            )

        names = self.list_names(environment)
        if names is not None:
            logger.warning(
                "remote_read_degraded", environment=str(environment), count=len(names)
            )
            return RemoteSnapshot(
                environment=environment,
                values=dict.fromkeys(names, OPAQUE),
                status=RemoteReadStatus.NAMES_ONLY,
                warning=(
                    f"Could not fetch values for {environment}; "
                    f"found {len(names)} names, values treated as unreadable"
                ),
            )

        logger.warning("remote_read_unavailable", environment=str(environment))
        return RemoteSnapshot(
            environment=environment,
            status=RemoteReadStatus.UNAVAILABLE,
            warning=f"Could not read any variables from remote {environment}",
        )
