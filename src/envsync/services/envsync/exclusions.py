"""Exclusion policy for platform-managed variables."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from envsync.services.envsync.models import Environment

DEFAULT_GLOBAL_EXCLUSIONS: tuple[str, ...] = (
    "VERCEL_OIDC_TOKEN",
    "VERCEL_URL",
    "VERCEL_ENV",
    "VERCEL_REGION",
)

DEFAULT_ENVIRONMENT_EXCLUSIONS: dict[Environment, tuple[str, ...]] = {
    Environment.DEVELOPMENT: (),
    Environment.PRODUCTION: (
        "NX_DAEMON",
        "TURBO_CACHE",
        "TURBO_DOWNLOAD_LOCAL_ENABLED",
        "TURBO_REMOTE_ONLY",
        "TURBO_RUN_SUMMARY",
        "VERCEL",
        "VERCEL_TARGET_ENV",
    ),
}


@dataclass(frozen=True)
class ExclusionPolicy:
    """Keys that must never be offered pull or remove-from-remote.

    The policy is the union of a global list and a per-environment list.
    It only ever restricts pull and remote deletion; add, update and local
    removal are always allowed.

    Attributes:
        global_keys: Keys excluded in every environment.
        environment_keys: Additional keys excluded per environment.
    """

    global_keys: frozenset[str] = frozenset()
    environment_keys: Mapping[Environment, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def from_lists(
        cls,
        global_keys: Iterable[str] = (),
        environment_keys: Mapping[Environment, Iterable[str]] | None = None,
    ) -> ExclusionPolicy:
        """Build a policy from plain lists."""
        return cls(
            global_keys=frozenset(global_keys),
            environment_keys={
                Environment(env): frozenset(keys) for env, keys in (environment_keys or {}).items()
            },
        )

    @classmethod
    def default(cls) -> ExclusionPolicy:
        """Policy protecting Vercel system and build variables."""
        return cls.from_lists(DEFAULT_GLOBAL_EXCLUSIONS, DEFAULT_ENVIRONMENT_EXCLUSIONS)

    def is_excluded(self, key: str, environment: Environment) -> bool:
        """Return True if key is ineligible for pull/remove-from-remote in environment."""
        if key in self.global_keys:
            return True
        return key in self.environment_keys.get(environment, frozenset())

    def keys_for(self, environment: Environment) -> frozenset[str]:
        """All keys excluded in environment."""
        return self.global_keys | self.environment_keys.get(environment, frozenset())
