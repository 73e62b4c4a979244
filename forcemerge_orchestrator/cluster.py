"""
Cluster-wide eligibility for automatic force merges.

Auto force merge is a tiering optimization: it only pays off when cold data
can be offloaded to remote storage and warm-tier nodes exist to serve it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (TYPE_CHECKING, Any, Callable, FrozenSet, Iterable, Mapping,
                    Optional, Protocol, runtime_checkable)

from .validation import DenialReason, ValidationOutcome

if TYPE_CHECKING:
    from .config import ClusterSettings
    from .observability import ObservabilityManager

REMOTE_STORE_ENABLED_SETTING = "cluster.remote_store.enabled"
WARM_ROLE = "warm"


@dataclass(frozen=True)
class ClusterEligibility:
    """Cluster flags read fresh at the start of each cycle."""

    remote_storage_enabled: bool
    has_warm_node: bool


@dataclass(frozen=True)
class DiscoveryNode:
    """A cluster member as seen in the current topology."""

    node_id: str
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_warm_node(self) -> bool:
        return WARM_ROLE in self.roles


@runtime_checkable
class ClusterConfigProvider(Protocol):
    def is_remote_storage_enabled(self) -> bool:
        ...

    def has_warm_node(self) -> bool:
        ...


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on", "enabled"}
    return bool(value)


class SettingsClusterConfigProvider:
    """
    Reads cluster flags from a settings mapping and a node supplier.

    Both are re-read on every call so that a setting flipped at runtime, or
    a warm node joining, is picked up by the next cycle.
    """

    def __init__(
        self,
        settings_supplier: Callable[[], Mapping[str, Any]],
        nodes_supplier: Callable[[], Iterable[DiscoveryNode]],
    ):
        self._settings_supplier = settings_supplier
        self._nodes_supplier = nodes_supplier

    @classmethod
    def from_settings(cls, settings: "ClusterSettings") -> "SettingsClusterConfigProvider":
        """Static view of the cluster described by the configuration file."""
        local = DiscoveryNode(settings.node_id or "local", frozenset(settings.node_roles))
        peers = [
            DiscoveryNode(f"peer-{i}", frozenset(roles))
            for i, roles in enumerate(settings.peer_roles)
        ]
        return cls(
            settings_supplier=lambda: {REMOTE_STORE_ENABLED_SETTING: settings.remote_store_enabled},
            nodes_supplier=lambda: [local, *peers],
        )

    def is_remote_storage_enabled(self) -> bool:
        return _as_bool(self._settings_supplier().get(REMOTE_STORE_ENABLED_SETTING), False)

    def has_warm_node(self) -> bool:
        return any(node.is_warm_node for node in self._nodes_supplier())


class ClusterEligibilityGate:
    """Allows auto force merge only on tiered clusters."""

    def __init__(
        self,
        provider: ClusterConfigProvider,
        observer: Optional["ObservabilityManager"] = None,
    ):
        self.provider = provider
        self.observer = observer

    def read(self) -> ClusterEligibility:
        return ClusterEligibility(
            remote_storage_enabled=self.provider.is_remote_storage_enabled(),
            has_warm_node=self.provider.has_warm_node(),
        )

    def evaluate(self, eligibility: ClusterEligibility) -> ValidationOutcome:
        if not eligibility.remote_storage_enabled:
            outcome = ValidationOutcome.deny(
                DenialReason.REMOTE_STORAGE_DISABLED, "Remote storage is not enabled"
            )
        elif not eligibility.has_warm_node:
            outcome = ValidationOutcome.deny(
                DenialReason.NO_WARM_NODE, "No warm node in the cluster"
            )
        else:
            return ValidationOutcome.allow()

        if self.observer:
            self.observer.record_denial(
                outcome,
                remote_storage_enabled=eligibility.remote_storage_enabled,
                has_warm_node=eligibility.has_warm_node,
            )
        return outcome

    def check(self) -> ValidationOutcome:
        """Evaluate freshly read cluster flags."""
        return self.evaluate(self.read())
