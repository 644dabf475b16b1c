"""
Multi-store registry and mirrored fan-out.

A MultiStore holds one primary store, named secondary stores and named
mirror groups. A Mirror replays one write/delete/delete_directory against
a sorted set of stores, applying the MultiStore's failure policy.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from enum import Enum

from blobmirror.core.exceptions import (
    DriverError,
    MirrorFailedOnStoreError,
    MirrorFailedOnStoresError,
    StoreConfigurationError,
    UnknownStoresError,
)
from blobmirror.drivers.base import StoragePath
from blobmirror.store import Store

logger = logging.getLogger(__name__)

PRIMARY_STORE_NAME = "primary"


class Policy(str, Enum):
    """What a mirror does when one of its stores fails."""

    # Record the failure and keep going with the remaining stores
    CONTINUE_ON_FAILURE = "continue_on_failure"
    # Raise on the first failing store; later stores are not touched
    STOP_ON_FAILURE = "stop_on_failure"


class MultiStore:
    """
    Registry of a primary store, named secondary stores and mirror groups.

    The failure policy is global to the MultiStore and applies to every
    mirror it hands out. Registry mutation is not synchronized with
    in-flight mirror operations.
    """

    def __init__(self, primary: Store):
        self.primary = primary
        self._stores: dict[str, Store] = {}
        self._mirrors: dict[str, list[str]] = {}
        self._policy = Policy.CONTINUE_ON_FAILURE

    @property
    def policy(self) -> Policy:
        return self._policy

    @property
    def store_names(self) -> list[str]:
        """Sorted names of the registered secondary stores."""
        return sorted(self._stores)

    @property
    def mirror_groups(self) -> dict[str, list[str]]:
        return {name: list(members) for name, members in self._mirrors.items()}

    def add_stores(self, stores: Mapping[str, Store]) -> "MultiStore":
        """
        Register secondary stores, replacing any with the same name.

        Raises:
            StoreConfigurationError: If a store is named "primary"; nothing
                is registered in that case
        """
        if PRIMARY_STORE_NAME in stores:
            raise StoreConfigurationError(
                message=f"'{PRIMARY_STORE_NAME}' is reserved for the primary store",
                details={"store": PRIMARY_STORE_NAME},
            )

        for name, store in stores.items():
            if name in self._stores:
                logger.debug(f"Replacing store {name}")
            self._stores[name] = store
        return self

    def set_mirrors_policy(self, policy: Policy | str) -> "MultiStore":
        """Set the failure policy used by every subsequent mirror."""
        self._policy = Policy(policy)
        return self

    def get_store(self, name: str) -> Store | None:
        return self._stores.get(name)

    def add_mirrors(self, name: str, store_names: Iterable[str]) -> "MultiStore":
        """
        Define (or redefine) a named mirror group.

        Args:
            name: Mirror group name
            store_names: Names of registered secondary stores

        Raises:
            UnknownStoresError: Listing every name that is not registered
        """
        members = list(store_names)
        unknown = [store_name for store_name in members if store_name not in self._stores]
        if unknown:
            raise UnknownStoresError(unknown)

        self._mirrors[name] = members
        return self

    def mirror_stores_from_primary(self) -> "Mirror":
        """Mirror over the primary store and every secondary store."""
        targets = {PRIMARY_STORE_NAME: self.primary}
        targets.update(self._stores)
        return Mirror(self._policy, targets)

    def mirror(self, name: str) -> "Mirror | None":
        """Mirror over the members of a named group, or None if the group is unknown."""
        members = self._mirrors.get(name)
        if members is None:
            return None

        targets = {
            store_name: store
            for store_name, store in self._stores.items()
            if store_name in members
        }
        return Mirror(self._policy, targets)

    def clone(self) -> "MultiStore":
        """Duplicate the registry, cloning every store."""
        duplicate = MultiStore(self.primary.clone())
        duplicate._stores = {name: store.clone() for name, store in self._stores.items()}
        duplicate._mirrors = self.mirror_groups
        duplicate._policy = self._policy
        return duplicate


class Mirror:
    """
    Sequential fan-out of one operation over a set of stores.

    Stores are visited in ascending name order. A Mirror is meant to be
    created for a single operation and discarded afterwards.
    """

    def __init__(self, policy: Policy, stores: Mapping[str, Store]):
        self.policy = policy
        self._targets: tuple[tuple[str, Store], ...] = tuple(sorted(stores.items()))

    @property
    def store_names(self) -> list[str]:
        return [name for name, _ in self._targets]

    async def write(self, path: StoragePath, content: bytes | bytearray | memoryview | str) -> None:
        """
        Write content to every store in the mirror.

        Raises:
            MirrorFailedOnStoresError: Under CONTINUE_ON_FAILURE, with every failure
            MirrorFailedOnStoreError: Under STOP_ON_FAILURE, with the first failure
        """
        await self._fan_out("write", path, lambda store: store.write(path, content))

    async def delete(self, path: StoragePath) -> None:
        """Delete a file from every store in the mirror."""
        await self._fan_out("delete", path, lambda store: store.delete(path))

    async def delete_directory(self, path: StoragePath) -> None:
        """Delete a directory from every store in the mirror."""
        await self._fan_out(
            "delete_directory", path, lambda store: store.delete_directory(path)
        )

    async def _fan_out(
        self,
        operation: str,
        path: StoragePath,
        call: Callable[[Store], Awaitable[None]],
    ) -> None:
        logger.info(
            f"Mirroring {operation} of {path} to {len(self._targets)} stores "
            f"({self.policy.value})"
        )
        failures: dict[str, DriverError] = {}

        for name, store in self._targets:
            logger.debug(f"Mirror {operation} on store {name}")
            try:
                await call(store)
            except DriverError as e:
                logger.warning(f"Mirror {operation} of {path} failed on store {name}: {e}")
                if self.policy is Policy.STOP_ON_FAILURE:
                    raise MirrorFailedOnStoreError(name, e) from e
                failures[name] = e

        if failures:
            raise MirrorFailedOnStoresError(failures)
