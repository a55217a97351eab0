"""Synchronizer mirroring a CAPIProvider into a Cluster API Operator provider.

Direction of updates:
  - CAPIProvider spec -> provider spec
  - CAPIProvider status <- provider status and conditions

On top of mirroring, the synchronizer derives the CAPIProvider phase and
periodically nudges the operator:

  - At most once per rollout interval the applied spec hash annotation is
    cleared, which makes the operator redeploy the provider.
  - At most once per version check interval an unpinned provider has its
    version reset, which makes the operator install the latest release.
"""

import asyncio
import logging

from provider_sync.client import ResourceClient
from provider_sync.config import SyncConfig
from provider_sync.exceptions import ObjectNotFoundError, UnknownProviderError
from provider_sync.manifest import (
    APPLIED_SPEC_HASH_ANNOTATION,
    CHECK_LATEST_VERSION_TIME,
    LAST_APPLIED_CONFIGURATION_TIME,
    PREFLIGHT_CHECK_CONDITION,
    PROVIDER_INSTALLED_CONDITION,
    CAPIProvider,
    Phase,
    Provider,
)
from provider_sync.registry import instantiate

from .synchronizer import DefaultSynchronizer

__all__ = [
    "ProviderSync",
]

_LOGGER = logging.getLogger(__name__)

ROLLOUT_REASON = "Requesting infrastructure rollout"
LATEST_VERSION_REASON = "Requesting latest version rollout"


class ProviderSync(DefaultSynchronizer[Provider]):
    """Mirror of a CAPIProvider as an operator provider."""

    def __init__(
        self,
        client: ResourceClient,
        source: CAPIProvider,
        config: SyncConfig | None = None,
    ) -> None:
        """Initialize ProviderSync.

        Raises:
            UnknownProviderError: If no provider kind matches the source type.
        """
        if (destination := instantiate(source)) is None:
            raise UnknownProviderError(str(source.resource_id), source.spec.type)
        super().__init__(client, source, destination, config)

    async def sync(self) -> None:
        """Mirror the source and destination, then refresh the latest version."""
        self.sync_objects()
        await self._update_latest_version()

    def sync_objects(self) -> None:
        """Mirror spec down and status up, then derive phase and rollout."""
        self.destination.spec = self.source.spec.install_spec()

        old_conditions = self.source.status.conditions.deep_copy()
        new_conditions = self.destination.status.conditions.deep_copy()
        self.source.set_status(self.destination.status)
        self.source.status.conditions = old_conditions

        for condition in new_conditions:
            self.source.status.conditions.set(condition, self._config.clock)

        self._sync_phase()
        self._rollout_infrastructure()

    def _sync_phase(self) -> None:
        conditions = self.source.status.conditions
        if conditions.is_true(PROVIDER_INSTALLED_CONDITION):
            phase = Phase.READY
        elif conditions.is_false(PREFLIGHT_CHECK_CONDITION):
            phase = Phase.FAILED
        else:
            phase = Phase.PROVISIONING
        if phase != self.source.status.phase:
            _LOGGER.info(
                "%s phase %s -> %s",
                self.source.resource_id,
                self.source.status.phase,
                phase,
            )
        self.source.status.phase = phase

    def _rollout_infrastructure(self) -> None:
        clock = self._config.clock
        conditions = self.source.status.conditions
        last_applied = conditions.get(LAST_APPLIED_CONFIGURATION_TIME)
        if (
            last_applied is not None
            and last_applied.last_transition_time is not None
            and last_applied.last_transition_time + self._config.rollout_interval
            > clock()
        ):
            _LOGGER.debug(
                "Skipping rollout of %s, last applied at %s",
                self.destination.resource_id,
                last_applied.last_transition_time,
            )
            return

        conditions.mark_unknown(
            LAST_APPLIED_CONFIGURATION_TIME, ROLLOUT_REASON, clock=clock
        )

        _LOGGER.info("Requesting rollout of %s", self.destination.resource_id)
        metadata = self.destination.metadata
        if metadata.annotations is None:
            metadata.annotations = {}
        metadata.annotations[APPLIED_SPEC_HASH_ANNOTATION] = ""

        conditions.mark_true(LAST_APPLIED_CONFIGURATION_TIME, clock=clock)

    async def _update_latest_version(self) -> None:
        # User specified versions are never replaced
        if self.source.spec.version:
            return

        clock = self._config.clock
        conditions = self.source.status.conditions
        last_check = conditions.get(CHECK_LATEST_VERSION_TIME)
        if (
            conditions.is_true(CHECK_LATEST_VERSION_TIME)
            and last_check is not None
            and last_check.last_transition_time is not None
            and last_check.last_transition_time + self._config.version_check_interval
            > clock()
        ):
            return

        patch_base = self.destination.deep_copy()
        self.destination.spec.version = ""

        # Marked before patching, a crash before the patch lands leaves the
        # check recorded until the next interval. Passing through Unknown
        # restarts the interval when the check was already True.
        conditions.mark_unknown(
            CHECK_LATEST_VERSION_TIME, LATEST_VERSION_REASON, clock=clock
        )
        conditions.mark_true(CHECK_LATEST_VERSION_TIME, clock=clock)

        _LOGGER.info("Requesting latest version of %s", self.destination.resource_id)
        try:
            await self._client.patch(self.destination, patch_base)
        except ObjectNotFoundError as err:
            conditions.mark_unknown(
                CHECK_LATEST_VERSION_TIME, LATEST_VERSION_REASON, clock=clock
            )
            _LOGGER.warning(
                "Unable to request latest version of %s: %s",
                self.destination.resource_id,
                err,
            )
        except (Exception, asyncio.CancelledError):
            conditions.mark_unknown(
                CHECK_LATEST_VERSION_TIME, LATEST_VERSION_REASON, clock=clock
            )
            raise
