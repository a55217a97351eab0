"""Command line tool for reconciling CAPIProvider resources from local files."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from datetime import timedelta
import logging
import pathlib
import sys
from typing import cast

import yaml

from provider_sync.client import InMemoryClient
from provider_sync.config import (
    DEFAULT_ROLLOUT_INTERVAL,
    DEFAULT_VERSION_CHECK_INTERVAL,
    SyncConfig,
)
from provider_sync.manifest import read_manifests
from provider_sync.sync import ProviderController


_LOGGER = logging.getLogger(__name__)


class ReconcileAction:
    """Provider-sync reconcile action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "reconcile",
                help="Reconcile CAPIProvider resources read from local files",
                description=(
                    "Load CAPIProvider and operator provider resources from local "
                    "YAML files, run one reconciliation pass for every CAPIProvider "
                    "and print the resulting resources."
                ),
            ),
        )
        args.add_argument(
            "--path",
            help="A YAML file or a directory of YAML files with resources",
            type=pathlib.Path,
            required=True,
        )
        args.add_argument(
            "--rollout-interval",
            help="Minimum seconds between forced rollouts of a provider",
            type=float,
            default=DEFAULT_ROLLOUT_INTERVAL.total_seconds(),
        )
        args.add_argument(
            "--version-check-interval",
            help="Minimum seconds between latest version refreshes of a provider",
            type=float,
            default=DEFAULT_VERSION_CHECK_INTERVAL.total_seconds(),
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: pathlib.Path,
        rollout_interval: float,
        version_check_interval: float,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        config = SyncConfig(
            rollout_interval=timedelta(seconds=rollout_interval),
            version_check_interval=timedelta(seconds=version_check_interval),
        )
        client = InMemoryClient()
        for obj in await read_manifests(path):
            await client.create(obj)
        _LOGGER.debug("Loaded %d resources from %s", len(client.list_docs()), path)

        controller = ProviderController(client, config)
        await controller.reconcile_all()

        yaml.dump_all(client.list_docs(), sys.stdout, sort_keys=False)
