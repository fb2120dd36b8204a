"""Stats acquisition run: load snapshot, authenticate, fetch, merge, write."""

from collections.abc import Callable
from pathlib import Path

import structlog

from ..models import AppConfig
from .auth import HaloAuthenticationService, XboxAuthenticationService
from .errors import ClearanceUnavailableError, FetchError, SnapshotWriteError, handle_error
from .halo_client import HaloInfiniteClient
from .snapshot_merge import SnapshotMerger
from .snapshot_store import SnapshotStore

log = structlog.stdlib.get_logger()

HaloClientFactory = Callable[[str, str], HaloInfiniteClient]


class StatsAcquisitionService:
    """Drives one acquisition run against an output folder.

    Every collaborator is passed in, so tests can substitute fakes for the
    network-facing ones.
    """

    def __init__(
        self,
        store: SnapshotStore,
        merger: SnapshotMerger,
        xbox_auth: XboxAuthenticationService,
        halo_auth: HaloAuthenticationService,
        client_factory: HaloClientFactory,
        config: AppConfig | None = None,
    ) -> None:
        """Initialize the acquisition service.

        Args:
            store: Snapshot store used for the load and write phases
            merger: Merge engine folding fetched records into the tree
            xbox_auth: Xbox Live user and XSTS ticket requests
            halo_auth: Spartan token requests
            client_factory: Builds a Halo client from a Spartan token and xuid
            config: Release and sandbox used for the clearance request
        """
        self.store = store
        self.merger = merger
        self.xbox_auth = xbox_auth
        self.halo_auth = halo_auth
        self.client_factory = client_factory
        self.config = config or AppConfig()

    async def acquire(self, auth_token: str, build_id: str, project_id: str, out_folder: Path) -> bool:
        """Acquire project stats and fold them into the snapshot at ``out_folder``.

        Returns:
            True if the snapshot was written, False if the fetch returned no
            data or the write failed

        Raises:
            AuthenticationError: If any stage of the authentication chain fails
        """
        log.info("Starting stats acquisition", project_id=project_id, build_id=build_id, out=str(out_folder))

        assets = self.store.load_or_empty(out_folder)

        client = await self._authenticate(auth_token)
        await self._apply_clearance(client, build_id)

        project = await client.get_project(project_id)
        if project is None:
            handle_error(
                FetchError("No stats were returned for the project", project_id=project_id),
                operation="fetch_project",
                component="stats_acquisition",
            )
            return False

        assets = self.merger.merge(assets, project)

        try:
            self.store.write(assets, out_folder)
        except SnapshotWriteError as e:
            handle_error(e, operation="write_snapshot", component="stats_acquisition", context={"path": e.path})
            return False

        log.info("Stats acquisition complete", assets=len(assets))
        return True

    async def _authenticate(self, auth_token: str) -> HaloInfiniteClient:
        ticket = await self.xbox_auth.request_user_token(auth_token)
        halo_ticket = await self.xbox_auth.request_xsts_token(ticket.token)
        extended_ticket = await self.xbox_auth.request_xsts_token(ticket.token, halo=False)

        xbl_token = self.xbox_auth.get_xbox_live_v3_token(halo_ticket.user_hash, halo_ticket.token)
        log.debug("Xbox Live token prepared", length=len(xbl_token))

        spartan_token = await self.halo_auth.get_spartan_token(halo_ticket.token)
        return self.client_factory(spartan_token.token, extended_ticket.xuid or "")

    async def _apply_clearance(self, client: HaloInfiniteClient, build_id: str) -> None:
        try:
            clearance = await client.get_clearance(self.config.release, self.config.sandbox, build_id)
        except ClearanceUnavailableError as e:
            log.warning("Could not obtain the clearance, continuing without it", error=e.technical_details)
            return

        client.clearance_token = clearance.flight_configuration_id
        log.info("Clearance set on the client", clearance=clearance.flight_configuration_id)
