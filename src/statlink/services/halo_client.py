"""Client for the Halo Infinite settings and UGC discovery services."""

import httpx
import structlog

from ..models import Clearance, ProjectStats
from .errors import ClearanceUnavailableError
from .http_client import HttpClientService

log = structlog.stdlib.get_logger()

SETTINGS_BASE_URL = "https://settings.svc.halowaypoint.com"
DISCOVERY_BASE_URL = "https://discovery-infiniteugc.svc.halowaypoint.com"


class HaloInfiniteClient:
    """Authenticated calls to the Halo Infinite services for one player."""

    def __init__(
        self,
        http_client: HttpClientService,
        spartan_token: str,
        xuid: str,
        clearance_token: str = "",
    ) -> None:
        self.http_client = http_client
        self.spartan_token = spartan_token
        self.xuid = xuid
        self.clearance_token = clearance_token

    def _headers(self) -> dict[str, str]:
        headers = {
            "x-343-authorization-spartan": self.spartan_token,
            "Accept": "application/json",
        }
        if self.clearance_token:
            headers["343-clearance"] = self.clearance_token
        return headers

    async def get_clearance(self, release: str, sandbox: str, build_id: str) -> Clearance:
        """Request the active flight configuration for the player.

        Raises:
            ClearanceUnavailableError: If the service returns no flight id
        """
        url = (
            f"{SETTINGS_BASE_URL}/oban/flight-configurations/titles/hi"
            f"/audiences/{release}/players/xuid({self.xuid})/active"
        )
        try:
            response = await self.http_client.get(
                url,
                headers=self._headers(),
                params={"sandbox": sandbox, "build": build_id},
            )
            data = response.json()
            clearance = Clearance.from_api(data)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            raise ClearanceUnavailableError(
                "Could not obtain the clearance",
                build_id=build_id,
                original_error=e,
            ) from e

        log.info("Clearance obtained", flight_configuration_id=clearance.flight_configuration_id)
        return clearance

    async def get_project(self, project_id: str) -> ProjectStats | None:
        """Fetch the latest version of a UGC project with its asset stats.

        Returns:
            The project's map and game-variant links, or None when the
            service returned no usable data
        """
        url = f"{DISCOVERY_BASE_URL}/hi/projects/{project_id}"
        try:
            response = await self.http_client.get(url, headers=self._headers())
            data = response.json() if response.content else None
        except (httpx.HTTPError, ValueError) as e:
            log.error("Failed to fetch project", project_id=project_id, error=str(e))
            return None

        if not isinstance(data, dict):
            log.error("Project response carried no data", project_id=project_id)
            return None

        try:
            project = ProjectStats.from_api(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            log.error("Malformed project response", project_id=project_id, error=str(e))
            return None

        log.info(
            "Project fetched",
            project_id=project_id,
            map_links=len(project.map_links),
            game_variant_links=len(project.game_variant_links),
        )
        return project
