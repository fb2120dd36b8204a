"""Main entry point for the statlink command-line tool.

This module provides the application entry point with:
- Command-line argument parsing with one sub-command per operation
- Application initialization and dependency injection
- Textual success/failure reporting and exit codes
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import httpx
import structlog

from statlink import __version__
from statlink.models import AppConfig
from statlink.services.auth import HaloAuthenticationService, XboxAuthenticationService
from statlink.services.config import ConfigurationService
from statlink.services.errors import AppError, ConfigurationError, get_error_service
from statlink.services.halo_client import HaloInfiniteClient
from statlink.services.http_client import HttpClientService
from statlink.services.logging import setup_logging
from statlink.services.snapshot_merge import SnapshotMerger
from statlink.services.snapshot_store import SnapshotStore
from statlink.services.stats_acquisition import StatsAcquisitionService


log = structlog.stdlib.get_logger()


class ApplicationContext:
    """Container for application services.

    Services are built lazily on first use and shared for the whole run, so
    one HTTP client backs the authentication chain and the Halo client.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path: Path | None = config_path

        self._config_service: ConfigurationService | None = None
        self._config: AppConfig | None = None
        self._http_client: HttpClientService | None = None
        self._xbox_auth: XboxAuthenticationService | None = None
        self._halo_auth: HaloAuthenticationService | None = None
        self._stats_acquisition: StatsAcquisitionService | None = None

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = self.config_service.load_config()
        return self._config

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService(timeout=self.config.request_timeout)
        return self._http_client

    @property
    def xbox_auth(self) -> XboxAuthenticationService:
        if self._xbox_auth is None:
            self._xbox_auth = XboxAuthenticationService(self.http_client)
        return self._xbox_auth

    @property
    def halo_auth(self) -> HaloAuthenticationService:
        if self._halo_auth is None:
            self._halo_auth = HaloAuthenticationService(self.http_client)
        return self._halo_auth

    def create_halo_client(self, spartan_token: str, xuid: str) -> HaloInfiniteClient:
        return HaloInfiniteClient(self.http_client, spartan_token, xuid)

    @property
    def stats_acquisition(self) -> StatsAcquisitionService:
        if self._stats_acquisition is None:
            self._stats_acquisition = StatsAcquisitionService(
                store=SnapshotStore(),
                merger=SnapshotMerger(),
                xbox_auth=self.xbox_auth,
                halo_auth=self.halo_auth,
                client_factory=self.create_halo_client,
                config=self.config,
            )
        return self._stats_acquisition

    async def cleanup(self) -> None:
        """Close network connections."""
        if self._http_client is not None:
            await self._http_client.close()


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="statlink",
        description="Collect Halo Infinite map and game variant stats into a versioned local dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  statlink geturl --client-id ID --redirect-url https://localhost
  statlink start --code CODE --client-id ID --client-secret SECRET --redirect-url https://localhost
  statlink getstats --auth-token TOKEN --build-id BUILD --project-id PROJECT --out ./data
        """
    )

    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/statlink/config.json)"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: from configuration, INFO)"
    )
    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: console only)"
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    def client_options(command: argparse.ArgumentParser, secret: bool = True) -> None:
        _ = command.add_argument("--client-id", default="", help="Registered client ID.")
        if secret:
            _ = command.add_argument("--client-secret", default="", help="Registered client secret.")
        _ = command.add_argument("--redirect-url", default="", help="Redirect URL for the registered client.")

    start = commands.add_parser("start", help="Authenticate the user with the Xbox and Halo services.")
    _ = start.add_argument("--code", required=True, help="Initial authorization code to perform the token exchange.")
    client_options(start)

    geturl = commands.add_parser(
        "geturl",
        help="Get the authentication URL which the user should go to for auth code production.",
    )
    client_options(geturl, secret=False)

    refresh = commands.add_parser("refresh", help="Refreshes the currently assigned token to a new one.")
    _ = refresh.add_argument("--refresh-token", required=True, help="Refresh token used to obtain a new token.")
    client_options(refresh)

    getstats = commands.add_parser("getstats", help="Get stats about currently available maps and game modes.")
    _ = getstats.add_argument("--auth-token", required=True, help="Authentication token to get the data.")
    _ = getstats.add_argument("--build-id", default="", help="Build for which data is being referenced.")
    _ = getstats.add_argument(
        "--project-id",
        required=True,
        help="Unique identifier of the project for which stats need to be obtained.",
    )
    _ = getstats.add_argument("--out", type=Path, required=True, help="Output folder used for final results.")

    return parser


def resolve_client(args: argparse.Namespace, config: AppConfig) -> tuple[str, str, str]:
    """Return client id, secret and redirect URL, preferring command-line values.

    Raises:
        ConfigurationError: If the client id or redirect URL is missing
    """
    client_id = args.client_id or config.client_id
    client_secret = getattr(args, "client_secret", "") or config.client_secret
    redirect_url = args.redirect_url or config.redirect_url

    if not client_id:
        raise ConfigurationError("A client id is required", setting="client_id", expected="--client-id or config file")
    if not redirect_url:
        raise ConfigurationError(
            "A redirect URL is required", setting="redirect_url", expected="--redirect-url or config file"
        )
    return client_id, client_secret, redirect_url


async def run_command(args: argparse.Namespace, context: ApplicationContext) -> int:
    """Run the selected sub-command.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        if args.command == "geturl":
            client_id, _, redirect_url = resolve_client(args, context.config)
            url = context.xbox_auth.generate_auth_url(client_id, redirect_url)
            print("You should be requesting the code from the following URL, if you don't have it yet:")
            print(url)
            return 0

        if args.command in ("start", "refresh"):
            client_id, client_secret, redirect_url = resolve_client(args, context.config)
            if args.command == "start":
                token = await context.xbox_auth.request_oauth_token(client_id, args.code, redirect_url, client_secret)
            else:
                token = await context.xbox_auth.refresh_oauth_token(
                    client_id, args.refresh_token, redirect_url, client_secret
                )
            print(json.dumps(token.to_dict(), indent=2, ensure_ascii=False))
            return 0

        if args.command == "getstats":
            ok = await context.stats_acquisition.acquire(args.auth_token, args.build_id, args.project_id, args.out)
            if ok:
                print(f"Wrote the stats to {args.out}")
                return 0
            print(f"Could not write asset stats to {args.out}.")
            return 1

    except (AppError, httpx.HTTPError, OSError, ValueError) as e:
        error_service = get_error_service()
        friendly = error_service.handle_error(e, operation=args.command, component="cli")
        print(error_service.create_user_message(friendly), file=sys.stderr)
        return 1
    finally:
        await context.cleanup()

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)

    log_level = args.log_level or "INFO"
    _ = setup_logging(log_level=log_level, log_dir=args.log_dir)

    context = ApplicationContext(config_path=args.config)
    if args.log_level is None and context.config.log_level != log_level:
        log_level = context.config.log_level
        _ = setup_logging(log_level=log_level, log_dir=args.log_dir)

    log.debug("Starting statlink", version=__version__, command=args.command, log_level=log_level)

    try:
        exit_code = asyncio.run(run_command(args, context))

    except KeyboardInterrupt:
        log.info("Interrupted by user")
        exit_code = 130

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        exit_code = 1

    log.debug("Exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
