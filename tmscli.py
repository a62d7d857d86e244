"""Command-line client for a translation-management service.

Usage:
    tmscli login API_KEY          - Validate and store an API key
    tmscli logout [--all]         - Forget stored API keys
    tmscli push FILE...           - Import translation files into the project
    tmscli pull OUTPUT            - Export the project's translations

Project settings are read from tmscli.ini in the working directory when present.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

import aiohttp

from config.loader import DEFAULT_CONFIG_FILE, ConfigFileNotFoundError, ConfigLoader, ConfigLoaderError
from core.client import ExportClient, ImportClient
from core.credential_resolver import CredentialResolver
from core.credential_store import CredentialStore, CredentialStoreError
from core.token_manager import AuthenticationError, TokenManager
from handlers.async_comm import AsyncCommError, AsyncHttp, HttpError
from models.config_models import VERSION
from models.credential_models import NO_PROJECT, PersonalAccessToken, ProjectApiKey, project_id_from_key
from models.request_models import MultipartFile
from utils.file_utils import FileUtils, FileUtilsError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = ["main"]

SCRIPT_NAME: Final[str] = "tmscli"
FORCE_MODES: Final[list[str]] = ["OVERRIDE", "KEEP", "NO_FORCE"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class CliError(Exception):
    """A command cannot run with the given arguments and settings."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv (list[str] | None): Arguments without the program name. Defaults to ``sys.argv[1:]``.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(prog=SCRIPT_NAME, description="Translation-management service command-line client")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--config", metavar="FILE", help=f"Project settings file (default: {DEFAULT_CONFIG_FILE})")
    parser.add_argument("--api-url", dest="api_url", metavar="URL", help="Base URL of the service API")
    parser.add_argument("--api-key", dest="api_key", metavar="KEY", help="API key to use instead of a stored one")
    parser.add_argument("--project-id", dest="project_id", metavar="ID", type=int, help="Project to work on")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debug output")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    login = commands.add_parser("login", help="Validate and store an API key")
    login.add_argument("key", metavar="API_KEY", help="Personal access token or project API key")

    logout = commands.add_parser("logout", help="Forget stored API keys for the instance")
    logout.add_argument("--all", dest="all_instances", action="store_true", help="Forget keys of every instance")

    push = commands.add_parser("push", help="Import translation files into the project")
    push.add_argument("files", metavar="FILE", nargs="+", help="Translation files to upload")
    push.add_argument("--force-mode", dest="force_mode", choices=FORCE_MODES, help="How to resolve conflicts")

    pull = commands.add_parser("pull", help="Export the project's translations to a zip archive")
    pull.add_argument("output", metavar="OUTPUT", help="Path of the archive to write")
    pull.add_argument("--format", dest="format", default="JSON", help="Export format (default: JSON)")
    pull.add_argument("--languages", nargs="+", metavar="LANG", help="Languages to export (default: all)")

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the project settings and apply command-line overrides.

    A missing default settings file is not an error; an explicitly requested one is.

    Raises:
        ConfigLoaderError: If the settings file cannot be loaded or is invalid.
    """
    overrides: dict[str, object] = {
        "api_url": args.api_url,
        "project_id": args.project_id,
        "api_key": args.api_key,
        "debug": args.verbose,
    }
    config_file: str = args.config or DEFAULT_CONFIG_FILE
    try:
        return ConfigLoader(config_filename=config_file, script_name=SCRIPT_NAME, **overrides).config
    except ConfigFileNotFoundError:
        if args.config:
            raise
    return ConfigLoader.defaults(script_name=SCRIPT_NAME, **overrides)


def setup_logging(config: Config) -> None:
    log_file: str = config.GENERAL.LOG_FILE
    LoggerUtils(FileUtils.resolve_path(log_file) if log_file else "", verbose=config.GENERAL.DEBUG)


def resolve_project(config: Config, manager: TokenManager) -> tuple[str, int]:
    """Work out the API key and project id for a project-scoped command.

    The project id comes from the command line or settings. Failing that, it is
    the id embedded in an explicit project API key, or the project of the only
    project API key stored for the instance.

    Returns:
        tuple[str, int]: The API key and the project id.

    Raises:
        AuthenticationError: If no usable key is available.
        CliError: If no project id can be determined.
    """
    explicit_key: str | None = config.API.API_KEY or None
    project_id: int = config.API.PROJECT_ID
    msg: str

    if project_id == NO_PROJECT and explicit_key:
        project_id = project_id_from_key(explicit_key) or NO_PROJECT
    elif project_id == NO_PROJECT:
        stored: list[int] = manager.stored_project_ids(config.API.URL)
        if len(stored) == 1:
            project_id = stored[0]
            logger.debug("Using project #%d of the stored project API key", project_id)
        elif len(stored) > 1:
            msg = (
                f"Project API keys for {len(stored)} projects are stored. "
                "Pass --project-id or set API.PROJECT_ID in the settings file."
            )
            raise CliError(msg)

    key: str = manager.resolve_key(config.API.URL, project_id, explicit_key)
    if project_id == NO_PROJECT:
        msg = "A project id is required. Pass --project-id or set API.PROJECT_ID in the settings file."
        raise CliError(msg)
    return key, project_id


async def cmd_login(args: argparse.Namespace, config: Config, manager: TokenManager) -> None:
    credential = await manager.login(config.API.URL, args.key)
    match credential:
        case PersonalAccessToken(username=username):
            print(f"Logged in as {username} on {config.API.URL} for all projects.")
        case ProjectApiKey(username=username, project=project):
            print(f"Logged in as {username} on {config.API.URL} for project '{project.name}' (#{project.id}).")


async def cmd_logout(args: argparse.Namespace, config: Config, manager: TokenManager) -> None:
    removed: int = manager.logout(config.API.URL, all_instances=args.all_instances)
    if args.all_instances:
        print("Forgot every stored API key.")
    elif removed:
        print(f"Forgot {removed} API key(s) for {config.API.URL}.")
    else:
        print(f"No API key was stored for {config.API.URL}.")


async def cmd_push(args: argparse.Namespace, config: Config, manager: TokenManager) -> None:
    files: list[MultipartFile] = []
    for name in args.files:
        path: Path = FileUtils.resolve_path(name)
        FileUtils.check_file_status(path)
        files.append(MultipartFile(filename=path.name, data=path.read_bytes()))

    key, project_id = resolve_project(config, manager)
    async with AsyncHttp(api_url=config.API.URL, api_key=key, project_id=project_id) as http:
        client = ImportClient(http)
        await client.delete_import_if_exists()
        await client.add_files(files)
        await client.apply_import(args.force_mode)
    print(f"Imported {len(files)} file(s) into project #{project_id}.")


async def cmd_pull(args: argparse.Namespace, config: Config, manager: TokenManager) -> None:
    key, project_id = resolve_project(config, manager)
    async with AsyncHttp(api_url=config.API.URL, api_key=key, project_id=project_id) as http:
        data: bytes = await ExportClient(http).export(format=args.format, languages=args.languages)

    output: Path = FileUtils.resolve_path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    print(f"Exported project #{project_id} to {output} ({len(data)} bytes).")


COMMANDS: Final = {
    "login": cmd_login,
    "logout": cmd_logout,
    "push": cmd_push,
    "pull": cmd_pull,
}


def describe_http_error(err: HttpError) -> str:
    """Turn an HTTP error into a one-line message for the user."""
    if err.status == 401:
        return "The API key is invalid or has expired. Run 'tmscli login' again."
    if err.status == 403:
        return "The API key does not have permission to perform this operation."

    detail: str = ""
    try:
        payload = json.loads(err.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        payload = None
    if isinstance(payload, dict) and payload.get("code"):
        detail = f" ({payload['code']})"
    return f"The server answered {err.status} {err.reason}{detail} to {err.method} {err.url}."


async def run(args: argparse.Namespace, config: Config) -> None:
    manager = TokenManager(CredentialResolver(CredentialStore()))
    await COMMANDS[args.command](args, config, manager)


def main(argv: list[str] | None = None) -> int:
    """Entry point of the ``tmscli`` command.

    Returns:
        int: Process exit code.
    """
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print(f"Error: failed to load settings: {err}", file=sys.stderr)
        return 1

    setup_logging(config)
    logger.debug("%s ver.%s", config.GENERAL.SCRIPT_NAME, config.GENERAL.VERSION)
    logger.debug("Running '%s' against %s", args.command, config.API.URL)

    try:
        asyncio.run(run(args, config))
    except HttpError as err:
        logger.debug("HTTP error body: %r", err.body)
        print(f"Error: {describe_http_error(err)}", file=sys.stderr)
        return 1
    except (aiohttp.ClientError, TimeoutError) as err:
        print(f"Error: could not reach {config.API.URL}: {err}", file=sys.stderr)
        return 1
    except (AuthenticationError, CliError, CredentialStoreError, FileUtilsError, AsyncCommError, OSError) as err:
        # ClientOSError is an OSError as well; keep this clause after the aiohttp one
        print(f"Error: {err}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
