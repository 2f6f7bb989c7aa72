"""
Command-line interface for managing short URLs directly in the store.

Usage:
    shorturl create -p <path> -d <destination> [-c <connection>]
    shorturl get -p <path> [-c <connection>]
    shorturl delete -p <path> [-c <connection>]
    shorturl list [-c <connection>] [--page-size N]

The connection target falls back to URL_SHORTENER_CONNECTION_STRING.

Exit codes:
    0  success
    1  unexpected error
    2  invalid command line
    3  validation error
    4  path already in use
    5  short URL not found
    6  store failure
    7  configuration error (e.g. missing connection string)
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from shorturl_app.config import settings
from shorturl_app.logging_config import setup_logging
from shorturl_app.models.short_url import ShortUrl
from shorturl_app.services.exceptions import (
    NotFound,
    ShortUrlError,
    ShortUrlValidationError,
)
from shorturl_app.services.repository import ShortUrlRepository
from shorturl_app.services.validator import (
    strip_slashes,
    validate,
    validate_path,
)
from shorturl_app.storage import StoreBackend, StoreFactory, StoreStrategy

CONNECTION_STRING_ENV = "URL_SHORTENER_CONNECTION_STRING"
BACKEND_ENV = "URL_SHORTENER_BACKEND"


class ShortUrlCLI:
    """Runs one operation per invocation against an injected store"""

    def __init__(self, store: StoreStrategy, out=None):
        self.repository = ShortUrlRepository(store)
        self.out = out or sys.stdout

    def _print(self, message: str):
        print(message, file=self.out)

    async def create(self, path: str, destination: str) -> int:
        short_url = ShortUrl(path=strip_slashes(path), destination=destination)
        result = validate(short_url)
        if not result.is_valid:
            raise ShortUrlValidationError(result.errors)

        await self.repository.create(short_url)
        self._print("Shortened URL created.")
        return 0

    async def get(self, path: str) -> int:
        path = self._checked_path(path)
        short_url = await self.repository.get_by_path(path)
        if short_url is None:
            raise NotFound(path)
        self._print(f"Destination URL: {short_url.destination}, Path: {short_url.path}")
        return 0

    async def delete(self, path: str) -> int:
        path = self._checked_path(path)
        await self.repository.delete(path)
        self._print("Shortened URL deleted.")
        return 0

    async def list_urls(self, page_size: int = 100) -> int:
        async for short_url in self.repository.list_all(page_size=page_size):
            self._print(f"Destination URL: {short_url.destination}, Path: {short_url.path}")
        return 0

    @staticmethod
    def _checked_path(path: str) -> str:
        path = strip_slashes(path)
        errors = validate_path(path)
        if errors:
            raise ShortUrlValidationError({"path": errors})
        return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shorturl",
        description="Manage the shortened URLs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a shortened URL
  %(prog)s create -p docs -d https://example.com/documentation

  # Look it up
  %(prog)s get -p docs

  # Delete it
  %(prog)s delete -p docs

  # List everything
  %(prog)s list -c redis://localhost:6379/0
        """,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    # Shared by every subcommand so the options can follow the command name
    connection = argparse.ArgumentParser(add_help=False)
    connection.add_argument(
        "-c", "--connection-string",
        default=os.getenv(CONNECTION_STRING_ENV),
        help="Connection string of the store where URLs are kept. "
             f"Alternatively, set {CONNECTION_STRING_ENV}.",
    )
    connection.add_argument(
        "-b", "--backend",
        choices=[backend.value for backend in StoreBackend],
        default=os.getenv(BACKEND_ENV, StoreBackend.REDIS.value),
        help=f"Store backend (default: from {BACKEND_ENV} env or redis)",
    )

    path_option = argparse.ArgumentParser(add_help=False)
    path_option.add_argument(
        "-p", "--path",
        required=True,
        help="The path used for the shortened URL.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    create_parser = subparsers.add_parser(
        "create", parents=[path_option, connection], help="Create a shortened URL"
    )
    create_parser.add_argument(
        "-d", "--destination-url",
        dest="destination",
        required=True,
        help="The URL that the shortened URL will forward to.",
    )

    subparsers.add_parser(
        "delete", parents=[path_option, connection], help="Delete a shortened URL"
    )
    subparsers.add_parser(
        "get", parents=[path_option, connection], help="Get a shortened URL"
    )

    list_parser = subparsers.add_parser(
        "list", parents=[connection], help="List shortened URLs"
    )
    list_parser.add_argument(
        "--page-size",
        type=int,
        default=100,
        help="Number of entries fetched from the store per round trip",
    )

    return parser


async def run(args: argparse.Namespace, store: Optional[StoreStrategy] = None, out=None, err=None) -> int:
    """Execute the parsed command and return the process exit code"""
    err = err or sys.stderr
    owns_store = store is None
    try:
        if owns_store:
            store = StoreFactory.build(
                StoreBackend(args.backend), args.connection_string, config=settings
            )
        cli = ShortUrlCLI(store, out=out)

        if args.command == "create":
            return await cli.create(args.path, args.destination)
        elif args.command == "get":
            return await cli.get(args.path)
        elif args.command == "delete":
            return await cli.delete(args.path)
        elif args.command == "list":
            return await cli.list_urls(args.page_size)
        raise ValueError(f"Unknown command: {args.command}")

    except ShortUrlValidationError as e:
        for field, messages in e.errors.items():
            for message in messages:
                print(f"{field}: {message}", file=err)
        return e.exit_code
    except NotFound as e:
        print(f"Shortened URL for path '{e.path}' not found.", file=err)
        return e.exit_code
    except ShortUrlError as e:
        print(str(e), file=err)
        return e.exit_code
    finally:
        if owns_store and store is not None:
            await store.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    setup_logging(level="DEBUG" if args.verbose else "WARNING", stream=sys.stderr)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
