#!/usr/bin/env python3
import argparse
import asyncio
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.table import Table

from pkglikes.core.entities import PackageLikes
from pkglikes.core.exceptions import LikesError
from pkglikes.main import PackageLikesApp
from pkglikes.providers.exceptions import (
    RecordStoreError,
    TransientIndexError,
    WriteRejectedError,
)


class PackageLikesCLI:
    """CLI interface for package likes administration."""

    _HEALTH_LABELS = {
        "healthy": ("OK", "green"),
        "unhealthy": ("DOWN", "red"),
        "error": ("ERROR", "yellow"),
    }

    def __init__(self, config_file: str = "config.yaml", env_file: str = ".env"):
        self.console = Console()
        self.config_file = config_file
        self.env_file = env_file
        self.app: Optional[PackageLikesApp] = None

    async def initialize(self):
        """Load configuration and build the application services."""
        try:
            self.app = PackageLikesApp(self.config_file, self.env_file)
            await self.app.initialize()
            self._configure_cli_logging()
        except Exception as e:
            self.console.print(f"❌ Could not start: {e}", style="red")
            raise

    def _configure_cli_logging(self):
        """Keep warnings and errors visible but drop routine INFO output."""
        logging.getLogger().setLevel(logging.WARNING)

    async def close(self):
        if self.app:
            await self.app.close()

    def _print_likes(self, title: str, likes: PackageLikes, caller_id: Optional[str]):
        table = Table(title=title)
        table.add_column("Package", style="cyan")
        table.add_column("Total Likes", style="magenta", justify="right")
        table.add_column("Liked By Caller", style="blue")

        if caller_id:
            liked = "❤️ Yes" if likes.user_has_liked else "No"
        else:
            liked = "-"
        table.add_row(likes.package_name, str(likes.total_likes), liked)
        self.console.print(table)

    async def status(self, package_name: str, caller_id: Optional[str]) -> bool:
        """Show likes for a package."""
        likes = await self.app.get_likes(package_name, caller_id)
        self._print_likes("Package Likes", likes, caller_id)
        return True

    async def like(self, package_name: str, caller_id: str) -> bool:
        """Like a package as the given caller."""
        try:
            likes = await self.app.like_package(package_name, caller_id)
        except WriteRejectedError as e:
            self.console.print(f"❌ Like rejected by record store: {e}", style="red")
            return False
        except (RecordStoreError, TransientIndexError, LikesError) as e:
            self.console.print(f"❌ Failed to like {package_name}: {e}", style="red")
            return False

        self._print_likes("Liked", likes, caller_id)
        return True

    async def unlike(self, package_name: str, caller_id: str) -> bool:
        """Remove the given caller's like from a package."""
        try:
            likes = await self.app.unlike_package(package_name, caller_id)
        except WriteRejectedError as e:
            self.console.print(f"❌ Unlike rejected by record store: {e}", style="red")
            return False
        except (RecordStoreError, TransientIndexError, LikesError) as e:
            self.console.print(f"❌ Failed to unlike {package_name}: {e}", style="red")
            return False

        self._print_likes("Unliked", likes, caller_id)
        return True

    async def health_check(self) -> bool:
        """Probe the cache, backlink index and record store."""
        report = await self.app.get_service_health_status()

        table = Table(title="Like Service Dependencies")
        table.add_column("Dependency", style="cyan")
        table.add_column("State")
        table.add_column("Details", style="dim")

        for name, result in report["services"].items():
            label, colour = self._HEALTH_LABELS.get(result["status"], ("?", "white"))
            table.add_row(name, f"[{colour}]{label}[/{colour}]", result["details"])

        self.console.print(table)

        healthy = report["overall_healthy"]
        self.console.print(
            f"{report['healthy_count']}/{report['total_count']} services healthy",
            style="green" if healthy else "red",
        )
        return healthy


async def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Package likes CLI - inspect and manage package likes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py status vue
  python cli.py status @nuxt/kit --did did:plc:abc123
  python cli.py like vue --did did:plc:abc123
  python cli.py unlike vue --did did:plc:abc123
  python cli.py health
        """,
    )

    parser.add_argument(
        "--config", "-c", default="config.yaml", help="Configuration file"
    )
    parser.add_argument("--env", "-e", default=".env", help="Environment file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    status_parser = subparsers.add_parser("status", help="Show likes for a package")
    status_parser.add_argument("package_name", help="Package name")
    status_parser.add_argument("--did", help="Caller DID to check")

    like_parser = subparsers.add_parser("like", help="Like a package")
    like_parser.add_argument("package_name", help="Package name")
    like_parser.add_argument("--did", required=True, help="Caller DID")

    unlike_parser = subparsers.add_parser("unlike", help="Unlike a package")
    unlike_parser.add_argument("package_name", help="Package name")
    unlike_parser.add_argument("--did", required=True, help="Caller DID")

    subparsers.add_parser("health", help="Check service health")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    cli = PackageLikesCLI(args.config, args.env)
    ok = True

    try:
        await cli.initialize()

        if args.command == "status":
            ok = await cli.status(args.package_name, args.did)
        elif args.command == "like":
            ok = await cli.like(args.package_name, args.did)
        elif args.command == "unlike":
            ok = await cli.unlike(args.package_name, args.did)
        elif args.command == "health":
            ok = await cli.health_check()

    except KeyboardInterrupt:
        cli.console.print("\n👋 Goodbye!", style="blue")
    except Exception as e:
        cli.console.print(f"❌ Fatal error: {e}", style="red")
        ok = False
    finally:
        await cli.close()

    if not ok:
        sys.exit(1)


def cli_entry_point():
    """Entry point for the installed pkglikes command."""
    asyncio.run(main())


if __name__ == "__main__":
    asyncio.run(main())
