"""Registry API - command line front end.

Query a registry through the version-negotiating client.

Usage:
  python main.py search nginx
  python main.py --url https://registry.example.com tags library/nginx 1.
  python main.py --hub ping
"""

import argparse
import json
import re
import sys

from registry_api.logging_config import configure_logging
from registry_api.registry.client import RegistryApi, docker_hub
from registry_api.registry.exceptions import RegistryError
from registry_api.registry.models import RegistryConfig


def to_jsonable(result):
    """Convert pydantic models (and lists of them) to plain JSON values."""
    if isinstance(result, list):
        return [to_jsonable(item) for item in result]
    if hasattr(result, "model_dump"):
        return result.model_dump()
    return result


def build_client(args) -> RegistryApi:
    if args.hub:
        return docker_hub()
    config = RegistryConfig.from_env(
        url=args.url,
        user=args.user,
        password=args.password,
        verify_ssl=False if args.insecure else None,
    )
    return RegistryApi(config)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Registry API - search, catalog and tags across v1/v2 registries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search the local registry
  python main.py search nginx

  # Tags starting with "1." on a remote registry
  python main.py --url https://registry.example.com tags library/nginx 1.

  # Liveness probe against Docker Hub
  python main.py --hub ping
        """,
    )

    parser.add_argument("--url", help="Registry URL (default: $REGISTRY_API_URL or localhost:5000)")
    parser.add_argument("--hub", action="store_true", help="Use Docker Hub")
    parser.add_argument("--user", help="Registry username")
    parser.add_argument("--password", help="Registry password")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS verification")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--log-file", help="Also write logs to this file")

    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search repositories")
    search.add_argument("query")

    catalog = commands.add_parser("catalog", help="List catalog repositories by prefix")
    catalog.add_argument("query", nargs="?", default="")

    tags = commands.add_parser("tags", help="List tags of a repository")
    tags.add_argument("image")
    tags.add_argument("query", nargs="?")

    commands.add_parser("ping", help="Check the registry is alive")

    args = parser.parse_args(argv)
    configure_logging(args.log_level, log_file=args.log_file)

    client = build_client(args)
    try:
        if args.command == "search":
            result = client.search(args.query)
        elif args.command == "catalog":
            result = client.catalog(args.query)
        elif args.command == "tags":
            result = client.tags(args.image, args.query)
        else:
            alive = client.ok()
            print("✓ Registry is alive" if alive else "✗ Registry is not responding")
            return 0 if alive else 1
    except (RegistryError, re.error) as e:
        print(f"✗ Registry request failed: {e}", file=sys.stderr)
        return 1
    finally:
        # the Docker Hub client is shared for the process lifetime
        if not args.hub:
            client.close()

    print(json.dumps(to_jsonable(result), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
