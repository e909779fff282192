"""Main entry point for the CRD MCP Server.

Used by the ``crd-mcp-server`` console script and ``run_mcp_server.py``.
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from .server import create_server, load_config


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Serve custom resource definitions, samples and instructions over MCP (stdio)."
    )
    parser.add_argument(
        "--data-dir",
        help="Directory containing crds/, samples/ and instructions/",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> dict:
    """Merge command line arguments over the YAML configuration."""
    config = load_config()
    if args.data_dir:
        workspace = dict(config.get("workspace") or {})
        workspace["data_dir"] = args.data_dir
        config["workspace"] = workspace
    if args.verbose:
        config["verbose"] = True
    return config


async def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for running the MCP server."""
    args = parse_args(argv)
    try:
        server = create_server(build_config(args))
        await server.start()
    except KeyboardInterrupt:
        print("\nServer interrupted by user", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Failed to start server: {e}", file=sys.stderr)
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
