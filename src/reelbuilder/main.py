"""Subcommand dispatcher for reelbuilder.

Usage:
    reelbuilder build  --manifest session.yaml --output reel.mp4
    reelbuilder probe  clip.mp4 [clip2.mp4 ...] --category hook
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="reelbuilder",
        description="Assemble Hook/Body/CTA clips into a short-form video.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("build", help="Build a reel from a YAML session manifest")
    subparsers.add_parser("probe", help="Extract clip duration and thumbnail")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "build":
        from .build_cli import main as build_main
        build_main(remaining)
    elif parsed.command == "probe":
        from .probe_cli import main as probe_main
        probe_main(remaining)


if __name__ == "__main__":
    main()
