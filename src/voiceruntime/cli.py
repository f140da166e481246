"""Command line diagnostics for the runtime services."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import ConfigurationError, PropertyStore, describe_environment, get_store, set_store
from .factory import instantiate
from .formats import audio_file_format_lines
from .log import setup_logging
from .memory import get_memory_policy
from .resources import resolve_for_locale


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voiceruntime",
        description="Inspect configuration, resources and memory policy of a voice runtime.",
    )
    parser.add_argument(
        "--config-dir",
        help="Directory with *.config files. Defaults to VR_CONFIG_DIR or the user config dir.",
    )
    parser.add_argument("--describe", action="store_true", help="Print environment info.")
    parser.add_argument(
        "--list-formats",
        action="store_true",
        help="List audio file formats that can be written.",
    )
    parser.add_argument("--memory", action="store_true", help="Print the memory policy state.")
    parser.add_argument(
        "--instantiate",
        metavar="DESCRIPTOR",
        help="Instantiate a registered component, e.g. 'voiceruntime.VoiceProfile(anna,de)'.",
    )
    parser.add_argument(
        "--resolve-locale",
        metavar="LOCALE",
        help="Resolve the phone set configured for a locale (e.g. en_US).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Root log level (default: WARNING).")
    parser.add_argument(
        "--version",
        action="version",
        version=f"voiceruntime {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, use_json=False)

    if not any(
        (args.describe, args.list_formats, args.memory, args.instantiate, args.resolve_locale)
    ):
        parser.error("Nothing to do. Pass --describe, --list-formats, --memory, "
                     "--instantiate or --resolve-locale.")

    try:
        if args.config_dir:
            set_store(PropertyStore.from_directory(Path(args.config_dir)))
        store = get_store()

        if args.describe:
            print(describe_environment(store))

        if args.list_formats:
            for line in audio_file_format_lines():
                print(line)

        if args.memory:
            policy = get_memory_policy()
            print(
                f"available={policy.available()} threshold={policy.threshold} "
                f"low={policy.is_low_memory()} very_low={policy.is_very_low_memory()}"
            )

        if args.instantiate:
            obj = instantiate(args.instantiate, store=store)
            print(repr(obj))

        if args.resolve_locale:
            resource = resolve_for_locale(args.resolve_locale)
            print(repr(resource) if resource is not None else "none")
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    return 0


def entry_point() -> None:
    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover
    entry_point()
