"""Command line entry point for running a bridge."""

import argparse
import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from evalbridge.bridge import serve
from evalbridge.core.entities.bridge_config import (
    EVALUATION_MODES,
    FRAMING_POLICIES,
    BridgeConfig,
)
from evalbridge.core.exceptions import BindError

logger = logging.getLogger("evalbridge")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="evalbridge",
        description="Serve freshly evaluated Python modules over a Unix socket.",
    )
    p.add_argument(
        "--socket",
        dest="socket_path",
        type=str,
        help="Socket path to bind (default: $EVALBRIDGE_SOCKET_PATH or /tmp/evalbridge.sock).",
    )
    p.add_argument("--framing", choices=FRAMING_POLICIES)
    p.add_argument("--evaluation-mode", choices=EVALUATION_MODES)
    p.add_argument(
        "--error-responses",
        action="store_true",
        default=None,
        help="Answer failed requests with an error envelope instead of silence.",
    )
    p.add_argument(
        "--root",
        dest="root_dir",
        type=Path,
        help="Base directory for relative module paths.",
    )
    p.add_argument("--max-frame-bytes", type=int)
    p.add_argument("--cache-maxsize", type=int)
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = vars(args).copy()
    overrides.pop("log_level")

    try:
        config = BridgeConfig.from_env(**overrides)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    try:
        asyncio.run(serve(config))
    except BindError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0
