# buildtask/__main__.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import structlog

from .build import compile_unit, read_unit_file
from .core.domain.exceptions import ConfigurationError, ToolchainError
from .core.domain.models import load_unit
from .core.staleness import StalenessEvaluator
from .shared.logging_setup import init_logging

logger = structlog.get_logger()


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="buildtask",
        description="Compile a unit (sources, references, modules, resources) if its output is stale.",
    )
    p.add_argument("unit", help="Path to the JSON unit description.")
    p.add_argument("--language", default=None, help="Source language (csharp, vb, jsharp).")
    p.add_argument("--verbose", action="store_true", help="Verbose logging, including the response file.")
    p.add_argument("--dry-run", action="store_true", help="Only report whether the output is out of date.")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    # CLI owns logging configuration; library modules just use get_logger().
    init_logging(level=logging.DEBUG if args.verbose else None)

    try:
        unit = load_unit(read_unit_file(args.unit))
        if args.dry_run:
            unit.default_base_dirs()
            verdict = StalenessEvaluator().needs_compile(unit)
            logger.info("staleness", stale=verdict.stale, trigger=verdict.trigger, output=unit.output)
            return 0
        compiled = compile_unit(unit, language=args.language, verbose=args.verbose)
    except ConfigurationError as e:
        logger.error("configuration_error", error=str(e))
        return 2
    except ToolchainError as e:
        logger.error("build_failed", tool=e.tool, exit_code=e.exit_code, error=str(e))
        return 1

    if not compiled:
        logger.info("up_to_date", output=unit.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
