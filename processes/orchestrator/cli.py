#!/usr/bin/env python3
"""CLI interface for the orchestrator."""

from __future__ import annotations

import argparse
import json
import sys
import time
import traceback
from collections.abc import Sequence

from processes.errors import PipelineError
from processes.job.models import Argument
from processes.reporter import Reporter

from .core import run_job


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the orchestrator CLI."""
    parser = argparse.ArgumentParser(
        prog="beacon",
        description="Convert a VCF and its metadata into BFF and load it: vcf2bff → bff2html → bff2mongodb",
    )

    parser.add_argument(
        "mode",
        choices=["info", "vcf", "mongodb", "full"],
        help="info: show the resolved job; vcf: vcf2bff/bff2html; mongodb: bff2mongodb; full: all stages",
    )

    parser.add_argument(
        "-i",
        "--input",
        dest="inputfile",
        help="Input VCF (.vcf.gz); required for vcf and full",
    )

    parser.add_argument(
        "-c",
        "--config",
        dest="configfile",
        help="System configuration file (default: $BEACON_CONFIG or the shipped config.yaml)",
    )

    parser.add_argument(
        "-p",
        "--param",
        dest="paramfile",
        help="Job parameter file (YAML or JSON)",
    )

    parser.add_argument(
        "-n",
        "--ncpu",
        type=int,
        help="Number of CPUs/threads handed to the stages",
    )

    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a parameter, e.g. genome=hg38 or pipeline.bff2html=true (repeatable)",
    )

    parser.add_argument(
        "--debug",
        type=int,
        choices=range(1, 6),
        default=0,
        metavar="{1-5}",
        help="Debug level",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    reporter = Reporter.configure(debug=args.debug, verbose=args.verbose)
    start = time.time()

    try:
        arg = Argument(
            mode=args.mode,
            inputfile=args.inputfile,
            configfile=args.configfile,
            paramfile=args.paramfile,
            ncpu=args.ncpu,
            debug=args.debug,
            verbose=args.verbose,
            overrides=tuple(args.overrides),
        )
        result = run_job(arg, reporter=reporter)
    except (PipelineError, ValueError) as e:
        reporter.fatal(e)
        if args.debug > 1:
            traceback.print_exc()
        return 1
    except KeyboardInterrupt:
        reporter.warn("interrupted; partial output left on disk")
        return 130

    if args.mode == "info":
        print(json.dumps(result, indent=2, sort_keys=True))
        return 0

    print(f"[orchestrator] ✓ Job {result['jobid']} completed")
    print(f"[orchestrator] Stages: {', '.join(result['stages']) or 'none'}")
    print(f"[orchestrator] Project dir: {result['projectdir']}")
    print(f"[orchestrator] Elapsed: {time.time() - start:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
