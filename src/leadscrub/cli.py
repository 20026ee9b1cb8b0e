"""Command-line entry point.

Usage:
    leadscrub annotate contacts.xlsx --client-code C1 --months 12
    leadscrub serve --port 3000
"""

from __future__ import annotations

import argparse
import sys

from leadscrub.core.config import AppSettings
from leadscrub.core.exceptions import PipelineError
from leadscrub.models.pipeline import PipelineOptions
from leadscrub.persistence import create_persistence
from leadscrub.pipeline.orchestrator import SuppressionPipeline
from leadscrub.utils.logging import configure_logging, get_logger

log = get_logger("cli")


def cmd_annotate(args: argparse.Namespace, settings: AppSettings) -> int:
    code = (args.client_code or "").strip() or None
    options = PipelineOptions(
        client_scope_enabled=code is not None,
        client_code=code,
        recency_window_months=args.months,
        split_status_columns=not args.single_status and settings.pipeline.split_status_columns,
    )
    store = create_persistence(settings)
    try:
        pipeline = SuppressionPipeline(store, args.output_dir or settings.storage.output_dir)
        result = pipeline.run(args.path, options)
    except PipelineError as exc:
        log.error("%s", exc)
        return 1
    finally:
        store.close()

    stats = result.stats
    log.info(
        "matched=%d unmatched=%d skipped=%d", stats.rows_matched, stats.rows_unmatched, stats.rows_skipped,
    )
    print(result.output_path)
    return 0


def cmd_serve(args: argparse.Namespace, settings: AppSettings) -> int:
    import uvicorn

    from leadscrub.api.app import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="leadscrub",
        description="Check a contact spreadsheet against the suppression store",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    pa = sub.add_parser("annotate", help="Annotate one spreadsheet and print the output path")
    pa.add_argument("path")
    pa.add_argument("--client-code", default=None, help="Only match records of this client")
    pa.add_argument("--months", type=int, default=None, help="Suppression window in calendar months")
    pa.add_argument("--single-status", action="store_true", help="Write one Status column instead of two")
    pa.add_argument("--output-dir", default=None)
    pa.set_defaults(func=cmd_annotate)

    ps = sub.add_parser("serve", help="Run the upload web app")
    ps.add_argument("--host", default="127.0.0.1")
    ps.add_argument("--port", type=int, default=3000)
    ps.set_defaults(func=cmd_serve)
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = AppSettings()
    configure_logging(settings.log_level, settings.log_format)
    if getattr(args, "months", None) is not None and args.months < 0:
        log.error("--months must be zero or positive")
        return 2
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
