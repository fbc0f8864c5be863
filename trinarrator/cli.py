"""
Command Line Interface

For local runs and for checking what each store recorded.
"""

import argparse
import asyncio
import json
import sys

from loguru import logger
from pydantic import ValidationError

from .config import get_settings
from .core import EncodingError
from .log import configure_logging
from .models import CreateVideoRequest
from .narrators import NARRATOR_STYLES, PARTICIPATION_RULE, CommentaryValidationError
from .pipeline import JobNotFoundError, SecondaryWriteError, VideoPipeline


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_create(args):
    """Run one video job from a JSON request file."""
    try:
        with open(args.request) as f:
            request = CreateVideoRequest.model_validate(json.load(f))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"Invalid request {args.request}: {e}")
        return 1

    pipeline = VideoPipeline(get_settings())
    try:
        result = asyncio.run(pipeline.create_video(request))
    except SecondaryWriteError as e:
        logger.error(str(e))
        print(f"Video produced, records incomplete. Check: inspect {e.job_id}")
        return 2
    except CommentaryValidationError as e:
        print(str(e))
        return 1
    except (EncodingError, OSError) as e:
        print(f"Encoding failed: {e}")
        return 1
    _print_json(result.model_dump(mode="json", by_alias=True))
    return 0


def cmd_status(args):
    """Print the ledger view of a job."""
    pipeline = VideoPipeline(get_settings())
    try:
        result = pipeline.get_job_status(args.job_id)
    except JobNotFoundError as e:
        print(str(e))
        return 1
    _print_json(result.model_dump(mode="json", by_alias=True))
    return 0


def cmd_inspect(args):
    """Print a job's records from all three stores."""
    pipeline = VideoPipeline(get_settings())
    try:
        report = pipeline.inspect(args.job_id)
    except JobNotFoundError as e:
        print(str(e))
        return 1
    _print_json(report)
    return 0 if report["consistent"] else 3


def cmd_narrators(args):
    """Print the narrator style table."""
    for config in NARRATOR_STYLES.values():
        print(
            f"{config.identity.value:<22} {config.name:<22} "
            f"{config.position:<7} {config.color}  size={config.font_size}"
        )
    print(PARTICIPATION_RULE)
    return 0


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    uvicorn.run(
        "trinarrator.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Triple-narrator commentary video CLI"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # create command
    p = subparsers.add_parser("create", help="Create a video from a request JSON")
    p.add_argument("--request", required=True, help="Path to request JSON")
    p.set_defaults(func=cmd_create)

    # status command
    p = subparsers.add_parser("status", help="Show a job's ledger status")
    p.add_argument("job_id")
    p.set_defaults(func=cmd_status)

    # inspect command
    p = subparsers.add_parser("inspect", help="Show a job's records in all three stores")
    p.add_argument("job_id")
    p.set_defaults(func=cmd_inspect)

    # narrators command
    p = subparsers.add_parser("narrators", help="List narrator styles")
    p.set_defaults(func=cmd_narrators)

    # serve command
    p = subparsers.add_parser("serve", help="Start API server")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8080)
    p.add_argument("--reload", action="store_true")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(get_settings().log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
