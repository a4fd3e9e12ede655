"""CLI entry point for Narrative.

    narrative serve [--host HOST] [--port PORT] [--reload]
    narrative run {seed,work,sync}
"""

import argparse
import asyncio
import sys

import orjson
import uvicorn

from narrative.config import get_settings
from narrative.core.logging import get_logger, job_context, setup_logging
from narrative.pipeline import PipelineJobs, create_jobs
from narrative.storage.database import close_database, init_database
from narrative.storage.redis import close_redis, init_redis

logger = get_logger(__name__)

JOB_NAMES = ("seed", "work", "sync")


async def run_job(name: str) -> dict[str, object]:
    """Run one pipeline job to completion and return its report."""
    settings = get_settings()
    redis = await init_redis(settings.redis_url)
    jobs: PipelineJobs | None = None
    try:
        db = await init_database(settings.database_url)
        jobs = create_jobs(settings, db, redis)
        runners = {
            "seed": jobs.seeder.run,
            "work": jobs.worker.run,
            "sync": jobs.market_sync.run,
        }
        with job_context(name):
            report = await runners[name]()
        return report.model_dump(mode="json", by_alias=True)
    finally:
        if jobs is not None:
            await jobs.close()
        await close_database()
        await close_redis()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="narrative", description="Narrative")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve.add_argument("--host", default="0.0.0.0", help="Bind host")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")

    run = subparsers.add_parser("run", help="Run one pipeline job and print its report")
    run.add_argument("job", choices=JOB_NAMES)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        uvicorn.run(
            "narrative.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
        return 0

    setup_logging(get_settings())
    try:
        report = asyncio.run(run_job(args.job))
    except Exception:
        logger.exception("Job failed", job=args.job)
        return 1
    sys.stdout.write(orjson.dumps(report, option=orjson.OPT_INDENT_2).decode() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
