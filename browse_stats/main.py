"""Command-line entry point for the browse stats service.

One-shot mode prints the browse stats (or a resolved slug) as JSON on
stdout; ``--serve`` runs the HTTP API under uvicorn.
"""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from browse_stats.config.environment import EnvironmentConfig
from browse_stats.config.exceptions import ConfigurationError
from browse_stats.config.loader import load_config
from browse_stats.config.models import AppConfig
from browse_stats.domain import Dimension, FilterSet
from browse_stats.facets import FacetAggregator, FacetError
from browse_stats.logging import get_logger
from browse_stats.logging.config import configure_logging
from browse_stats.persistence import PersistenceError, close_database, init_database

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2

DIMENSION_CHOICES = [dimension.value for dimension in Dimension]


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Args:
        config_path: Path to configuration file (None searches the defaults)
        log_level_override: Log level from CLI

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with env_config.log_level set

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override.upper()
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="browse-stats",
        description="Faceted browse statistics for nursing job listings",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    filters = parser.add_argument_group("filters")
    filters.add_argument("--state", help="2-letter state code or full state name")
    filters.add_argument("--specialty", help="Specialty, e.g. 'ICU' or 'Med Surg'")
    filters.add_argument("--job-type", help="Job type, e.g. 'per diem'")
    filters.add_argument("--experience-level", help="Experience level, e.g. 'new grad'")
    filters.add_argument("--shift-type", help="Shift type, e.g. 'nights'")
    filters.add_argument("--employer-slug", help="Employer slug")
    filters.add_argument("--search", help="Free-text search over title and specialty")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--resolve",
        nargs=2,
        metavar=("DIMENSION", "SLUG"),
        help=f"Resolve a URL slug to its filter value ({', '.join(DIMENSION_CHOICES)})",
    )
    mode.add_argument("--serve", action="store_true", help="Run the HTTP API")
    return parser


def filter_set_from_args(args: argparse.Namespace) -> FilterSet:
    return FilterSet(
        state=args.state,
        specialty=args.specialty,
        job_type=args.job_type,
        experience_level=args.experience_level,
        shift_type=args.shift_type,
        employer_slug=args.employer_slug,
        search=args.search,
    )


def serve(aggregator: FacetAggregator, app_config: AppConfig) -> None:
    """Run the HTTP API until interrupted."""
    import uvicorn

    from browse_stats.api import create_app

    logger.info(
        f"Serving API on {app_config.api.host}:{app_config.api.port}",
        extra={
            "event": "service.api.starting",
            "host": app_config.api.host,
            "port": app_config.api.port,
        },
    )
    # log_config=None keeps our root logger configuration
    uvicorn.run(
        create_app(aggregator),
        host=app_config.api.host,
        port=app_config.api.port,
        log_config=None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 on success, 1 on configuration or store errors,
        2 when a slug does not resolve
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        # stdout carries the JSON result in one-shot mode
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
            stream=sys.stdout if args.serve else sys.stderr,
        )
        logger.info(
            "Browse stats starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "employer_limit": app_config.facets.employer_limit,
                "query_timeout_seconds": app_config.facets.query_timeout_seconds,
            },
        )

        init_database(env_config.database_url)

        aggregator = FacetAggregator(
            employer_limit=app_config.facets.employer_limit,
            query_timeout_seconds=app_config.facets.query_timeout_seconds,
        )

        if args.serve:
            serve(aggregator, app_config)
            return EXIT_OK

        if args.resolve:
            dimension_name, slug = args.resolve
            try:
                dimension = Dimension.from_param(dimension_name)
            except ValueError:
                print(
                    f"Unknown dimension '{dimension_name}'. Choose from: {', '.join(DIMENSION_CHOICES)}",
                    file=sys.stderr,
                )
                return EXIT_ERROR

            value = aggregator.resolve_slug(dimension, slug)
            if value is None:
                print(f"No {dimension.value} matches slug '{slug}'", file=sys.stderr)
                return EXIT_NOT_FOUND
            print(json.dumps({"dimension": dimension.value, "slug": slug, "value": value}))
            return EXIT_OK

        stats = aggregator.aggregate(filter_set_from_args(args))
        print(json.dumps(stats.to_dict(), indent=2))
        return EXIT_OK

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except (FacetError, PersistenceError) as e:
        print(f"Listing store error: {e}", file=sys.stderr)
        logger.error(
            f"Browse stats failed: {e}",
            extra={"event": "service.failed", "error_type": type(e).__name__},
        )
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return EXIT_OK
    finally:
        close_database()
        logger.info(
            "Browse stats stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
