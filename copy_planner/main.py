"""
Main entry point for the copy planner.
"""
import sys
from pathlib import Path
from loguru import logger

from .errors import PlanningError
from .models.config import load_properties
from .services.copy_source import CopySource
from .services.plan_manifest import PlanManifest


def setup_logging():
    """Configure logging for the copy planner."""
    # Remove default logger
    logger.remove()

    # Add console logger with appropriate format
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="INFO"
    )

    # Add file logger for debugging
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    logger.add(
        "logs/copy_planner.log",
        rotation="10 MB",
        retention="7 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG"
    )


def run_plan(properties_path: str, manifest_path: str = None, completed_path: str = None):
    """
    Plan a copy job and optionally write its manifest.

    Args:
        properties_path: Job properties file
        manifest_path: Where to write the CSV manifest of planned work units
        completed_path: Manifest of completed work units to leave out of the plan
    """
    logger.info(f"Loading job properties from {properties_path}")
    properties = load_properties(properties_path)

    work_units = CopySource(properties).get_work_units()

    manifest = PlanManifest()
    if completed_path:
        work_units = manifest.filter_pending(work_units, completed_path)
    if manifest_path:
        manifest.export_work_units(work_units, manifest_path)

    logger.info(f"Planned {len(work_units)} work units")
    return work_units


def print_help():
    """Print help information for the CLI."""
    help_text = """
Copy Planner - Command Line Interface

USAGE:
    python -m copy_planner.main [COMMAND] [OPTIONS]

COMMANDS:
    plan PROPERTIES [MANIFEST] [COMPLETED]
                     Plan work units from a job properties file, optionally
                     writing a CSV manifest and skipping work units listed in
                     a manifest of completed work
    help             Show this help message

EXAMPLES:
    # Plan and write a manifest
    python -m copy_planner.main plan job.properties data/plan.csv

    # Re-plan, leaving out work that already completed
    python -m copy_planner.main plan job.properties data/pending.csv data/completed.csv

ENVIRONMENT VARIABLES:
    COPY_S3_ENDPOINT     S3 endpoint URL for s3:// stores
    COPY_S3_ACCESS_KEY   S3 access key
    COPY_S3_SECRET_KEY   S3 secret key
    COPY_S3_REGION       S3 region (default: us-east-1)
"""
    print(help_text)


def main():
    """Main entry point with command line argument handling."""
    setup_logging()

    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1].lower()

    try:
        if command in ["help", "--help", "-h"]:
            print_help()
        elif command == "plan":
            if len(sys.argv) < 3:
                logger.error("plan requires a properties file")
                print_help()
                sys.exit(1)
            run_plan(*sys.argv[2:5])
        else:
            logger.error(f"Unknown command: {command}")
            logger.error("Use 'help' to see available commands")
            print_help()
            sys.exit(1)

    except PlanningError as e:
        logger.error(f"Planning failed: {type(e).__name__}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down")
        sys.exit(130)


if __name__ == "__main__":
    main()
