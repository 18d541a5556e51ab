#!/usr/bin/env python3
"""
Simple demo of the copy planner.

This script demonstrates:
- Planning a copy job over a local source tree
- Inspecting work units and their partitions
- Resuming: re-planning after part of the job completed
"""
import sys
import tempfile
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from copy_planner.models.config import DATA_PUBLISHER_FINAL_DIR, DATASET_PATTERN_KEY
from copy_planner.models.work_unit import DATASET_URN_KEY, WORK_UNIT_GUID
from copy_planner.services.copy_source import CopySource, deserialize_copyable_file
from copy_planner.services.plan_manifest import PlanManifest
from loguru import logger


def build_source_tree(root: Path) -> None:
    """Create two small datasets under ``root``."""
    for dataset, day, part in [('clicks', 1, 0), ('clicks', 1, 1), ('clicks', 2, 0), ('views', 1, 0)]:
        directory = root / dataset / f'day={day}'
        directory.mkdir(parents=True, exist_ok=True)
        (directory / f'part-{part}').write_text(f'{dataset}-{day}-{part}\n')


def main():
    """Run copy planner demo."""
    logger.remove()
    logger.add(sys.stderr, format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> - <level>{message}</level>", level="INFO")

    logger.info("Copy Planner Demo")

    try:
        with tempfile.TemporaryDirectory() as workdir:
            workdir = Path(workdir)
            build_source_tree(workdir / 'source')

            properties = {
                DATA_PUBLISHER_FINAL_DIR: str(workdir / 'published'),
                DATASET_PATTERN_KEY: f"{workdir / 'source'}/*",
            }

            logger.info("Planning copy job...")
            work_units = CopySource(properties).get_work_units()

            for work_unit in work_units:
                copyable_file = deserialize_copyable_file(work_unit)
                logger.info(f"  • [{work_unit.extract.table}] {copyable_file.origin_path} -> "
                            f"{copyable_file.destination_path}")
                logger.info(f"    urn={work_unit.get_prop(DATASET_URN_KEY)} guid={work_unit.get_prop(WORK_UNIT_GUID)}")

            # Pretend the first two work units were executed
            manifest = PlanManifest()
            completed_path = workdir / 'completed.csv'
            manifest.export_work_units(work_units[:2], str(completed_path))

            logger.info("Re-planning after a partial run...")
            pending = manifest.filter_pending(CopySource(properties).get_work_units(), str(completed_path))
            logger.success(f"{len(pending)} of {len(work_units)} work units still to run")

    except Exception as e:
        logger.error(f"Demo failed: {str(e)}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
