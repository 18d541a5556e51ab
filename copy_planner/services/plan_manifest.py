"""
CSV manifests of planned work units, used to resume a copy job.

A manifest lists one row per work unit keyed by GUID. Because GUIDs are stable
across planning runs, a manifest of completed work units can be used to drop
already copied files from a fresh plan.
"""
from pathlib import Path
from typing import Dict, List, Set

import pandas as pd
from loguru import logger

from ..models.work_unit import DATASET_URN_KEY, SLA_PARTITION_KEY, WORK_UNIT_GUID, WorkUnit
from .copy_source import deserialize_copyable_file

MANIFEST_COLUMNS = ['guid', 'dataset_urn', 'partition', 'origin_path', 'destination_path']


class PlanManifest:
    """Exports, reads and compares work unit manifests."""

    def to_dataframe(self, work_units: List[WorkUnit]) -> pd.DataFrame:
        rows = []
        for work_unit in work_units:
            copyable_file = deserialize_copyable_file(work_unit)
            rows.append({
                'guid': work_unit.get_prop(WORK_UNIT_GUID),
                'dataset_urn': work_unit.get_prop(DATASET_URN_KEY),
                'partition': work_unit.get_prop(SLA_PARTITION_KEY),
                'origin_path': copyable_file.origin_path,
                'destination_path': copyable_file.destination_path
            })
        return pd.DataFrame(rows, columns=MANIFEST_COLUMNS)

    def export_work_units(self, work_units: List[WorkUnit], csv_path: str) -> None:
        """Write one row per work unit to ``csv_path``."""
        csv_dir = Path(csv_path).parent
        csv_dir.mkdir(parents=True, exist_ok=True)

        self.to_dataframe(work_units).to_csv(csv_path, index=False)
        logger.info(f"Exported {len(work_units)} work units to {csv_path}")

    def read_manifest(self, csv_path: str) -> pd.DataFrame:
        if not Path(csv_path).exists():
            raise FileNotFoundError(f"Manifest not found: {csv_path}")

        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
        missing = set(MANIFEST_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Manifest {csv_path} is missing columns: {sorted(missing)}")
        return df

    def load_guids(self, csv_path: str) -> Set[str]:
        df = self.read_manifest(csv_path)
        return set(df.loc[df['guid'] != '', 'guid'])

    def filter_pending(self, work_units: List[WorkUnit], completed_csv_path: str) -> List[WorkUnit]:
        """
        Drop work units whose GUID appears in the completed manifest.

        Order of the remaining work units is preserved.
        """
        completed = self.load_guids(completed_csv_path)
        pending = [wu for wu in work_units if wu.get_prop(WORK_UNIT_GUID) not in completed]
        logger.info(f"{len(work_units) - len(pending)} work units already completed, {len(pending)} pending")
        return pending

    def compare_plans(self, old_csv_path: str, new_csv_path: str) -> Dict[str, int]:
        """Count GUIDs added, removed and kept between two manifests."""
        old_df = self.read_manifest(old_csv_path)
        new_df = self.read_manifest(new_csv_path)

        merged = pd.merge(old_df[['guid']], new_df[['guid']], on='guid', how='outer', indicator=True)
        counts = merged['_merge'].value_counts()

        return {
            'added': int(counts.get('right_only', 0)),
            'removed': int(counts.get('left_only', 0)),
            'unchanged': int(counts.get('both', 0))
        }
