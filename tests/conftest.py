"""
Pytest configuration and fixtures for the copy planner tests.
"""
import pytest

from copy_planner.clients.dataset_finders import CopyableDataset, DatasetFinder
from copy_planner.models.config import DATA_PUBLISHER_FINAL_DIR
from copy_planner.models.data_models import CopyableFile
from copy_planner.services.path_utils import join_path


class StaticDataset(CopyableDataset):
    """Dataset returning a fixed list of (relative name, file set) entries."""

    def __init__(self, root, entries, error=None):
        self.root = root
        self.entries = entries
        self.error = error
        self.configurations = []

    def dataset_root(self):
        return self.root

    def get_copyable_files(self, target_fs, copy_configuration):
        self.configurations.append(copy_configuration)
        if self.error is not None:
            raise self.error
        return [
            CopyableFile(
                origin_path=f"{self.root}/{name}",
                destination_path=join_path(copy_configuration.target_root, name),
                file_set=file_set,
                origin_size=100
            )
            for name, file_set in self.entries
        ]


class StaticFinder(DatasetFinder):
    """Finder returning fixed datasets and a fixed common root."""

    def __init__(self, datasets, common_root):
        self.datasets = datasets
        self.common_root = common_root
        self.find_calls = 0

    def find_datasets(self):
        self.find_calls += 1
        return list(self.datasets)

    def common_dataset_root(self):
        return self.common_root


@pytest.fixture
def sample_dataset():
    """One dataset at /data/a with two files in p1 and one in p2."""
    return StaticDataset('/data/a', [('f1', 'p1'), ('f2', 'p1'), ('f3', 'p2')])


@pytest.fixture
def sample_finder(sample_dataset):
    return StaticFinder([sample_dataset], '/data')


@pytest.fixture
def base_properties():
    return {DATA_PUBLISHER_FINAL_DIR: '/out'}


@pytest.fixture
def sample_copyable_file():
    """Create a sample copyable file for testing."""
    return CopyableFile(
        origin_path='/data/a/f1',
        destination_path='/out/a/f1',
        file_set='p1',
        origin_size=1024,
        origin_modification_time=1700000000000,
        checksum='abc123',
        metadata={'owner': 'etl'}
    )
