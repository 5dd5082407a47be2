"""Shared fixtures for PySpark integration tests."""

import os
import shutil

import pytest

_WAREHOUSE_DIR = os.path.join(
    os.path.dirname(__file__), os.pardir, os.pardir, "spark-warehouse"
)


@pytest.fixture(scope="session", autouse=True)
def _cleanup_spark_warehouse():
    """Remove the local spark-warehouse directory before and after PySpark tests."""
    warehouse = os.path.normpath(_WAREHOUSE_DIR)
    if os.path.isdir(warehouse):
        shutil.rmtree(warehouse, ignore_errors=True)
    yield
    if os.path.isdir(warehouse):
        shutil.rmtree(warehouse, ignore_errors=True)
