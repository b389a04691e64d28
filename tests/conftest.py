"""Shared test fixtures for the cfgtree test suite."""

from __future__ import annotations

from typing import Any

import pytest
import yaml

from cfgtree import MapConfig, TreeConfig

from config_helpers import SAMPLE_YAML, build_config


@pytest.fixture
def sample_data() -> dict[str, Any]:
    """The sample tree, as a YAML loader would hand it over."""
    return yaml.safe_load(SAMPLE_YAML)


@pytest.fixture
def tree_config(sample_data: dict[str, Any]) -> TreeConfig:
    """Nested-mapping backend over the sample tree."""
    return TreeConfig(sample_data)


@pytest.fixture
def map_config(sample_data: dict[str, Any]) -> MapConfig:
    """Flat-map backend over the sample tree."""
    return MapConfig.from_mapping(sample_data)


@pytest.fixture(params=["tree", "map"])
def config(request: pytest.FixtureRequest, sample_data: dict[str, Any]) -> TreeConfig | MapConfig:
    """The sample tree, once per backend."""
    return build_config(request.param, sample_data)
