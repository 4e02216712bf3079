"""Root-level pytest fixtures for the regionstats test suite.

Provides shared configuration fixtures following Pydantic-based architecture.
All tests must use these fixtures instead of creating raw dict configs.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from regionstats.schemas import ParamConfig, UserConfig, resolve_config

from tests.helpers.fake_raster import TEST_METRICS, TEST_SOURCES


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Use this as the base for all test configs. Override specific values
    using make_config or by creating custom UserConfig instances.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Use this when tests don't care about specific config values and just
    need a valid InternalConfig to pass to constructors.
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs. The
    test metrics (``NTL`` and ``NO2`` on a unit grid, sources ``ntl`` and
    ``no2``) replace the production defaults unless overridden.

    Examples
    --------
    >>> def test_inner_join(make_config):
    ...     config = make_config(years=[2019], join_policy="inner")
    ...     assert config.join.policy == "inner"
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        user_overrides.setdefault("sources", {sid: {} for sid in TEST_SOURCES})
        user_overrides.setdefault("metrics", [dict(m) for m in TEST_METRICS])
        return resolve_config(param_config, UserConfig(**user_overrides), None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def output_dirs(temp_dir):
    """Standard regionstats output directory structure.

    Returns dict with keys: base, exports, logs
    """
    dirs = {
        "base": temp_dir,
        "exports": temp_dir / "exports",
        "logs": temp_dir / "logs",
    }

    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)

    return dirs
