import logging

import pytest

from veganom.schemas import ParamConfig, UserConfig, InternalConfig
from veganom.schemas.resolve import resolve_config
from veganom.setup_directories import setup_output_directories


@pytest.fixture
def pipeline_config(temp_dir) -> InternalConfig:
    """InternalConfig for pipeline tests, writing under temp_dir."""
    user = UserConfig(BASE_DIR=str(temp_dir), LOG_LEVEL="DEBUG")
    return resolve_config(ParamConfig(), user, None)


@pytest.fixture
def pipeline_output_dirs(temp_dir):
    """Output directories for pipeline tests."""
    return setup_output_directories(temp_dir, verbose=False)


@pytest.fixture
def restore_root_logging():
    """Undo the root handlers installed by PipelineOrchestrator._setup_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
