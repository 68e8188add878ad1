import logging

import numpy as np
import pytest

from rtrace.config import RenderConfig
from rtrace.errors import InvalidConfigurationError
from rtrace.logging_config import setup_logging
from rtrace.main import render_to_file


def test_defaults_match_default_camera():
    config = RenderConfig()
    assert config.aspect == 2.0
    camera = config.build_camera()
    assert np.allclose(camera.lower_left_corner, [-2, -1, -1], atol=1e-6)
    assert len(config.build_scene()) == 4


def test_from_env_overrides():
    config = RenderConfig.from_env({
        "RTRACE_WIDTH": "32",
        "RTRACE_HEIGHT": "16",
        "RTRACE_SAMPLES": "3",
        "RTRACE_THREADS": "2",
        "RTRACE_SEED": "99",
    })
    settings = config.render_settings()
    assert (settings.width, settings.height, settings.samples, settings.num_threads) == (32, 16, 3, 2)
    assert config.seed == 99


def test_from_env_ignores_empty_values():
    config = RenderConfig.from_env({"RTRACE_WIDTH": ""})
    assert config.width == 400


def test_from_env_rejects_garbage():
    with pytest.raises(InvalidConfigurationError):
        RenderConfig.from_env({"RTRACE_SAMPLES": "many"})


def test_invalid_settings_fail_before_rendering():
    config = RenderConfig()
    config.samples = 0
    with pytest.raises(InvalidConfigurationError):
        config.render_settings()
    config.height = 0
    with pytest.raises(InvalidConfigurationError):
        config.build_camera()


def test_setup_logging_is_idempotent(tmp_path):
    log_file = tmp_path / "render.log"
    setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG, log_file=str(log_file))
    logger = logging.getLogger("rtrace")
    assert len(logger.handlers) == 2
    logging.getLogger("rtrace.renderer").info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_render_to_file(tmp_path):
    config = RenderConfig()
    config.width, config.height, config.samples, config.num_threads = 8, 4, 1, 2
    config.seed = 11
    path = tmp_path / "scene.ppm"
    image = render_to_file(str(path), config, progress=False)
    assert image.shape == (4, 8, 3)
    assert path.read_text(encoding="ascii").startswith("P3\n8 4\n255\n")


def test_setup_logging_returns_package_logger():
    logger = setup_logging(logging.WARNING)
    assert logger is logging.getLogger("rtrace")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
