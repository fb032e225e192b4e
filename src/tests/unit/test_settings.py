"""Unit tests for config/settings.py"""

from pathlib import Path

import pytest
from pydantic import ValidationError


def test_settings_import():
    """Test that settings module imports successfully."""
    from config.settings import PlannerPressSettings, settings

    assert settings is not None
    assert isinstance(settings, PlannerPressSettings)


def test_settings_defaults(monkeypatch):
    """Test default settings values."""
    from config.settings import PlannerPressSettings

    monkeypatch.delenv("PP_LOG_LEVEL", raising=False)
    settings = PlannerPressSettings(_env_file=None)

    assert settings.lead_in_days == 7
    assert settings.preview_week_cap == 4
    assert settings.preview_page_cap == 5
    assert settings.book_format == "A4"
    assert settings.grayscale_strategy == "remote"
    assert settings.grayscale_cache_entries == 32
    assert settings.grayscale_max_concurrency == 2
    assert settings.log_level == "INFO"
    assert settings.log_to_file is False


def test_settings_paths():
    """Test that path settings are Paths."""
    from config.settings import PlannerPressSettings

    settings = PlannerPressSettings(_env_file=None, watermark_path="assets/wm.png")

    assert isinstance(settings.logs_dir, Path)
    assert settings.watermark_path == Path("assets/wm.png")


def test_settings_env_var_override(monkeypatch):
    """Test that environment variables override defaults."""
    from config.settings import PlannerPressSettings

    monkeypatch.setenv("PP_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PP_PREVIEW_WEEK_CAP", "2")
    monkeypatch.setenv("PP_GRAYSCALE_API_KEY", "secret")

    settings = PlannerPressSettings(_env_file=None)

    assert settings.log_level == "DEBUG"
    assert settings.preview_week_cap == 2
    assert settings.grayscale_api_key == "secret"


def test_base_urls_are_normalized():
    from config.settings import PlannerPressSettings

    settings = PlannerPressSettings(
        _env_file=None,
        cdn_base_url="https://cdn.test/files/ ",
        grayscale_proxy_url="  ",
    )

    assert settings.cdn_base_url == "https://cdn.test/files"
    assert settings.grayscale_proxy_url is None


def test_settings_validation():
    """Test that settings validation works."""
    from config.settings import PlannerPressSettings

    valid = PlannerPressSettings(
        _env_file=None, grayscale_max_concurrency=4, log_level="WARNING"
    )
    assert valid.grayscale_max_concurrency == 4
    assert valid.log_level == "WARNING"

    with pytest.raises(ValidationError):
        PlannerPressSettings(_env_file=None, grayscale_max_concurrency=100)

    with pytest.raises(ValidationError):
        PlannerPressSettings(_env_file=None, log_level="INVALID")

    with pytest.raises(ValidationError):
        PlannerPressSettings(_env_file=None, grayscale_strategy="ghostscript")


@pytest.mark.parametrize(
    "field, value",
    [
        ("preview_week_cap", 0),
        ("lead_in_days", -1),
        ("watermark_opacity", 1.5),
        ("grayscale_shrink_target_ratio", 0),
        ("http_timeout", 1),
    ],
)
def test_out_of_range_values(field, value):
    from config.settings import PlannerPressSettings

    with pytest.raises(ValidationError):
        PlannerPressSettings(_env_file=None, **{field: value})


def test_settings_repr():
    """Test that settings has a useful repr."""
    from config.settings import settings

    repr_str = repr(settings)
    assert "PlannerPressSettings" in repr_str
    assert "preview_week_cap" in repr_str


def test_reload_settings_reads_environment(monkeypatch):
    import config.settings as settings_module

    # restore the module-level instance afterwards
    monkeypatch.setattr(settings_module, "settings", settings_module.settings)
    monkeypatch.setenv("PP_PREVIEW_WEEK_CAP", "9")

    reloaded = settings_module.reload_settings()

    assert reloaded.preview_week_cap == 9
    assert settings_module.settings is reloaded
