import datetime

import pytest

from hurricaneviewer.exceptions import ConfigurationError
from hurricaneviewer.utils import config


@pytest.fixture
def sample_toml_content():
    return """
output_dir = "/tmp/hurricaneviewer_output"

[logging]
level = "DEBUG"

[best_track]
storm_name = "irma"
start = 2017-08-30
end = 2017-09-13
"""


@pytest.fixture(autouse=True)
def clear_config_cache():
    config._load_config.cache_clear()
    yield
    config._load_config.cache_clear()


def test_load_config_defaults_when_file_missing(monkeypatch, tmp_path):
    monkeypatch.setenv("HURRICANEVIEWER_CONFIG_FILE", str(tmp_path / "absent.toml"))

    data = config._load_config()

    assert data["precipitation"]["collection"] == "JAXA/GPM_L3/GSMaP/v6/operational"
    assert data["best_track"]["storm_name"] == "MARIA"
    assert len(data["wind_styles"]) == 25
    assert len(data["legend"]["entries"]) == 9


def test_load_config_from_file_merges_tables(tmp_path, sample_toml_content):
    config_path = tmp_path / "config.toml"
    config_path.write_text(sample_toml_content)

    data = config.load_config(config_path)

    assert data["output_dir"] == "/tmp/hurricaneviewer_output"
    assert data["logging"]["level"] == "DEBUG"
    assert data["best_track"]["storm_name"] == "irma"
    # Bare TOML dates are accepted for start/end
    assert data["best_track"]["start"] == datetime.date(2017, 8, 30)
    # Keys not overridden keep their defaults
    assert data["best_track"]["wind_property"] == "max_wind_kts"
    assert data["precipitation"]["band"] == "hourlyPrecipRate"


def test_load_config_does_not_mutate_defaults(tmp_path, sample_toml_content):
    config_path = tmp_path / "config.toml"
    config_path.write_text(sample_toml_content)

    config.load_config(config_path)

    assert config.DEFAULTS["best_track"]["storm_name"] == "MARIA"
    assert config.DEFAULTS["logging"]["level"] == "INFO"


def test_load_config_invalid_toml(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text("invalid = [this is not valid toml")

    with pytest.raises(ConfigurationError, match="Invalid TOML"):
        config.load_config(config_path)


def test_load_config_wrong_type(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[animations.precipitation]\ndimensions = "large"\n')

    with pytest.raises(ConfigurationError, match="animations.precipitation.dimensions"):
        config.load_config(config_path)


def test_load_config_int_accepted_for_float(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text("[precipitation.vis]\nmin = 0\nmax = 25\n")

    data = config.load_config(config_path)

    assert data["precipitation"]["vis"]["max"] == 25


def test_load_config_unknown_animation_region(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[animations.precipitation]\nregion = "gulf"\n')

    with pytest.raises(ConfigurationError, match="not a configured region"):
        config.load_config(config_path)


def test_load_config_incomplete_wind_style(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[[wind_styles]]\nspeed = 30\n')

    with pytest.raises(ConfigurationError, match="wind_styles\\[0\\]"):
        config.load_config(config_path)


def test_load_config_incomplete_user_chart(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[charts.best_track]\ntitle = "Track"\n')

    with pytest.raises(ConfigurationError, match="missing 'charts.best_track.h_axis_title'"):
        config.load_config(config_path)


def test_load_config_complete_user_animation_accepted(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        "[animations.gulf]\n"
        'title = "Gulf"\n'
        'region = "precipitation"\n'
        "dimensions = 512\n"
        "frames_per_second = 5\n"
        'crs = "EPSG:3857"\n'
        'outline_color = "ffffff"\n'
        'filename = "gulf.gif"\n'
    )

    data = config.load_config(config_path)

    assert data["animations"]["gulf"]["dimensions"] == 512


def test_load_config_user_chart_not_a_table(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[charts]\nbest_track = "Track"\n')

    with pytest.raises(ConfigurationError, match="charts.best_track"):
        config.load_config(config_path)


def test_load_config_non_numeric_region(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[regions]\nprecipitation = ["a", 21.6, -57.4, 12.1]\n')

    with pytest.raises(ConfigurationError, match="regions.precipitation"):
        config.load_config(config_path)


def test_load_config_wind_style_point_size_type(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[[wind_styles]]\nspeed = 30\ncolor = "577590"\npoint_size = "large"\n')

    with pytest.raises(ConfigurationError, match="point_size an integer"):
        config.load_config(config_path)


def test_explicit_missing_file_is_an_error(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        config.load_config(tmp_path / "nope.toml")


def test_get_config_path_env_dir(monkeypatch, tmp_path):
    monkeypatch.delenv("HURRICANEVIEWER_CONFIG_FILE", raising=False)
    monkeypatch.setenv("HURRICANEVIEWER_CONFIG_DIR", str(tmp_path))

    assert config.get_config_path() == tmp_path / "config.toml"


def test_get_logging_level(monkeypatch, tmp_path, sample_toml_content):
    config_path = tmp_path / "config.toml"
    config_path.write_text(sample_toml_content)
    monkeypatch.setenv("HURRICANEVIEWER_CONFIG_FILE", str(config_path))

    assert config.get_logging_level() == "DEBUG"
