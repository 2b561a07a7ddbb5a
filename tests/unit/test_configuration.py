"""Tests for building the typed ViewerConfig tree."""

import datetime
import pathlib

import pytest

from hurricaneviewer.core.configuration import build_viewer_config, load_viewer_config
from hurricaneviewer.exceptions import ConfigurationError, InvalidDateRangeError


class TestBuildViewerConfig:
    def test_default_storm(self, viewer_config, temp_dir) -> None:
        assert viewer_config.output_dir == temp_dir
        assert viewer_config.log_level == "INFO"
        assert viewer_config.best_track.storm_name == "MARIA"
        assert viewer_config.best_track.drop_unstyled is True
        assert viewer_config.point_of_interest.name == "San Juan, PR"
        assert viewer_config.zoom == 4
        assert viewer_config.download_timeout == 120.0

    def test_date_ranges(self, viewer_config) -> None:
        precip = viewer_config.precipitation.date_range

        assert precip.start == datetime.datetime(2017, 9, 19, tzinfo=datetime.timezone.utc)
        assert precip.duration == datetime.timedelta(days=2)
        assert viewer_config.sea_surface_temperature.date_range.duration == datetime.timedelta(days=8)

    def test_sst_scaling(self, viewer_config) -> None:
        sst = viewer_config.sea_surface_temperature

        assert sst.scale_factor == 0.001
        assert sst.offset == 20.0
        assert viewer_config.precipitation.scale_factor == 1.0

    def test_animation_regions_resolved(self, viewer_config) -> None:
        animation = viewer_config.animations["precipitation"]

        assert animation.spec.region is viewer_config.regions["precipitation"]
        assert animation.spec.region.north == 21.604
        assert animation.filename == "precipitation.gif"
        assert viewer_config.animations["sea_surface_temperature"].spec.frames_per_second == 5

    def test_chart_style_applied(self, viewer_config) -> None:
        chart = viewer_config.charts["sea_surface_temperature"]

        assert chart.spec.x_property == "system:index"
        assert chart.spec.line_color == "577590"
        assert chart.spec.line_width == 3.0

    def test_wind_styles_and_legend(self, viewer_config) -> None:
        assert len(viewer_config.wind_styles) == 25
        assert viewer_config.wind_styles.require(150).color == "f94144"
        assert len(viewer_config.legend.entries) == 9
        assert viewer_config.legend.entries[0].label == "30 - 39"

    def test_empty_credentials_become_none(self, viewer_config) -> None:
        assert viewer_config.earth_engine.project is None
        assert viewer_config.earth_engine.key_file is None

    def test_storm_name_upper_cased(self, default_config_data) -> None:
        default_config_data["best_track"]["storm_name"] = "irma"

        assert build_viewer_config(default_config_data).best_track.storm_name == "IRMA"

    def test_reversed_dates_rejected(self, default_config_data) -> None:
        default_config_data["precipitation"]["start"] = "2017-09-21"
        default_config_data["precipitation"]["end"] = "2017-09-19"

        with pytest.raises(InvalidDateRangeError):
            build_viewer_config(default_config_data)

    def test_fractional_wind_speed_rejected(self, default_config_data) -> None:
        default_config_data["wind_styles"] = [{"speed": 32.5, "color": "577590", "point_size": 9}]

        with pytest.raises(ConfigurationError, match="whole knots"):
            build_viewer_config(default_config_data)

    def test_malformed_region(self, default_config_data) -> None:
        default_config_data["regions"]["precipitation"] = [-73.7, 21.6]

        with pytest.raises(ConfigurationError, match="four numbers"):
            build_viewer_config(default_config_data)

    def test_missing_chart_key_wrapped(self, default_config_data) -> None:
        del default_config_data["charts"]["precipitation"]["filename"]

        with pytest.raises(ConfigurationError, match="KeyError") as exc_info:
            build_viewer_config(default_config_data)

        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_non_numeric_value_wrapped(self, default_config_data) -> None:
        default_config_data["point_of_interest"]["lon"] = "west"

        with pytest.raises(ConfigurationError, match="ValueError"):
            build_viewer_config(default_config_data)

    def test_log_level_normalized(self, default_config_data) -> None:
        default_config_data["logging"]["level"] = "warning"

        assert build_viewer_config(default_config_data).log_level == "WARNING"

    def test_unknown_log_level_rejected(self, default_config_data) -> None:
        default_config_data["logging"]["level"] = "VERBOSE"

        with pytest.raises(ConfigurationError, match="logging.level"):
            build_viewer_config(default_config_data)


def test_load_viewer_config_from_file(tmp_path: pathlib.Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        f"""
output_dir = "{tmp_path.as_posix()}"

[earth_engine]
project = "my-cloud-project"

[point_of_interest]
zoom = 6
"""
    )

    viewer_config = load_viewer_config(config_path)

    assert viewer_config.earth_engine.project == "my-cloud-project"
    assert viewer_config.zoom == 6
    assert viewer_config.output_dir == tmp_path
