"""Command line entry point: render the hurricane viewer outputs.

Loads the configuration once, initializes Earth Engine and runs every
pipeline stage with explicit parameters: animations, point charts, the wind
speed legend and the map layer manifest.
"""

from __future__ import annotations

import argparse
import dataclasses
import pathlib
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from hurricaneviewer.core.configuration import ImageDatasetConfig, ViewerConfig, load_viewer_config
from hurricaneviewer.earth_engine import session
from hurricaneviewer.exceptions import HurricaneViewerError, PlatformError
from hurricaneviewer.pipeline import charts, exporter, layers, legend, loader, styles, visualize
from hurricaneviewer.utils import log

LOGGER = log.get_logger(__name__)

PRECIPITATION = "precipitation"
SEA_SURFACE_TEMPERATURE = "sea_surface_temperature"


@dataclass(frozen=True)
class LoadedDataset:
    name: str
    source: ImageDatasetConfig
    collection: Any
    frame_count: int


@dataclass
class ViewerResult:
    """Paths and URLs produced by one run."""

    animations: list[exporter.AnimationExport] = field(default_factory=list)
    charts: dict[str, pathlib.Path] = field(default_factory=dict)
    legend_path: Optional[pathlib.Path] = None
    layers_path: Optional[pathlib.Path] = None


def load_datasets(config: ViewerConfig) -> list[LoadedDataset]:
    """Load both raster datasets and check their frames against the window."""
    datasets = []
    for name, source, load in (
        (PRECIPITATION, config.precipitation, loader.load_precipitation),
        (SEA_SURFACE_TEMPERATURE, config.sea_surface_temperature, loader.load_sea_surface_temperature),
    ):
        collection = load(source)
        frame_count = loader.ensure_not_empty(collection, f"{name.replace('_', ' ')} frames")
        loader.check_frames_in_range(loader.frame_timestamps(collection), source.date_range)
        datasets.append(LoadedDataset(name=name, source=source, collection=collection, frame_count=frame_count))
    return datasets


def render_animations(
    config: ViewerConfig, datasets: Sequence[LoadedDataset], borders: Any
) -> list[exporter.AnimationExport]:
    exports = []
    for dataset in datasets:
        animation = config.animations.get(dataset.name)
        if animation is None:
            LOGGER.debug("No animation configured for %s", dataset.name)
            continue
        outline = visualize.paint_outline(borders, animation.outline_color, config.borders.width)
        frames = visualize.composite_frames(dataset.collection, dataset.source.vis, outline)
        exports.append(
            exporter.export_animation(
                frames,
                animation.spec,
                config.output_dir / animation.filename,
                title=animation.title,
                timeout=config.download_timeout,
            )
        )
    return exports


def render_charts(config: ViewerConfig, datasets: Sequence[LoadedDataset]) -> dict[str, pathlib.Path]:
    rendered = {}
    for dataset in datasets:
        chart = config.charts.get(dataset.name)
        if chart is None:
            LOGGER.debug("No chart configured for %s", dataset.name)
            continue
        series = charts.sample_series(dataset.collection, config.point_of_interest, chart.spec, dataset.source.band)
        if len(series) != dataset.frame_count:
            LOGGER.warning(
                "%s chart has %d points for %d frames", dataset.name, len(series), dataset.frame_count
            )
        rendered[dataset.name] = charts.render_chart(series, chart.spec, config.output_dir / chart.filename)
    return rendered


def render_layers(config: ViewerConfig, datasets: Sequence[LoadedDataset], track: Any) -> pathlib.Path:
    map_layers = [
        layers.build_layer(d.collection, d.source.vis, d.source.layer_name, d.source.show_layer) for d in datasets
    ]
    styled_track = styles.style_track(
        track,
        config.wind_styles,
        config.best_track.wind_property,
        drop_unstyled=config.best_track.drop_unstyled,
    )
    map_layers.append(
        layers.build_layer(styled_track, None, config.best_track.layer_name, config.best_track.show_layer)
    )
    return layers.write_layer_manifest(
        map_layers, config.point_of_interest, config.zoom, config.output_dir / config.layers_filename
    )


def run(
    config: ViewerConfig,
    skip_gifs: bool = False,
    skip_charts: bool = False,
    skip_layers: bool = False,
) -> ViewerResult:
    """Run every enabled stage against an initialized Earth Engine session."""
    result = ViewerResult()
    config.output_dir.mkdir(parents=True, exist_ok=True)

    datasets = load_datasets(config)

    track = loader.load_best_track(config.best_track)
    loader.ensure_not_empty(track, f"{config.best_track.storm_name} best-track records")

    if not skip_gifs:
        borders = loader.load_borders(config.borders)
        result.animations = render_animations(config, datasets, borders)

    if not skip_charts:
        result.charts = render_charts(config, datasets)

    panel = legend.build_legend(config.legend.title, config.legend.entries)
    result.legend_path = legend.render_legend(panel, config.output_dir / config.legend.filename)

    if not skip_layers:
        result.layers_path = render_layers(config, datasets, track)

    return result


def _apply_overrides(config: ViewerConfig, args: argparse.Namespace) -> ViewerConfig:
    if args.output_dir:
        config = dataclasses.replace(config, output_dir=pathlib.Path(args.output_dir).expanduser())
    if args.project:
        config = dataclasses.replace(
            config, earth_engine=dataclasses.replace(config.earth_engine, project=args.project)
        )
    if args.storm:
        config = dataclasses.replace(
            config, best_track=dataclasses.replace(config.best_track, storm_name=args.storm.upper())
        )
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hurricaneviewer",
        description="Render hurricane precipitation, sea surface temperature and best-track outputs from Earth Engine.",
    )
    parser.add_argument("--config", type=pathlib.Path, default=None, help="TOML config file to use.")
    parser.add_argument("--output-dir", default=None, help="Directory for GIFs, charts, legend and layers.")
    parser.add_argument("--project", default=None, help="Google Cloud project registered for Earth Engine.")
    parser.add_argument("--storm", default=None, help="Storm name to filter best-track records by.")
    parser.add_argument("--skip-gifs", action="store_true", help="Do not request or download animations.")
    parser.add_argument("--skip-charts", action="store_true", help="Do not sample or draw time-series charts.")
    parser.add_argument("--skip-layers", action="store_true", help="Do not request map tiles or write layers.json.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        log.set_level(debug_mode=True)

    try:
        config = _apply_overrides(load_viewer_config(args.config), args)
        log.set_level(debug_mode=args.debug, level_name=config.log_level)
        session.initialize(config.earth_engine)
        result = run(
            config,
            skip_gifs=args.skip_gifs,
            skip_charts=args.skip_charts,
            skip_layers=args.skip_layers,
        )
    except PlatformError as exc:
        LOGGER.error("%s", exc.get_user_message())
        if exc.technical_details:
            LOGGER.debug("Details:\n%s", exc.technical_details)
        return 1
    except HurricaneViewerError as exc:
        LOGGER.error("%s", exc)
        return 1

    for animation in result.animations:
        LOGGER.info("%s (%d frames): %s", animation.title, animation.frame_count, animation.url)
    LOGGER.info("Outputs written to %s", config.output_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
