from unittest.mock import MagicMock, patch

import pytest

from hurricaneviewer.core.models import VisParams
from hurricaneviewer.exceptions import ConfigurationError
from hurricaneviewer.pipeline import visualize


@pytest.fixture
def precip_vis():
    return VisParams(min=0.0, max=20.0, palette=("1621a2", "ffffff", "ff2300"))


@patch("hurricaneviewer.pipeline.visualize.ee")
def test_visualize_collection(mock_ee, precip_vis):
    collection = MagicMock()

    result = visualize.visualize_collection(collection, precip_vis)

    assert result is collection.map.return_value
    frame = MagicMock()
    collection.map.call_args[0][0](frame)
    mock_ee.Image.assert_called_once_with(frame)
    mock_ee.Image.return_value.visualize.assert_called_once_with(
        min=0.0, max=20.0, palette=["1621a2", "ffffff", "ff2300"]
    )


@patch("hurricaneviewer.pipeline.visualize.ee")
def test_paint_outline(mock_ee):
    borders = MagicMock()

    visualize.paint_outline(borders, "#FFFFFF", width=2)

    byte_image = mock_ee.Image.return_value.byte.return_value
    byte_image.paint.assert_called_once_with(featureCollection=borders, color=1, width=2)
    byte_image.paint.return_value.visualize.assert_called_once_with(palette=["ffffff"])


def test_paint_outline_bad_colour():
    with pytest.raises(ConfigurationError):
        visualize.paint_outline(MagicMock(), "white")


@patch("hurricaneviewer.pipeline.visualize.ee")
def test_overlay_outline_blends_each_frame(mock_ee):
    collection = MagicMock()
    outline = MagicMock(name="outline")

    visualize.overlay_outline(collection, outline)

    collection.map.call_args[0][0](MagicMock())
    mock_ee.Image.return_value.blend.assert_called_once_with(outline)


@patch("hurricaneviewer.pipeline.visualize.ee")
def test_composite_frames_visualizes_then_blends(mock_ee, precip_vis):
    collection = MagicMock()
    outline = MagicMock(name="outline")

    result = visualize.composite_frames(collection, precip_vis, outline)

    visualized = collection.map.return_value
    assert result is visualized.map.return_value


class FrameList:
    """List-backed stand-in for an ImageCollection whose ``map`` runs eagerly."""

    def __init__(self, frames):
        self.frames = list(frames)

    def map(self, fn):
        return FrameList(fn(frame) for frame in self.frames)


@patch("hurricaneviewer.pipeline.visualize.ee")
def test_equal_vis_params_visualize_identically(mock_ee):
    mock_ee.Image.side_effect = lambda image: image
    frames = [MagicMock(name=f"frame{i}") for i in range(2)]

    visualize.visualize_collection(FrameList(frames), VisParams(min=0.0, max=20.0, palette=("#1621A2",)))
    visualize.visualize_collection(FrameList(frames), VisParams(min=0, max=20, palette=("1621a2",)))

    for frame in frames:
        first, second = frame.visualize.call_args_list
        assert first == second == ((), {"min": 0.0, "max": 20.0, "palette": ["1621a2"]})


@patch("hurricaneviewer.pipeline.visualize.ee")
def test_composite_blends_once_per_frame(mock_ee, precip_vis):
    mock_ee.Image.side_effect = lambda image: image
    frames = [MagicMock(name=f"frame{i}") for i in range(3)]
    outline = MagicMock(name="outline")

    result = visualize.composite_frames(FrameList(frames), precip_vis, outline)

    assert len(result.frames) == 3
    for frame, composited in zip(frames, result.frames):
        frame.visualize.assert_called_once_with(min=0.0, max=20.0, palette=["1621a2", "ffffff", "ff2300"])
        frame.visualize.return_value.blend.assert_called_once_with(outline)
        assert composited is frame.visualize.return_value.blend.return_value


@patch("hurricaneviewer.pipeline.visualize.ee")
def test_overlay_twice_reuses_same_outline(mock_ee):
    mock_ee.Image.side_effect = lambda image: image
    frames = [MagicMock(name=f"frame{i}") for i in range(2)]
    outline = MagicMock(name="outline")

    twice = visualize.overlay_outline(visualize.overlay_outline(FrameList(frames), outline), outline)

    for frame, composited in zip(frames, twice.frames):
        once = frame.blend.return_value
        once.blend.assert_called_once_with(outline)
        assert frame.blend.call_args.args[0] is once.blend.call_args.args[0] is outline
        assert composited is once.blend.return_value
    mock_ee.Image.return_value.blend.assert_not_called()
    # The outline is never re-painted or modified
    assert outline.method_calls == []
