from PIL import Image

from hurricaneviewer.core.models import LegendEntry
from hurricaneviewer.pipeline.legend import LegendPanel, LegendRow, build_legend, render_legend


def test_build_legend_keeps_order(viewer_config):
    panel = build_legend(viewer_config.legend.title, viewer_config.legend.entries)

    assert panel.title == "Max Wind Speed (kts)"
    assert len(panel.rows) == 9
    assert panel.rows[0] == LegendRow(color="577590", label="30 - 39")
    assert panel.rows[-1] == LegendRow(color="f94144", label="140 - 150")


def test_add_row():
    panel = LegendPanel(title="Test")
    panel.add(LegendRow(color="000000", label="calm"))

    assert [r.label for r in panel.rows] == ["calm"]


def test_render_legend_png(tmp_path):
    entries = [LegendEntry(color="577590", label="30 - 39"), LegendEntry(color="f94144", label="140 - 150")]
    destination = tmp_path / "out" / "wind_speed_legend.png"

    path = render_legend(build_legend("Max Wind Speed (kts)", entries), destination)

    assert path == destination
    with Image.open(destination) as img:
        assert img.format == "PNG"
        width, height = img.size
    assert width > 0 and height > 0


def test_render_legend_grows_with_rows(tmp_path):
    short = render_legend(
        build_legend("t", [LegendEntry(color="577590", label="a")]), tmp_path / "short.png"
    )
    tall = render_legend(
        build_legend("t", [LegendEntry(color="577590", label=str(i)) for i in range(9)]), tmp_path / "tall.png"
    )

    with Image.open(short) as a, Image.open(tall) as b:
        assert b.size[1] > a.size[1]
        assert b.size[0] == a.size[0]
