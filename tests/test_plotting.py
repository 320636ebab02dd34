from descentchart.layout import LayoutOptions, layout_chart
from descentchart.plotting import chart_to_dot, plot_layout, write_dot


def test_chart_to_dot(two_marriages_chart):
    dot = chart_to_dot(two_marriages_chart).to_string()
    assert "FAM_1_1" in dot
    assert "FAM_4_1" in dot
    assert "rank=same" in dot
    assert "Person One" in dot


def test_write_dot_source(tmp_path, two_marriages_chart):
    path = tmp_path / "chart.dot"
    write_dot(two_marriages_chart, path)
    text = path.read_text()
    assert text.startswith("digraph")
    assert "FAM_1_2" in text


def test_plot_layout(tmp_path, two_marriages_chart):
    lay = layout_chart(two_marriages_chart, LayoutOptions(debug=True))
    path = tmp_path / "preview.png"
    plot_layout(lay, path)
    assert path.stat().st_size > 0
