"""
Tests for SpectraFilm barcode rendering and the frame series pipeline.
"""

import numpy as np
import pytest
from PIL import Image

from spectrafilm.analysis.colors import Color
from spectrafilm.config import BarcodeConfig, ReductionConfig, SpectraFilmConfig
from spectrafilm.errors import DecodeFailure, EmptyFrame, EncodeFailure, InvalidConfiguration
from spectrafilm.io.frames import PixelGrid
from spectrafilm.pipeline import FrameSeriesPipeline
from spectrafilm.visualization.barcode import BarcodeComposer

RED = Color(255, 0, 0)
GREEN = Color(0, 255, 0)
BLUE = Color(0, 0, 255)
TRANSPARENT = [0, 0, 0, 0]


def solid_frame(color: Color, width: int = 4, height: int = 3) -> np.ndarray:
    """Frame filled with a single color."""
    return np.full((height, width, 3), color.rgb, dtype=np.uint8)


def read_png(path) -> np.ndarray:
    with Image.open(path) as image:
        return np.asarray(image.convert('RGBA'))


# Composer

def test_line_image_bands():
    colors = [RED, Color(10, 20, 30), BLUE]
    composer = BarcodeComposer(BarcodeConfig(width=10, line_height=4))

    raster = composer.render_lines(colors)

    assert raster.shape == (12, 10, 4)
    for i, color in enumerate(colors):
        band = raster[i * 4:(i + 1) * 4]
        assert np.all(band == np.array(color.rgba, dtype=np.uint8))


def test_column_image_bands_and_remainder():
    composer = BarcodeComposer(BarcodeConfig(width=10, line_height=2))

    raster = composer.render_columns([(RED, GREEN, BLUE), (GREEN,)])

    assert raster.shape == (4, 10, 4)
    first = raster[0:2]
    assert np.all(first[:, 0:3] == RED.rgba)
    assert np.all(first[:, 3:6] == GREEN.rgba)
    assert np.all(first[:, 6:9] == BLUE.rgba)
    # 10 // 3 leaves one pixel of background on the right
    assert np.all(first[:, 9] == TRANSPARENT)
    assert np.all(raster[2:4] == GREEN.rgba)


def test_column_image_empty_palette_is_background():
    composer = BarcodeComposer(BarcodeConfig(width=6, line_height=3))

    raster = composer.render_columns([(RED,), (), (BLUE, GREEN)])

    assert np.all(raster[3:6] == TRANSPARENT)
    assert np.all(raster[0:3] == RED.rgba)


def test_column_image_palette_wider_than_image():
    composer = BarcodeComposer(BarcodeConfig(width=2, line_height=1))

    raster = composer.render_columns([(RED, GREEN, BLUE)])

    assert raster.shape == (1, 2, 4)
    assert np.all(raster == TRANSPARENT)


def test_written_line_image_round_trip(tmp_path):
    colors = [Color(1, 2, 3), Color(250, 128, 7), Color(0, 0, 0), Color(255, 255, 255)]
    composer = BarcodeComposer(BarcodeConfig(width=5, line_height=3))
    path = composer.write_line_image(colors, tmp_path / "avg.png")

    pixels = read_png(path)
    assert pixels.shape == (12, 5, 4)
    for i, color in enumerate(colors):
        assert np.all(pixels[i * 3:(i + 1) * 3] == np.array(color.rgba, dtype=np.uint8))


def test_written_column_image(tmp_path):
    composer = BarcodeComposer(BarcodeConfig(width=4, line_height=1))
    path = composer.write_column_image([(RED, BLUE), ()], tmp_path / "mode_2.png")

    pixels = read_png(path)
    assert pixels[0, :2].tolist() == [list(RED.rgba)] * 2
    assert pixels[0, 2:].tolist() == [list(BLUE.rgba)] * 2
    assert pixels[1].tolist() == [TRANSPARENT] * 4


def test_write_failures(tmp_path):
    composer = BarcodeComposer(BarcodeConfig(width=4, line_height=1))

    with pytest.raises(EncodeFailure):
        composer.write_line_image([RED], tmp_path / "missing" / "avg.png")
    with pytest.raises(EncodeFailure):
        composer.write_line_image([], tmp_path / "avg.png")


# Pipeline

def test_series_keeps_input_order():
    colors = [Color(i * 10, 255 - i * 10, i) for i in range(20)]
    pipeline = FrameSeriesPipeline(ReductionConfig(average=True, median=True), max_workers=4)

    series = pipeline.reduce_series(solid_frame(c) for c in colors)

    assert len(series) == 20
    assert series.averages() == colors
    assert series.medians() == colors
    assert [p.source for p in series] == [f"frame_{i:06d}" for i in range(20)]


def test_series_accepts_named_sources():
    pipeline = FrameSeriesPipeline(ReductionConfig(dominant_count=2), max_workers=1)

    series = pipeline.reduce_series([
        ("a", solid_frame(RED)),
        ("b", PixelGrid.from_array(solid_frame(BLUE))),
        ("c", Image.new('RGB', (3, 3), GREEN.rgb)),
    ])

    assert [p.source for p in series] == ["a", "b", "c"]
    assert series.dominants() == [(RED,), (BLUE,), (GREEN,)]
    assert series.to_records()[0] == {'Path': "a", 'Average': "#FF0000", 'Median': "", 'Mode': ["#FF0000"]}


def test_series_fails_fast_on_bad_frame(tmp_path):
    pipeline = FrameSeriesPipeline(max_workers=2)
    sources = [solid_frame(RED), tmp_path / "missing.png", solid_frame(BLUE)]

    with pytest.raises(DecodeFailure):
        pipeline.reduce_series(sources)

    serial = FrameSeriesPipeline(max_workers=1)
    with pytest.raises(EmptyFrame):
        serial.reduce_series([solid_frame(RED), np.zeros((0, 0, 3), dtype=np.uint8)])


def test_pipeline_rejects_bad_worker_count():
    with pytest.raises(InvalidConfiguration):
        FrameSeriesPipeline(max_workers=0)


def test_reduce_directory_uses_file_name_order(tmp_path):
    Image.new('RGB', (4, 4), BLUE.rgb).save(tmp_path / "img000002.png")
    Image.new('RGB', (4, 4), RED.rgb).save(tmp_path / "img000001.png")
    (tmp_path / "notes.txt").write_text("not a frame")

    series = FrameSeriesPipeline(max_workers=2).reduce_directory(tmp_path)

    assert [p.source for p in series] == ["frames/img000001.png", "frames/img000002.png"]
    assert series.averages() == [RED, BLUE]


def test_reduce_directory_missing(tmp_path):
    with pytest.raises(DecodeFailure):
        FrameSeriesPipeline().reduce_directory(tmp_path / "frames")


def test_render_barcodes(tmp_path, capsys):
    pipeline = FrameSeriesPipeline(
        ReductionConfig.from_flags(all_metrics=True, dominant_count=2),
        BarcodeConfig(width=8, line_height=2),
        verbose=True,
    )
    frames = [solid_frame(RED), solid_frame(GREEN), solid_frame(BLUE)]

    series = pipeline.run(frames, tmp_path)

    assert len(series) == 3
    assert sorted(p.name for p in tmp_path.iterdir()) == ["avg.png", "med.png", "mode_2.png"]
    average = read_png(tmp_path / "avg.png")
    assert average.shape == (6, 8, 4)
    assert np.all(average[2:4] == GREEN.rgba)

    output = capsys.readouterr().out
    assert "Generating" in output
    assert "Average: #FF0000" in output


def test_pipeline_from_config(tmp_path):
    config = SpectraFilmConfig.from_dict({
        'barcode': {'width': 3, 'line_height': 1},
        'reduction': {'median': True},
        'pipeline': {'max_workers': 1},
        'output': {'median_file': "median.png"},
        'logging': {'verbose': False},
    })
    pipeline = FrameSeriesPipeline.from_config(config)

    written = pipeline.render_barcodes(pipeline.reduce_series([solid_frame(BLUE)]), tmp_path)

    assert list(written) == ['median']
    assert read_png(written['median']).shape == (1, 3, 4)


def test_series_rejects_malformed_named_source():
    pipeline = FrameSeriesPipeline(max_workers=1)

    with pytest.raises(DecodeFailure):
        pipeline.reduce_series([("a", solid_frame(RED), "extra")])
    with pytest.raises(DecodeFailure):
        pipeline.reduce_series([("a",)])
