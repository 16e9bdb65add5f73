import numpy as np
import pytest

from digitnet.gui import CANVAS, DigitApp, canvas_to_input, load_gui_network, main
from digitnet.network import Network, WeightsError


def _network(seed=0):
    return Network((784, 16, 10), 0.001, 0.001, np.random.default_rng(seed))


def _white():
    return np.full((CANVAS, CANVAS), 255, dtype=np.uint8)


def test_white_canvas_is_all_zero():
    result = canvas_to_input(_white())
    assert result.shape == (784,)
    assert np.all(result == 0.0)


def test_black_canvas_is_all_one():
    result = canvas_to_input(np.zeros((CANVAS, CANVAS), dtype=np.uint8))
    assert np.allclose(result, 1.0)


def test_single_black_cell_maps_to_its_index():
    pixels = _white()
    pixels[20:30, 30:40] = 0
    result = canvas_to_input(pixels)
    index = 2 * 28 + 3
    assert result[index] == pytest.approx(1.0)
    assert np.count_nonzero(result) == 1


def test_three_channel_canvas_uses_first_channel():
    rgb = np.full((CANVAS, CANVAS, 3), 255, dtype=np.uint8)
    rgb[0:10, 0:10, 0] = 0
    gray = _white()
    gray[0:10, 0:10] = 0
    assert np.array_equal(canvas_to_input(rgb), canvas_to_input(gray))


def test_wrong_canvas_shape_raises():
    with pytest.raises(ValueError):
        canvas_to_input(np.zeros((28, 28)))


def test_headless_app_starts_with_blank_prediction():
    net = _network()
    app = DigitApp(None, net)
    assert np.all(app.pixels == 255)
    assert app.probabilities.sum() == pytest.approx(1.0)
    assert np.allclose(app.probabilities, net.forward(np.zeros(784)))


def test_draw_point_paints_pen_disc():
    app = DigitApp(None, _network())
    app.draw_line((100, 100), (100, 100))
    assert app.pixels[100, 100] == 0
    assert app.pixels[100, 104] == 0
    assert app.pixels[100, 110] == 255


def test_draw_horizontal_line():
    app = DigitApp(None, _network())
    app.draw_line((50, 50), (150, 50))
    assert app.pixels[50, 100] == 0
    assert app.pixels[53, 100] == 0
    assert app.pixels[60, 100] == 255
    assert app.pixels[50, 170] == 255


def test_line_partly_off_canvas_is_clipped():
    app = DigitApp(None, _network())
    app.draw_line((-50, -50), (5, 5))
    assert app.pixels[0, 0] == 0
    assert app.pixels.shape == (CANVAS, CANVAS)


def test_infer_matches_network_on_drawing():
    net = _network()
    app = DigitApp(None, net)
    app.draw_line((40, 40), (200, 220))
    probs = app.infer()
    expected = net.forward(canvas_to_input(app.pixels))
    assert np.allclose(probs, expected)
    assert np.allclose(app.probabilities, expected)


def test_clear_restores_blank_state():
    app = DigitApp(None, _network())
    blank = app.probabilities.copy()
    app.draw_line((10, 10), (270, 270))
    assert np.any(app.pixels == 0)
    app.clear()
    assert np.all(app.pixels == 255)
    assert np.allclose(app.probabilities, blank)


def _write_config(path, sizes):
    path.write_text(
        "neurons: " + ",".join(str(s) for s in sizes) + "\n"
        "learning_rate: 0.01\nregularization: 0.0005\n"
    )


def test_load_gui_network_round_trip(tmp_path):
    original = _network(seed=3)
    weights = tmp_path / "weights.txt"
    original.save(weights)
    config = tmp_path / "config.txt"
    _write_config(config, (784, 16, 10))
    loaded = load_gui_network(config, weights)
    sample = np.linspace(0.0, 1.0, 784)
    assert loaded.layer_sizes == (784, 16, 10)
    assert np.allclose(loaded.forward(sample), original.forward(sample), atol=1e-4)


def test_load_gui_network_needs_two_layers(tmp_path):
    config = tmp_path / "config.txt"
    _write_config(config, (784,))
    with pytest.raises(ValueError):
        load_gui_network(config, tmp_path / "weights.txt")


def test_load_gui_network_layer_mismatch(tmp_path):
    weights = tmp_path / "weights.txt"
    Network((784, 10), rng=np.random.default_rng(1)).save(weights)
    config = tmp_path / "config.txt"
    _write_config(config, (784, 16, 10))
    with pytest.raises(WeightsError):
        load_gui_network(config, weights)


def test_load_gui_network_missing_weights(tmp_path):
    config = tmp_path / "config.txt"
    _write_config(config, (784, 10))
    with pytest.raises(FileNotFoundError):
        load_gui_network(config, tmp_path / "absent.txt")


def test_main_without_config_fails(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 1
    assert "Error" in capsys.readouterr().err


def test_main_without_weights_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_config(tmp_path / "config.txt", (784, 10))
    assert main(["missing.txt"]) == 1