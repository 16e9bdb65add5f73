"""Drawing window that classifies a hand-drawn digit with a trained network."""

from __future__ import annotations

import math
import sys
from pathlib import Path

import numpy as np

from .config import read_config
from .data import INPUT_SIZE
from .network import Network

CANVAS = 280
GRID = 28
CELL = CANVAS // GRID
PEN_W = 12
MAX_LAYERS = 10
BAR_MAX = 220
WINDOW_WIDTH = 600
WINDOW_HEIGHT = 340
MARGIN = 10
BAR_COLOUR = "#6495ED"
CONFIG_FILE = "config.txt"
DEFAULT_WEIGHTS = "weights.txt"
WINDOW_TITLE = "MNIST GUI – draw a digit"


def canvas_to_input(pixels) -> np.ndarray:
    """Average a 280x280 canvas into 28x28 cells and map white to 0, black to 1.

    ``pixels`` is a grayscale ``(280, 280)`` array, or an ``(280, 280, channels)``
    array of which the first channel is used.
    """
    pixels = np.asarray(pixels)
    if pixels.ndim == 3:
        pixels = pixels[:, :, 0]
    if pixels.shape != (CANVAS, CANVAS):
        raise ValueError(f"canvas must be {CANVAS}x{CANVAS}, got {pixels.shape}")
    cells = pixels.astype(float).reshape(GRID, CELL, GRID, CELL).mean(axis=(1, 3))
    return (1.0 - cells / 255.0).ravel()


def load_gui_network(config_path: str | Path, weights_path: str | Path) -> Network:
    """Build the network described by ``config_path`` and load its trained weights."""
    config = read_config(config_path)
    sizes = config.layer_sizes
    if len(sizes) < 2:
        raise ValueError("configuration must define at least 2 layers")
    if len(sizes) > MAX_LAYERS:
        raise ValueError(f"configuration defines more than {MAX_LAYERS} layers")
    if sizes[0] > INPUT_SIZE:
        raise ValueError(f"input layer has {sizes[0]} neurons, the canvas gives {INPUT_SIZE}")
    network = Network(sizes, config.learning_rate, config.regularization)
    network.load(weights_path)
    return network


def _stamp_segment(pixels: np.ndarray, start, end, width: float) -> None:
    """Paint black every pixel within ``width / 2`` of the segment ``start``-``end``."""
    x0, y0 = (float(v) for v in start)
    x1, y1 = (float(v) for v in end)
    radius = width / 2.0
    height, span = pixels.shape[:2]
    xmin = max(int(math.floor(min(x0, x1) - radius)), 0)
    xmax = min(int(math.ceil(max(x0, x1) + radius)), span - 1)
    ymin = max(int(math.floor(min(y0, y1) - radius)), 0)
    ymax = min(int(math.ceil(max(y0, y1) + radius)), height - 1)
    if xmin > xmax or ymin > ymax:
        return
    ys, xs = np.mgrid[ymin:ymax + 1, xmin:xmax + 1]
    dx, dy = x1 - x0, y1 - y0
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        t = np.zeros(xs.shape)
    else:
        t = np.clip(((xs - x0) * dx + (ys - y0) * dy) / length_sq, 0.0, 1.0)
    px = x0 + t * dx
    py = y0 + t * dy
    mask = (xs - px) ** 2 + (ys - py) ** 2 <= radius * radius
    pixels[ymin:ymax + 1, xmin:xmax + 1][mask] = 0


class DigitApp:
    """A white canvas to draw on and a live panel of class probabilities.

    With ``master`` set to ``None`` the app keeps only its pixel buffer and
    predictions, without any widgets.
    """

    def __init__(self, master, network: Network) -> None:
        self.network = network
        self.pixels = np.full((CANVAS, CANVAS), 255, dtype=np.uint8)
        self.probabilities = np.zeros(network.layer_sizes[-1])
        self._drawing = False
        self._last: tuple[int, int] | None = None
        self._canvas = None
        self._panel = None
        if master is not None:
            self._build(master)
        self.infer()

    def _build(self, master) -> None:
        import tkinter as tk

        self._round_cap = tk.ROUND
        self._canvas = tk.Canvas(
            master, width=CANVAS, height=CANVAS, bg="white",
            highlightthickness=1, highlightbackground="black",
        )
        self._canvas.place(x=MARGIN, y=MARGIN)
        self._panel = tk.Canvas(
            master, width=WINDOW_WIDTH - MARGIN - (CANVAS + 2 * MARGIN),
            height=CANVAS, bg="white", highlightthickness=0,
        )
        self._panel.place(x=CANVAS + 2 * MARGIN, y=MARGIN)

        self._canvas.bind("<ButtonPress-1>", self._on_press)
        self._canvas.bind("<B1-Motion>", self._on_motion)
        self._canvas.bind("<ButtonRelease-1>", self._on_release)
        self._canvas.bind("<ButtonPress-3>", lambda event: self.clear())
        master.bind("<KeyPress-c>", lambda event: self.clear())
        master.bind("<KeyPress-C>", lambda event: self.clear())

    def clear(self) -> None:
        """Wipe the canvas white and recompute the prediction."""
        self.pixels.fill(255)
        if self._canvas is not None:
            self._canvas.delete("ink")
        self.infer()

    def draw_line(self, start, end) -> None:
        """Draw a thick black stroke from ``start`` to ``end`` (canvas coordinates)."""
        _stamp_segment(self.pixels, start, end, PEN_W)
        if self._canvas is not None:
            self._canvas.create_line(
                start[0], start[1], end[0], end[1], width=PEN_W, fill="black",
                capstyle=self._round_cap, tags="ink",
            )

    def infer(self) -> np.ndarray:
        """Classify the current drawing, refresh the panel and return the probabilities."""
        self.probabilities = self.network.forward(canvas_to_input(self.pixels))
        self._redraw_panel()
        return self.probabilities.copy()

    def _redraw_panel(self) -> None:
        if self._panel is None:
            return
        self._panel.delete("all")
        x_text, y = 5, 5
        for digit, prob in enumerate(self.probabilities):
            self._panel.create_text(x_text, y, anchor="nw", text=f"{digit} : {prob:.3f}")
            length = int(prob * BAR_MAX + 0.5)
            if length > 0:
                self._panel.create_rectangle(
                    x_text + 80, y + 2, x_text + 80 + length, y + 14,
                    fill=BAR_COLOUR, outline="",
                )
            y += 20

    def _on_press(self, event) -> None:
        self._drawing = True
        self._last = (event.x, event.y)

    def _on_motion(self, event) -> None:
        if not self._drawing:
            return
        point = (event.x, event.y)
        self.draw_line(self._last, point)
        self._last = point
        self.infer()

    def _on_release(self, event) -> None:
        self._drawing = False
        self.infer()


def main(argv=None) -> int:
    """Open the drawing window; the optional first argument is the weights file."""
    args = sys.argv[1:] if argv is None else list(argv)
    weights = args[0] if args else DEFAULT_WEIGHTS
    try:
        network = load_gui_network(CONFIG_FILE, weights)
    except OSError as exc:
        print(f"Error: cannot read {exc.filename or weights}: {exc.strerror}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    import tkinter as tk

    root = tk.Tk()
    root.title(WINDOW_TITLE)
    root.geometry(f"{WINDOW_WIDTH}x{WINDOW_HEIGHT}")
    root.resizable(False, False)
    DigitApp(root, network)
    root.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())