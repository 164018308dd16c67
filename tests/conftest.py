import pytest
import sys
from pathlib import Path
from typing import List, Tuple

from PIL import Image

# Add src to sys.path so we can import stamp_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from stamp_toolkit.core.models import Format, FormatTable, StyleRef, Token  # noqa: E402
from stamp_toolkit.fonts.metrics import FontMetrics  # noqa: E402
from stamp_toolkit.output.sink import RenderSink  # noqa: E402


class FixedMetrics(FontMetrics):
    """
    Deterministic metrics for layout tests.

    Every character is char_width wide (bold text bold_factor times
    wider), a line is the font size high and the ascent is 80% of it.
    With the defaults a five letter word measures 15 (" " + 5 chars).
    """

    def __init__(self, char_width: float = 2.5, bold_factor: float = 1.0):
        self.char_width = char_width
        self.bold_factor = bold_factor

    def string_width(self, text: str, fmt: Format) -> float:
        factor = self.bold_factor if "bold" in fmt.style else 1.0
        return len(text) * self.char_width * factor

    def line_height(self, fmt: Format) -> float:
        return float(fmt.size)

    def ascent(self, fmt: Format) -> float:
        return fmt.size * 0.8


class RecordingSink(RenderSink):
    """Sink that records every operation as a tuple."""

    def __init__(self):
        self.ops: List[Tuple] = []

    def begin_text(self) -> None:
        self.ops.append(("begin_text",))

    def set_position(self, x: float, y: float) -> None:
        self.ops.append(("set_position", x, y))

    def set_font(self, fmt: Format) -> None:
        self.ops.append(("set_font", fmt.font, fmt.size, tuple(sorted(fmt.style))))

    def set_color(self, rgb) -> None:
        self.ops.append(("set_color", tuple(rgb)))

    def draw_run(self, text: str) -> None:
        self.ops.append(("draw_run", text))

    def move_by(self, dx: float, dy: float) -> None:
        self.ops.append(("move_by", dx, dy))

    def end_text(self) -> None:
        self.ops.append(("end_text",))

    def draw_image(self, image, x: float, y: float, width: float, height: float) -> None:
        self.ops.append(("draw_image", image.size, x, y, width, height))

    def named(self, name: str) -> List[Tuple]:
        return [op for op in self.ops if op[0] == name]

    @property
    def runs(self) -> List[str]:
        return [op[1] for op in self.named("draw_run")]


FORMAT_DATA = {
    "paragraph": {"font": "times", "size": 12},
    "heading-1": {"font": "helvetica", "size": 18, "style": ["bold"],
                  "spacing": {"paragraph": {"above": 6, "below": 4}}},
    "heading-2": {"font": "helvetica", "size": 14, "style": ["bold"]},
    "heading-3": {"font": "helvetica", "size": 12, "style": ["bold"]},
    "bullet": {"font": "times", "size": 12, "indent": {"all": 10},
               "list": {"type": "bullet"}, "bullet-char": "*"},
    "number": {"font": "times", "size": 12, "indent": {"all": 10},
               "list": {"type": "number", "numbering": "{n})"}},
}


@pytest.fixture
def format_data():
    """Plain format table description (deep copy per test)."""
    import copy
    return copy.deepcopy(FORMAT_DATA)


@pytest.fixture
def formats():
    """Validated format table covering every tokenizer format key."""
    return FormatTable.from_dict(FORMAT_DATA)


@pytest.fixture
def metrics():
    return FixedMetrics()


@pytest.fixture
def metrics_factory():
    """FixedMetrics class, for tests that need other widths."""
    return FixedMetrics


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def sink_factory():
    """RecordingSink class, for tests that record several pages."""
    return RecordingSink


@pytest.fixture
def paragraph_style():
    return StyleRef("paragraph")


@pytest.fixture
def make_words(paragraph_style):
    """Factory for n five-letter word tokens (15 units wide each)."""
    def _create(n: int, style: StyleRef = None):
        return tuple(Token.word(f"w{i:04d}", style or paragraph_style) for i in range(n))
    return _create


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path
