"""Synthetic two-column patent document built from literal fragments.

Layout (PDF coordinates, y grows upward):
- page 1: front page
- page 2: drawing sheet ("Sheet 1 of 1")
- page 3: first specification page. Header + column marker, left column at
  x=72, margin numbers at x=300, right column at x=320 (offset 0.5 in y so
  the two columns never share a baseline)
- page 4: second specification page, with one line whose margin number and
  right-column text were merged into the left-column baseline, and a word
  hyphenated across two lines
"""

from __future__ import annotations

import pytest

from patent_models import TextFragment

DOC_ID = "US 9,740,988 B2"
CHAR_WIDTH = 6.0
LEFT_X = 72.0
MARGIN_X = 300.0
RIGHT_X = 320.0
HEADER_X = 260.0


def line_fragments(page: int, x: float, y: float, text: str) -> list[TextFragment]:
    """Split *text* into one fragment per word, each keeping its trailing space."""
    fragments = []
    words = text.split(" ")
    for i, word in enumerate(words):
        chunk = word if i == len(words) - 1 else word + " "
        fragments.append(TextFragment(page=page, x=x, y=y, width=CHAR_WIDTH * len(chunk), text=chunk))
        x += CHAR_WIDTH * len(chunk)
    return fragments


PAGE3_LEFT = [
    (700.0, "A reconnaissance system includes an aerial"),
    (688.0, "vehicle and a ground station. The vehicle"),
    (676.0, "carries a camera , a radar and a"),
    (664.0, "transmitter."),
    (640.0, "In one embodiment the camera is"),
    (628.0, "an infrared camera with a wide"),
    (616.0, "field of view."),
]
PAGE3_MARGIN = [(694.3, "5"), (682.3, "10"), (670.3, "15"), (658.3, "20"), (646.3, "25")]
PAGE3_RIGHT = [
    (700.5, "The ground station receives images"),
    (688.5, "from the vehicle over a wireless"),
    (676.5, "link and displays them to an"),
    (664.5, "operator."),
    (652.5, "The operator may steer the vehicle"),
]

PAGE4_LEFT_BEFORE = [
    (700.0, "the drone performs aerial recon-"),
    (688.0, "naissance of the target area"),
    (676.0, "using the camera described"),
    (664.0, "above, wherein"),
]
PAGE4_LEFT_AFTER = [(640.0, "final left line")]
PAGE4_MARGIN = [(694.3, "30"), (682.3, "35")]
PAGE4_RIGHT = [
    (700.5, "Other embodiments use"),
    (688.5, "several vehicles flying"),
    (676.5, "in formation and"),
]


def _merged_margin_line() -> list[TextFragment]:
    return [
        TextFragment(page=4, x=LEFT_X, y=652.0, width=220.0, text="the sensor array is rigidly mounted "),
        TextFragment(page=4, x=MARGIN_X, y=652.0, width=10.0, text="15"),
        TextFragment(page=4, x=RIGHT_X, y=652.0, width=130.0, text=" on a gimbal assembly"),
    ]


def build_document() -> list[TextFragment]:
    frags: list[TextFragment] = []
    frags += line_fragments(1, 50.0, 760.0, "(12) United States Patent")
    frags += line_fragments(1, 50.0, 500.0, "Abstract of a system for reconnaissance")
    frags += line_fragments(2, 50.0, 760.0, "U.S. Patent")
    frags += line_fragments(2, 300.0, 758.0, "Sheet 1 of 1")
    frags += line_fragments(2, 250.0, 400.0, "FIG. 1")

    frags += line_fragments(3, HEADER_X, 750.0, DOC_ID)
    frags += line_fragments(3, 150.0, 740.0, "1")
    for y, text in PAGE3_LEFT:
        frags += line_fragments(3, LEFT_X, y, text)
    for y, text in PAGE3_MARGIN:
        frags += line_fragments(3, MARGIN_X, y, text)
    for y, text in PAGE3_RIGHT:
        frags += line_fragments(3, RIGHT_X, y, text)

    frags += line_fragments(4, HEADER_X, 750.0, DOC_ID)
    for y, text in PAGE4_LEFT_BEFORE:
        frags += line_fragments(4, LEFT_X, y, text)
    frags += _merged_margin_line()
    for y, text in PAGE4_LEFT_AFTER:
        frags += line_fragments(4, LEFT_X, y, text)
    for y, text in PAGE4_MARGIN:
        frags += line_fragments(4, MARGIN_X, y, text)
    for y, text in PAGE4_RIGHT:
        frags += line_fragments(4, RIGHT_X, y, text)
    return frags


@pytest.fixture
def fragments() -> list[TextFragment]:
    return build_document()


def build_shared_baseline_document() -> list[TextFragment]:
    """One specification page where right-column lines share left-column baselines.

    At y=688 the right-column text sits on the left line's baseline with no
    margin number between them; at y=676 the margin number "10" separates the
    two columns on a shared baseline.
    """
    frags: list[TextFragment] = []
    frags += line_fragments(1, HEADER_X, 750.0, DOC_ID)
    frags += line_fragments(1, 150.0, 740.0, "1")
    frags += line_fragments(1, LEFT_X, 700.0, "A heater warms the sample chamber")
    frags += line_fragments(1, LEFT_X, 688.0, "a thermostat reads the temperature")
    frags += line_fragments(1, LEFT_X, 676.0, "the heater is controlled by a relay")
    frags.append(TextFragment(page=1, x=MARGIN_X, y=676.0, width=CHAR_WIDTH * 4, text=" 10 "))
    frags.append(TextFragment(page=1, x=MARGIN_X, y=694.3, width=CHAR_WIDTH, text="5"))
    frags += line_fragments(1, RIGHT_X, 700.5, "The relay is rated for mains")
    frags.append(TextFragment(page=1, x=RIGHT_X, y=688.0, width=CHAR_WIDTH * 21, text=" and reports upstream"))
    frags.append(TextFragment(page=1, x=RIGHT_X, y=676.0, width=CHAR_WIDTH * 24, text=" through the control bus"))
    return frags


@pytest.fixture
def shared_baseline_fragments() -> list[TextFragment]:
    return build_shared_baseline_document()
