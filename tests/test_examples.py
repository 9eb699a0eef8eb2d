"""Examples print exactly what their ``# =>`` comments promise."""

from __future__ import annotations

import re
import runpy
from pathlib import Path

import pytest

EXAMPLES_ROOT = Path(__file__).resolve().parent.parent / "examples"
EXPECTATION = re.compile(r"#\s*=>\s*(.*)$")

EXAMPLE_PATHS = sorted(EXAMPLES_ROOT.glob("ex_*/01_*.py"))


def expected_output(path: Path) -> list[str]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [match.group(1).rstrip() for line in lines if (match := EXPECTATION.search(line))]


@pytest.mark.parametrize(
    "path",
    EXAMPLE_PATHS,
    ids=[str(path.relative_to(EXAMPLES_ROOT)) for path in EXAMPLE_PATHS],
)
def test_example_output(path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    expected = expected_output(path)

    runpy.run_path(str(path), run_name="__main__")

    assert expected
    assert capsys.readouterr().out.splitlines() == expected
