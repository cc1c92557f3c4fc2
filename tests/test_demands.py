"""Tests for demand parsing, generation and residence output."""

import numpy as np
import pytest

from mva.demands import (
    format_residences,
    generate_random,
    parse_demands,
    read_demands,
    write_residences,
)
from mva.errors import InvalidInputError


def test_parse_demands_handles_newlines_and_trailing_comma():
    values = parse_demands("0.1,0.2,0.3,\n0.4,0.5\n")
    np.testing.assert_allclose(values, [0.1, 0.2, 0.3, 0.4, 0.5])


def test_parse_demands_does_not_pad():
    assert parse_demands("1,2,3").size == 3


@pytest.mark.parametrize("text", ["0.1,abc", "", " , ,", "0.1,-0.3"])
def test_parse_demands_rejects_bad_content(text):
    with pytest.raises(InvalidInputError):
        parse_demands(text)


def test_read_demands_from_file(tmp_path):
    path = tmp_path / "demands.txt"
    path.write_text("0.25,0.5", encoding="utf-8")
    np.testing.assert_allclose(read_demands(path), [0.25, 0.5])


def test_read_demands_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_demands(tmp_path / "missing.txt")


def test_generate_random_is_seeded_and_bounded():
    first = generate_random(100, seed=11)
    second = generate_random(100, seed=11)
    np.testing.assert_array_equal(first, second)
    assert first.size == 100
    assert np.all((first >= 0) & (first < 0.8))
    assert not np.array_equal(first, generate_random(100, seed=12))


def test_generate_random_requires_stations():
    with pytest.raises(InvalidInputError):
        generate_random(0, seed=1)


def test_format_residences_breaks_lines():
    text = format_residences(np.arange(12, dtype=float), per_line=10)
    lines = text.split("\n")
    assert lines[0] == "0,1,2,3,4,5,6,7,8,9,"
    assert lines[1] == "10,11,"


def test_write_residences_separates_blocks(tmp_path):
    path = write_residences(tmp_path / "out" / "residences.txt", [[1.5, 1.5], [1.5, 1.5001]])
    content = path.read_text(encoding="utf-8")
    assert content == "1.5,1.5,\n\n1.5,1.5001,\n"
