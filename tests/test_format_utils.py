from datetime import timedelta

import pytest

from import_converter.utils.format_utils import find_key_in_dictionary, format_timedelta, formatted_size


@pytest.mark.parametrize(
    "size,expected",
    [(0, "0 B"), (-5, "0 B"), (512, "512 B"), (1536, "1.50 KB"), (2 * 1024 ** 2, "2 MB"), (3 * 1024 ** 3, "3 GB")],
)
def test_formatted_size(size, expected):
    assert formatted_size(size) == expected


def test_format_timedelta():
    assert format_timedelta(timedelta(seconds=7261)) == "02:01:01"
    assert format_timedelta("later") == "00:00:00"


def test_find_key_in_dictionary():
    probe = {"format": {"tags": {"creation_time": "2023-07-04T08:15:00Z"}}, "streams": []}
    assert find_key_in_dictionary(probe, "creation_time") == "2023-07-04T08:15:00Z"
    assert find_key_in_dictionary(probe, "duration") is None
    assert find_key_in_dictionary([], "creation_time") is None
