import pytest

from eng_tutor.levels import (
    demote, get_level_info, is_level, level_distance, level_index, promote, shift,
)


def test_promote_and_demote_clamp():
    assert promote("A1") == "A2"
    assert promote("B2") == "B2"
    assert demote("B1") == "A2"
    assert demote("A1") == "A1"


def test_shift():
    assert shift("A2", 1) == "B1"
    assert shift("A2", -3) == "A1"
    assert shift("B1", 5) == "B2"


def test_level_index_only_covers_placement_levels():
    assert level_index("A1") == 0
    assert level_index("B2") == 3
    with pytest.raises(ValueError):
        level_index("C1")


def test_is_level():
    assert is_level("C2")
    assert not is_level("D1")


def test_level_distance():
    assert level_distance("A1", "B2") == 3
    assert level_distance("B1", "A2") == 1


def test_get_level_info():
    info = get_level_info("B1")
    assert info["code"] == "B1"
    assert info["name"] == "Intermediate"
    assert info["korean_name"] == "중급"
    with pytest.raises(ValueError):
        get_level_info("Z9")
