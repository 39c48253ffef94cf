"""Tests for controller param objects."""

import pytest

from mojokit import ConfigurationError, Param, ParamSet, param


def test_default_is_set_without_required_check():
    item = Param("title", None, required=True, type=str)
    assert item.get_value() is None
    with pytest.raises(ConfigurationError):
        item.set_value("")


def test_change_events_fire_only_on_change():
    params = ParamSet.from_specs({"count": param(1, type=int)})
    item = params["count"]
    changes, set_changes = [], []
    item.listen("onChange", changes.append)
    params.listen("on_change", set_changes.append)

    item.set_value(1)
    item.set_value(2)

    assert changes == [item]
    assert set_changes == [params]
    assert params.to_dict() == {"count": 2}


@pytest.mark.parametrize("type_,value", [(int, "1"), (int, True), (str, 3), (list, "abc")])
def test_type_is_checked_strictly(type_, value):
    item = Param("value", type=type_)
    with pytest.raises(ConfigurationError):
        item.set_value(value)


def test_unset_leaves_value():
    params = ParamSet.from_specs({"page": param(3)}, {})
    assert params["page"].get_value() == 3


def test_unknown_param():
    with pytest.raises(ConfigurationError):
        ParamSet()["missing"]
    assert "missing" not in ParamSet()
