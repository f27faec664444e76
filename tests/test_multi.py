#!/usr/bin/env python3
"""
Tests for repeatable options and the Multi accumulator.
"""

import enum
from dataclasses import dataclass, field

import pytest

from structopts import CapacityExceeded, CoercionFailure, Multi, TypeCategory, describe, parse


class Level(enum.Enum):
    debug = 10
    info = 20


@dataclass
class RepeatConfig:
    """Configuration with repeatable fields."""

    include: Multi[str, 2] = field(
        default_factory=Multi[str, 2], metadata={"short": "I", "help": "Include path"}
    )
    number: Multi[int, 3] = field(default_factory=Multi[int, 3])
    level: Multi[Level, 2] = field(default_factory=Multi[Level, 2])


class TestMultiContainer:
    """Test suite for the Multi container itself."""

    def test_alias_builds_empty_container(self):
        values = Multi[str, 2]()

        assert isinstance(values, Multi)
        assert values.capacity == 2
        assert values.item_type is str
        assert len(values) == 0
        assert not values.is_full

    def test_append_in_order(self):
        values = Multi(3)
        values.append("a")
        values.append("b")

        assert list(values) == ["a", "b"]
        assert values == ["a", "b"]
        assert values[1] == "b"
        assert "a" in values

    def test_append_beyond_capacity(self):
        values = Multi(1)
        values.append("a")

        with pytest.raises(CapacityExceeded) as exc:
            values.append("b")
        assert exc.value.capacity == 1
        assert exc.value.field is None
        assert values == ["a"]
        assert values.is_full

    def test_capacity_error_takes_field_first(self):
        error = CapacityExceeded("tag", 3)

        assert error.field == "tag"
        assert error.capacity == 3
        assert str(error) == "Option 'tag' accepts at most 3 values"

    def test_no_removal(self):
        values = Multi(2)
        assert not hasattr(values, "pop")
        assert not hasattr(values, "remove")

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_capacity_must_be_positive(self, capacity):
        with pytest.raises(ValueError):
            Multi(capacity)

    def test_capacity_must_be_int(self):
        with pytest.raises(TypeError):
            Multi[str, "2"]

    def test_bad_parametrization(self):
        with pytest.raises(TypeError):
            Multi[str]

    def test_alias_equality(self):
        assert Multi[str, 2] == Multi[str, 2]
        assert Multi[str, 2] != Multi[str, 3]
        assert repr(Multi[str, 2]) == "Multi[str, 2]"


class TestRepeatableOptions:
    """Test suite for parsing repeatable options."""

    def test_descriptor(self):
        include = next(d for d in describe(RepeatConfig) if d.name == "include")

        assert include.category is TypeCategory.MULTI
        assert include.leaf is TypeCategory.STRING
        assert include.capacity == 2

    def test_values_accumulate(self):
        config = RepeatConfig()
        parse(RepeatConfig, config, ["-I", "a", "-I", "b"])
        assert config.include == ["a", "b"]

    def test_mixed_forms_accumulate(self):
        config = RepeatConfig()
        parse(RepeatConfig, config, ["-Ia", "--include=b"])
        assert config.include == ["a", "b"]

    def test_capacity_exceeded_names_field(self):
        config = RepeatConfig()
        with pytest.raises(CapacityExceeded) as exc:
            parse(RepeatConfig, config, ["-I", "a", "-I", "b", "-I", "c"])

        assert exc.value.field == "include"
        assert exc.value.capacity == 2
        assert "include" in str(exc.value)
        assert "2" in str(exc.value)
        assert config.include == ["a", "b"]

    def test_elements_are_coerced(self):
        config = RepeatConfig()
        parse(RepeatConfig, config, ["--number", "1", "--number=-2", "--level", "info"])

        assert config.number == [1, -2]
        assert config.level == [Level.info]

    def test_element_coercion_failure_is_not_capacity(self):
        with pytest.raises(CoercionFailure):
            parse(RepeatConfig, RepeatConfig(), ["--number", "x"])

    def test_empty_by_default(self):
        config = RepeatConfig()
        parse(RepeatConfig, config, [])
        assert len(config.include) == 0

    def test_accumulator_created_when_field_holds_none(self):
        config = RepeatConfig(number=None)
        parse(RepeatConfig, config, ["--number", "5"])

        assert isinstance(config.number, Multi)
        assert config.number == [5]
        assert config.number.capacity == 3

    def test_declared_capacity_wins_over_default_container(self):
        @dataclass
        class WideDefault:
            tag: Multi[str, 2] = field(default_factory=lambda: Multi(10))

        config = WideDefault()
        with pytest.raises(CapacityExceeded) as exc:
            parse(WideDefault, config, ["--tag", "a", "--tag", "b", "--tag", "c"])

        assert exc.value.capacity == 2
        assert config.tag == ["a", "b"]
        assert config.tag.capacity == 2

    def test_command_line_values_replace_default(self):
        @dataclass
        class Prefilled:
            tag: Multi[str, 2] = field(default_factory=Multi[str, 2])

        config = Prefilled()
        config.tag.append("d")
        parse(Prefilled, config, ["--tag", "a", "--tag", "b"])

        assert config.tag == ["a", "b"]

    def test_default_kept_when_option_absent(self):
        config = RepeatConfig(include=Multi[str, 2]())
        config.include.append("default")
        parse(RepeatConfig, config, ["--number", "1"])

        assert config.include == ["default"]

    def test_each_parse_starts_fresh(self):
        config = RepeatConfig()
        parse(RepeatConfig, config, ["-I", "a", "-I", "b"])
        parse(RepeatConfig, config, ["-I", "c"])

        assert config.include == ["c"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
