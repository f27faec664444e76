#!/usr/bin/env python3
"""
Tests for descriptor table derivation.

This module tests how long names, short aliases, help text and type
categories are derived from option dataclasses, and which malformed
dataclasses are rejected.
"""

import dataclasses
import enum
import threading
from dataclasses import dataclass, field
from typing import Annotated, ClassVar, Literal, Optional

import pytest

from structopts import (
    About,
    DescriptorError,
    FieldDescriptor,
    IntWidth,
    Meta,
    Multi,
    NameCollision,
    TypeCategory,
    describe,
    get_about,
    merge_tables,
    u32,
)
from structopts.descriptor import _describe, _describe_merged


class Shape(enum.Enum):
    circle = 1
    square = 2


class Empty(enum.Enum):
    pass


@dataclass
class SampleConfig:
    """Sample configuration dataclass with various field types."""

    string_field: str = field(
        default="default_value", metadata={"help": "A string field for testing"}
    )
    int_field: int = field(default=42, metadata={"short": "i"})
    float_field: float = 3.14
    bool_field: bool = True
    shape: Shape = Shape.circle
    literal_field: Literal["option1", "option2"] = "option1"
    wide: u32 = 0
    maybe: Optional[int] = None
    many: Multi[float, 4] = field(default_factory=Multi[float, 4])
    other: bytes = b""

    meta: ClassVar[dict] = {
        "int_field": Meta(help="From the meta table"),
        "bool_field": {"short": "b"},
    }


class TestDerivation:
    """Test suite for descriptor derivation."""

    def test_one_descriptor_per_field_in_order(self):
        table = describe(SampleConfig)
        assert [d.name for d in table] == [
            "string_field",
            "int_field",
            "float_field",
            "bool_field",
            "shape",
            "literal_field",
            "wide",
            "maybe",
            "many",
            "other",
        ]
        assert len(table) == 10
        assert table.owners == (SampleConfig,)

    def test_long_names_are_hyphenated(self):
        table = describe(SampleConfig)
        assert table.by_long("--string-field").name == "string_field"
        assert table.by_long("--string_field") is None

    def test_categories(self):
        categories = {d.name: d.category for d in describe(SampleConfig)}
        assert categories == {
            "string_field": TypeCategory.STRING,
            "int_field": TypeCategory.INTEGER,
            "float_field": TypeCategory.FLOAT,
            "bool_field": TypeCategory.BOOLEAN,
            "shape": TypeCategory.ENUM,
            "literal_field": TypeCategory.LITERAL,
            "wide": TypeCategory.INTEGER,
            "maybe": TypeCategory.OPTIONAL,
            "many": TypeCategory.MULTI,
            "other": TypeCategory.STRING,
        }

    def test_width_and_capacity(self):
        table = describe(SampleConfig)
        wide = table.by_long("--wide")
        many = table.by_long("--many")

        assert wide.width == IntWidth(32, signed=False)
        assert wide.capacity is None
        assert many.capacity == 4
        assert many.leaf is TypeCategory.FLOAT

    def test_choices(self):
        table = describe(SampleConfig)
        assert table.by_long("--shape").choices == ("circle", "square")
        assert table.by_long("--literal-field").choices == ("option1", "option2")
        assert table.by_long("--wide").choices == ()

    def test_metadata_sources(self):
        table = describe(SampleConfig)

        string_field = table.by_long("--string-field")
        assert string_field.help == "A string field for testing"
        assert string_field.short is None

        int_field = table.by_short("i")
        assert int_field.name == "int_field"
        assert int_field.help == "From the meta table"

        assert table.by_short("b").name == "bool_field"

    def test_meta_table_overrides_field_metadata(self):
        @dataclass
        class Overridden:
            port: int = field(default=0, metadata={"short": "p", "help": "old"})

            meta: ClassVar[dict] = {"port": Meta(short="P")}

        descriptor = describe(Overridden).by_long("--port")
        assert descriptor.short == "P"
        assert descriptor.help == "old"

    def test_defaults_recorded(self):
        table = describe(SampleConfig)
        assert table.by_long("--int-field").default == 42
        assert table.by_long("--many").default == []

    def test_deterministic_and_cached(self):
        assert describe(SampleConfig) is describe(SampleConfig)
        _describe.cache_clear()
        first = describe(SampleConfig)
        _describe.cache_clear()
        assert describe(SampleConfig) == first

    def test_concurrent_derivation(self):
        _describe.cache_clear()
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(describe(SampleConfig)))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 8
        assert all(table == results[0] for table in results)

    def test_field_named_meta_is_an_option(self):
        @dataclass
        class HasMetaField:
            meta: str = "x"

        assert describe(HasMetaField).by_long("--meta").category is TypeCategory.STRING

    def test_descriptor_default_is_missing_when_omitted(self):
        descriptor = FieldDescriptor(
            name="port",
            long="--port",
            category=TypeCategory.INTEGER,
            leaf=TypeCategory.INTEGER,
            leaf_type=int,
            owner=SampleConfig,
        )
        assert descriptor.default is dataclasses.MISSING
        assert descriptor.short is None

    def test_required_field_default_is_missing(self):
        @dataclass
        class Required:
            name: str

        assert describe(Required).by_long("--name").default is dataclasses.MISSING

    def test_cache_is_bounded(self):
        assert _describe.cache_info().maxsize is not None
        assert _describe_merged.cache_info().maxsize is not None


class TestDerivationErrors:
    """Test suite for rejected option structures."""

    def test_not_a_dataclass(self):
        with pytest.raises(DescriptorError):
            describe(int)

    def test_instance_is_not_a_type(self):
        with pytest.raises(DescriptorError):
            describe(SampleConfig())

    def test_duplicate_short(self):
        @dataclass
        class Dup:
            alpha: int = field(default=0, metadata={"short": "a"})
            again: int = field(default=0, metadata={"short": "a"})

        with pytest.raises(NameCollision) as exc:
            describe(Dup)
        assert exc.value.name == "-a"
        assert exc.value.field_a == "Dup.alpha"
        assert exc.value.field_b == "Dup.again"

    @pytest.mark.parametrize("short", ["ab", "", "-", 1])
    def test_invalid_short(self, short):
        @dataclass
        class BadShort:
            alpha: int = field(default=0, metadata={"short": short})

        with pytest.raises(DescriptorError):
            describe(BadShort)

    def test_help_names_are_reserved(self):
        @dataclass
        class HelpField:
            help: bool = False

        @dataclass
        class HelpShort:
            host: str = field(default="", metadata={"short": "h"})

        with pytest.raises(NameCollision):
            describe(HelpField)
        with pytest.raises(NameCollision):
            describe(HelpShort)

    def test_meta_for_unknown_field(self):
        @dataclass
        class Stray:
            alpha: int = 0

            meta: ClassVar[dict] = {"beta": Meta(short="b")}

        with pytest.raises(DescriptorError):
            describe(Stray)

    def test_meta_with_unknown_key(self):
        @dataclass
        class Typo:
            alpha: int = 0

            meta: ClassVar[dict] = {"alpha": {"shrot": "a"}}

        with pytest.raises(DescriptorError):
            describe(Typo)

    def test_width_on_non_int(self):
        @dataclass
        class BadWidth:
            name: Annotated[str, IntWidth(8)] = ""

        with pytest.raises(DescriptorError):
            describe(BadWidth)

    def test_empty_enum(self):
        @dataclass
        class NoTags:
            value: Optional[Empty] = None

        with pytest.raises(DescriptorError):
            describe(NoTags)

    def test_nested_wrappers(self):
        @dataclass
        class Nested:
            values: Optional[Multi[int, 2]] = None

        with pytest.raises(DescriptorError):
            describe(Nested)

    def test_descriptor_error_is_type_error(self):
        assert issubclass(DescriptorError, TypeError)


class TestMergeTables:
    """Test suite for merging a global and a subcommand table."""

    def test_merge(self):
        @dataclass
        class Global:
            verbose: bool = field(default=False, metadata={"short": "v"})

        @dataclass
        class Sub:
            release: bool = field(default=False, metadata={"short": "r"})

        merged = merge_tables(describe(Global), describe(Sub))
        assert merged.owners == (Global, Sub)
        assert merged.by_short("v").owner is Global
        assert merged.by_long("--release").owner is Sub
        assert merged.for_owner(Sub) == describe(Sub).fields

    def test_long_collision(self):
        @dataclass
        class Global:
            verbose: bool = False

        @dataclass
        class Sub:
            verbose: bool = False

        with pytest.raises(NameCollision) as exc:
            merge_tables(describe(Global), describe(Sub))
        assert exc.value.name == "--verbose"

    def test_short_collision(self):
        @dataclass
        class Global:
            verbose: bool = field(default=False, metadata={"short": "v"})

        @dataclass
        class Sub:
            version: str = field(default="", metadata={"short": "v"})

        with pytest.raises(NameCollision):
            merge_tables(describe(Global), describe(Sub))


class TestAbout:
    """Test suite for the about record."""

    def test_about_record(self):
        @dataclass
        class WithAbout:
            alpha: int = 0

            about: ClassVar[About] = About(name="tool", desc="Does things")

        about = get_about(WithAbout)
        assert about.name == "tool"
        assert about.desc == "Does things"
        assert about.usage is None

    def test_about_defaults(self):
        assert get_about(SampleConfig) == About(name="sampleconfig")

    def test_about_mapping(self):
        @dataclass
        class MappingAbout:
            about: ClassVar[dict] = {"desc": "Mapped"}

        assert get_about(MappingAbout) == About(name="mappingabout", desc="Mapped")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
