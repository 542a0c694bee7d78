"""
Tests for the Symbol Matcher.

Requires Python 3.11+.
"""

import pytest

from matcher import ArtifactFiles, ArtifactKind, MissingSymbolError, SymbolMatcher, capitalize
from parsers.models import (
    CppHeaderSymbols,
    CppImplSymbols,
    IdlArgument,
    IdlAttribute,
    IdlConst,
    IdlConstructor,
    IdlOperation,
    SymbolLocation,
    TsClassSymbols,
)


@pytest.fixture
def header() -> CppHeaderSymbols:
    return CppHeaderSymbols(
        class_name="VideoDecoder",
        methods={
            "GetState": SymbolLocation(50),
            "Configure": SymbolLocation(56),
        },
        static_methods={"IsConfigSupported": SymbolLocation(60)},
    )


@pytest.fixture
def implementation() -> CppImplSymbols:
    return CppImplSymbols(
        ctor=SymbolLocation(20, 40),
        methods={
            "GetState": SymbolLocation(92, 94),
            "Configure": SymbolLocation(113, 123),
            "IsConfigSupported": SymbolLocation(200, 215),
        },
    )


@pytest.fixture
def wrapper() -> TsClassSymbols:
    return TsClassSymbols(
        class_name="VideoDecoder",
        constructor=SymbolLocation(30, 35),
        methods={"configure": SymbolLocation(61, 63)},
        getters={"state": SymbolLocation(47, 49)},
        static_methods={"isConfigSupported": SymbolLocation(80, 84)},
    )


def test_capitalize():
    """Test only the first character changes."""
    assert capitalize("state") == "State"
    assert capitalize("isConfigSupported") == "IsConfigSupported"
    assert capitalize("missingattr") == "Missingattr"
    assert capitalize("") == ""


class TestSymbolMatcher:
    """Test cases for SymbolMatcher."""

    @pytest.fixture
    def matcher(self) -> SymbolMatcher:
        """Create a matcher instance."""
        return SymbolMatcher()

    def test_attribute(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test a readonly attribute resolves in all three artifacts."""
        member = IdlAttribute(name="state", type="CodecState", readonly=True)

        links = matcher.match("VideoDecoder", member, header, implementation, wrapper)

        assert links.as_dict == {
            "declaration": {"file": "src/VideoDecoder.h", "line": 50},
            "implementation": {"file": "src/VideoDecoder.cpp", "line": 92, "endLine": 94},
            "highLevelBinding": {"file": "lib/VideoDecoder.ts", "line": 47, "endLine": 49},
        }

    def test_missing_attribute_in_header(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test an absent getter is reported against the header."""
        member = IdlAttribute(name="missingAttr", type="long")

        with pytest.raises(MissingSymbolError) as exc_info:
            matcher.match("VideoDecoder", member, header, implementation, wrapper)

        error = exc_info.value
        assert error.expected_artifact == "src/VideoDecoder.h"
        assert error.artifact_kind is ArtifactKind.HEADER
        assert error.expected_symbol == "GetMissingAttr"
        assert error.member_kind == "attribute"
        assert error.as_dict["interface"] == "VideoDecoder"

    def test_operation(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test an instance operation resolves in all three artifacts."""
        member = IdlOperation(
            name="configure",
            return_type="undefined",
            parameters=[IdlArgument(name="config", type="VideoDecoderConfig")],
        )

        links = matcher.match("VideoDecoder", member, header, implementation, wrapper)

        assert links.declaration.line == 56
        assert (links.implementation.line, links.implementation.end_line) == (113, 123)
        assert (links.high_level_binding.line, links.high_level_binding.end_line) == (61, 63)
        assert links.test is None

    def test_static_operation(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test static operations consult the static tables."""
        member = IdlOperation(
            name="isConfigSupported",
            return_type="Promise<VideoDecoderSupport>",
            is_static=True,
        )

        links = matcher.match("VideoDecoder", member, header, implementation, wrapper)

        assert "IsConfigSupported" not in header.methods
        assert links.declaration.line == 60
        assert links.implementation.line == 200
        assert links.high_level_binding.line == 80

    def test_static_operation_missing_from_wrapper(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test a static wrapper method declared as an instance method is not accepted."""
        wrapper.methods["isConfigSupported"] = wrapper.static_methods.pop("isConfigSupported")
        member = IdlOperation(name="isConfigSupported", return_type="boolean", is_static=True)

        with pytest.raises(MissingSymbolError) as exc_info:
            matcher.match("VideoDecoder", member, header, implementation, wrapper)

        assert exc_info.value.artifact_kind is ArtifactKind.WRAPPER
        assert exc_info.value.expected_symbol == "static isConfigSupported()"
        assert exc_info.value.member_kind == "static-method"

    def test_header_reported_before_later_artifacts(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test lookups stop at the first missing artifact."""
        member = IdlOperation(name="flush", return_type="Promise<undefined>")

        with pytest.raises(MissingSymbolError) as exc_info:
            matcher.match("VideoDecoder", member, header, implementation, wrapper)

        assert exc_info.value.artifact_kind is ArtifactKind.HEADER
        assert exc_info.value.expected_symbol == "Flush"

    def test_missing_implementation(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test the implementation symbol is qualified by the interface name."""
        del implementation.methods["Configure"]
        member = IdlOperation(name="configure", return_type="undefined")

        with pytest.raises(MissingSymbolError) as exc_info:
            matcher.match("VideoDecoder", member, header, implementation, wrapper)

        assert exc_info.value.expected_artifact == "src/VideoDecoder.cpp"
        assert exc_info.value.expected_symbol == "VideoDecoder::Configure"
        assert exc_info.value.member_kind == "method"

    def test_missing_getter(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test attributes need a getter, not a plain method."""
        wrapper.methods["state"] = wrapper.getters.pop("state")
        member = IdlAttribute(name="state", type="CodecState", readonly=True)

        with pytest.raises(MissingSymbolError) as exc_info:
            matcher.match("VideoDecoder", member, header, implementation, wrapper)

        assert exc_info.value.expected_symbol == "get state()"
        assert exc_info.value.expected_artifact == "lib/VideoDecoder.ts"

    def test_constructor(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test constructors default the declaration line and link what exists."""
        links = matcher.match("VideoDecoder", IdlConstructor(), header, implementation, wrapper)

        assert links.as_dict == {
            "declaration": {"file": "src/VideoDecoder.h", "line": 1},
            "implementation": {"file": "src/VideoDecoder.cpp", "line": 20, "endLine": 40},
            "highLevelBinding": {"file": "lib/VideoDecoder.ts", "line": 30, "endLine": 35},
        }

    def test_constructor_links_are_optional(self, matcher: SymbolMatcher):
        """Test a constructor with nothing to link never fails."""
        links = matcher.match(
            "VideoDecoder",
            IdlConstructor(),
            CppHeaderSymbols(methods={"VideoDecoder": SymbolLocation(12)}),
            CppImplSymbols(),
            TsClassSymbols(),
        )

        assert links.declaration.line == 12
        assert links.implementation is None
        assert links.high_level_binding is None

    def test_custom_files(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test explicit artifact paths are used in links and errors."""
        files = ArtifactFiles(header="native/vd.h", implementation="native/vd.cc", wrapper="ts/vd.ts")
        member = IdlAttribute(name="state", type="CodecState", readonly=True)

        links = matcher.match("VideoDecoder", member, header, implementation, wrapper, files)

        assert links.declaration.file == "native/vd.h"
        assert links.implementation.file == "native/vd.cc"
        assert links.high_level_binding.file == "ts/vd.ts"

    def test_unsupported_member(self, matcher: SymbolMatcher, header, implementation, wrapper):
        """Test members outside the three kinds are rejected."""
        with pytest.raises(TypeError):
            matcher.match(
                "VideoDecoder",
                IdlConst(name="KIND", type="short", value="1"),
                header,
                implementation,
                wrapper,
            )
