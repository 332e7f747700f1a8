"""
Property-based tests for record codecs and disclosure selectors.

This module uses Hypothesis to check layout and selector properties across
all document schemes with randomly generated field values and selections.
"""

import dataclasses

import pytest
from hypothesis import given, settings, strategies as st

from zkid.documents import (
    DocumentScheme,
    build_selector,
    compress,
    decompress,
    get_codec,
    get_layout,
    serialize,
)
from zkid.errors import FieldTooLong
from zkid.inputs.mock import mock_record

pytestmark = pytest.mark.property

_ASCII = st.characters(min_codepoint=0x21, max_codepoint=0x7E)


def _selectable(scheme):
    return [spec.selector for spec in get_layout(scheme) if not spec.placeholder]


@st.composite
def selections(draw):
    scheme = draw(st.sampled_from(list(DocumentScheme)))
    fields = draw(st.lists(st.sampled_from(_selectable(scheme)), unique=True))
    return scheme, fields


class TestSelectorProperties:
    """Property-based tests for selector bitmaps."""

    @given(selections())
    def test_bits_cover_exactly_the_selected_fields(self, selection):
        """Test set bits are the union of the selected field ranges."""
        scheme, fields = selection
        layout = get_layout(scheme)
        expected = set()
        for name in fields:
            expected.update(layout.require_field(name).span())
        bitmap = build_selector(scheme, fields)
        assert len(bitmap) == layout.max_length
        assert set(bitmap.revealed_positions()) == expected

    @given(selections())
    def test_decompress_inverts_compress(self, selection):
        """Test compressing then decompressing gives the same bitmap."""
        scheme, fields = selection
        bitmap = build_selector(scheme, fields)
        low, high = bitmap.compress()
        assert decompress(low, high, len(bitmap)) == bitmap

    @given(st.lists(st.integers(min_value=0, max_value=1), min_size=1, max_size=400))
    def test_halves_fit_their_share(self, bits):
        """Test each compressed half fits in its half of the bits."""
        low, high = compress(bits)
        mid = len(bits) // 2
        assert low < 1 << mid
        assert high < 1 << (len(bits) - mid)


class TestCodecProperties:
    """Property-based tests for fixed-width serialization."""

    @given(
        scheme=st.sampled_from([DocumentScheme.SELFPER, DocumentScheme.SELFRICA]),
        name=st.text(_ASCII, min_size=1, max_size=40),
    )
    @settings(max_examples=50)
    def test_length_is_scheme_width(self, scheme, name):
        """Test any fitting value serializes to the scheme width."""
        record = dataclasses.replace(mock_record(scheme), full_name=name)
        data = serialize(record)
        assert len(data) == get_layout(scheme).max_length
        assert get_codec(scheme).extract_field(data, "FULL_NAME") == name

    @given(extra=st.integers(min_value=1, max_value=20))
    @settings(max_examples=20)
    def test_overflow_names_the_field(self, extra):
        """Test a value over its width raises FieldTooLong for that field."""
        width = get_layout(DocumentScheme.KYC).require_field("ADDRESS").length
        record = dataclasses.replace(
            mock_record(DocumentScheme.KYC), address="A" * (width + extra)
        )
        with pytest.raises(FieldTooLong) as exc_info:
            serialize(record)
        assert exc_info.value.field == "address"
        assert exc_info.value.length == width + extra
