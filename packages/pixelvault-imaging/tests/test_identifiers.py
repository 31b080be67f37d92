import pytest
from pixelvault_imaging import (
    INVALID,
    Decoded,
    IdentifierCodec,
    IdentifierSource,
    InvalidIdentifierError,
    ResolvedIdentifier,
    parse_legacy_id,
)


@pytest.fixture
def codec():
    return IdentifierCodec(salt="test-salt", min_length=6)


class TestEncodeDecode:
    @pytest.mark.parametrize("image_id", [1, 2, 96, 1000, 2**31 - 1])
    def test_round_trip(self, codec, image_id):
        encoded = codec.encode(image_id)

        assert isinstance(encoded, str)
        assert encoded != str(image_id)
        assert codec.decode(encoded) == Decoded(image_id)

    @pytest.mark.parametrize("image_id", [1, 7, 123456])
    def test_minimum_length(self, codec, image_id):
        assert len(codec.encode(image_id)) >= 6
        assert codec.encode(image_id).isalnum()

    def test_custom_min_length(self):
        codec = IdentifierCodec(salt="test-salt", min_length=12)
        assert len(codec.encode(5)) >= 12

    def test_encoding_is_stable(self, codec):
        assert codec.encode(42) == codec.encode(42)
        assert codec.encode(42) == IdentifierCodec("test-salt", 6).encode(42)

    def test_consecutive_ids_are_distinct(self, codec):
        encoded = [codec.encode(i) for i in range(1, 6)]
        assert len(set(encoded)) == 5
        assert all(not value.isdigit() for value in encoded)

    @pytest.mark.parametrize("bad_id", [0, -1, -1000, 1.5, "12", None, True])
    def test_encode_rejects_non_positive_integers(self, codec, bad_id):
        with pytest.raises(InvalidIdentifierError, match="positive integer"):
            codec.encode(bad_id)

    def test_encode_error_is_value_error(self, codec):
        with pytest.raises(ValueError):
            codec.encode(0)

    @pytest.mark.parametrize(
        "value", ["not-a-real-hash", "", "!!!", "a", "42", "ZZZZZZZZZZZZZZ", None]
    )
    def test_decode_foreign_strings(self, codec, value):
        assert codec.decode(value) is INVALID

    def test_invalid_is_falsy(self, codec):
        assert not codec.decode("not-a-real-hash")
        assert codec.is_valid(codec.encode(3))
        assert not codec.is_valid("not-a-real-hash")

    def test_multi_number_hash_rejected(self, codec):
        multi = codec._hashids.encode(1, 2)
        assert codec.decode(multi) is INVALID


class TestSaltIsolation:
    @pytest.mark.parametrize("image_id", [1, 1000, 2**31 - 1])
    def test_different_salts_produce_different_strings(self, image_id):
        first = IdentifierCodec(salt="salt-one")
        second = IdentifierCodec(salt="salt-two")

        assert first.encode(image_id) != second.encode(image_id)
        assert second.decode(first.encode(image_id)) != Decoded(image_id)

    def test_empty_salt_rejected(self):
        with pytest.raises(ValueError, match="salt"):
            IdentifierCodec(salt="")

    def test_negative_min_length_rejected(self):
        with pytest.raises(ValueError, match="min_length"):
            IdentifierCodec(salt="salt", min_length=-1)

    def test_custom_alphabet(self):
        alphabet = "abcdefghjkmnpqrstuvwxyz23456789"
        codec = IdentifierCodec(salt="salt", alphabet=alphabet)

        encoded = codec.encode(2024)
        assert set(encoded) <= set(alphabet)
        assert codec.decode(encoded) == Decoded(2024)


class TestResolve:
    def test_hashid_path(self, codec):
        result = codec.resolve(codec.encode(96))
        assert result == ResolvedIdentifier(96, IdentifierSource.HASHID)

    def test_legacy_numeric_path(self, codec):
        result = codec.resolve("42")
        assert result == ResolvedIdentifier(42, IdentifierSource.LEGACY)

    @pytest.mark.parametrize(
        "value", ["0", "-5", "4.2", "42abc", " 42", "+42", "", "abc", "٤٢"]
    )
    def test_rejects_everything_else(self, codec, value):
        assert codec.resolve(value) is INVALID


class TestParseLegacyId:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1", 1),
            ("42", 42),
            ("007", 7),
            ("2147483647", 2147483647),
            ("0", None),
            ("-1", None),
            ("1e3", None),
            ("", None),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_legacy_id(value) == expected
