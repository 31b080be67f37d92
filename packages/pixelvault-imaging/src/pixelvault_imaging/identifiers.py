"""Reversible public identifiers for integer primary keys.

Sequential ids leak row counts and invite enumeration, so every image id that
leaves the service is run through a salted Hashids transform. The mapping is
reversible by anyone holding the salt: it hides ordering, it does not grant
or deny access.
"""

from dataclasses import dataclass
from enum import Enum

from hashids import Hashids

from .types import InvalidIdentifierError

DEFAULT_MIN_LENGTH = 6


class IdentifierSource(str, Enum):
    HASHID = "hashid"
    LEGACY = "legacy"


class _Invalid(Enum):
    INVALID = "invalid"

    def __bool__(self) -> bool:
        return False


INVALID = _Invalid.INVALID


@dataclass(frozen=True)
class Decoded:
    id: int


@dataclass(frozen=True)
class ResolvedIdentifier:
    id: int
    source: IdentifierSource


DecodeResult = Decoded | _Invalid
ResolveResult = ResolvedIdentifier | _Invalid


class IdentifierCodec:
    def __init__(
        self,
        salt: str,
        min_length: int = DEFAULT_MIN_LENGTH,
        alphabet: str | None = None,
    ):
        if not salt:
            raise ValueError("Identifier salt must be a non-empty string")
        if min_length < 0:
            raise ValueError("min_length cannot be negative")

        self.min_length = min_length
        if alphabet is None:
            self._hashids = Hashids(salt=salt, min_length=min_length)
        else:
            self._hashids = Hashids(salt=salt, min_length=min_length, alphabet=alphabet)

    def encode(self, image_id: int) -> str:
        if (
            not isinstance(image_id, int)
            or isinstance(image_id, bool)
            or image_id <= 0
        ):
            raise InvalidIdentifierError(
                f"Invalid ID: must be a positive integer, got {image_id!r}"
            )
        return self._hashids.encode(image_id)

    def decode(self, value: str) -> DecodeResult:
        if not value or not isinstance(value, str):
            return INVALID

        # hashids re-encodes the decoded numbers and returns () on mismatch,
        # so foreign strings and strings minted under another salt land here
        numbers = self._hashids.decode(value)
        if len(numbers) != 1 or numbers[0] <= 0:
            return INVALID
        return Decoded(numbers[0])

    def resolve(self, value: str) -> ResolveResult:
        """Resolve an external id, accepting legacy base-10 ids after hashids."""
        decoded = self.decode(value)
        if isinstance(decoded, Decoded):
            return ResolvedIdentifier(decoded.id, IdentifierSource.HASHID)

        legacy_id = parse_legacy_id(value)
        if legacy_id is None:
            return INVALID
        return ResolvedIdentifier(legacy_id, IdentifierSource.LEGACY)

    def is_valid(self, value: str) -> bool:
        return isinstance(self.decode(value), Decoded)


def parse_legacy_id(value: str) -> int | None:
    if not isinstance(value, str) or not value.isascii() or not value.isdigit():
        return None
    parsed = int(value)
    return parsed if parsed > 0 else None
