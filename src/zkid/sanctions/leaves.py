"""
Sanctions-list entries and SMT leaf keys.

Names are normalized identically at tree construction and at proof time:
upper-cased, with all whitespace and NUL padding removed. A key is the
PackedHash of the normalized name followed by the date (``YYYYMMDD``) or year
(``YYYY``), reduced to the tree's key width.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..crypto.hashing import packed_hash
from ..errors import ValidationError

DEFAULT_KEY_BITS = 64

_STRIP = re.compile(r"[\s\x00]+")


def normalize_name(name: str) -> str:
    return _STRIP.sub("", name.upper())


def leaf_key(name: str, date_or_year: str, key_bits: int = DEFAULT_KEY_BITS) -> int:
    """
    Deterministic SMT key for a (name, date) pair.

    Args:
        name: Full name in any case or spacing
        date_or_year: ``YYYYMMDD`` for the DOB tree, ``YYYY`` for the YOB tree
        key_bits: Key width; keys are reduced modulo ``2**key_bits``

    Returns:
        Integer key below ``2**key_bits``
    """
    normalized = normalize_name(name)
    date = _STRIP.sub("", date_or_year)
    if not normalized:
        raise ValidationError("Name is empty after normalization", field="name", value=name)
    key = packed_hash(normalized + date) % (1 << key_bits)
    # 0 marks an empty slot in sanctions proofs.
    if key == 0:
        raise ValidationError(
            "Leaf key reduced to zero", field="key", value=key, expected="non-zero key"
        )
    return key


def _check_digits(value: Any, pattern: str, field: str, label: str) -> None:
    if not isinstance(value, str) or len(value) != len(pattern) or not value.isdigit():
        raise ValidationError(
            f"{label} must be {pattern}", field=field, value=value, expected=pattern
        )


def name_dob_key(name: str, dob: str, key_bits: int = DEFAULT_KEY_BITS) -> int:
    _check_digits(dob, "YYYYMMDD", "dob", "Date of birth")
    return leaf_key(name, dob, key_bits)


def name_yob_key(name: str, yob: str, key_bits: int = DEFAULT_KEY_BITS) -> int:
    _check_digits(yob, "YYYY", "yob", "Year of birth")
    return leaf_key(name, yob, key_bits)


@dataclass(frozen=True)
class SanctionsEntry:
    """One sanctioned person; ``dob`` may be partial (year only) or missing."""

    full_name: str
    dob: Optional[str] = None
    year_of_birth: Optional[str] = None

    @property
    def yob(self) -> Optional[str]:
        if self.year_of_birth:
            return self.year_of_birth
        if self.dob:
            return self.dob[:4]
        return None

    @property
    def has_full_dob(self) -> bool:
        return bool(self.dob) and len(self.dob) == 8

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SanctionsEntry":
        """
        Build an entry from a parsed sanctions-list record.

        Accepts ``{"fullName", "dob"}`` or the split form
        ``{"First_Name", "Last_Name", "year", "month", "day"}``.
        """
        if "fullName" in data or "full_name" in data:
            name = data.get("fullName") or data.get("full_name")
            dob = str(data["dob"]) if data.get("dob") else None
            year = str(data["year"]) if data.get("year") else None
            return cls(full_name=name, dob=dob, year_of_birth=year)

        name = f"{data.get('First_Name', '')} {data.get('Last_Name', '')}".strip()
        year = str(data.get("year") or "") or None
        month = str(data.get("month") or "")
        day = str(data.get("day") or "")
        dob = None
        if year and month and day:
            dob = f"{year}{month.zfill(2)}{day.zfill(2)}"
        return cls(full_name=name, dob=dob, year_of_birth=year)
