"""Core data models for cookiepm."""

from __future__ import annotations

from dataclasses import asdict, dataclass

# ── Storage Keys ──
AGREEMENT_KEY = "cpm-agree"
PAGEVIEW_KEY = "cpm-prev"

# Agreement type -> whether it allows non-essential cookies
AGREEMENT_TYPES: dict[str, bool] = {
    "deny": False,
    "explicit": True,
    "implicit": True,
}

IMPLICIT = "implicit"
SEPARATOR = "/"


def encode_types(agreement_type: str, sub_type: str = "") -> str:
    """Join type and sub-type into the single stored string."""
    return agreement_type + (SEPARATOR + sub_type if sub_type else "")


def decode_types(raw: str | None) -> tuple[str, str]:
    """Split a stored string back into ``(type, sub_type)``.

    Segments past the second are ignored.
    """
    details = (raw or "").split(SEPARATOR)
    return details[0], details[1] if len(details) > 1 else ""


def strip_fragment(url: str) -> str:
    """Drop everything from the first ``#`` on."""
    return url.split("#", 1)[0]


def normalize(value: object) -> str:
    """Trimmed lower-case string, or empty for non-strings."""
    return value.strip().lower() if isinstance(value, str) else ""


@dataclass(frozen=True)
class AgreementValue:
    """Decoded agreement record."""

    allowed: bool
    type: str = ""
    sub_type: str = ""

    @classmethod
    def from_raw(cls, raw: str | None) -> AgreementValue:
        agreement_type, sub_type = decode_types(raw)
        return cls(
            allowed=AGREEMENT_TYPES.get(agreement_type, False),
            type=agreement_type,
            sub_type=sub_type,
        )

    @property
    def exists(self) -> bool:
        return self.type != ""

    def encode(self) -> str:
        return encode_types(self.type, self.sub_type)


@dataclass(frozen=True)
class AgreementStatus:
    """Public projection of the agreement: is it allowed, and why."""

    allowed: bool
    because: str = ""

    @classmethod
    def from_value(cls, value: AgreementValue) -> AgreementStatus:
        return cls(allowed=value.allowed, because=value.encode())

    def to_dict(self) -> dict:
        return asdict(self)
