from enum import EnumMeta, Enum
from typing import Dict


def _fold(name: str) -> str:
    return name.replace("_", "").replace("-", "").lower()


class _ContainedInEnumMeta(EnumMeta):

    def __contains__(cls, obj):
        try:
            cls(obj)
        except ValueError:
            return False
        return True


class ContainedInEnum(Enum, metaclass=_ContainedInEnumMeta):
    """Enum class that allow pythonic in checks"""

    @classmethod
    def aliases(cls) -> Dict[str, "ContainedInEnum"]:
        """Additional names accepted by `from_spec`, matched like member names."""
        return {}

    @classmethod
    def from_spec(cls, spec):
        """
        Look up a member by value, by member name or by one of its aliases,
        ignoring case, underscores and dashes, e.g. "custom_region",
        "CustomRegion" and 2 for the same member. Raises ValueError if
        nothing matches.
        """
        if isinstance(spec, cls):
            return spec
        if isinstance(spec, str):
            stripped = spec.strip()
            if stripped.lstrip("-").isdigit():
                spec = int(stripped)
            else:
                wanted = _fold(stripped)
                for member in cls:
                    if _fold(member.name) == wanted:
                        return member
                aliases = {_fold(name): member for name, member in cls.aliases().items()}
                if wanted in aliases:
                    return aliases[wanted]
        if spec in cls:
            return cls(spec)
        raise ValueError(f"{spec!r} is not a valid {cls.__name__}")
