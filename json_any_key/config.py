"""Codec configuration model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from json_any_key.exceptions import ConfigurationError

SerializationWarnings = Literal["none", "warn", "error"]


@dataclass(frozen=True, slots=True)
class CodecConfig:
    """Options shared by the encode and decode paths of a codec.

    Attributes
    ----------
    by_alias : bool, default=False
        Serialize model fields under their alias.
    exclude_none : bool, default=False
        Drop model fields whose value is ``None``.
    round_trip : bool, default=False
        Ask pydantic for output that can be validated back losslessly
        (e.g. ``Json`` fields stay as JSON strings).
    warnings : {"none", "warn", "error"}, default="error"
        What pydantic does when a value does not match its declared type.
        ``"error"`` turns the mismatch into a serialization error.
    max_size_bytes : int | None, default=None
        Reject decode input larger than this many UTF-8 bytes.
    max_depth : int | None, default=None
        Reject decode input nested deeper than this many containers.

    Examples
    --------
    >>> CodecConfig(by_alias=True).dump_options()["by_alias"]
    True
    """

    by_alias: bool = False
    exclude_none: bool = False
    round_trip: bool = False
    warnings: SerializationWarnings = "error"
    max_size_bytes: int | None = None
    max_depth: int | None = None

    def __post_init__(self) -> None:
        """Validate limits and the warning policy.

        Raises
        ------
        ConfigurationError
            If a limit is not a positive integer or ``warnings`` is unknown
        """
        for option in ("max_size_bytes", "max_depth"):
            limit = getattr(self, option)
            if limit is None:
                continue
            if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
                raise ConfigurationError(option, f"must be a positive integer (got {limit!r})")
        if self.warnings not in ("none", "warn", "error"):
            raise ConfigurationError(
                "warnings", f"must be 'none', 'warn' or 'error' (got {self.warnings!r})"
            )

    def dump_options(self) -> dict[str, Any]:
        """Keyword arguments forwarded to ``TypeAdapter.dump_json``."""
        return {
            "by_alias": self.by_alias,
            "exclude_none": self.exclude_none,
            "round_trip": self.round_trip,
            "warnings": self.warnings,
        }


DEFAULT_CONFIG = CodecConfig()

__all__ = ["DEFAULT_CONFIG", "CodecConfig", "SerializationWarnings"]
