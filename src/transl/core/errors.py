"""
Error taxonomy for transl.

- UnsupportedShapeError: the record type has no usable translation source.
  Built once with the type metadata and cached alongside it.
- NotMutableError: the caller passed something that cannot be written to.
- TableDecodeError: a stored translation table could not be decoded.
- ConfigError: invalid configuration file or overrides.

Malformed language codes and empty translation data are never errors.
"""


class TranslError(Exception):
    """Base class for every error raised by transl."""

    pass


class UnsupportedShapeError(TranslError):
    """Raised (in strict mode) for record types without translatable fields.

    Attributes:
        record_type: The type whose metadata could not be built
        reason: "no localized string fields" or "no translations field"
    """

    def __init__(self, record_type: type, reason: str) -> None:
        self.record_type = record_type
        self.reason = reason
        super().__init__(
            f"Type '{record_type.__qualname__}' cannot be translated: {reason}"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnsupportedShapeError):
            return NotImplemented
        return self.record_type is other.record_type and self.reason == other.reason

    def __hash__(self) -> int:
        return hash((self.record_type, self.reason))


class NotMutableError(TranslError, TypeError):
    """Raised when the target record cannot be mutated in place."""

    pass


class TableDecodeError(TranslError, ValueError):
    """Raised when an encoded translation table is malformed."""

    pass


class ConfigError(TranslError):
    """Raised for invalid transl configuration."""

    pass
