"""Immutable query string parameters."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class QueryParams(Mapping[str, str]):
    """Parsed query string.

    ``params["q"]`` returns the first value; ``get_list`` returns all.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        self._raw = query_string
        self._data: dict[str, list[str]] = parse_qs(
            query_string.decode("latin-1"), keep_blank_values=True
        )

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, ()))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return the value as int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    @property
    def raw(self) -> bytes:
        """The undecoded query string."""
        return self._raw
