"""Offset pagination for list endpoints.

``first`` is the page size and ``after`` the numeric offset of the first row.
Both arrive as untrusted query strings: anything that does not parse falls
back to the default instead of failing the request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from starlette.requests import Request

from devwars.config import get_settings

_TRUE_VALUES = frozenset({"true", "1", "yes"})
_FALSE_VALUES = frozenset({"false", "0", "no"})


def parse_int_with_default(value: Any, default: int, minimum: int, maximum: int) -> int:  # noqa: ANN401
    """Parse ``value`` as an integer clamped to ``[minimum, maximum]``."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return max(minimum, min(parsed, maximum))


def parse_bool_with_default(value: Any, default: bool) -> bool:  # noqa: ANN401
    """Parse ``value`` as a boolean, accepting true/false, 1/0 and yes/no."""
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True)
class PageParams:
    """A bounded ``first``/``after`` window."""

    first: int
    after: int

    @classmethod
    def from_query(cls, first: str | None, after: str | None) -> PageParams:
        settings = get_settings()
        return cls(
            first=parse_int_with_default(first, settings.page_size_default, 1, settings.page_size_max),
            after=parse_int_with_default(after, 0, 0, settings.database_max_id),
        )

    @property
    def before_offset(self) -> int:
        return max(self.after - self.first, 0)

    @property
    def after_offset(self) -> int:
        return self.after + self.first


def build_pagination(request: Request, params: PageParams, page_length: int) -> dict[str, str | None]:
    """Build absolute ``before``/``after`` links for the current request path.

    ``before`` is None on the first page; ``after`` is None once a page comes
    back empty.
    """
    url = f"{request.url.scheme}://{request.url.netloc}{request.url.path}"

    before: str | None = f"{url}?first={params.first}&after={params.before_offset}"
    after: str | None = f"{url}?first={params.first}&after={params.after_offset}"

    if page_length == 0:
        after = None
    if params.after == 0:
        before = None

    return {"before": before, "after": after}
