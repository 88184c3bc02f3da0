"""Report settings and their validation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from appmem.errors import ConfigurationError
from appmem.resolver import DEFAULT_LAUNCHERS, JavaBy

DEFAULT_LIMIT = 20


class RelativeTo(Enum):
    """Denominator used for the percentage columns."""

    PROCESSES = "processes"  # Grand total of all groups
    SYSTEM = "system"  # Installed physical memory


class ReportSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # None or 0 shows every group
    limit: int | None = Field(default=DEFAULT_LIMIT, ge=0)
    java_by: JavaBy = JavaBy.AUTO
    relative_to: RelativeTo = RelativeTo.PROCESSES
    include_empty: bool = False
    launchers: frozenset[str] = DEFAULT_LAUNCHERS

    @field_validator("launchers")
    @classmethod
    def _launchers_not_blank(cls, value: frozenset[str]) -> frozenset[str]:
        if any(not name.strip() for name in value):
            raise ValueError("launcher names must not be blank")
        return value

    @property
    def row_limit(self) -> int | None:
        """Row cap for the ranker, None meaning unbounded."""
        return self.limit or None


def _describe(error: ValidationError) -> str:
    details = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "value"
        details.append(f"{field}: {item['msg']} (got {item.get('input')!r})")
    return "; ".join(details)


def load_settings(
    limit: str | int | None = None,
    java_by: str | JavaBy = JavaBy.AUTO,
    relative_to: str | RelativeTo = RelativeTo.PROCESSES,
    include_empty: bool = False,
    launchers: list[str] | None = None,
) -> ReportSettings:
    """
    Build validated settings from raw command line values.

    Raises:
        ConfigurationError: If any value is out of range or not recognised.
    """
    values: dict[str, object] = {
        "java_by": java_by,
        "relative_to": relative_to,
        "include_empty": include_empty,
    }
    if limit is not None:
        values["limit"] = limit.strip() if isinstance(limit, str) else limit
    if launchers:
        values["launchers"] = frozenset(launchers)

    try:
        return ReportSettings.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(_describe(e)) from e
