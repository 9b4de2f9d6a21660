"""Error taxonomy for the template engine.

Registration-time failures are exceptions and abort loading. Lookup misses
are plain values the caller branches on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class ConfigError(Exception):
    """Malformed template or jurisdiction data detected while registering."""


class UnknownPlaceholder(ConfigError):
    """A prompt template references a field that no earlier section defines."""

    def __init__(self, template_id: str, section_id: str, placeholder: str, jurisdiction: str = ""):
        self.template_id = template_id
        self.section_id = section_id
        self.placeholder = placeholder
        self.jurisdiction = jurisdiction
        where = f" ({jurisdiction})" if jurisdiction else ""
        super().__init__(
            f"Template '{template_id}'{where}: section '{section_id}' references "
            f"unknown placeholder '{{{{{placeholder}}}}}'"
        )


@dataclass(frozen=True)
class NotFound:
    """Returned by registry lookups for an unregistered template/jurisdiction pair."""

    template_id: str
    jurisdiction_code: str
    district_code: Optional[str] = None

    @property
    def message(self) -> str:
        where = self.jurisdiction_code
        if self.district_code:
            where = f"{where} / {self.district_code}"
        return f"Template '{self.template_id}' is not yet supported in {where}"

    def __bool__(self) -> bool:
        return False
