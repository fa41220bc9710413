from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import LOGGER_NAME, settings

logger = logging.getLogger(LOGGER_NAME)

_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


def _base36(value: int) -> str:
    if value <= 0:
        return '0'
    out: List[str] = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_DIGITS[rem])
    return ''.join(reversed(out))


@dataclass
class Section:
    id: str
    name: str
    removable: bool = True


def default_section(name: Optional[str] = None) -> Section:
    name = name or settings.default_section or 'main'
    return Section(id=name, name=name, removable=True)


@dataclass
class SectionRegistry:
    """Ordered sections plus the header -> section id assignment map.

    The first section is the fallback for unassigned headers. Assignments are
    keyed by section id, so renames never move columns.
    """

    sections: List[Section] = field(default_factory=lambda: [default_section()])
    assignments: Dict[str, str] = field(default_factory=dict)

    @property
    def fallback(self) -> Optional[Section]:
        return self.sections[0] if self.sections else None

    def get(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def ids(self) -> List[str]:
        return [s.id for s in self.sections]

    def _new_id(self, name: str) -> str:
        stem = re.sub(r'\s+', '_', name.lower())
        stamp = int(time.time() * 1000)
        candidate = f"{stem}_{_base36(stamp)}"
        while self.get(candidate) is not None:
            stamp += 1
            candidate = f"{stem}_{_base36(stamp)}"
        return candidate

    def add(self, name: str) -> Optional[Section]:
        if not name or not name.strip():
            return None
        normalized = name.strip()
        section = Section(id=self._new_id(normalized), name=normalized, removable=True)
        self.sections.append(section)
        logger.debug("Added section %s (%s)", section.name, section.id)
        return section

    def rename(self, section_id: str, new_name: str) -> bool:
        section = self.get(section_id)
        if section is None:
            return False
        section.name = new_name
        logger.debug("Renamed section %s to %r", section_id, new_name)
        return True

    def remove(self, section_id: str) -> bool:
        """Drop a section and move its columns to the new first section.

        The last remaining section is never removed.
        """
        if self.get(section_id) is None or len(self.sections) <= 1:
            return False

        remaining = [s for s in self.sections if s.id != section_id]
        fallback_id = remaining[0].id
        reassigned = {
            header: (fallback_id if target == section_id else target)
            for header, target in self.assignments.items()
        }
        # Swap both together so no assignment ever points at a removed id.
        self.sections, self.assignments = remaining, reassigned
        logger.debug("Removed section %s; columns moved to %s", section_id, fallback_id)
        return True

    def assign(self, header: str, section_id: Optional[str]) -> None:
        key = str(header).lower()
        if not section_id:
            self.assignments.pop(key, None)
            return
        if self.get(section_id) is None:
            raise ValueError(f"Unknown section id: {section_id}")
        self.assignments[key] = section_id

    def clear_assignments(self) -> None:
        self.assignments = {}

    def ensure_fallback(self) -> Section:
        if not self.sections:
            logger.warning("No sections defined; restoring default section.")
            self.sections = [default_section()]
        return self.sections[0]

    def resolve(self, header_lower: str) -> str:
        """Section id for a header; the first section when unassigned."""
        fallback = self.ensure_fallback()
        target = self.assignments.get(header_lower)
        if target is not None and self.get(target) is not None:
            return target
        return fallback.id

    def section_for(self, header_lower: str) -> Section:
        return self.get(self.resolve(header_lower)) or self.ensure_fallback()

    def reset(self) -> None:
        self.sections = [default_section()]
        self.assignments = {}
