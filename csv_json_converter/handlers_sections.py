from __future__ import annotations

import logging
from typing import Optional

from .config import LOGGER_NAME
from .errors import StatusMessage
from .handlers import new_session, session_views
from .records import ConversionSession

logger = logging.getLogger(LOGGER_NAME)


def add_section_handler(session: Optional[ConversionSession], name: str):
    session = session or new_session()
    section = session.registry.add(name or '')
    if section is None:
        return (session, *session_views(session), name, StatusMessage.error("Enter a section name.").render())
    message = StatusMessage.success(f"Added section '{section.name}'.").render()
    return (session, *session_views(session), "", message)


def rename_section_handler(session: Optional[ConversionSession], section_id: str, new_name: str):
    session = session or new_session()
    if not section_id:
        return (session, *session_views(session), StatusMessage.error("Select a section to rename.").render())
    if not session.registry.rename(section_id, new_name or ''):
        return (session, *session_views(session), StatusMessage.error(f"Unknown section: {section_id}").render())
    return (session, *session_views(session), StatusMessage.success(f"Renamed section to '{new_name}'.").render())


def remove_section_handler(session: Optional[ConversionSession], section_id: str):
    session = session or new_session()
    if not section_id:
        return (session, *session_views(session), StatusMessage.error("Select a section to remove.").render())
    if not session.registry.remove(section_id):
        if session.registry.get(section_id) is not None:
            message = "At least one section is required."
        else:
            message = f"Unknown section: {section_id}"
        return (session, *session_views(session), StatusMessage.error(message).render())
    fallback = session.registry.fallback
    message = f"Removed section. Its columns now belong to '{fallback.name}'."
    return (session, *session_views(session), StatusMessage.success(message).render())


def assign_column_handler(session: Optional[ConversionSession], header: str, section_id: str):
    session = session or new_session()
    if not header:
        return (session, *session_views(session), StatusMessage.error("Select a column.").render())
    try:
        session.registry.assign(header, section_id)
    except ValueError as exc:
        return (session, *session_views(session), StatusMessage.error(str(exc)).render())
    section = session.registry.section_for(str(header).lower())
    return (session, *session_views(session), StatusMessage.success(f"'{header}' -> {section.name}").render())


def assignments_from_table(session: Optional[ConversionSession], table):
    """Apply an edited [column, section id, ...] table.

    Rows with an unknown section id are skipped and reported.
    """
    session = session or new_session()
    if table is None:
        return (session, *session_views(session), "")

    try:
        rows = table.values.tolist()
    except AttributeError:
        rows = [list(row) for row in table]

    skipped = []
    for row in rows:
        if len(row) < 2 or not row[0]:
            continue
        header, section_id = str(row[0]), str(row[1] or '').strip()
        try:
            session.registry.assign(header, section_id)
        except ValueError:
            skipped.append(header)

    if skipped:
        logger.debug("Skipped assignments for %s", skipped)
        message = StatusMessage.error(f"Unknown section id for: {', '.join(skipped)}").render()
    else:
        message = StatusMessage.success("Column assignments updated.").render()
    return (session, *session_views(session), message)
