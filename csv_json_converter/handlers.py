from __future__ import annotations

import logging
from typing import List, Optional

import gradio as gr
import pandas as pd

from .config import LOGGER_NAME, settings
from .errors import (
    EmptyInputError,
    ExportPreconditionError,
    StatusMessage,
    UnexpectedParseError,
    ValidationError,
)
from .exporters import export_csv, export_json, reconstruct_row, write_artifact
from .flattening import flatten_records_for_preview, records_for_json_preview
from .io_utils import decode_csv_bytes, read_csv_bytes, upload_name, validate_csv_upload
from .records import ConversionSession, convert_session
from .titles import append_token, sample_titles

logger = logging.getLogger(LOGGER_NAME)


def new_session() -> ConversionSession:
    return ConversionSession()


def format_header_chips(headers: List[str]) -> str:
    if not headers:
        return "No columns detected."
    return "Detected columns: " + " ".join(f"`{h}`" for h in headers)


def format_sample_titles(session: ConversionSession) -> str:
    rows = [reconstruct_row(r) for r in session.records[:3]]
    titles = sample_titles(session.title_pattern, rows, session.headers)
    return "Sample titles: " + ", ".join(f"`{t}`" if t else "`(empty)`" for t in titles)


def section_choices(session: ConversionSession):
    return [(f"{s.name} ({s.id})", s.id) for s in session.registry.sections]


def assignment_rows(session: ConversionSession) -> List[List[str]]:
    """One [column, section id, section name] row per non-base header."""
    rows = []
    for header in session.headers:
        if header in ('title', 'content'):
            continue
        section = session.registry.section_for(header)
        rows.append([header, section.id, section.name])
    return rows


def session_views(session: ConversionSession):
    """Header chips, section pickers, column table and sample titles."""
    choices = section_choices(session)
    first_id = choices[0][1] if choices else None
    headers = [h for h in session.headers if h not in ('title', 'content')]
    return (
        format_header_chips(session.headers),
        gr.update(choices=choices, value=first_id),
        gr.update(choices=choices, value=first_id),
        gr.update(choices=headers, value=headers[0] if headers else None),
        assignment_rows(session),
        format_sample_titles(session),
    )


def handle_file_upload(file_obj, session: Optional[ConversionSession]):
    session = session or new_session()
    try:
        name = validate_csv_upload(upload_name(file_obj))
        prefix = read_csv_bytes(file_obj, limit=settings.header_prefix_bytes)
    except ValidationError as exc:
        return (session, *session_views(session), StatusMessage.error(str(exc)).render())
    except OSError as exc:
        logger.exception("Header extraction error")
        return (session, *session_views(session), StatusMessage.error(f"Could not read file: {exc}").render())

    headers = session.load_file(name, file_obj, decode_csv_bytes(prefix))
    logger.info("Loaded %s with %d columns", name, len(headers))
    message = f"Loaded file. Found {len(headers)} columns." if headers else "Loaded file. No columns detected."
    return (session, *session_views(session), StatusMessage.success(message).render())


def convert_handler(session: Optional[ConversionSession]):
    """Full-file conversion; previews are left as they were on failure."""
    session = session or new_session()
    unchanged = (gr.update(), gr.update())

    if session.file_path is None:
        return (session, *unchanged, *session_views(session), StatusMessage.error("Please select a file first.").render())

    try:
        text = decode_csv_bytes(read_csv_bytes(session.file_path))
        records = convert_session(session, text)
    except (EmptyInputError, UnexpectedParseError) as exc:
        return (session, *unchanged, *session_views(session), StatusMessage.error(str(exc)).render())
    except OSError:
        logger.exception("CSV read error")
        return (session, *unchanged, *session_views(session), StatusMessage.error("Error processing CSV file.").render())

    table = flatten_records_for_preview(records, settings.table_preview_rows)
    raw = records_for_json_preview(records, settings.json_preview_rows)
    plural = "s" if len(records) != 1 else ""
    message = StatusMessage.success(f"Converted {len(records)} row{plural}.").render()
    return (session, table, raw, *session_views(session), message)


def _blocked(exc: ExportPreconditionError):
    panel = f"### {exc.title}\n\n{exc.body}"
    return None, StatusMessage.error(str(exc)).render(), gr.update(visible=True), panel


def export_json_handler(session: Optional[ConversionSession]):
    session = session or new_session()
    try:
        artifact = export_json(session.records, session.registry)
        path = write_artifact(artifact, settings.export_dir)
    except ExportPreconditionError as exc:
        return _blocked(exc)
    except OSError as exc:
        logger.exception("JSON export failed")
        return None, StatusMessage.error(f"Error during export: {exc}").render(), gr.update(visible=False), ""
    return path, StatusMessage.success("JSON download started.").render(), gr.update(visible=False), ""


def export_csv_handler(session: Optional[ConversionSession]):
    session = session or new_session()
    try:
        artifact = export_csv(session.records, session.registry, session.title_pattern, session.headers)
        path = write_artifact(artifact, settings.export_dir)
    except ExportPreconditionError as exc:
        return _blocked(exc)
    except OSError as exc:
        logger.exception("CSV export failed")
        return None, StatusMessage.error(f"Error during export: {exc}").render(), gr.update(visible=False), ""
    return path, StatusMessage.success("CSV download started.").render(), gr.update(visible=False), ""


def close_modal_handler():
    return gr.update(visible=False), ""


def reset_handler(session: Optional[ConversionSession]):
    session = session or new_session()
    session.reset()
    return (
        session,
        None,
        settings.title_pattern,
        pd.DataFrame(),
        None,
        *session_views(session),
        "",
    )


def update_title_pattern(session: Optional[ConversionSession], pattern: str):
    session = session or new_session()
    session.title_pattern = pattern or ''
    return session, format_sample_titles(session)


def append_token_handler(session: Optional[ConversionSession], token: str):
    session = session or new_session()
    session.title_pattern = append_token(session.title_pattern, token)
    return session, session.title_pattern, format_sample_titles(session)

