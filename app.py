import logging
from functools import partial

import gradio as gr

from csv_json_converter.config import settings
from csv_json_converter.handlers import (
    append_token_handler,
    close_modal_handler,
    convert_handler,
    export_csv_handler,
    export_json_handler,
    handle_file_upload,
    new_session,
    reset_handler,
    update_title_pattern,
)
from csv_json_converter.handlers_sections import (
    add_section_handler,
    assign_column_handler,
    assignments_from_table,
    remove_section_handler,
    rename_section_handler,
)
from csv_json_converter.titles import TOKEN_HELP

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# --- UI Definition ---
with gr.Blocks(title="CSV to JSON Converter") as demo:
    gr.Markdown("# CSV to JSON Converter")
    gr.Markdown("Upload a CSV, group its columns into sections, and export structured JSON or a CSV envelope.")

    # State
    session_state = gr.State(value=new_session())

    with gr.Row():
        # Left Panel: Input & Sections
        with gr.Column(scale=1):
            gr.Markdown("### 1. Import")
            file_input = gr.File(label="Upload CSV File", file_types=[".csv"])
            status_msg = gr.Textbox(label="Status", interactive=False)
            headers_md = gr.Markdown("No columns detected.")

            gr.Markdown("### 2. Title Pattern")
            title_pattern = gr.Textbox(label="Title Pattern", value=settings.title_pattern)
            with gr.Row():
                token_buttons = [gr.Button(token, size="sm") for token, _ in TOKEN_HELP[:3]]
            gr.Markdown("\n".join(f"- `{token}`: {help_text}" for token, help_text in TOKEN_HELP))
            sample_titles_md = gr.Markdown("")

            gr.Markdown("### 3. Sections")
            with gr.Row():
                new_section_name = gr.Textbox(label="New Section Name", placeholder="details")
                add_section_btn = gr.Button("Add Section")
            section_selector = gr.Dropdown(label="Section", choices=[], interactive=True)
            rename_input = gr.Textbox(label="New Name")
            with gr.Row():
                rename_btn = gr.Button("Rename")
                remove_btn = gr.Button("Remove", variant="stop")

        # Right Panel: Assignment & Output
        with gr.Column(scale=1):
            gr.Markdown("### 4. Column Assignment")
            with gr.Row():
                column_selector = gr.Dropdown(label="Column", choices=[], interactive=True)
                target_section = gr.Dropdown(label="Target Section", choices=[], interactive=True)
            assign_btn = gr.Button("Assign")
            assignment_table = gr.Dataframe(
                headers=["Column", "Section ID", "Section Name"],
                datatype=["str", "str", "str"],
                col_count=(3, "fixed"),
                interactive=True,
                label="Assignments (edit Section ID to move a column)",
            )

            gr.Markdown("### 5. Convert & Export")
            with gr.Row():
                convert_btn = gr.Button("Convert", variant="primary")
                reset_btn = gr.Button("Reset")
            with gr.Row():
                json_btn = gr.Button("Download JSON")
                csv_btn = gr.Button("Download CSV")
            download_output = gr.File(label="Download Result")

            with gr.Column(visible=False) as modal:
                modal_md = gr.Markdown("")
                close_modal_btn = gr.Button("Close")

    with gr.Tab("Table Preview"):
        table_preview = gr.Dataframe(label=f"Preview (first {settings.table_preview_rows} rows)", interactive=False)
    with gr.Tab("JSON Preview"):
        json_preview = gr.JSON(label=f"Preview (first {settings.json_preview_rows} rows)")

    views = [headers_md, section_selector, target_section, column_selector, assignment_table, sample_titles_md]

    file_input.upload(
        fn=handle_file_upload,
        inputs=[file_input, session_state],
        outputs=[session_state, *views, status_msg],
    )

    title_pattern.change(
        fn=update_title_pattern,
        inputs=[session_state, title_pattern],
        outputs=[session_state, sample_titles_md],
    )

    for btn, (token, _) in zip(token_buttons, TOKEN_HELP):
        btn.click(
            fn=partial(append_token_handler, token=token),
            inputs=[session_state],
            outputs=[session_state, title_pattern, sample_titles_md],
        )

    add_section_btn.click(
        fn=add_section_handler,
        inputs=[session_state, new_section_name],
        outputs=[session_state, *views, new_section_name, status_msg],
    )

    rename_btn.click(
        fn=rename_section_handler,
        inputs=[session_state, section_selector, rename_input],
        outputs=[session_state, *views, status_msg],
    )

    remove_btn.click(
        fn=remove_section_handler,
        inputs=[session_state, section_selector],
        outputs=[session_state, *views, status_msg],
    )

    assign_btn.click(
        fn=assign_column_handler,
        inputs=[session_state, column_selector, target_section],
        outputs=[session_state, *views, status_msg],
    )

    assignment_table.input(
        fn=assignments_from_table,
        inputs=[session_state, assignment_table],
        outputs=[session_state, *views, status_msg],
    )

    # Buttons stay disabled while a conversion is running.
    editing_controls = [convert_btn, add_section_btn, rename_btn, remove_btn, assign_btn]

    convert_btn.click(
        fn=lambda: [gr.update(interactive=False)] * len(editing_controls),
        outputs=editing_controls,
        queue=False,
    ).then(
        fn=convert_handler,
        inputs=[session_state],
        outputs=[session_state, table_preview, json_preview, *views, status_msg],
    ).then(
        fn=lambda: [gr.update(interactive=True)] * len(editing_controls),
        outputs=editing_controls,
        queue=False,
    )

    json_btn.click(
        fn=export_json_handler,
        inputs=[session_state],
        outputs=[download_output, status_msg, modal, modal_md],
    )

    csv_btn.click(
        fn=export_csv_handler,
        inputs=[session_state],
        outputs=[download_output, status_msg, modal, modal_md],
    )

    close_modal_btn.click(fn=close_modal_handler, outputs=[modal, modal_md])

    reset_btn.click(
        fn=reset_handler,
        inputs=[session_state],
        outputs=[session_state, file_input, title_pattern, table_preview, json_preview, *views, status_msg],
    )

if __name__ == "__main__":
    demo.queue(default_concurrency_limit=1).launch()
