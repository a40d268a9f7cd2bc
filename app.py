import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple

import gradio as gr
import gradio_client.utils as gr_client_utils

from config import DEFAULT_BASE_URL, DEFAULT_MODEL, EndpointConfig
from editor.session import EditorSession
from errors import InvalidInput, PortfolioError, http_status
from llm.pipeline import InMemoryCounterStore, ResumeExtractor
from render.live import LiveHooks, render_live
from render.registry import list_kinds
from render.static import ThemePreference, escape_html, export_portfolio
from resume_parser.parser import rasterize_pdf
from schemas.resume import SECTION_IDS

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("resume_portfolio")

APP_TITLE = "Resume to Portfolio"
VISION_MODELS = ["gemini-2.0-flash", "gemini-1.5-flash", "gpt-4o-mini", "gpt-4o"]
PREVIEW_HEIGHT = 720

# Shared across requests so consecutive extractions start on the next key.
COUNTER_STORE = InMemoryCounterStore()


# Gradio 4.44.1 can emit JSON schema fragments with `additionalProperties: true`,
# which crashes `gradio_client.utils` when generating API info. Patch in a guard
# so boolean schemas map to `Any` instead of raising TypeError.
_original_json_schema_to_python_type = gr_client_utils._json_schema_to_python_type


def _safe_json_schema_to_python_type(schema, defs=None):
    if isinstance(schema, bool):
        return "Any"
    return _original_json_schema_to_python_type(schema, defs)


gr_client_utils._json_schema_to_python_type = _safe_json_schema_to_python_type


def _extract_pdf_bytes(pdf_file) -> bytes:
    """Support both file objects and filepath strings from Gradio."""
    if pdf_file is None:
        raise InvalidInput("No PDF uploaded.")
    if isinstance(pdf_file, (bytes, bytearray)):
        return bytes(pdf_file)
    if hasattr(pdf_file, "read"):
        return pdf_file.read()
    if isinstance(pdf_file, str) and Path(pdf_file).exists():
        return Path(pdf_file).read_bytes()
    raise InvalidInput("Unsupported PDF input; please re-upload the file.")


def _theme(choice: str) -> ThemePreference:
    return ThemePreference(default="light" if choice == "light" else "dark")


def _preview_html(session: EditorSession, theme_choice: str) -> str:
    # Edit/remove affordances show each element's id for the controls below.
    hooks = LiveHooks(on_edit=lambda _id: None, on_remove=lambda _id: None)
    document = render_live(session.data, hooks=hooks, theme=_theme(theme_choice)).to_document()
    return (
        f'<iframe srcdoc="{escape_html(document)}" '
        f'style="width:100%;height:{PREVIEW_HEIGHT}px;border:0;" sandbox="allow-scripts"></iframe>'
    )


def _has_element(session: EditorSession, element_id: str) -> bool:
    return any(element.id == element_id for element in session.elements)


def _describe_error(exc: Exception) -> str:
    if isinstance(exc, PortfolioError):
        return f"[{http_status(exc)}] {exc}"
    return f"An error occurred: {exc}"


def extract_portfolio(
    pdf_file,
    api_keys: str,
    model: str,
    base_url: str,
    theme_choice: str,
) -> Tuple[str, str, str]:
    logs = []

    def log(msg: str):
        logs.append(msg)

    if not pdf_file:
        return "", "", "Please upload a resume PDF."

    try:
        config = EndpointConfig(
            api_keys=api_keys or os.getenv("VISION_API_KEYS") or os.getenv("VISION_API_KEY") or "",
            model=model or DEFAULT_MODEL,
            base_url=base_url,
        )
        log(f"Using {len(config.api_keys)} API key(s) with model {config.model}")

        raster = rasterize_pdf(_extract_pdf_bytes(pdf_file))
        log(f"Rendered {len(raster.pages)} of {raster.page_count} page(s) using {raster.method}")

        extractor = ResumeExtractor(config, counter_store=COUNTER_STORE)
        resume = extractor.extract(raster.pages)
        log("Extraction complete.")

        session = EditorSession(resume)
        return session.to_json(), _preview_html(session, theme_choice), "\n".join(logs)
    except Exception as exc:
        logger.exception("Extraction failed")
        log(_describe_error(exc))
        log("If this persists, verify your API keys and model and that outbound network access is allowed.")
        return "", "", "\n".join(logs)


def refresh_preview(resume_json: str, theme_choice: str) -> Tuple[str, str]:
    try:
        session = EditorSession.from_json(resume_json)
        return _preview_html(session, theme_choice), "Preview updated."
    except PortfolioError as exc:
        return "", _describe_error(exc)


def add_element(resume_json: str, kind_name: str, section: str, theme_choice: str) -> Tuple[str, str, str]:
    kinds = {kind.name: kind.tag for kind in list_kinds()}
    try:
        session = EditorSession.from_json(resume_json)
        added = []

        def on_drop(target: str, kind: str):
            added.append(session.add_element(kind, target))

        preview = render_live(session.data, hooks=LiveHooks(on_drop=on_drop))
        if not preview.dispatch("drop", section, kinds.get(kind_name, kind_name)):
            return resume_json, gr.update(), f"Section {section!r} is not shown in the portfolio yet."
        message = f"Added {added[0].id} to {section}."
        return session.to_json(), _preview_html(session, theme_choice), message
    except PortfolioError as exc:
        return resume_json, gr.update(), _describe_error(exc)


def edit_element(resume_json: str, element_id: str, props_json: str, theme_choice: str) -> Tuple[str, str, str]:
    try:
        session = EditorSession.from_json(resume_json)
        props = json.loads(props_json or "{}")
        if not isinstance(props, dict):
            return resume_json, gr.update(), "Element props must be a JSON object."
        element_id = element_id.strip()
        hooks = LiveHooks(on_edit=lambda target: session.update_element(target, props))
        if not render_live(session.data, hooks=hooks).dispatch("edit", element_id):
            if not _has_element(session, element_id):
                return resume_json, gr.update(), f"No element with id {element_id!r}."
            # placed in a section that is not shown yet
            session.update_element(element_id, props)
        return session.to_json(), _preview_html(session, theme_choice), f"Updated {element_id}."
    except json.JSONDecodeError as exc:
        return resume_json, gr.update(), f"Element props are not valid JSON: {exc}"
    except PortfolioError as exc:
        return resume_json, gr.update(), _describe_error(exc)


def remove_element(resume_json: str, element_id: str, theme_choice: str) -> Tuple[str, str, str]:
    try:
        session = EditorSession.from_json(resume_json)
        element_id = element_id.strip()
        hooks = LiveHooks(on_remove=session.remove_element)
        if not render_live(session.data, hooks=hooks).dispatch("remove", element_id):
            if not _has_element(session, element_id):
                return resume_json, gr.update(), f"No element with id {element_id!r}."
            session.remove_element(element_id)
        return session.to_json(), _preview_html(session, theme_choice), f"Removed {element_id}."
    except PortfolioError as exc:
        return resume_json, gr.update(), _describe_error(exc)


def export_html(resume_json: str, theme_choice: str) -> Tuple[Optional[str], str]:
    try:
        session = EditorSession.from_json(resume_json)
        filename, html = export_portfolio(session.data, theme=_theme(theme_choice))
    except PortfolioError as exc:
        return None, _describe_error(exc)
    out_path = Path(tempfile.mkdtemp()) / filename
    out_path.write_text(html, encoding="utf-8")
    return str(out_path), f"Exported {filename}."


def build_ui():
    kind_names = [kind.name for kind in list_kinds()]

    with gr.Blocks(title=APP_TITLE) as demo:
        gr.Markdown(f"# {APP_TITLE}\nTurn a resume PDF into a single-file portfolio website.")
        with gr.Row():
            with gr.Column():
                pdf = gr.File(label="Upload Resume PDF", file_types=[".pdf"], type="binary")
                api = gr.Textbox(
                    label="Vision API key(s), comma-separated (falls back to VISION_API_KEYS)",
                    type="password",
                )
                model = gr.Dropdown(
                    label="Model name",
                    choices=VISION_MODELS,
                    value=os.getenv("VISION_MODEL", DEFAULT_MODEL),
                    allow_custom_value=True,
                )
                base_url = gr.Textbox(
                    label="OpenAI-compatible base URL",
                    value=os.getenv("VISION_BASE_URL", DEFAULT_BASE_URL),
                )
                theme_choice = gr.Radio(label="Theme", choices=["dark", "light"], value="dark")
                extract_btn = gr.Button("Generate Portfolio")
                logs_box = gr.Textbox(label="Logs", lines=8, interactive=False)
            with gr.Column():
                resume_json = gr.Code(label="Resume JSON (editable)", language="json")
                refresh_btn = gr.Button("Refresh preview")
                with gr.Row():
                    kind = gr.Dropdown(label="Element", choices=kind_names, value=kind_names[0])
                    section = gr.Dropdown(label="Section", choices=list(SECTION_IDS), value="about")
                    add_btn = gr.Button("Add element")
                with gr.Row():
                    element_id = gr.Textbox(label="Element id")
                    props_json = gr.Textbox(label="Element props (JSON)", lines=3)
                with gr.Row():
                    edit_btn = gr.Button("Update element")
                    remove_btn = gr.Button("Remove element")
                export_btn = gr.Button("Export .html")
                html_download = gr.File(label="Portfolio download")

        preview = gr.HTML(label="Live preview")

        extract_btn.click(
            fn=extract_portfolio,
            inputs=[pdf, api, model, base_url, theme_choice],
            outputs=[resume_json, preview, logs_box],
        )
        refresh_btn.click(fn=refresh_preview, inputs=[resume_json, theme_choice], outputs=[preview, logs_box])
        theme_choice.change(fn=refresh_preview, inputs=[resume_json, theme_choice], outputs=[preview, logs_box])
        add_btn.click(
            fn=add_element,
            inputs=[resume_json, kind, section, theme_choice],
            outputs=[resume_json, preview, logs_box],
        )
        edit_btn.click(
            fn=edit_element,
            inputs=[resume_json, element_id, props_json, theme_choice],
            outputs=[resume_json, preview, logs_box],
        )
        remove_btn.click(
            fn=remove_element,
            inputs=[resume_json, element_id, theme_choice],
            outputs=[resume_json, preview, logs_box],
        )
        export_btn.click(fn=export_html, inputs=[resume_json, theme_choice], outputs=[html_download, logs_box])

    return demo


if __name__ == "__main__":
    app = build_ui()
    app.launch(
        server_name="0.0.0.0",
        server_port=int(os.getenv("PORT", "7860")),
    )
