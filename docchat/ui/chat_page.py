"""NiceGUI chat page: upload a PDF, then ask questions about it."""

import os
from datetime import datetime

import httpx
from nicegui import events, ui

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
REQUEST_TIMEOUT = 180.0

CUSTOM_CSS = """
<style>
    body { background: #f4f5f7; }
    .chat-card { background: white; border-radius: 12px; box-shadow: 0 2px 8px rgba(0, 0, 0, 0.08); }
    .chat-header { background: #1f4e79; }
    .bubble-user { background: #1f4e79; color: white; border-radius: 16px 16px 4px 16px; }
    .bubble-assistant { background: #eef1f5; color: #1f2937; border-radius: 16px 16px 16px 4px; }
    .bubble-notice { background: #fff7e0; color: #7a5b00; border-radius: 8px; }
</style>
"""


class PageState:
    """Chat state for one browser tab."""

    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.session_id: str | None = None
        self.document_name: str | None = None
        self.is_waiting: bool = False

    def add(self, role: str, content: str) -> None:
        self.messages.append({
            "role": role,
            "content": content,
            "time": datetime.now().strftime("%H:%M"),
        })


def _error_detail(response: httpx.Response) -> str:
    try:
        return response.json().get("detail", response.text)
    except ValueError:
        return response.text or f"HTTP {response.status_code}"


async def upload_document(name: str, content: bytes, session_id: str | None) -> dict:
    """POST a PDF to /upload/pdf and return the JSON body.

    Raises:
        RuntimeError: With the API's error detail.
    """
    data = {"session_id": session_id} if session_id else {}
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
        try:
            response = await client.post(
                f"{API_BASE_URL}/upload/pdf",
                files={"file": (name, content, "application/pdf")},
                data=data,
            )
        except httpx.RequestError as e:
            raise RuntimeError(f"Connection failed: {e}") from e
    if response.is_error:
        raise RuntimeError(_error_detail(response))
    return response.json()


async def ask(message: str, session_id: str | None) -> str:
    """POST a question to /chat and return the reply text.

    Raises:
        RuntimeError: With the API's error detail.
    """
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
        try:
            response = await client.post(
                f"{API_BASE_URL}/chat",
                json={"message": message, "session_id": session_id},
            )
        except httpx.RequestError as e:
            raise RuntimeError(f"Connection failed: {e}") from e
    if response.is_error:
        raise RuntimeError(_error_detail(response))
    return response.json()["response"]


async def reset_conversation(session_id: str) -> None:
    """POST to /sessions/{id}/reset so the next question grounds again.

    Raises:
        RuntimeError: With the API's error detail.
    """
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
        try:
            response = await client.post(f"{API_BASE_URL}/sessions/{session_id}/reset")
        except httpx.RequestError as e:
            raise RuntimeError(f"Connection failed: {e}") from e
    if response.is_error:
        raise RuntimeError(_error_detail(response))


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    state = PageState()

    messages_container: ui.column
    input_field: ui.textarea
    send_btn: ui.button
    document_label: ui.label

    def render_message(msg: dict) -> None:
        role = msg["role"]
        if role == "notice":
            with ui.row().classes("w-full justify-center"):
                ui.label(msg["content"]).classes("px-3 py-2 text-sm bubble-notice")
            return

        is_user = role == "user"
        with ui.row().classes(f"w-full {'justify-end' if is_user else 'justify-start'}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(
                    f"px-4 py-3 {'bubble-user' if is_user else 'bubble-assistant'}"
                ):
                    if is_user:
                        ui.label(msg["content"]).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.markdown(msg["content"]).classes("text-sm")
                ui.label(msg["time"]).classes("text-[10px] text-gray-400")

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            if not state.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("picture_as_pdf").classes("text-5xl text-gray-300")
                    ui.label("Upload a PDF, then ask about it").classes("text-lg text-gray-400")
            for msg in state.messages:
                render_message(msg)

    def set_waiting(waiting: bool) -> None:
        state.is_waiting = waiting
        if waiting:
            send_btn.disable()
        else:
            send_btn.enable()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        if state.is_waiting:
            ui.notify("Wait for the current answer first", type="warning")
            return
        state.add("notice", "Processing PDF...")
        refresh_messages()
        set_waiting(True)
        try:
            result = await upload_document(e.file.name, await e.file.read(), state.session_id)
        except RuntimeError as err:
            state.messages.pop()
            state.add("notice", f"Error: {err}")
            ui.notify(str(err), type="negative")
        else:
            state.session_id = result["session_id"]
            # Loading a document resets the conversation on the server
            state.messages.clear()
            if result["warning"]:
                state.add("notice", f"Warning: {result['warning']}")
                ui.notify(result["warning"], type="warning")
            else:
                state.document_name = result["filename"]
                document_label.set_text(result["filename"])
                state.add(
                    "notice",
                    f"Processed {result['pages']} pages ({result['char_count']} characters found).",
                )
        finally:
            set_waiting(False)
            refresh_messages()

    async def send_message() -> None:
        text = input_field.value or ""
        if not text.strip() or state.is_waiting:
            return

        input_field.value = ""
        set_waiting(True)
        state.add("user", text)
        refresh_messages()
        with messages_container:
            spinner = ui.spinner("dots", size="lg").classes("text-gray-400")

        try:
            reply = await ask(text, state.session_id)
        except RuntimeError as err:
            state.add("notice", f"Error: {err}")
            ui.notify(str(err), type="negative")
        else:
            state.add("assistant", reply)
        finally:
            spinner.delete()
            set_waiting(False)
            refresh_messages()

    async def new_chat() -> None:
        if state.is_waiting:
            return
        if state.session_id:
            try:
                await reset_conversation(state.session_id)
            except RuntimeError as err:
                ui.notify(f"Could not start a new chat: {err}", type="negative")
                return
        state.messages.clear()
        refresh_messages()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto chat-card").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        with ui.row().classes("w-full chat-header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("description").classes("text-white text-3xl")
                ui.label("DocChat").classes("text-lg font-semibold text-white")
                document_label = ui.label("No document").classes("text-xs text-white/70")
            with ui.row().classes("items-center gap-2"):
                ui.upload(on_upload=handle_upload, auto_upload=True, max_files=1).props(
                    'accept=".pdf" flat dense color=white label="Upload PDF"'
                ).classes("w-48")
                ui.button(icon="add", on_click=new_chat).props("flat round color=white")

        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")
            refresh_messages()

        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            input_field = (
                ui.textarea(placeholder="Ask about the document...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")


def main() -> None:
    ui.run(title="DocChat", port=8080, reload=False)


if __name__ == "__main__":
    main()
