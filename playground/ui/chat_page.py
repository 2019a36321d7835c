"""NiceGUI playground page driven by a ConversationController."""

import logging

from nicegui import background_tasks, events, ui

from playground.agent.config import Settings, get_settings
from playground.conversation import (
    AudioClient,
    ConversationController,
    ConversationEvent,
    ConversationState,
    EventKind,
    FileClient,
    GenerationTransport,
    SessionStoreClient,
)
from playground.errors import SideChannelError
from playground.models.catalog import MODEL_CATEGORIES
from playground.models.chat import ChatMessage, LogEntry
from playground.models.schemas import SessionSummary

logger = logging.getLogger(__name__)

AUDIO_LANGUAGES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ja": "Japanese",
    "zh": "Chinese",
}
REASONING_EFFORTS = {"low": "Low", "medium": "Medium", "high": "High"}

STATUS_TEXT = {
    ConversationState.SENDING: "Sending...",
    ConversationState.STREAMING: "Generating response...",
    ConversationState.WAITING: "Waiting for response...",
    ConversationState.FINALIZING: "Finishing up...",
}

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #0f766e 0%, #1e3a8a 100%); }

    .message-user {
        background: linear-gradient(135deg, #0f766e 0%, #1e3a8a 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .message-system {
        background: #fef2f2;
        color: #b91c1c;
        border: 1px solid #fecaca;
        border-radius: 8px;
    }

    .avatar-user { background: linear-gradient(135deg, #0f766e 0%, #1e3a8a 100%); }
    .avatar-assistant { background: #6b7280; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #0f766e;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
        transition: border-color 0.2s;
    }
    .input-box:focus-within { border-color: #0f766e; }

    .send-btn { background: linear-gradient(135deg, #0f766e 0%, #1e3a8a 100%) !important; }

    .console-log { font-family: 'Menlo', 'Monaco', monospace; font-size: 11px; }

    .message-assistant pre { margin: 0.5rem 0; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
</style>
"""


def build_controller(settings: Settings) -> ConversationController:
    """Wire a controller to this application's HTTP API."""
    base_url = settings.api_base_url
    timeout = settings.request_timeout
    return ConversationController(
        transport=GenerationTransport(base_url, timeout=timeout),
        session_store=SessionStoreClient(base_url, timeout=timeout),
        audio=AudioClient(base_url, timeout=timeout),
    )


def format_log(entry: LogEntry) -> str:
    line = f"[{entry.timestamp[11:19]}] {entry.type.value.upper()}: {entry.message}"
    if entry.details is not None:
        line += f" {entry.details}"
    return line


@ui.page("/")
async def chat_page(session: str | None = None) -> None:
    """Main playground page. `?session=<id>` reopens a stored chat."""
    ui.add_head_html(CUSTOM_CSS)
    settings = get_settings()
    controller = build_controller(settings)
    file_client = FileClient(settings.api_base_url, timeout=settings.request_timeout)

    if session:
        await controller.load_session(session)

    messages_container: ui.column
    stream_row: ui.row
    stream_markdown: ui.markdown
    status_row: ui.row
    status_label: ui.label
    input_field: ui.textarea
    send_btn: ui.button
    console: ui.log
    context_label: ui.label
    context_bar: ui.linear_progress
    files_row: ui.row
    reasoning_select: ui.select
    audio_panel: ui.column
    model_select: ui.select

    def render_avatar(is_user: bool) -> None:
        css = "avatar-user" if is_user else "avatar-assistant"
        icon = "person" if is_user else "smart_toy"
        avatar_classes = f"w-9 h-9 rounded-full flex items-center justify-center {css}"
        with ui.element("div").classes(avatar_classes):
            ui.icon(icon).classes("text-white text-lg")

    def render_message(msg: ChatMessage) -> None:
        if msg.role == "system":
            with ui.row().classes("w-full justify-center"):
                ui.label(msg.content).classes("message-system px-4 py-2 text-sm")
            return

        is_user = msg.role == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align} gap-3 items-end"):
            if not is_user:
                render_avatar(False)
            with ui.column().classes("max-w-[70%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.markdown(msg.content).classes("text-sm leading-relaxed")
                    for file in msg.files:
                        ui.chip(file.name, icon="attach_file").props("dense outline")
                if msg.audio_url:
                    ui.audio(msg.audio_url).classes("w-64")
                ui.label(msg.timestamp[11:16]).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )
            if is_user:
                render_avatar(True)

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            if not controller.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Start a conversation").classes("text-lg text-gray-400")
            else:
                for msg in controller.messages:
                    render_message(msg)

    def refresh_stream() -> None:
        text = controller.current_streamed_text
        stream_markdown.set_content(text)
        stream_row.set_visibility(bool(text))
        state = controller.state
        status_row.set_visibility(controller.is_processing and not text and state in STATUS_TEXT)
        status_label.set_text(STATUS_TEXT.get(state, ""))

    def refresh_controls() -> None:
        if controller.is_processing:
            send_btn.disable()
        else:
            send_btn.enable()
        refresh_stream()

    def refresh_context() -> None:
        usage = controller.context_usage()
        context_label.set_text(
            f"{usage.tokens:,} / {usage.max_tokens:,} tokens ({usage.percent:.1f}%)"
        )
        context_bar.set_value(usage.percent / 100)

    def refresh_files() -> None:
        files_row.clear()
        with files_row:
            for file in controller.files:
                ui.chip(file.name, icon="description").props("dense")
            if controller.files:
                ui.button(icon="close", on_click=controller.clear_files).props(
                    "flat round dense size=sm"
                )

    def refresh_config() -> None:
        config = controller.model_config
        options = {m.id: m.id for m in MODEL_CATEGORIES.get(config.model_category, [])}
        model_select.set_options(options, value=config.model)
        reasoning_select.set_visibility(config.supports_reasoning)
        audio_panel.set_visibility(config.supports_audio)
        refresh_context()

    def append_log(entry: LogEntry | None) -> None:
        if entry is None:
            console.clear()
        else:
            console.push(format_log(entry))

    @ui.refreshable
    def session_list(sessions: list[SessionSummary]) -> None:
        if not sessions:
            ui.label("No saved chats").classes("text-xs text-gray-400 px-2")
        for summary in sessions:
            selected = summary.id == controller.session_id
            ui.button(
                summary.title,
                on_click=lambda s=summary: open_session(s.id),
            ).props(f"flat no-caps align=left {'color=primary' if selected else 'color=grey-8'}").classes(
                "w-full text-sm"
            )

    async def reload_sessions() -> None:
        session_list.refresh(await controller.list_sessions())

    def on_event(event: ConversationEvent) -> None:
        with root:
            if event.kind is EventKind.TRANSCRIPT_CHANGED:
                refresh_messages()
                refresh_stream()
                refresh_context()
            elif event.kind is EventKind.STREAM_PROGRESS:
                refresh_stream()
            elif event.kind is EventKind.STATE_CHANGED:
                refresh_controls()
            elif event.kind is EventKind.LOG_ADDED:
                append_log(event.payload)
            elif event.kind is EventKind.NOTIFICATION:
                ui.notify(
                    f"{event.payload.title}: {event.payload.description}",
                    type=event.payload.level,
                )
            elif event.kind is EventKind.SESSION_CHANGED:
                url = f"/?session={event.payload}" if event.payload else "/"
                ui.run_javascript(f"history.replaceState(null, '', '{url}')")
                background_tasks.create(reload_sessions())
            elif event.kind is EventKind.FILES_CHANGED:
                refresh_files()
            elif event.kind is EventKind.CONFIG_CHANGED:
                refresh_config()

    async def send_message() -> None:
        text = input_field.value or ""
        if controller.is_processing or (not text.strip() and not controller.files):
            return
        input_field.value = ""
        await controller.send_message(text)

    async def open_session(session_id: str) -> None:
        await controller.load_session(session_id)

    async def handle_file_upload(e: events.UploadEventArguments) -> None:
        content = await e.file.read()
        try:
            file_data = await file_client.upload(e.file.name, content, e.file.content_type)
        except SideChannelError as err:
            ui.notify(f"File Upload Error: {err}", type="negative")
            return
        controller.add_files([file_data])

    async def handle_audio_upload(e: events.UploadEventArguments) -> None:
        content = await e.file.read()
        await controller.handle_audio_recorded(content, filename=e.file.name)

    def download(fmt: str) -> None:
        suffix = "json" if fmt == "json" else "md"
        ui.download.content(controller.export(fmt), f"conversation.{suffix}")

    def on_category(e: events.ValueChangeEventArguments) -> None:
        if e.value != controller.model_config.model_category:
            controller.select_category(e.value)

    def on_model(e: events.ValueChangeEventArguments) -> None:
        if e.value and e.value != controller.model_config.model:
            controller.select_model(e.value)

    def on_setting(field: str):
        def handler(e: events.ValueChangeEventArguments) -> None:
            if getattr(controller.model_config, field) != e.value:
                controller.update_model_config(**{field: e.value})

        return handler

    def on_max_tokens(e: events.ValueChangeEventArguments) -> None:
        value = int(e.value or 0)
        if value and value != controller.model_config.max_tokens:
            controller.update_model_config(max_tokens=value)

    config = controller.model_config

    # === UI Layout ===
    with ui.element("div").classes("w-full min-h-screen p-4 md:p-8") as root:
        with ui.row().classes("w-full max-w-7xl mx-auto gap-4 no-wrap items-stretch"):
            # Sidebar: sessions and model settings
            with ui.column().classes("w-72 app-container p-4 gap-3").style(
                "height: calc(100vh - 4rem); overflow-y: auto"
            ):
                ui.button("New chat", icon="add", on_click=controller.new_chat).props(
                    "unelevated no-caps"
                ).classes("w-full send-btn text-white")
                ui.label("Chats").classes("text-xs font-semibold text-gray-500 uppercase")
                with ui.column().classes("w-full gap-0"):
                    session_list(await controller.list_sessions())

                ui.separator()
                ui.label("Model").classes("text-xs font-semibold text-gray-500 uppercase")
                ui.select(
                    {c: c.capitalize() for c in MODEL_CATEGORIES},
                    value=config.model_category,
                    label="Category",
                    on_change=on_category,
                ).classes("w-full")
                model_select = ui.select(
                    {m.id: m.id for m in MODEL_CATEGORIES.get(config.model_category, [])},
                    value=config.model,
                    label="Model",
                    on_change=on_model,
                ).classes("w-full")

                ui.label("Temperature").classes("text-xs text-gray-500")
                ui.slider(
                    min=0, max=2, step=0.1, value=config.temperature,
                    on_change=on_setting("temperature"),
                ).props("label")
                ui.label("Top P").classes("text-xs text-gray-500")
                ui.slider(
                    min=0, max=1, step=0.05, value=config.top_p,
                    on_change=on_setting("top_p"),
                ).props("label")
                ui.number(
                    "Max tokens", value=config.max_tokens, min=1, max=128000, precision=0,
                    on_change=on_max_tokens,
                ).classes("w-full")
                ui.switch(
                    "Streaming", value=config.streaming, on_change=on_setting("streaming")
                )
                reasoning_select = ui.select(
                    REASONING_EFFORTS,
                    value=config.reasoning_effort,
                    label="Reasoning effort",
                    clearable=True,
                    on_change=on_setting("reasoning_effort"),
                ).classes("w-full")
                reasoning_select.set_visibility(config.supports_reasoning)

                with ui.column().classes("w-full gap-2") as audio_panel:
                    ui.select(
                        AUDIO_LANGUAGES,
                        value=config.audio_language,
                        label="Audio language",
                        on_change=on_setting("audio_language"),
                    ).classes("w-full")
                    ui.textarea(
                        "Transcription instructions",
                        value=config.audio_instructions,
                        on_change=on_setting("audio_instructions"),
                    ).props("autogrow dense").classes("w-full")
                    ui.upload(
                        label="Send a recording",
                        auto_upload=True,
                        on_upload=handle_audio_upload,
                    ).props("accept=audio/* flat dense").classes("w-full")
                audio_panel.set_visibility(config.supports_audio)

                ui.separator()
                ui.label("Context").classes("text-xs font-semibold text-gray-500 uppercase")
                context_label = ui.label().classes("text-xs text-gray-600")
                context_bar = ui.linear_progress(value=0, show_value=False)
                with ui.row().classes("w-full gap-2"):
                    ui.button("JSON", icon="download", on_click=lambda: download("json")).props(
                        "flat dense no-caps"
                    )
                    ui.button(
                        "Markdown", icon="download", on_click=lambda: download("markdown")
                    ).props("flat dense no-caps")
                    ui.button(
                        icon="delete_sweep", on_click=controller.clear_conversation
                    ).props("flat dense round").tooltip("Clear conversation")

            # Chat column
            with ui.column().classes("flex-grow app-container gap-0").style(
                "height: calc(100vh - 4rem)"
            ):
                with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
                    with ui.row().classes("items-center gap-3"):
                        ui.icon("science").classes("text-white text-3xl")
                        ui.label("LLM Playground").classes("text-lg font-semibold text-white")
                    with ui.element("div").classes(
                        "bg-white/20 rounded-full px-3 py-1 flex items-center gap-2"
                    ):
                        ui.icon("memory").classes("text-white/80 text-sm")
                        ui.label().bind_text_from(
                            controller, "model_config", lambda c: c.model
                        ).classes("text-xs text-white/80 font-mono")

                with (
                    ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
                    ui.column().classes("w-full p-5 gap-4"),
                ):
                    messages_container = ui.column().classes("w-full gap-4")
                    with ui.row().classes("w-full justify-start gap-3 items-end") as stream_row:
                        render_avatar(False)
                        with ui.element("div").classes("message-assistant px-4 py-3 max-w-[70%]"):
                            stream_markdown = ui.markdown("").classes("text-sm leading-relaxed")
                    with ui.row().classes("w-full justify-start gap-3 items-end") as status_row:
                        render_avatar(False)
                        with ui.element("div").classes("message-assistant px-4 py-3"):
                            with ui.row().classes("items-center gap-2"):
                                with ui.row().classes("gap-1"):
                                    for _ in range(3):
                                        ui.element("div").classes("typing-dot")
                                status_label = ui.label("").classes(
                                    "text-sm text-gray-500 italic"
                                )

                files_row = ui.row().classes("w-full px-4 pt-2 gap-2 items-center")
                with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
                    ui.upload(
                        auto_upload=True,
                        multiple=True,
                        on_upload=handle_file_upload,
                    ).props("accept=.pdf,.txt,.md,.json,.csv flat dense").classes("w-40")
                    with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                        input_field = (
                            ui.textarea(placeholder="Type a message...")
                            .props("autogrow borderless dense rows=1")
                            .classes("w-full")
                            .on("keydown.enter.prevent", send_message)
                        )
                    send_btn = (
                        ui.button(icon="send", on_click=send_message)
                        .props("round unelevated")
                        .classes("send-btn")
                    )

                with ui.expansion("Console", icon="terminal").classes("w-full border-t"):
                    console = ui.log(max_lines=500).classes("w-full h-40 console-log")
                    ui.button("Clear logs", on_click=controller.clear_logs).props(
                        "flat dense no-caps"
                    )

    refresh_messages()
    refresh_files()
    refresh_controls()
    refresh_context()
    for entry in controller.logs:
        append_log(entry)

    unsubscribe = controller.subscribe(on_event)

    async def on_disconnect() -> None:
        unsubscribe()
        await controller.drain()

    ui.context.client.on_disconnect(on_disconnect)
    logger.debug(f"Playground page ready (session={controller.session_id})")


def main() -> None:
    settings = get_settings()
    ui.run(
        title="LLM Playground",
        host=settings.host,
        port=settings.ui_port,
        storage_secret=settings.storage_secret,
        reload=False,
    )


if __name__ == "__main__":
    main()
