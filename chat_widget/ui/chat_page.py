"""NiceGUI chat widget page, a read-only observer of a ChatSession."""

from datetime import datetime

from nicegui import ui
from nicegui.events import MultiUploadEventArguments

from chat_widget.attachments.intake import StagedFile, StageResult, format_file_size
from chat_widget.client.config import get_widget_config
from chat_widget.models.schemas import DeliveryStatus, Message, Sender
from chat_widget.session.lifecycle import ChatSession


def format_time(moment: datetime) -> str:
    """Format a message timestamp as hours and minutes."""
    return moment.strftime("%H:%M")


CUSTOM_CSS = """
<style>
    .chat-panel {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .message-user {
        background: var(--theme, #4f46e5);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-bot {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .message-error { border: 1px solid #ef4444; }

    .typing-dot {
        width: 8px; height: 8px;
        background: var(--theme, #4f46e5);
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }
</style>
"""


def render_message(msg: Message) -> None:
    is_user = msg.sender == Sender.USER
    align = "justify-end" if is_user else "justify-start"
    bubble = "message-user" if is_user else "message-bot"
    if msg.status == DeliveryStatus.ERROR:
        bubble += " message-error"

    with ui.row().classes(f"w-full {align}"), ui.column().classes("max-w-[75%] gap-1"):
        with ui.element("div").classes(f"px-4 py-2 {bubble}"):
            if is_user:
                ui.label(msg.text).classes("text-sm whitespace-pre-wrap")
            else:
                ui.markdown(msg.text).classes("text-sm")
            for att in msg.attachments:
                if att.is_image:
                    ui.image(att.url).classes("w-40 rounded")
                else:
                    ui.link(f"{att.name} ({format_file_size(att.size)})", att.url, new_tab=True)
        status = "" if msg.status == DeliveryStatus.SENT else f" · {msg.status.value}"
        ui.label(f"{format_time(msg.created_at)}{status}").classes("text-[10px] text-gray-400")


async def stage_selection(session: ChatSession, e: MultiUploadEventArguments) -> StageResult:
    """Offer every file of one picker selection to the session as a single batch."""
    staged = [StagedFile.from_bytes(f.name, await f.read(), f.content_type) for f in e.files]
    return session.add_files(staged)


@ui.page("/")
async def chat_page() -> None:
    """Floating chat widget page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession(get_widget_config())
    ui.context.client.on_disconnect(session.dispose)

    await session.load()
    if session.fatal_error:
        with ui.row().classes("fixed bottom-6 right-6 items-center gap-2 text-red-600"):
            ui.icon("warning")
            ui.label(session.fatal_error)
        return

    bot = session.bot_config
    ui.query("body").style(f"--theme: {bot.theme_color}")

    @ui.refreshable
    def transcript_view() -> None:
        for msg in session.transcript:
            render_message(msg)
        if session.typing:
            with ui.row().classes("gap-1 px-4 py-3 message-bot"):
                for _ in range(3):
                    ui.element("div").classes("typing-dot")

    @ui.refreshable
    def staged_view() -> None:
        with ui.row().classes("w-full gap-2"):
            for index, staged in enumerate(session.staged_files):
                with ui.row().classes("items-center gap-1 text-xs bg-gray-100 rounded px-2 py-1"):
                    if staged.preview:
                        ui.image(staged.preview).classes("w-8 h-8 rounded")
                    ui.label(f"{staged.name} {format_file_size(staged.size)}")
                    ui.button(
                        icon="close", on_click=lambda i=index: session.remove_file(i)
                    ).props("flat dense round size=xs")
        if session.notices.current:
            ui.label(session.notices.current).classes("text-xs text-red-600")

    @ui.refreshable
    def badge_view() -> None:
        if session.unread_count and not session.panel_visible:
            ui.badge(str(session.unread_count), color="red").props("floating")

    def on_change() -> None:
        transcript_view.refresh()
        staged_view.refresh()
        badge_view.refresh()
        panel.set_visibility(session.panel_visible)

    session.subscribe(on_change)

    async def handle_upload(e: MultiUploadEventArguments) -> None:
        await stage_selection(session, e)
        e.sender.reset()

    async def send() -> None:
        session.input_text = input_field.value or ""
        input_field.value = ""
        await session.send()

    def toggle_panel() -> None:
        if session.panel_visible:
            session.close_panel()
        else:
            session.open_panel()

    with ui.column().classes("fixed bottom-24 right-6 w-96 h-[32rem] chat-panel") as panel:
        with ui.row().classes("w-full px-4 py-3 items-center justify-between").style(
            f"background: {bot.theme_color}"
        ):
            ui.label(bot.display_name).classes("text-white font-semibold")
            ui.button(icon="close", on_click=session.close_panel).props("flat round color=white")

        with ui.scroll_area().classes("flex-grow w-full"), ui.column().classes("w-full p-3 gap-3"):
            transcript_view()

        with ui.column().classes("w-full p-3 gap-2 border-t"):
            staged_view()
            with ui.row().classes("w-full items-end gap-2 no-wrap"):
                ui.upload(
                    multiple=True,
                    auto_upload=True,
                    on_multi_upload=handle_upload,
                ).props(f'accept="{session.config.accept}" batch flat dense').classes("w-12")
                input_field = (
                    ui.textarea(placeholder="Type a message...")
                    .props("autogrow borderless dense rows=1")
                    .classes("flex-grow")
                    .on("keydown.enter.prevent", send)
                )
                ui.button(icon="send", on_click=send).props("round unelevated")

    panel.set_visibility(False)

    with ui.button(icon="chat", on_click=toggle_panel).props("fab").classes("fixed bottom-6 right-6"):
        badge_view()
