"""UI layout and event handling for the Registration Console.

This module defines the Gradio interface (search row, registration form,
users table and the deletion confirmation group) and the controller that
turns console views into component updates.
"""

from typing import Callable, Optional

import gradio as gr

from registration_console.console.controller import (
    ConsoleView,
    RegistrationConsole,
)
from registration_console.models.enums import FormMode, MutationStatus
from registration_console.models.user import User
from registration_console.observability.logging import get_logger
from registration_console.ui.theme import ConsoleTheme

logger = get_logger(__name__)

TABLE_HEADERS = ["ID", "First Name", "Last Name", "Edit", "Delete"]
EDIT_COLUMN = 3
DELETE_COLUMN = 4
EDIT_CELL = "✏️"
DELETE_CELL = "🗑️"

LOADING_MARKDOWN = "⏳ Loading users..."
ERROR_MARKDOWN = "**Error loading users**"

REFETCH_BUTTON_ID = "refetch-on-focus"
FOCUS_REFETCH_JS = f"""
() => {{
    window.addEventListener("focus", () => {{
        const button = document.getElementById("{REFETCH_BUTTON_ID}");
        if (button) {{
            button.click();
        }}
    }});
}}
"""


def format_rows(users: list[User]) -> list[list[str]]:
    """Renders users as table rows with edit and delete cells."""
    return [
        [u.short_id, u.first_name, u.last_name, EDIT_CELL, DELETE_CELL]
        for u in users
    ]


def format_confirm_markdown(view: ConsoleView) -> str:
    return f"### {view.confirm_title}\n{view.confirm_message}"


class ConsoleUIController:
    """Event handlers bridging Gradio components and a console session.

    Every handler takes the session's console from ``gr.State`` and returns
    it first, followed by the component updates.
    """

    def __init__(self, console_factory: Callable[[], RegistrationConsole]):
        self.console_factory = console_factory

    def _ensure(self, console: Optional[RegistrationConsole]) -> RegistrationConsole:
        return console if console is not None else self.console_factory()

    def render(
        self,
        console: RegistrationConsole,
        view: ConsoleView,
        *,
        sync_form: bool = False,
    ) -> tuple:
        """Builds the full output tuple for a view.

        The form textboxes are only written when ``sync_form`` is set, so a
        frame emitted after a slow request does not overwrite what the user
        typed meanwhile. The search textbox is never written.
        """
        for notice in console.drain_notices():
            gr.Warning(notice)

        if view.is_loading:
            status = LOADING_MARKDOWN
        elif view.has_error:
            status = ERROR_MARKDOWN
        else:
            status = ""

        if sync_form:
            first_name = gr.update(value=view.first_name)
            last_name = gr.update(value=view.last_name)
        else:
            first_name = last_name = gr.update()

        return (
            console,
            gr.update(value=status, visible=bool(status)),
            gr.update(
                value=format_rows(view.rows),
                visible=not view.is_loading and not view.has_error,
            ),
            first_name,
            last_name,
            gr.update(value=view.submit_label, interactive=not view.submit_disabled),
            gr.update(visible=view.confirm_open),
            gr.update(value=format_confirm_markdown(view)),
        )

    async def on_load(self, console):
        console = self._ensure(console)
        async for view in console.start():
            yield self.render(console, view)

    async def on_window_focus(self, console):
        console = self._ensure(console)
        async for view in console.window_focused():
            yield self.render(console, view)

    def on_field_input(self, name: str):
        """Returns a handler that stores one form field."""

        def handler(console, value):
            console = self._ensure(console)
            console.set_field(name, value)
            return console

        return handler

    async def on_submit(self, console, first_name, last_name):
        console = self._ensure(console)
        console.set_field("firstName", first_name)
        console.set_field("lastName", last_name)
        mutation = (
            console.update_mutation
            if console.form.mode == FormMode.EDIT
            else console.create_mutation
        )
        async for view in console.submit():
            # Only a completed write clears the form.
            cleared = (
                not console.is_submitting
                and mutation.status == MutationStatus.SUCCESS
            )
            yield self.render(console, view, sync_form=cleared)

    def on_cancel(self, console):
        console = self._ensure(console)
        return self.render(console, console.cancel_form(), sync_form=True)

    def on_search_input(self, console, value):
        console = self._ensure(console)
        console.type_search(value)
        return console

    async def on_search(self, console, value):
        console = self._ensure(console)
        console.type_search(value)
        async for view in console.commit_search():
            yield self.render(console, view)

    def on_table_select(self, console, evt: gr.SelectData):
        console = self._ensure(console)
        row, column = evt.index
        user = console.row_at(row)
        if user is None:
            logger.debug(f"Table selection outside current rows: {evt.index}")
            return self.render(console, console.view())

        if column == EDIT_COLUMN:
            return self.render(
                console, console.begin_edit(user), sync_form=True
            )
        if column == DELETE_COLUMN:
            return self.render(console, console.request_delete(user.id))
        return self.render(console, console.view())

    async def on_confirm_delete(self, console):
        console = self._ensure(console)
        async for view in console.confirm_delete():
            yield self.render(console, view)

    def on_cancel_delete(self, console):
        console = self._ensure(console)
        return self.render(console, console.cancel_delete())


def create_ui(
    console_factory: Callable[[], RegistrationConsole],
    *,
    title: str = "User Registration",
) -> gr.Blocks:
    """Constructs the Gradio UI and sets up event handlers.

    Args:
        console_factory: Creates the console for each new browser session.
        title: Page and header title.

    Returns:
        A Gradio gr.Blocks object containing the application layout.
    """
    controller = ConsoleUIController(console_factory)

    with gr.Blocks(title=title, theme=ConsoleTheme()) as demo:
        console_state = gr.State(None)

        gr.Markdown(f"# {title}")

        with gr.Row():
            search_input = gr.Textbox(
                placeholder="Search users...",
                show_label=False,
                scale=4,
            )
            search_btn = gr.Button("Search", variant="primary", scale=1)
            refresh_btn = gr.Button(
                "Refresh", variant="secondary", scale=1, elem_id=REFETCH_BUTTON_ID
            )

        with gr.Row():
            # --- Registration Form ---
            with gr.Column(scale=1):
                gr.Markdown("### New Registration")
                first_name = gr.Textbox(
                    label="First Name", placeholder="Enter first name"
                )
                last_name = gr.Textbox(
                    label="Last Name", placeholder="Enter last name"
                )
                with gr.Row():
                    submit_btn = gr.Button("Register", variant="primary")
                    cancel_btn = gr.Button("Cancel", variant="stop")

            # --- Users Table ---
            with gr.Column(scale=1):
                gr.Markdown("### Registered Users")
                status_md = gr.Markdown(LOADING_MARKDOWN)
                table = gr.Dataframe(
                    headers=TABLE_HEADERS,
                    datatype=["str"] * len(TABLE_HEADERS),
                    value=[],
                    interactive=False,
                    wrap=True,
                )

        # Confirmation prompt (hidden by default)
        with gr.Group(visible=False) as confirm_group:
            confirm_md = gr.Markdown("")
            with gr.Row():
                confirm_btn = gr.Button("Delete", variant="stop")
                cancel_delete_btn = gr.Button("Cancel", variant="secondary")

        outputs = [
            console_state,
            status_md,
            table,
            first_name,
            last_name,
            submit_btn,
            confirm_group,
            confirm_md,
        ]

        # --- Event Handlers ---

        demo.load(controller.on_load, inputs=[console_state], outputs=outputs)
        demo.load(None, js=FOCUS_REFETCH_JS)
        refresh_btn.click(
            controller.on_window_focus, inputs=[console_state], outputs=outputs
        )

        first_name.input(
            controller.on_field_input("firstName"),
            inputs=[console_state, first_name],
            outputs=[console_state],
        )
        last_name.input(
            controller.on_field_input("lastName"),
            inputs=[console_state, last_name],
            outputs=[console_state],
        )

        form_inputs = [console_state, first_name, last_name]
        submit_btn.click(controller.on_submit, inputs=form_inputs, outputs=outputs)
        first_name.submit(controller.on_submit, inputs=form_inputs, outputs=outputs)
        last_name.submit(controller.on_submit, inputs=form_inputs, outputs=outputs)
        cancel_btn.click(controller.on_cancel, inputs=[console_state], outputs=outputs)

        search_input.input(
            controller.on_search_input,
            inputs=[console_state, search_input],
            outputs=[console_state],
        )
        search_inputs = [console_state, search_input]
        search_btn.click(controller.on_search, inputs=search_inputs, outputs=outputs)
        search_input.submit(
            controller.on_search, inputs=search_inputs, outputs=outputs
        )

        table.select(
            controller.on_table_select, inputs=[console_state], outputs=outputs
        )

        confirm_btn.click(
            controller.on_confirm_delete, inputs=[console_state], outputs=outputs
        )
        cancel_delete_btn.click(
            controller.on_cancel_delete, inputs=[console_state], outputs=outputs
        )

    return demo
