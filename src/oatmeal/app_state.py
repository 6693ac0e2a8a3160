"""Conversation state controller.

``AppState`` owns the message history and keeps the bubble layout, scroll
position and code-block registry in step with it. Every mutator ends by
re-syncing those dependants, either directly or through ``add_message``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from enum import Enum
import logging
from typing import TYPE_CHECKING, NamedTuple

from .backends import BackendManager
from .commands import SlashCommand
from .editors import EditorManager
from .exceptions import CodeBlockSelectionError, ConfigError, NoContextError
from .managers import BubbleList, CodeBlocks, Scroll, ThemeManager
from .models import (
    AcceptCodeBlock,
    AcceptType,
    Author,
    BackendPrompt,
    BackendResponse,
    CopyMessages,
    EditorContext,
    Message,
    MessageType,
)
from .persistence import SessionStore

if TYPE_CHECKING:
    from .channel import Channel
    from .config import Config
    from .managers import Theme
    from .models import Action

LOGGER = logging.getLogger(__name__)

INTRO_TEXT = "Hey there! What can I do for you?"
EDITOR_INTRO_TEXT = "Hey there! Let's talk about the following: \n\n{context}"
NEW_SESSION_CLEAR_ARG = "clear"


def editor_message(formatted_context: str) -> Message:
    return Message(Author.MODEL, EDITOR_INTRO_TEXT.format(context=formatted_context))


def intro_message() -> Message:
    return Message(Author.MODEL, INTRO_TEXT)


def narrator_error(text: str) -> Message:
    return Message(Author.OATMEAL, text, MessageType.ERROR)


class CommandOutcome(str, Enum):
    """What the input loop should do after a line went through dispatch."""

    CONTINUE = "CONTINUE"
    HANDLED_LOCALLY = "HANDLED_LOCALLY"
    TERMINATE = "TERMINATE"


class SlashCommandResult(NamedTuple):
    """Two independent signals returned by ``handle_slash_commands``."""

    should_terminate: bool = False
    should_skip_backend_send: bool = False

    @property
    def outcome(self) -> CommandOutcome:
        if self.should_terminate:
            return CommandOutcome.TERMINATE
        if self.should_skip_backend_send:
            return CommandOutcome.HANDLED_LOCALLY
        return CommandOutcome.CONTINUE


@dataclass(frozen=True)
class AppStateProps:
    """Startup selections for a session."""

    backend_name: str
    editor_name: str
    model_name: str
    theme_name: str
    theme_file: str = ""
    session_id: str | None = None

    @classmethod
    def from_config(cls, config: Config, session_id: str | None = None) -> AppStateProps:
        return cls(
            backend_name=config.oatmeal.backend,
            editor_name=config.oatmeal.editor,
            model_name=config.oatmeal.model,
            theme_name=config.oatmeal.theme,
            theme_file=config.oatmeal.theme_file,
            session_id=session_id,
        )


@dataclass
class AppServices:
    """Collaborators injected into the controller."""

    sessions: SessionStore
    themes: ThemeManager = field(default_factory=ThemeManager)
    backends: BackendManager = field(default_factory=BackendManager)
    editors: EditorManager = field(default_factory=EditorManager)

    @classmethod
    def from_config(cls, config: Config) -> AppServices:
        return cls(
            sessions=SessionStore(config.sessions.directory),
            backends=BackendManager(
                ollama_url=config.ollama.url, timeout=config.ollama.timeout
            ),
        )


class AppState:
    """Canonical conversation state and its synchronized view dependants."""

    def __init__(
        self,
        theme: Theme,
        services: AppServices,
        session_id: str,
        backend_context: str = "",
        messages: list[Message] | None = None,
    ) -> None:
        self.services = services
        self.session_id = session_id
        self.backend_context = backend_context
        self.editor_context: EditorContext | None = None
        self.messages: list[Message] = list(messages or [])
        self.waiting_for_backend = False
        self.exit_warning = False
        self.last_known_width = 0
        self.last_known_height = 0
        self.bubble_list = BubbleList(theme)
        self.codeblocks = CodeBlocks()
        self.scroll = Scroll()

    @classmethod
    async def create(cls, props: AppStateProps, services: AppServices) -> AppState:
        """Resume the configured session, or start a fresh one."""
        if props.session_id:
            return await cls.from_session(props, services)
        return await cls.init(props, services)

    @classmethod
    async def init(cls, props: AppStateProps, services: AppServices) -> AppState:
        """Start a fresh session, probing the backend and attaching editor context."""
        theme = services.themes.get(props.theme_name, props.theme_file)
        app_state = cls(theme, services, session_id=services.sessions.create_id())

        backend_name = props.backend_name
        model_name = props.model_name
        backend = services.backends.get(backend_name)
        try:
            await backend.health_check()
        except Exception as exc:  # noqa: BLE001 - a broken backend must not block startup.
            LOGGER.warning(
                "app_state.init.backend_unhealthy",
                extra={
                    "event": "app_state.init.backend_unhealthy",
                    "backend": backend_name,
                    "error": str(exc),
                },
            )
            app_state.messages.append(
                narrator_error(
                    f"Hey, it looks like backend {backend_name} isn't running, I can't "
                    "connect to it. You should double check that before we start "
                    f"talking, otherwise I may crash.\n\nError: {exc}"
                )
            )
        else:
            models = await backend.list_models()
            if model_name not in models:
                LOGGER.warning(
                    "app_state.init.model_missing",
                    extra={
                        "event": "app_state.init.model_missing",
                        "backend": backend_name,
                        "model": model_name,
                    },
                )
                app_state.messages.append(
                    narrator_error(
                        f"Model {model_name} doesn't exist for backend {backend_name}. "
                        "You can use `/modellist` to view all available models, and "
                        "`/model NAME` to switch models."
                    )
                )

        try:
            await app_state.add_editor_context(props.editor_name)
        except Exception as exc:  # noqa: BLE001 - any failure falls back to the intro.
            LOGGER.info(
                "app_state.init.no_editor_context",
                extra={
                    "event": "app_state.init.no_editor_context",
                    "editor": props.editor_name,
                    "reason": str(exc),
                },
            )
            app_state.messages.append(intro_message())

        app_state.codeblocks.replace_from_messages(app_state.messages)
        app_state.sync_dependants()
        LOGGER.info(
            "app_state.init.ready",
            extra={
                "event": "app_state.init.ready",
                "session_id": app_state.session_id,
                "messages": len(app_state.messages),
            },
        )
        return app_state

    @classmethod
    async def from_session(cls, props: AppStateProps, services: AppServices) -> AppState:
        """Restore a stored session and re-attach live editor context."""
        session_id = props.session_id or ""
        session = await asyncio.to_thread(services.sessions.load, session_id)
        theme = services.themes.get(props.theme_name, props.theme_file)

        app_state = cls(
            theme,
            services,
            session_id=session_id,
            backend_context=session.backend_context,
            messages=session.messages,
        )
        app_state.codeblocks.replace_from_messages(app_state.messages)

        try:
            editor = services.editors.get(props.editor_name)
        except ConfigError:
            editor = None
        if editor is not None:
            try:
                await editor.health_check()
            except Exception as exc:  # noqa: BLE001
                LOGGER.info(
                    "app_state.resume.editor_unhealthy",
                    extra={
                        "event": "app_state.resume.editor_unhealthy",
                        "editor": props.editor_name,
                        "error": str(exc),
                    },
                )
            else:
                app_state.editor_context = await editor.get_context()

        app_state.sync_dependants()
        LOGGER.info(
            "app_state.resume.ready",
            extra={
                "event": "app_state.resume.ready",
                "session_id": session_id,
                "messages": len(app_state.messages),
            },
        )
        return app_state

    async def add_editor_context(self, editor_name: str) -> None:
        """Attach the editor's current context and greet the user with it.

        Raises ``ConfigError`` for an unknown editor and ``NoContextError`` when
        the editor has nothing to offer. An unhealthy editor is reported in the
        conversation instead of raising.
        """
        if not editor_name:
            raise ConfigError("Editor name not set.")

        editor = self.services.editors.get(editor_name)
        try:
            await editor.health_check()
        except Exception as exc:  # noqa: BLE001
            self.messages.append(
                narrator_error(
                    f"Whoops, it looks like editor {editor_name} isn't setup properly. "
                    "You should double check that before we start talking, otherwise "
                    f"I may crash.\n\nError: {exc}"
                )
            )
            return

        editor_context = await editor.get_context()
        if editor_context is None:
            raise NoContextError("No editor context")

        self.editor_context = editor_context
        self.messages.append(editor_message(editor_context.format()))

    def reset_state(self, clear_context: bool) -> None:
        """Start a new conversation in place, optionally dropping editor context."""
        self.backend_context = ""
        self.exit_warning = False
        self.last_known_width = 0
        self.last_known_height = 0
        self.messages = []
        self.session_id = self.services.sessions.create_id()
        self.scroll = Scroll()

        if clear_context:
            self.editor_context = None

        if self.editor_context is not None:
            self.messages.append(editor_message(self.editor_context.format()))
        else:
            self.messages.append(intro_message())

        self.codeblocks.replace_from_messages(self.messages)
        self.sync_dependants()
        LOGGER.info(
            "app_state.reset",
            extra={
                "event": "app_state.reset",
                "session_id": self.session_id,
                "clear_context": clear_context,
            },
        )

    def handle_backend_response(self, response: BackendResponse) -> None:
        """Fold a streamed chunk into the history.

        Narrator-authored responses are action completions and are routed to
        ``handle_action_completion`` instead of the streaming fold.
        """
        if response.author is Author.OATMEAL:
            self.handle_action_completion(Message(Author.OATMEAL, response.text))
            return

        if not self.messages:
            raise RuntimeError("A backend response arrived before any message.")

        last_message = self.messages[-1]
        if last_message.author is response.author:
            last_message.append(response.text)
        else:
            self.messages.append(Message(response.author, response.text))

        self.sync_dependants()

        if not response.done:
            return

        self.waiting_for_backend = False
        if response.context:
            self.backend_context = response.context

        if not self.backend_context:
            LOGGER.warning(
                "app_state.backend.no_context",
                extra={"event": "app_state.backend.no_context"},
            )
            self.add_message(
                narrator_error(
                    "Error: No context was provided by the backend upon completion. "
                    "Please report this bug on Github."
                )
            )
            self.sync_dependants()

        self.codeblocks.replace_from_messages(self.messages)

    def handle_action_completion(self, message: Message) -> None:
        """Record the outcome of a copy or accept action as its own message."""
        self.waiting_for_backend = False
        self.add_message(message)

    def handle_slash_commands(
        self, input_str: str, actions: Channel[Action]
    ) -> SlashCommandResult:
        """Interpret a slash command, emitting side effects onto *actions*.

        Raises ``ChannelClosedError`` when an action cannot be dispatched.
        """
        should_terminate = False
        should_skip = False

        command = SlashCommand.parse(input_str)
        if command is None:
            return SlashCommandResult(should_terminate, should_skip)

        LOGGER.debug(
            "app_state.command",
            extra={"event": "app_state.command", "command": command.command},
        )

        if command.is_quit():
            should_terminate = True

        if (
            command.is_append_code_block()
            or command.is_replace_code_block()
            or command.is_copy_code_block()
        ):
            should_skip = True
            try:
                code = self.codeblocks.blocks_from_slash_commands(command)
            except CodeBlockSelectionError as exc:
                self.add_message(
                    narrator_error(
                        f"There was an error trying to parse your command:\n\n{exc}"
                    )
                )
                return SlashCommandResult(should_terminate, should_skip)

            if command.is_copy_code_block():
                actions.send(CopyMessages([Message(Author.MODEL, code)]))
                self.waiting_for_backend = True
                return SlashCommandResult(should_terminate, should_skip)

            accept_type = AcceptType.APPEND
            if command.is_replace_code_block():
                accept_type = AcceptType.REPLACE
            actions.send(AcceptCodeBlock(self.editor_context, code, accept_type))

        if command.is_copy_chat():
            should_skip = True
            actions.send(CopyMessages([replace(message) for message in self.messages]))
            self.waiting_for_backend = True

        # Switching models invalidates the backend's conversation continuity.
        if command.is_model_set():
            self.backend_context = ""

        if command.is_new():
            self.reset_state(
                bool(command.args) and command.args[0] == NEW_SESSION_CLEAR_ARG
            )
            should_skip = True

        return SlashCommandResult(should_terminate, should_skip)

    def build_backend_prompt(self, text: str) -> BackendPrompt:
        """Build the next prompt, front-loading editor context on the first turn."""
        if not self.backend_context and self.editor_context is not None:
            text = f"{self.editor_context.format()}\n\n{text}"
        return BackendPrompt(text=text, backend_context=self.backend_context)

    def set_rect(self, width: int, height: int) -> None:
        self.last_known_width = max(0, width)
        self.last_known_height = max(0, height)
        self.sync_dependants()

    def add_message(self, message: Message) -> None:
        self.messages.append(message)
        self.sync_dependants()
        self.scroll.last()

    def sync_dependants(self) -> None:
        """Recompute bubble layout and scroll bounds from the current state."""
        self.bubble_list.set_messages(self.messages, self.last_known_width)
        self.scroll.set_state(len(self.bubble_list), self.last_known_height)
        if self.waiting_for_backend:
            self.scroll.last()

    async def save_session(self) -> None:
        """Persist the session; store errors propagate to the caller."""
        await asyncio.to_thread(
            self.services.sessions.save,
            self.session_id,
            self.backend_context,
            self.editor_context,
            self.messages,
        )
