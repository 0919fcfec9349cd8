"""
Modal dialog service.

One shared dialog per ``ModalService``, driven as an acknowledgment (OK),
a yes/no confirmation or a one-line text input.  Each call returns an
``asyncio.Future`` that the next ``resolve`` completes; the caller awaits it
while the event loop keeps running.

States: IDLE (nothing shown) and AWAITING (one dialog, one pending future).
Opening a dialog while AWAITING raises ``ReentrantDialog``; the pending
caller is left alone.  Dismissing the dialog is ``resolve(None)``, which a
confirmation reads as "No" and an input as "no answer".  There is no
timeout.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, Tuple, TypeVar

import click
import typer
from rich.console import Console
from rich.panel import Panel

from novelfactory.errors import ReentrantDialog

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ModalState(str, Enum):
    IDLE = "idle"
    AWAITING = "awaiting"


class DialogMode(str, Enum):
    ACKNOWLEDGE = "acknowledge"
    CONFIRM = "confirm"
    INPUT = "input"


@dataclass(frozen=True)
class DialogView:
    mode: DialogMode
    title: str
    paragraphs: Tuple[str, ...]
    buttons: Tuple[str, ...]
    focus: str
    default: str = ""


class DialogSurface(Protocol):
    def show(self, view: DialogView) -> None: ...

    def hide(self) -> None: ...


def _coerce(mode: DialogMode, result: Any) -> Any:
    if mode is DialogMode.ACKNOWLEDGE:
        return True
    if mode is DialogMode.CONFIRM:
        return result is True
    return result if isinstance(result, str) else None


class ModalService:
    def __init__(self, surface: DialogSurface):
        self.surface = surface
        self.view: DialogView | None = None
        self._pending: asyncio.Future | None = None

    @property
    def state(self) -> ModalState:
        return ModalState.AWAITING if self._pending is not None else ModalState.IDLE

    # ─── openers ─────────────────────────────────────────────────────
    def acknowledge(self, message: str, title: str = "Notification") -> asyncio.Future:
        return self._open(DialogMode.ACKNOWLEDGE, message, title, ("OK",), "OK")

    def confirm(self, message: str, title: str = "Confirmation") -> asyncio.Future:
        return self._open(DialogMode.CONFIRM, message, title, ("Yes", "No"), "No")

    def ask(self, message: str, title: str = "Input", default: str = "") -> asyncio.Future:
        return self._open(DialogMode.INPUT, message, title, ("OK", "Cancel"), "input", default)

    def _open(
        self,
        mode: DialogMode,
        message: str,
        title: str,
        buttons: Tuple[str, ...],
        focus: str,
        default: str = "",
    ) -> asyncio.Future:
        if self._pending is not None:
            logger.warning("Dialog %r requested while %r is open", title, self.view.title if self.view else "?")
            raise ReentrantDialog(title)

        future = asyncio.get_running_loop().create_future()
        view = DialogView(mode, title, tuple(message.splitlines()), buttons, focus, default)
        self._pending, self.view = future, view
        future.add_done_callback(self._on_done)
        try:
            self.surface.show(view)
        except BaseException:
            self._clear()
            future.cancel()
            raise
        logger.debug("Dialog opened: %s (%s)", title, mode.value)
        return future

    # ─── closers ─────────────────────────────────────────────────────
    def resolve(self, result: Any = True) -> None:
        """Close the dialog and hand *result* to the waiting caller."""
        future, view = self._pending, self.view
        if future is None:
            logger.debug("resolve(%r) with no open dialog; ignored", result)
            return
        self._clear()
        self.surface.hide()
        if not future.done():
            future.set_result(_coerce(view.mode, result))
        logger.debug("Dialog closed: %s -> %r", view.title, result)

    def dismiss(self) -> None:
        self.resolve(None)

    def _clear(self) -> None:
        self._pending = None
        self.view = None

    def _on_done(self, future: asyncio.Future) -> None:
        # the awaiting task was cancelled: take the dialog down with it
        if future.cancelled() and future is self._pending:
            self._clear()
            self.surface.hide()


# ═════════ console surface ═════════
class ConsoleSurface:
    """Shows the dialog as a rich panel and reads the answer from the terminal."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.service: ModalService | None = None

    def attach(self, service: ModalService) -> None:
        self.service = service

    def show(self, view: DialogView) -> None:
        body = "\n\n".join(p for p in view.paragraphs if p.strip()) or " "
        hint = " / ".join(view.buttons)
        self.console.print(Panel(body, title=f"[bold]{view.title}[/]", subtitle=hint, expand=False))
        asyncio.get_running_loop().call_soon(self._read_answer, view)

    def hide(self) -> None:
        pass

    def _read_answer(self, view: DialogView) -> None:
        service = self.service
        if service is None or service.view is not view:
            return
        try:
            if view.mode is DialogMode.CONFIRM:
                answer: Any = typer.confirm("", default=view.focus == "Yes", prompt_suffix="> ")
            elif view.mode is DialogMode.INPUT:
                answer = typer.prompt("", default=view.default, prompt_suffix="> ", show_default=bool(view.default))
            else:
                typer.prompt("", default="", show_default=False, prompt_suffix="[OK] ")
                answer = True
        except click.exceptions.Abort:
            service.dismiss()
            return
        service.resolve(answer)


def console_modal(console: Console | None = None) -> ModalService:
    surface = ConsoleSurface(console)
    service = ModalService(surface)
    surface.attach(service)
    return service


def run_dialog(open_dialog: Callable[[ModalService], Awaitable[T]], console: Console | None = None) -> T:
    """Run one console dialog from synchronous code and return its answer."""

    async def _main() -> T:
        return await open_dialog(console_modal(console))

    return asyncio.run(_main())


def console_confirm(message: str, title: str = "Confirmation") -> bool:
    return run_dialog(lambda modal: modal.confirm(message, title))


def console_acknowledge(message: str, title: str = "Notification") -> bool:
    return run_dialog(lambda modal: modal.acknowledge(message, title))


def console_ask(message: str, title: str = "Input", default: str = "") -> str | None:
    return run_dialog(lambda modal: modal.ask(message, title, default))
