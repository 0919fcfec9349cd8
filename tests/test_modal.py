# tests/test_modal.py
import asyncio

import pytest

from novelfactory.errors import ReentrantDialog
from novelfactory.modal import DialogMode, ModalService, ModalState


class FakeSurface:
    def __init__(self):
        self.shown = []
        self.hidden = 0

    def show(self, view):
        self.shown.append(view)

    def hide(self):
        self.hidden += 1


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def modal(surface):
    return ModalService(surface)


def run(coro):
    return asyncio.run(coro)


def test_confirm_yes(modal, surface):
    async def scenario():
        fut = modal.confirm("Delete?\nThis cannot be undone.", "Delete Project")
        assert modal.state is ModalState.AWAITING
        modal.resolve(True)
        return await fut

    assert run(scenario()) is True
    view = surface.shown[0]
    assert view.mode is DialogMode.CONFIRM
    assert view.title == "Delete Project"
    assert view.paragraphs == ("Delete?", "This cannot be undone.")
    assert view.buttons == ("Yes", "No")
    assert view.focus == "No"
    assert surface.hidden == 1
    assert modal.state is ModalState.IDLE
    assert modal.view is None


@pytest.mark.parametrize("answer", [False, None, "yes", 1])
def test_confirm_anything_but_true_is_no(modal, answer):
    async def scenario():
        fut = modal.confirm("Sure?")
        modal.resolve(answer)
        return await fut

    assert run(scenario()) is False


def test_dismiss_confirm_is_no(modal, surface):
    async def scenario():
        fut = modal.confirm("Sure?")
        modal.dismiss()
        return await fut

    assert run(scenario()) is False
    assert surface.hidden == 1


def test_acknowledge(modal, surface):
    async def scenario():
        fut = modal.acknowledge("Saved.")
        modal.dismiss()
        return await fut

    assert run(scenario()) is True
    view = surface.shown[0]
    assert view.title == "Notification"
    assert view.buttons == ("OK",)
    assert view.focus == "OK"


def test_ask_returns_text(modal, surface):
    async def scenario():
        fut = modal.ask("Project title?", "Save Project", default="Untitled")
        modal.resolve("The Gate")
        return await fut

    assert run(scenario()) == "The Gate"
    assert surface.shown[0].default == "Untitled"


def test_ask_dismissed(modal):
    async def scenario():
        fut = modal.ask("Project title?")
        modal.dismiss()
        return await fut

    assert run(scenario()) is None


def test_resolve_while_idle_is_ignored(modal, surface):
    modal.resolve(True)
    modal.dismiss()
    assert modal.state is ModalState.IDLE
    assert surface.hidden == 0


def test_second_dialog_is_rejected(modal, surface):
    async def scenario():
        first = modal.confirm("First?", "One")
        with pytest.raises(ReentrantDialog) as err:
            modal.acknowledge("Second", "Two")
        assert err.value.title == "Two"
        assert modal.view.title == "One"
        modal.resolve(True)
        return await first

    assert run(scenario()) is True
    assert len(surface.shown) == 1


def test_dialogs_in_sequence(modal, surface):
    async def scenario():
        answers = []
        for msg in ("a", "b", "c"):
            fut = modal.confirm(msg)
            modal.resolve(msg != "b")
            answers.append(await fut)
        return answers

    assert run(scenario()) == [True, False, True]
    assert surface.hidden == 3


def test_resolve_from_another_task(modal):
    async def scenario():
        fut = modal.confirm("Continue?")
        asyncio.get_running_loop().call_later(0.01, modal.resolve, True)
        return await fut

    assert run(scenario()) is True


def test_cancelled_waiter_closes_dialog(modal, surface):
    async def scenario():
        fut = modal.confirm("Sure?")
        fut.cancel()
        await asyncio.sleep(0)
        assert modal.state is ModalState.IDLE
        fut2 = modal.acknowledge("Next")
        modal.resolve()
        return await fut2

    assert run(scenario()) is True
    assert surface.hidden == 2


def test_failing_surface_leaves_service_idle(modal):
    class Broken(FakeSurface):
        def show(self, view):
            raise OSError("no terminal")

    service = ModalService(Broken())

    async def scenario():
        with pytest.raises(OSError):
            service.confirm("Sure?")
        assert service.state is ModalState.IDLE

    run(scenario())


def test_needs_running_loop(modal):
    with pytest.raises(RuntimeError):
        modal.confirm("Sure?")
    assert modal.state is ModalState.IDLE


def test_confirm_after_stray_resolve(modal):
    async def scenario():
        modal.resolve(False)
        fut = modal.confirm("Still there?")
        assert modal.state is ModalState.AWAITING
        modal.resolve(True)
        return await fut

    assert run(scenario()) is True
