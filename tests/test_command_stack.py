import numpy as np
import pytest
from unittest.mock import MagicMock

from pix3l.commands.factory import create_brightness_command, create_filter_command, FilterType
from pix3l.commands.stack import CommandStack, StackState


def make_command(label: str) -> MagicMock:
    cmd = MagicMock()
    cmd.label = label
    return cmd


def test_empty_stack():
    stack = CommandStack()
    assert stack.index == 0
    assert stack.count == 0
    assert not stack.can_undo()
    assert not stack.can_redo()
    assert stack.undo() is False
    assert stack.redo() is False
    assert stack.undo_label is None
    assert stack.redo_label is None


def test_push_applies_and_advances():
    stack = CommandStack()
    cmd = make_command("A")
    stack.push(cmd)
    cmd.apply.assert_called_once()
    assert stack.index == 1
    assert stack.can_undo()
    assert stack.undo_label == "A"


def test_push_none_is_noop():
    stack = CommandStack()
    listener = MagicMock()
    stack.add_listener(listener)
    stack.push(None)
    assert stack.count == 0
    listener.assert_not_called()


def test_undo_redo_move_index():
    stack = CommandStack()
    a, b = make_command("A"), make_command("B")
    stack.push(a)
    stack.push(b)
    assert stack.undo()
    b.undo.assert_called_once()
    assert stack.index == 1
    assert stack.redo_label == "B"
    assert stack.redo()
    assert b.apply.call_count == 2
    assert stack.index == 2


def test_push_discards_redo_branch():
    stack = CommandStack()
    c1, c2, c3 = make_command("c1"), make_command("c2"), make_command("c3")
    stack.push(c1)
    stack.push(c2)
    stack.undo()
    stack.push(c3)
    assert stack.labels() == ["c1", "c3"]
    assert not stack.can_redo()
    assert stack.redo() is False
    assert c2.apply.call_count == 1


def test_listeners_get_state_after_each_change():
    stack = CommandStack()
    listener = MagicMock()
    stack.add_listener(listener)
    stack.push(make_command("A"))
    listener.assert_called_with(
        StackState(index=1, count=1, can_undo=True, can_redo=False, undo_label="A", redo_label=None)
    )
    stack.undo()
    listener.assert_called_with(
        StackState(index=0, count=1, can_undo=False, can_redo=True, undo_label=None, redo_label="A")
    )
    stack.remove_listener(listener)
    stack.clear()
    assert listener.call_count == 2


def test_set_index_walks_history():
    stack = CommandStack()
    cmds = [make_command(str(i)) for i in range(4)]
    for c in cmds:
        stack.push(c)
    stack.set_index(1)
    assert stack.index == 1
    cmds[3].undo.assert_called_once()
    cmds[2].undo.assert_called_once()
    cmds[1].undo.assert_called_once()
    stack.set_index(99)
    assert stack.index == 4


def test_clear_drops_history():
    stack = CommandStack()
    stack.push(make_command("A"))
    stack.clear()
    assert stack.index == 0
    assert stack.labels() == []


def test_failed_apply_is_not_recorded():
    stack = CommandStack()
    cmd = make_command("boom")
    cmd.apply.side_effect = RuntimeError("bad")
    with pytest.raises(RuntimeError):
        stack.push(cmd)
    assert stack.count == 0
    assert stack.index == 0


def test_stack_with_real_commands(document):
    original = document.raster.pixels.copy()
    stack = CommandStack()
    stack.push(create_brightness_command(document, 30))
    stack.push(create_filter_command(document, FilterType.SEPIA))
    stacked = document.raster.pixels.copy()
    stack.undo()
    stack.undo()
    np.testing.assert_array_equal(document.raster.pixels, original)
    stack.redo()
    stack.redo()
    np.testing.assert_array_equal(document.raster.pixels, stacked)
    assert stack.labels() == ["Adjust Brightness", "Apply Sepia"]


def test_failed_push_keeps_redo_branch():
    stack = CommandStack()
    stack.push(make_command("A"))
    stack.push(make_command("B"))
    stack.undo()
    cmd = make_command("boom")
    cmd.apply.side_effect = RuntimeError("bad")
    with pytest.raises(RuntimeError):
        stack.push(cmd)
    assert stack.labels() == ["A", "B"]
    assert stack.index == 1
    assert stack.can_redo()
    assert stack.redo_label == "B"
