import pytest

from pitschpatsch.interactive.toolkit.headless import HeadlessToolkit, iter_controllers


def test_folders_nest_and_are_found_depth_first() -> None:
    toolkit = HeadlessToolkit()
    root = toolkit.root()
    a = toolkit.create_folder(root, title="A")
    inner = toolkit.create_folder(a, title="Inner", expanded=False)
    toolkit.create_folder(root, title="B")

    assert [f.title for f in root.folders()] == ["A", "B"]
    assert toolkit.folder("Inner") is inner
    assert inner.parent is a
    assert inner.expanded is False
    with pytest.raises(KeyError):
        toolkit.folder("missing")


def test_binding_set_value_updates_object_and_emits_change() -> None:
    toolkit = HeadlessToolkit()
    obj = {"value": 1.0}
    seen = []
    controller = toolkit.add_binding(toolkit.root(), obj, "value", {"label": "freq"})
    controller.on("change", seen.append)

    controller.set_value(2.5)
    assert obj["value"] == 2.5
    assert controller.value == 2.5
    assert seen == [2.5]
    assert toolkit.binding("freq") is controller
    assert controller.view == "slider"


def test_binding_rejects_unknown_view_and_missing_key() -> None:
    toolkit = HeadlessToolkit()
    with pytest.raises(ValueError):
        toolkit.add_binding(toolkit.root(), {"v": 1}, "v", {"view": "knob"})
    with pytest.raises(KeyError):
        toolkit.add_binding(toolkit.root(), {"v": 1}, "w", {})


def test_buttons_and_texts() -> None:
    toolkit = HeadlessToolkit()
    clicks = []
    folder = toolkit.create_folder(toolkit.root(), title="F")
    toolkit.add_button(folder, "Go", lambda: clicks.append(1))
    toolkit.add_text(folder, "hello")

    toolkit.button("Go").click()
    assert clicks == [1]
    assert toolkit.texts() == ["hello"]
    assert toolkit.texts(folder) == ["hello"]


def test_clear_folder_disposes_children_recursively() -> None:
    toolkit = HeadlessToolkit()
    folder = toolkit.create_folder(toolkit.root(), title="F")
    sub = toolkit.create_folder(folder, title="Sub")
    deep = toolkit.add_binding(sub, {"v": 0}, "v", {})
    top = toolkit.add_text(folder, "t")
    seen = []
    deep.on("change", seen.append)

    toolkit.clear_folder(folder)
    assert folder.children == []
    assert deep.disposed and top.disposed
    deep.set_value(3)
    assert seen == []
    assert list(iter_controllers(toolkit.root())) == []


def test_dispose_removes_controller_and_refresh_counts() -> None:
    toolkit = HeadlessToolkit()
    controller = toolkit.add_binding(toolkit.root(), {"v": 0}, "v", {})
    controller.refresh()
    controller.refresh()
    assert controller.refresh_count == 2
    controller.dispose()
    assert toolkit.bindings() == []


def test_mount_state() -> None:
    toolkit = HeadlessToolkit()
    assert not toolkit.is_mounted()
    toolkit.mount()
    assert toolkit.is_mounted()
    assert toolkit.mount_count == 1
    toolkit.unmount()
    assert not toolkit.is_mounted()
