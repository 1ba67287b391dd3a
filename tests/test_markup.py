from __future__ import annotations

import pytest

from darkmode_detection.errors import StorageAccessError
from darkmode_detection.markup import MemoryStorage
from darkmode_detection.scheduling import PolledScheduler

from . import page_factory as factory


def test_denied_storage_raises_permission_error():
    storage = MemoryStorage({"theme": "dark"}, denied=True)

    with pytest.raises(StorageAccessError):
        storage.get("theme")
    with pytest.raises(PermissionError):
        storage.set("theme", "light")


def test_storage_round_trip_and_clear():
    storage = MemoryStorage()
    storage.set("theme", "dark")
    assert storage.get("theme") == "dark"
    storage.clear()
    assert storage.get("theme") is None


def test_wrappers_of_same_tag_are_equal():
    page = factory.create_app_page()

    assert page.root == page.root
    assert page.root != page.body
    assert page.element_by_id("app") == page.element_by_id("app")
    assert page.element_by_id("missing") is None


def test_class_edits_notify_observers_with_old_and_new_values():
    page = factory.create_page(html_attrs='class="light"')
    seen = []
    page.observe(page.root, ["class"], lambda *change: seen.append(change))

    page.root.toggle_class("light")
    page.root.add_class("dark")

    assert seen == [("class", "light", ""), ("class", "", "dark")]
    assert page.root.has_class("dark")


def test_unwatched_attributes_are_not_delivered():
    page = factory.create_blank_page()
    seen = []
    page.observe(page.root, ["data-theme"], lambda *change: seen.append(change))

    page.root.set_attribute("lang", "en")
    page.root.set_attribute("data-theme", "dark")
    page.root.remove_attribute("data-theme")
    page.root.remove_attribute("data-theme")

    assert seen == [("data-theme", None, "dark"), ("data-theme", "dark", None)]


def test_unsubscribe_is_idempotent():
    page = factory.create_blank_page()
    unsubscribe = page.observe(page.body, ["class"], lambda *change: None)
    assert page.observer_count() == 1

    unsubscribe()
    unsubscribe()

    assert page.observer_count() == 0


def test_computed_style_only_serves_the_root():
    page = factory.create_page(root_styles={"--background": "#000000"})

    assert page.computed_style(page.root, "--background") == "#000000"
    assert page.computed_style(page.body, "--background") == ""
    assert page.computed_style(page.root, "--missing") == ""


def test_polled_scheduler_runs_due_calls_in_deadline_order():
    clock = factory.FakeClock()
    scheduler = PolledScheduler(clock=clock)
    calls = []

    scheduler.call_later(0.3, lambda: calls.append("late"))
    scheduler.call_later(0.1, lambda: calls.append("early"))
    cancelled = scheduler.call_later(0.2, lambda: calls.append("cancelled"))
    cancelled.cancel()
    assert scheduler.pending() == 2

    assert scheduler.run_pending() == 0
    clock.advance(1.0)
    assert scheduler.run_pending() == 2

    assert calls == ["early", "late"]
    assert scheduler.pending() == 0
