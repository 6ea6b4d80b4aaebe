# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the focus/selection state machine."""
import pytest

from heliotrack.domain.focus import FocusController, FocusMode, FocusState


class TestFocusState:

    def test_default_is_none(self):
        state = FocusState()
        assert state.mode is FocusMode.NONE
        assert state.selected_id is None


class TestFocusController:

    def test_starts_in_none(self):
        controller = FocusController()
        assert controller.mode is FocusMode.NONE
        assert controller.selected_id is None

    def test_select_known(self):
        controller = FocusController()
        assert controller.select("a", {"a", "b"}) is True
        assert controller.mode is FocusMode.SINGLE_EVENT
        assert controller.selected_id == "a"

    def test_select_unknown_ignored(self):
        controller = FocusController()
        controller.enter_timeline()
        assert controller.select("zzz", {"a"}) is False
        assert controller.mode is FocusMode.TIMELINE
        assert controller.selected_id is None

    @pytest.mark.parametrize("event_id", [["a"], {"a": 1}, None, 7])
    def test_select_non_string_ignored(self, event_id):
        controller = FocusController()
        assert controller.select(event_id, {"a"}) is False
        assert controller.state == FocusState()

    def test_enter_timeline_drops_selection(self):
        controller = FocusController()
        controller.select("a", ["a"])
        controller.enter_timeline()
        assert controller.state == FocusState(FocusMode.TIMELINE, None)

    def test_clear_with_events(self):
        controller = FocusController()
        controller.select("a", ["a"])
        controller.clear(has_events=True)
        assert controller.mode is FocusMode.TIMELINE
        assert controller.selected_id is None

    def test_clear_without_events(self):
        controller = FocusController()
        controller.select("a", ["a"])
        controller.clear(has_events=False)
        assert controller.mode is FocusMode.NONE

    def test_reset(self):
        controller = FocusController()
        controller.enter_timeline()
        controller.reset()
        assert controller.state == FocusState()

    def test_reselect_switches_event(self):
        controller = FocusController()
        controller.select("a", ["a", "b"])
        controller.select("b", ["a", "b"])
        assert controller.selected_id == "b"


class TestReconcile:

    def test_dangling_selection_dropped(self):
        controller = FocusController()
        controller.select("a", ["a", "b"])
        assert controller.reconcile(["b"]) is True
        assert controller.mode is FocusMode.NONE
        assert controller.selected_id is None

    def test_present_selection_kept(self):
        controller = FocusController()
        controller.select("a", ["a", "b"])
        assert controller.reconcile(["a"]) is False
        assert controller.selected_id == "a"

    def test_timeline_untouched(self):
        controller = FocusController()
        controller.enter_timeline()
        assert controller.reconcile([]) is False
        assert controller.mode is FocusMode.TIMELINE

    def test_selected_id_only_in_single_event(self):
        controller = FocusController()
        for action in (
            lambda: controller.select("a", ["a"]),
            controller.enter_timeline,
            lambda: controller.select("a", ["a"]),
            lambda: controller.clear(True),
            controller.reset,
        ):
            action()
            state = controller.state
            assert (state.selected_id is not None) == (state.mode is FocusMode.SINGLE_EVENT)
