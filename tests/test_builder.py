"""
Unit tests for the dashboard builder session
"""

import pytest

from dashboard_engine.services.dashboard.builder import (
    MSG_SAVE_FAILED,
    MSG_SAVED,
    BuilderSession,
    IdentityContext,
    SaveOutcome,
    SessionState,
)
from dashboard_engine.services.dashboard.models import (
    MSG_NAME_REQUIRED,
    MSG_NO_WIDGETS,
    MSG_NOT_LOGGED_IN,
    DashboardConfig,
)
from dashboard_engine.services.dashboard.notifications import (
    NotificationKind,
    RecordingNotifier,
)


async def _session(store, user_id="u-1"):
    notifier = RecordingNotifier()
    session = BuilderSession(store, notifier, IdentityContext(user_id=user_id, tenant_id="t-1"))
    await session.load()
    return session, notifier


async def _descriptor(session, widget_type):
    return await session.catalog.get(widget_type)


class TestComposition:
    """Test cases for adding, configuring and removing widgets"""

    @pytest.mark.asyncio
    async def test_load_fills_palette(self, store):
        session, _ = await _session(store)

        assert not session.is_loading
        assert list(session.palette()) == ["metrics", "charts", "tables"]

    @pytest.mark.asyncio
    async def test_added_widget_is_titled_after_its_type(self, store):
        session, _ = await _session(store)

        instance = session.add_widget(await _descriptor(session, "pie_chart"))

        assert instance.title == "Pie Chart"
        assert instance.config["x_axis"] == "name"
        assert instance.data_source_id == "ds-users"
        assert session.state == SessionState.COMPOSING
        assert session.preview()[0]["category"] == "charts"

    @pytest.mark.asyncio
    async def test_widget_ids_are_unique(self, store):
        session, _ = await _session(store)
        descriptor = await _descriptor(session, "metric_card")

        ids = {session.add_widget(descriptor).id for _ in range(20)}

        assert len(ids) == 20

    @pytest.mark.asyncio
    async def test_remove_widget(self, store):
        session, _ = await _session(store)
        first = session.add_widget(await _descriptor(session, "bar_chart"))
        second = session.add_widget(await _descriptor(session, "data_table"))

        session.remove_widget(first.id)

        assert [w.id for w in session.widgets] == [second.id]

    @pytest.mark.asyncio
    async def test_open_config_without_widget_shows_nothing(self, store):
        session, _ = await _session(store)
        assert session.open_config(None, 0) is None
        assert session.dialog is None

    @pytest.mark.asyncio
    async def test_save_config_merges_validated_values(self, store):
        session, _ = await _session(store)
        session.add_widget(await _descriptor(session, "data_table"))

        dialog = session.open_config(session.widgets[0], 0)
        dialog.update("columns", "name, email")
        dialog.update("page_size", "500")
        dialog.update("data_source_id", "ds-signups")
        updated = session.save_config(dialog.result())

        assert updated.config["columns"] == ["name", "email"]
        assert updated.config["page_size"] == 10
        assert updated.config["title"] == "Data Table"
        assert updated.data_source_id == "ds-signups"
        assert session.dialog is None

    @pytest.mark.asyncio
    async def test_close_config_discards_edits(self, store):
        session, _ = await _session(store)
        session.add_widget(await _descriptor(session, "data_table"))

        dialog = session.open_config(session.widgets[0], 0)
        dialog.update("page_size", 25)
        session.close_config()

        assert session.dialog is None
        assert session.save_config({"page_size": 50}) is None
        assert session.widgets[0].config["page_size"] == 10

    @pytest.mark.asyncio
    async def test_removing_edited_widget_closes_dialog(self, store):
        session, _ = await _session(store)
        instance = session.add_widget(await _descriptor(session, "bar_chart"))
        session.open_config(instance, 0)

        session.remove_widget(instance.id)

        assert session.dialog is None


class TestSaveDashboard:
    """Test cases for BuilderSession.save_dashboard"""

    @pytest.mark.asyncio
    async def test_no_widgets_never_reaches_store(self, store):
        session, notifier = await _session(store)

        outcome = await session.save_dashboard()

        assert outcome == SaveOutcome.REJECTED
        assert session.state == SessionState.SAVE_REJECTED
        assert notifier.notices == [(NotificationKind.ERROR, MSG_NO_WIDGETS)]
        assert store.calls["create_dashboard_config"] == 0

    @pytest.mark.asyncio
    async def test_signed_out_user_is_rejected(self, store):
        session, notifier = await _session(store, user_id=None)
        session.add_widget(await _descriptor(session, "metric_card"))

        outcome = await session.save_dashboard()

        assert outcome == SaveOutcome.REJECTED
        assert "must be logged in" in notifier.last_message
        assert notifier.last_message == MSG_NOT_LOGGED_IN
        assert len(session.widgets) == 1
        assert store.calls["create_dashboard_config"] == 0

    @pytest.mark.asyncio
    async def test_blank_name_is_rejected(self, store):
        session, notifier = await _session(store)
        session.add_widget(await _descriptor(session, "metric_card"))
        session.set_dashboard_name("   ")

        assert await session.save_dashboard() == SaveOutcome.REJECTED
        assert notifier.last_message == MSG_NAME_REQUIRED

    @pytest.mark.asyncio
    async def test_success_resets_session(self, store):
        session, notifier = await _session(store)
        session.add_widget(await _descriptor(session, "line_chart"))
        session.set_dashboard_name("Growth")

        outcome = await session.save_dashboard()

        assert outcome == SaveOutcome.SAVED
        assert notifier.notices == [(NotificationKind.SUCCESS, MSG_SAVED)]
        assert session.widgets == []
        assert session.dashboard_name == "My Dashboard"
        assert session.state == SessionState.EMPTY
        assert store.dashboards[0]["dashboard_name"] == "Growth"
        assert store.dashboards[0]["tenant_id"] == "t-1"

    @pytest.mark.asyncio
    async def test_store_failure_keeps_work(self, store):
        store.fail_saves = True
        session, notifier = await _session(store)
        session.add_widget(await _descriptor(session, "metric_card"))
        session.set_dashboard_name("Ops")

        outcome = await session.save_dashboard()

        assert outcome == SaveOutcome.FAILED
        assert notifier.last_message == MSG_SAVE_FAILED
        assert session.state == SessionState.COMPOSING
        assert session.dashboard_name == "Ops"
        assert len(session.widgets) == 1

    @pytest.mark.asyncio
    async def test_saved_config_round_trips(self, store):
        session, _ = await _session(store)
        session.add_widget(await _descriptor(session, "metric_card"))
        session.add_widget(await _descriptor(session, "data_table"))
        expected = list(session.widgets)

        await session.save_dashboard()
        rows = await store.list_user_dashboard_configs("u-1")
        loaded = DashboardConfig.from_dict(rows[0])

        assert loaded.widget_configs == expected
        assert loaded.layout_config["columns"] == 4
