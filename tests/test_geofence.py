import math
from datetime import datetime, timedelta
from typing import Optional, get_type_hints

import pytest

from app.core.config import settings
from app.models.site import Site
from app.schemas.notification import NotificationCreate
from app.services.geofence_monitor import (
    GeofenceMonitor,
    GeofenceState,
    MonitoredSite,
    PositionSample,
    evaluate_position,
)
from app.services.geofence_service import EARTH_RADIUS_M, haversine_distance
from app.services.notification_service import DatabaseNotificationSink, NotificationService

from tests.conftest import GUARD_ID, ORG_ID

T0 = datetime(2025, 3, 3, 8, 0, 0)
SITE = MonitoredSite(id="site-hq", name="HQ", latitude=0.0, longitude=0.0, radius_meters=100)
INSIDE = (0.0, 0.0)
OUTSIDE = (0.01, 0.0)  # ~1.1 km north of the site centre


class FakeSubscription:
    def __init__(self):
        self.cancel_calls = 0

    def cancel(self):
        self.cancel_calls += 1


class FakePositionSource:
    def __init__(self, granted=True):
        self.granted = granted
        self.callbacks = []
        self.subscriptions = []

    async def request_permission(self):
        return self.granted

    def subscribe(self, on_sample):
        self.callbacks.append(on_sample)
        subscription = FakeSubscription()
        self.subscriptions.append(subscription)
        return subscription


class FakeAlerts:
    def __init__(self):
        self.haptics = 0
        self.notifications = []

    def haptic_warning(self):
        self.haptics += 1

    def notify(self, title, body):
        self.notifications.append((title, body))


class RecordingSink:
    def __init__(self):
        self.payloads = []

    async def __call__(self, payload):
        self.payloads.append(payload)


async def failing_sink(payload):
    raise RuntimeError("notification store unavailable")


def sample(position, seconds=0):
    return PositionSample(latitude=position[0], longitude=position[1], timestamp=T0 + timedelta(seconds=seconds))


def make_monitor(source=None, alerts=None, sink=None, cooldown_seconds=300):
    return GeofenceMonitor(
        source or FakePositionSource(),
        alerts or FakeAlerts(),
        notification_sink=sink,
        organization_id=ORG_ID,
        user_id=GUARD_ID,
        cooldown_seconds=cooldown_seconds,
    )


def test_haversine_same_point_is_zero():
    assert haversine_distance(-6.2, 106.8, -6.2, 106.8) == 0


def test_haversine_antipodal_points_are_half_circumference():
    assert haversine_distance(0, 0, 0, 180) == pytest.approx(math.pi * EARTH_RADIUS_M)


def test_haversine_one_degree_of_latitude():
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(111195, abs=1)


def test_position_on_radius_counts_as_inside():
    site = MonitoredSite(id="s", name="S", latitude=0.0, longitude=0.0, radius_meters=haversine_distance(0, 0, 0.001, 0))
    decision = evaluate_position(GeofenceState(), site, sample((0.001, 0.0)), timedelta(minutes=5))
    assert decision.is_outside is False
    assert decision.should_alert is False


def test_evaluate_alerts_on_exit_and_records_time():
    decision = evaluate_position(GeofenceState(), SITE, sample(OUTSIDE, 30), timedelta(minutes=5))
    assert decision.should_alert is True
    assert decision.state == GeofenceState(was_inside=False, last_alert_at=T0 + timedelta(seconds=30))


def test_evaluate_respects_cooldown_on_sample_time():
    state = GeofenceState(was_inside=True, last_alert_at=T0)
    cooldown = timedelta(minutes=5)

    assert evaluate_position(state, SITE, sample(OUTSIDE, 299), cooldown).should_alert is False
    assert evaluate_position(state, SITE, sample(OUTSIDE, 300), cooldown).should_alert is True


@pytest.mark.asyncio
async def test_alerts_once_while_staying_outside():
    source, alerts, sink = FakePositionSource(), FakeAlerts(), RecordingSink()
    monitor = make_monitor(source, alerts, sink)
    assert await monitor.activate(SITE) is True

    on_sample = source.callbacks[0]
    on_sample(sample(INSIDE, 0))
    on_sample(sample(OUTSIDE, 10))
    on_sample(sample(OUTSIDE, 20))
    on_sample(sample(OUTSIDE, 400))
    await monitor.drain()

    assert alerts.haptics == 1
    assert alerts.notifications == [
        ("Geofence Alert", "You have left the designated area for HQ. Please return immediately.")
    ]
    assert len(sink.payloads) == 1


@pytest.mark.asyncio
async def test_reentry_rearms_after_cooldown():
    alerts = FakeAlerts()
    monitor = make_monitor(alerts=alerts)
    await monitor.activate(SITE)

    monitor.handle_sample(sample(OUTSIDE, 0))
    monitor.handle_sample(sample(INSIDE, 60))
    assert monitor.state.was_inside is True

    monitor.handle_sample(sample(OUTSIDE, 120))
    assert alerts.haptics == 1

    monitor.handle_sample(sample(INSIDE, 200))
    monitor.handle_sample(sample(OUTSIDE, 360))
    assert alerts.haptics == 2


@pytest.mark.asyncio
async def test_supervisor_notification_payload():
    sink = RecordingSink()
    monitor = make_monitor(sink=sink)
    await monitor.activate(SITE)

    decision = monitor.handle_sample(sample(OUTSIDE, 5))
    await monitor.drain()

    assert sink.payloads == [
        NotificationCreate(
            nt_organization_id=ORG_ID,
            nt_user_id=GUARD_ID,
            nt_title="Guard Left Geofence",
            nt_message=f'Guard left the designated area for site "HQ". Distance: {round(decision.distance_m)}m.',
            nt_type="warning",
        )
    ]


@pytest.mark.asyncio
async def test_sink_failure_is_swallowed_after_local_alerts():
    alerts = FakeAlerts()
    monitor = make_monitor(alerts=alerts, sink=failing_sink)
    await monitor.activate(SITE)

    monitor.handle_sample(sample(OUTSIDE, 5))
    await monitor.drain()

    assert alerts.haptics == 1
    assert len(alerts.notifications) == 1
    assert monitor.state.was_inside is False


@pytest.mark.asyncio
async def test_permission_denied_leaves_monitor_inactive():
    source, alerts = FakePositionSource(granted=False), FakeAlerts()
    monitor = make_monitor(source, alerts)

    assert await monitor.activate(SITE) is False
    assert monitor.is_active is False
    assert source.subscriptions == []
    assert monitor.handle_sample(sample(OUTSIDE, 5)) is None
    assert alerts.haptics == 0


@pytest.mark.asyncio
async def test_deactivate_is_idempotent_and_cancels_subscription():
    source = FakePositionSource()
    monitor = make_monitor(source)
    await monitor.activate(SITE)

    monitor.deactivate()
    monitor.deactivate()

    assert source.subscriptions[0].cancel_calls == 1
    assert monitor.is_active is False
    assert monitor.active_site is None


@pytest.mark.asyncio
async def test_sync_follows_clock_in_state():
    source = FakePositionSource()
    monitor = make_monitor(source)

    assert await monitor.sync(SITE, is_clocked_in=True) is True
    assert await monitor.sync(SITE, is_clocked_in=True) is True
    assert len(source.subscriptions) == 1

    assert await monitor.sync(SITE, is_clocked_in=False) is False
    assert source.subscriptions[0].cancel_calls == 1

    other = MonitoredSite(id="site-2", name="Depot", latitude=1.0, longitude=1.0, radius_meters=50)
    assert await monitor.sync(other, is_clocked_in=True) is True
    assert monitor.active_site == other


@pytest.mark.asyncio
async def test_database_sink_inserts_unread_notification(session_factory, db):
    sink = DatabaseNotificationSink(session_factory)
    await sink(NotificationCreate(
        nt_organization_id=ORG_ID,
        nt_user_id=GUARD_ID,
        nt_title="Guard Left Geofence",
        nt_message="left",
        nt_type="warning",
    ))

    rows = NotificationService().list_for_user(db, ORG_ID, GUARD_ID)
    assert len(rows) == 1
    assert rows[0].nt_is_read is False
    assert rows[0].nt_type == "warning"


def test_monitored_site_from_site_row(db):
    row = Site(si_organization_id=ORG_ID, si_name="Warehouse A", si_latitude=-6.2, si_longitude=106.8, si_radius_m=150)
    db.add(row)
    db.commit()

    site = MonitoredSite.from_model(row)
    assert site == MonitoredSite(id=row.si_id, name="Warehouse A", latitude=-6.2, longitude=106.8, radius_meters=150)


def test_cooldown_defaults_to_settings(monkeypatch):
    monkeypatch.setattr(settings, "GEOFENCE_ALERT_COOLDOWN_SECONDS", 120)
    monitor = GeofenceMonitor(FakePositionSource(), FakeAlerts(), organization_id=ORG_ID, user_id=GUARD_ID)

    assert monitor.cooldown == timedelta(seconds=120)
    assert get_type_hints(GeofenceMonitor.__init__)["cooldown_seconds"] == Optional[int]
