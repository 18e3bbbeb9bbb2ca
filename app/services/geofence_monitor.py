"""
Geofence Monitor - Breach alerting for a clocked-in guard

The monitor reacts to position samples pushed by a position source while a
guard is clocked in at a site. Each sample goes through a pure decision
function (distance, inside/outside transition, cooldown); the monitor only
applies the decision and performs the side effects:

1. haptic warning on the device
2. local notification naming the site
3. best-effort supervisor notification, written from a background task

Alerts are edge-triggered: one alert when the guard goes from inside to
outside, none while they stay outside. Coming back inside re-arms the next
exit. A cooldown (default 5 minutes, measured on sample timestamps) caps the
alert rate even across re-entries.
"""
import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, Protocol, Set

from atams.logging import get_logger

from app.core.config import settings
from app.models.site import Site
from app.schemas.notification import NotificationCreate
from app.services.geofence_service import haversine_distance

logger = get_logger(__name__)

ALERT_TITLE = "Geofence Alert"
SUPERVISOR_TITLE = "Guard Left Geofence"


@dataclass(frozen=True)
class PositionSample:
    latitude: float
    longitude: float
    timestamp: datetime


@dataclass(frozen=True)
class MonitoredSite:
    id: str
    name: str
    latitude: float
    longitude: float
    radius_meters: float

    @classmethod
    def from_model(cls, site: Site) -> "MonitoredSite":
        return cls(
            id=site.si_id,
            name=site.si_name,
            latitude=site.si_latitude,
            longitude=site.si_longitude,
            radius_meters=site.si_radius_m,
        )


@dataclass(frozen=True)
class GeofenceState:
    was_inside: bool = True
    last_alert_at: Optional[datetime] = None


@dataclass(frozen=True)
class GeofenceDecision:
    distance_m: float
    is_outside: bool
    should_alert: bool
    state: GeofenceState


class Subscription(Protocol):
    def cancel(self) -> None:
        ...


class PositionSource(Protocol):
    async def request_permission(self) -> bool:
        ...

    def subscribe(self, on_sample: Callable[[PositionSample], None]) -> Subscription:
        ...


class LocalAlerts(Protocol):
    def haptic_warning(self) -> None:
        ...

    def notify(self, title: str, body: str) -> None:
        ...


NotificationSink = Callable[[NotificationCreate], Awaitable[None]]


def evaluate_position(
    state: GeofenceState,
    site: MonitoredSite,
    sample: PositionSample,
    cooldown: timedelta
) -> GeofenceDecision:
    """
    Decide whether a sample should raise a breach alert

    Args:
        state: Monitor state before the sample
        site: Geofence being watched
        sample: Device position
        cooldown: Minimum time between two alerts

    Returns:
        GeofenceDecision carrying the state to keep for the next sample
    """
    distance = haversine_distance(sample.latitude, sample.longitude, site.latitude, site.longitude)
    is_outside = distance > site.radius_meters

    cooldown_expired = (
        state.last_alert_at is None
        or sample.timestamp - state.last_alert_at >= cooldown
    )

    if is_outside and state.was_inside and cooldown_expired:
        return GeofenceDecision(
            distance_m=distance,
            is_outside=True,
            should_alert=True,
            state=GeofenceState(was_inside=False, last_alert_at=sample.timestamp),
        )

    if not is_outside:
        # Back inside: the next exit may alert again
        return GeofenceDecision(
            distance_m=distance,
            is_outside=False,
            should_alert=False,
            state=replace(state, was_inside=True),
        )

    return GeofenceDecision(distance_m=distance, is_outside=True, should_alert=False, state=state)


class GeofenceMonitor:
    """
    One watcher per guard session. Must be driven from a running event loop
    because supervisor notifications are written from background tasks.
    """

    def __init__(
        self,
        position_source: PositionSource,
        local_alerts: LocalAlerts,
        notification_sink: Optional[NotificationSink] = None,
        organization_id: Optional[str] = None,
        user_id: Optional[int] = None,
        cooldown_seconds: Optional[int] = None
    ) -> None:
        self.position_source = position_source
        self.local_alerts = local_alerts
        self.notification_sink = notification_sink
        self.organization_id = organization_id
        self.user_id = user_id
        if cooldown_seconds is None:
            cooldown_seconds = settings.GEOFENCE_ALERT_COOLDOWN_SECONDS
        self.cooldown = timedelta(seconds=cooldown_seconds)

        self._state = GeofenceState()
        self._site: Optional[MonitoredSite] = None
        self._subscription: Optional[Subscription] = None
        self._generation = 0
        self._pending: Set[asyncio.Task] = set()

    @property
    def state(self) -> GeofenceState:
        return self._state

    @property
    def active_site(self) -> Optional[MonitoredSite]:
        return self._site

    @property
    def is_active(self) -> bool:
        return self._subscription is not None

    async def activate(self, site: MonitoredSite) -> bool:
        """
        Start watching a site

        Returns:
            bool: True if the position subscription was opened. False when
            permission was denied or the monitor was deactivated while
            waiting for the permission prompt.
        """
        self.deactivate()
        self._generation += 1
        generation = self._generation

        granted = await self.position_source.request_permission()
        if not granted:
            logger.info("Location permission denied, geofence monitor stays inactive for site %s", site.id)
            return False
        if generation != self._generation:
            return False

        self._site = site
        self._subscription = self.position_source.subscribe(self.handle_sample)
        logger.debug("Geofence monitor watching site %s (radius %sm)", site.id, site.radius_meters)
        return True

    def deactivate(self) -> None:
        """Stop watching; safe to call when already inactive"""
        self._generation += 1
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        self._site = None
        self._state = replace(self._state, was_inside=True)

    async def sync(self, active_site: Optional[MonitoredSite], is_clocked_in: bool) -> bool:
        """
        Follow the guard's session: watch only while clocked in at a site

        Returns:
            bool: whether the monitor is watching after the call
        """
        if active_site is None or not is_clocked_in:
            self.deactivate()
            return False
        if self.is_active and self._site is not None and self._site.id == active_site.id:
            return True
        return await self.activate(active_site)

    def handle_sample(self, sample: PositionSample) -> Optional[GeofenceDecision]:
        """Process one pushed position; ignored while inactive"""
        site = self._site
        if site is None:
            return None

        decision = evaluate_position(self._state, site, sample, self.cooldown)
        self._state = decision.state

        if decision.should_alert:
            self._raise_alert(site, decision)
        return decision

    def _raise_alert(self, site: MonitoredSite, decision: GeofenceDecision) -> None:
        self.local_alerts.haptic_warning()
        self.local_alerts.notify(
            ALERT_TITLE,
            f"You have left the designated area for {site.name}. Please return immediately."
        )

        if self.notification_sink is None or not self.organization_id or self.user_id is None:
            return

        payload = NotificationCreate(
            nt_organization_id=self.organization_id,
            nt_user_id=self.user_id,
            nt_title=SUPERVISOR_TITLE,
            nt_message=(
                f'Guard left the designated area for site "{site.name}". '
                f"Distance: {round(decision.distance_m)}m."
            ),
            nt_type="warning",
        )
        task = asyncio.get_running_loop().create_task(self._write_notification(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write_notification(self, payload: NotificationCreate) -> None:
        try:
            await self.notification_sink(payload)
        except Exception:
            logger.warning("Failed to write geofence notification for site alert", exc_info=True)

    async def drain(self) -> None:
        """Wait for outstanding supervisor notification writes"""
        if self._pending:
            await asyncio.gather(*list(self._pending))
