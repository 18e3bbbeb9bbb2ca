from datetime import datetime, timedelta

import pytest
from atams.exceptions import BadRequestException, ConflictException, ForbiddenException, NotFoundException

from app.schemas import CheckpointCreate, CheckpointUpdate, ScanLocation, SiteCreate
from app.services.checkpoint_service import CheckpointService
from app.services.patrol_service import PatrolService, format_patrol_duration
from app.services.site_service import SiteService

from tests.conftest import GUARD_ID, ORG_ID, FakeClock

T0 = datetime(2025, 3, 3, 22, 0, 0)


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def patrols(clock):
    return PatrolService(clock=clock)


@pytest.fixture
def site(db):
    return SiteService().create_site(db, SiteCreate(
        si_organization_id=ORG_ID,
        si_name="Warehouse A",
        si_latitude=-6.2,
        si_longitude=106.8,
        si_radius_m=150,
    ))


@pytest.fixture
def checkpoints(db, site):
    service = CheckpointService()
    return [
        service.create_checkpoint(db, site.si_id, CheckpointCreate(cp_name=name, cp_qr_code=f"QR-{name}"))
        for name in ("Gate", "Loading Dock", "Server Room")
    ]


def test_duration_label():
    assert format_patrol_duration(T0, T0 + timedelta(minutes=47)) == "47 mins"
    assert format_patrol_duration(T0, T0 + timedelta(minutes=46, seconds=30)) == "47 mins"
    assert format_patrol_duration(T0, None) == "Ongoing"


def test_checkpoints_get_sequential_order(checkpoints):
    assert [c.cp_order for c in checkpoints] == [0, 1, 2]


def test_duplicate_qr_code_conflicts(db, site, checkpoints):
    with pytest.raises(ConflictException):
        CheckpointService().create_checkpoint(db, site.si_id, CheckpointCreate(cp_name="Other", cp_qr_code="QR-Gate"))


def test_start_patrol_sets_started(db, patrols, site):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID, notes="night round")

    assert patrol.pa_status == "started"
    assert patrol.pa_started_at == T0
    assert patrol.pa_ended_at is None
    assert patrol.duration_label == "Ongoing"


def test_start_patrol_unknown_site(db, patrols):
    with pytest.raises(NotFoundException):
        patrols.start_patrol(db, ORG_ID, "missing-site", GUARD_ID)


def test_start_patrol_in_other_organization(db, patrols, site):
    with pytest.raises(NotFoundException):
        patrols.start_patrol(db, "org-2", site.si_id, GUARD_ID)


def test_second_active_patrol_conflicts(db, patrols, site):
    patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    with pytest.raises(ConflictException):
        patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)


def test_scans_then_end_then_rejected(db, patrols, clock, site, checkpoints):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    for checkpoint in checkpoints:
        clock.advance(minutes=10)
        patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoint.cp_id)

    clock.advance(minutes=17)
    ended = patrols.end_patrol(db, ORG_ID, patrol.pa_id)
    assert ended.pa_status == "completed"
    assert ended.duration_minutes == 47
    assert ended.duration_label == "47 mins"

    with pytest.raises(ConflictException):
        patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoints[0].cp_id)

    detail = patrols.get_patrol(db, patrol.pa_id)
    assert [log.checkpoint_name for log in detail.logs] == ["Gate", "Loading Dock", "Server Room"]
    assert len(detail.logs) == 3


def test_end_closed_patrol_conflicts(db, patrols, site):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    patrols.end_patrol(db, ORG_ID, patrol.pa_id, outcome="incomplete")

    with pytest.raises(ConflictException):
        patrols.end_patrol(db, ORG_ID, patrol.pa_id)


def test_unknown_outcome_rejected(db, patrols, site):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    with pytest.raises(BadRequestException):
        patrols.end_patrol(db, ORG_ID, patrol.pa_id, outcome="abandoned")


def test_issue_reported_scan_keeps_patrol_status(db, patrols, site, checkpoints):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    log = patrols.record_scan(
        db,
        ORG_ID,
        patrol.pa_id,
        checkpoints[1].cp_id,
        status="issue_reported",
        location=ScanLocation(lat=-6.2, lng=106.8, formatted_address="Dock 2"),
    )

    assert log.pl_status == "issue_reported"
    assert log.pl_location.formatted_address == "Dock 2"
    assert patrols.get_patrol(db, patrol.pa_id).pa_status == "started"


def test_scan_unknown_checkpoint(db, patrols, site):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    with pytest.raises(NotFoundException):
        patrols.record_scan(db, ORG_ID, patrol.pa_id, "missing-checkpoint")


def test_scan_checkpoint_of_other_site(db, patrols, site):
    other_site = SiteService().create_site(db, SiteCreate(
        si_organization_id=ORG_ID, si_name="Depot", si_latitude=-6.3, si_longitude=106.9
    ))
    foreign = CheckpointService().create_checkpoint(
        db, other_site.si_id, CheckpointCreate(cp_name="Depot Gate", cp_qr_code="QR-DEPOT")
    )
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    with pytest.raises(NotFoundException):
        patrols.record_scan(db, ORG_ID, patrol.pa_id, foreign.cp_id)


def test_scan_unknown_patrol(db, patrols, checkpoints):
    with pytest.raises(NotFoundException):
        patrols.record_scan(db, ORG_ID, "missing-patrol", checkpoints[0].cp_id)


def test_writes_to_patrol_of_other_organization_not_found(db, patrols, site, checkpoints):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    with pytest.raises(NotFoundException):
        patrols.record_scan(db, "org-2", patrol.pa_id, checkpoints[0].cp_id)
    with pytest.raises(NotFoundException):
        patrols.record_qr_scan(db, "org-2", patrol.pa_id, "QR-Gate")
    with pytest.raises(NotFoundException):
        patrols.end_patrol(db, "org-2", patrol.pa_id)

    detail = patrols.get_patrol(db, patrol.pa_id)
    assert detail.pa_status == "started"
    assert detail.logs == []


def test_guard_cannot_write_to_another_guards_patrol(db, patrols, site, checkpoints):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    other_guard = GUARD_ID + 1

    with pytest.raises(ForbiddenException):
        patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoints[0].cp_id, user_id=other_guard)
    with pytest.raises(ForbiddenException):
        patrols.record_qr_scan(db, ORG_ID, patrol.pa_id, "QR-Gate", user_id=other_guard)
    with pytest.raises(ForbiddenException):
        patrols.end_patrol(db, ORG_ID, patrol.pa_id, user_id=other_guard)

    patrols.record_qr_scan(db, ORG_ID, patrol.pa_id, "QR-Gate", user_id=GUARD_ID)
    assert patrols.end_patrol(db, ORG_ID, patrol.pa_id, user_id=GUARD_ID).pa_status == "completed"


def test_supervisor_may_close_any_patrol_of_organization(db, patrols, site):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    ended = patrols.end_patrol(db, ORG_ID, patrol.pa_id, outcome="incomplete", user_id=None)
    assert ended.pa_status == "incomplete"


def test_qr_scan_rejects_repeat_and_unknown_codes(db, patrols, clock, site, checkpoints):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    log = patrols.record_qr_scan(db, ORG_ID, patrol.pa_id, "QR-Gate")
    assert log.pl_checkpoint_id == checkpoints[0].cp_id

    clock.advance(minutes=1)
    with pytest.raises(ConflictException):
        patrols.record_qr_scan(db, ORG_ID, patrol.pa_id, "QR-Gate")
    with pytest.raises(NotFoundException):
        patrols.record_qr_scan(db, ORG_ID, patrol.pa_id, "QR-UNKNOWN")


def test_offline_scans_keep_device_time(db, patrols, site, checkpoints):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoints[2].cp_id, scanned_at=T0 + timedelta(minutes=5))
    patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoints[0].cp_id, scanned_at=T0 + timedelta(minutes=30))

    detail = patrols.get_patrol(db, patrol.pa_id)
    assert [log.checkpoint_name for log in detail.logs] == ["Server Room", "Gate"]
    assert [log.pl_scanned_at for log in detail.logs] == [T0 + timedelta(minutes=5), T0 + timedelta(minutes=30)]


def test_scan_before_patrol_start_rejected(db, patrols, site, checkpoints):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    with pytest.raises(BadRequestException):
        patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoints[0].cp_id, scanned_at=datetime(2020, 1, 1))
    assert patrols.get_patrol(db, patrol.pa_id).logs == []


def test_scan_earlier_than_previous_scan_rejected(db, patrols, clock, site, checkpoints):
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    clock.advance(minutes=20)
    patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoints[0].cp_id)

    with pytest.raises(BadRequestException):
        patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoints[1].cp_id, scanned_at=T0 + timedelta(minutes=10))

    detail = patrols.get_patrol(db, patrol.pa_id)
    assert [log.checkpoint_name for log in detail.logs] == ["Gate"]


def test_progress_counts_distinct_active_checkpoints(db, patrols, clock, site, checkpoints):
    CheckpointService().update_checkpoint(db, checkpoints[2].cp_id, CheckpointUpdate(cp_is_active=False))
    patrol = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    for _ in range(2):
        clock.advance(minutes=1)
        patrols.record_scan(db, ORG_ID, patrol.pa_id, checkpoints[0].cp_id)

    detail = patrols.get_patrol(db, patrol.pa_id)
    assert detail.site_name == "Warehouse A"
    assert detail.progress.scanned == 1
    assert detail.progress.total == 2
    assert detail.progress.ratio == 0.5


def test_sweep_marks_stale_patrols_incomplete(db, site):
    old_patrols = PatrolService(clock=FakeClock(T0 - timedelta(hours=30)))
    stale = old_patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    patrols = PatrolService(clock=FakeClock(T0))
    fresh = patrols.start_patrol(db, ORG_ID, site.si_id, GUARD_ID + 1)

    result = patrols.sweep_abandoned_patrols(db)

    assert result.updated_count == 1
    assert result.cutoff == T0 - timedelta(hours=24)
    assert patrols.get_patrol(db, stale.pa_id).pa_status == "incomplete"
    assert patrols.get_patrol(db, stale.pa_id).pa_ended_at == T0
    assert patrols.get_patrol(db, fresh.pa_id).pa_status == "started"


def test_list_patrols_newest_first(db, site):
    first = PatrolService(clock=FakeClock(T0)).start_patrol(db, ORG_ID, site.si_id, GUARD_ID)
    second = PatrolService(clock=FakeClock(T0 + timedelta(hours=1))).start_patrol(db, ORG_ID, site.si_id, GUARD_ID + 1)

    listed = PatrolService().list_patrols(db, ORG_ID)
    assert [p.pa_id for p in listed] == [second.pa_id, first.pa_id]
