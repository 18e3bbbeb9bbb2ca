from datetime import datetime, timedelta

import pytest
from atams.exceptions import BadRequestException, NotFoundException

from app.models.profile import Profile
from app.schemas import IncidentCreate, SiteCreate
from app.services.incident_service import IncidentService
from app.services.patrol_service import PatrolService
from app.services.site_service import SiteService

from tests.conftest import GUARD_ID, ORG_ID, FakeClock

T0 = datetime(2025, 3, 4, 1, 30, 0)


@pytest.fixture
def clock():
    return FakeClock(T0, step=timedelta(minutes=5))


@pytest.fixture
def incidents(clock):
    return IncidentService(clock=clock)


def report(db, incidents, **overrides):
    payload = {"in_organization_id": ORG_ID, "in_title": "Broken fence", "in_priority": "high"}
    payload.update(overrides)
    return incidents.create_incident(db, GUARD_ID, IncidentCreate(**payload))


def test_new_incident_is_open(db, incidents):
    incident = report(db, incidents)

    assert incident.in_status == "open"
    assert incident.in_priority == "high"
    assert incident.in_photos == []
    assert incident.in_created_at == incident.in_updated_at == T0


def test_any_transition_allowed_and_updated_at_refreshes(db, incidents):
    incident = report(db, incidents)

    resolved = incidents.update_status(db, ORG_ID, incident.in_id, "resolved")
    assert resolved.in_status == "resolved"
    assert resolved.in_updated_at > incident.in_updated_at

    reopened = incidents.update_status(db, ORG_ID, incident.in_id, "open")
    assert reopened.in_status == "open"
    assert reopened.in_updated_at > resolved.in_updated_at

    closed = incidents.update_status(db, ORG_ID, incident.in_id, "closed")
    assert incidents.update_status(db, ORG_ID, incident.in_id, "investigating").in_status == "investigating"
    assert closed.in_created_at == T0


def test_unknown_status_rejected(db, incidents):
    incident = report(db, incidents)
    with pytest.raises(BadRequestException):
        incidents.update_status(db, ORG_ID, incident.in_id, "archived")


def test_update_missing_incident(db, incidents):
    with pytest.raises(NotFoundException):
        incidents.update_status(db, ORG_ID, "missing", "closed")


def test_update_incident_of_other_organization(db, incidents):
    incident = report(db, incidents)

    with pytest.raises(NotFoundException):
        incidents.update_status(db, "org-2", incident.in_id, "closed")
    assert incidents.get_incident(db, incident.in_id).in_status == "open"


def test_incident_carries_patrol_site_and_reporter(db, incidents):
    db.add(Profile(pr_user_id=GUARD_ID, pr_full_name="Budi Santoso", pr_email="budi@example.com"))
    db.commit()
    site = SiteService().create_site(db, SiteCreate(
        si_organization_id=ORG_ID, si_name="Warehouse A", si_latitude=-6.2, si_longitude=106.8
    ))
    patrol = PatrolService().start_patrol(db, ORG_ID, site.si_id, GUARD_ID)

    incident = report(db, incidents, in_patrol_id=patrol.pa_id, in_photos=["https://cdn.example.com/a.jpg"])

    assert incident.reporter_name == "Budi Santoso"
    assert incident.site_id == site.si_id
    assert incident.site_name == "Warehouse A"
    assert incident.in_photos == ["https://cdn.example.com/a.jpg"]


def test_incident_with_patrol_of_other_organization(db, incidents):
    site = SiteService().create_site(db, SiteCreate(
        si_organization_id="org-2", si_name="Elsewhere", si_latitude=1.0, si_longitude=1.0
    ))
    patrol = PatrolService().start_patrol(db, "org-2", site.si_id, GUARD_ID)

    with pytest.raises(NotFoundException):
        report(db, incidents, in_patrol_id=patrol.pa_id)


def test_list_incidents_newest_first_and_filtered(db, incidents):
    first = report(db, incidents, in_title="First")
    second = report(db, incidents, in_title="Second")
    incidents.update_status(db, ORG_ID, first.in_id, "resolved")

    listed = incidents.list_incidents(db, ORG_ID)
    assert [i.in_id for i in listed] == [second.in_id, first.in_id]
    assert [i.in_id for i in incidents.list_incidents(db, ORG_ID, status="resolved")] == [first.in_id]
