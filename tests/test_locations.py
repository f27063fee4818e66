from datetime import datetime, timedelta

import pytest

from hestia.core.errors import Forbidden, InvalidCoordinates, ValidationError
from hestia.modules.connections import service as connections
from hestia.modules.locations import service
from hestia.modules.locations.models import LocationPermission, LocationSample, LocationSetting
from hestia.schemas.enums import SharingMode


def _connect(db, a, b):
    connections.request_connection(db, a, b)
    connections.respond_to_connection(db, b, a, True)


def _visible(db, viewer):
    return {row["username"] for row in service.connected_locations(db, viewer)}


@pytest.fixture
def pair(db, make_user):
    """alice and bob connected; bob shares with alice and has a sample."""
    make_user("alice")
    make_user("bob", profile_pic=b"bob-pic")
    _connect(db, "alice", "bob")
    service.update_settings(db, "bob", True, SharingMode.always)
    service.set_location_permission(db, "bob", "alice", True)
    service.update_location(db, "bob", 51.5, -0.12, 8.0)


def test_first_location_creates_settings_and_self_permission(db, make_user):
    make_user("carol")

    service.update_location(db, "carol", 40.0, -73.0, 5)

    setting = db.get(LocationSetting, "carol")
    assert setting.is_enabled is True
    assert setting.sharing_mode == "always"

    perm = (
        db.query(LocationPermission)
        .filter_by(requester_username="carol", target_username="carol")
        .one()
    )
    assert perm.is_approved is True

    sample = db.get(LocationSample, "carol")
    assert (sample.latitude, sample.longitude, sample.accuracy) == (40.0, -73.0, 5)


@pytest.mark.parametrize("lat,lon", [(91, 0), (-90.5, 0), (0, 200), (0, -181)])
def test_invalid_coordinates_change_nothing(db, make_user, lat, lon):
    make_user("carol")
    service.update_location(db, "carol", 1.0, 2.0)

    with pytest.raises(InvalidCoordinates):
        service.update_location(db, "carol", lat, lon)

    samples = db.query(LocationSample).all()
    assert len(samples) == 1
    assert (samples[0].latitude, samples[0].longitude) == (1.0, 2.0)


def test_invalid_coordinates_is_a_validation_error(db, make_user):
    make_user("carol")
    with pytest.raises(ValidationError):
        service.update_location(db, "carol", 91, 0)
    assert db.query(LocationSample).count() == 0
    assert db.get(LocationSetting, "carol") is None


def test_second_update_replaces_sample(db, make_user):
    make_user("carol")

    service.update_location(db, "carol", 10.0, 20.0, 3.0)
    service.update_location(db, "carol", -33.9, 151.2, 12.0)

    rows = db.query(LocationSample).filter_by(username="carol").all()
    assert len(rows) == 1
    assert (rows[0].latitude, rows[0].longitude, rows[0].accuracy) == (-33.9, 151.2, 12.0)
    assert db.query(LocationPermission).count() == 1


def test_get_settings_defaults_when_missing(db, make_user):
    make_user("carol")
    assert service.get_settings(db, "carol") == (False, SharingMode.off)


def test_disable_deletes_sample_and_resets_mode(db, make_user):
    make_user("carol")
    service.update_location(db, "carol", 1.0, 1.0)

    service.update_settings(db, "carol", False, SharingMode.always)

    assert db.get(LocationSample, "carol") is None
    assert service.get_settings(db, "carol") == (False, SharingMode.off)


def test_location_write_reenables_disabled_sharing(db, make_user):
    make_user("carol")
    service.update_settings(db, "carol", False, SharingMode.off)

    service.update_location(db, "carol", 1.0, 1.0)

    assert service.get_settings(db, "carol") == (True, SharingMode.always)


def test_timed_mode_sets_expiry(db, make_user):
    make_user("carol")
    before = datetime.utcnow()

    service.update_settings(db, "carol", True, SharingMode.timed, duration_minutes=30)

    setting = db.get(LocationSetting, "carol")
    assert setting.sharing_mode == "timed"
    assert before + timedelta(minutes=29) < setting.sharing_until <= datetime.utcnow() + timedelta(minutes=30)

    service.update_settings(db, "carol", True, SharingMode.always)
    assert db.get(LocationSetting, "carol").sharing_until is None


def test_connected_viewer_sees_shared_location(db, pair):
    rows = {r["username"]: r for r in service.connected_locations(db, "alice")}

    assert set(rows) == {"bob"}
    bob = rows["bob"]
    assert (bob["latitude"], bob["longitude"], bob["accuracy"]) == (51.5, -0.12, 8.0)
    assert bob["profile_pic"] == "Ym9iLXBpYw=="
    assert bob["sharing_mode"] == "always"


def test_viewer_always_sees_own_location(db, pair):
    service.update_location(db, "alice", 0.0, 0.0)
    assert _visible(db, "alice") == {"alice", "bob"}
    assert _visible(db, "bob") == {"bob"}


def test_disabling_hides_user_and_deletes_sample(db, pair):
    service.update_settings(db, "bob", False, SharingMode.always)

    assert _visible(db, "alice") == set()
    assert db.get(LocationSample, "bob") is None


def test_unapproved_viewer_does_not_see_location(db, pair):
    service.set_location_permission(db, "bob", "alice", False)
    assert _visible(db, "alice") == set()


def test_permission_without_connection_hides_location(db, pair):
    connections.disconnect(db, "alice", "bob")
    # a stale approval must not leak a location
    db.add(LocationPermission(requester_username="alice", target_username="bob", is_approved=True))
    db.commit()

    assert _visible(db, "alice") == set()


def test_timed_share_expires_at_read_time(db, pair):
    service.update_settings(db, "bob", True, SharingMode.timed, duration_minutes=10)
    service.update_location(db, "bob", 51.5, -0.12)
    assert _visible(db, "alice") == {"bob"}

    setting = db.get(LocationSetting, "bob")
    setting.sharing_until = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    assert _visible(db, "alice") == set()
    # the stored flag is not swept
    assert service.get_settings(db, "bob") == (True, SharingMode.timed)


def test_permission_requires_connection(db, make_user):
    make_user("alice")
    make_user("mallory")

    with pytest.raises(Forbidden):
        service.set_location_permission(db, "alice", "mallory", True)


def test_permission_for_self_rejected(db, make_user):
    make_user("alice")
    with pytest.raises(ValidationError):
        service.set_location_permission(db, "alice", "alice", True)


def test_list_location_permissions(db, pair, make_user):
    make_user("carol")
    _connect(db, "carol", "bob")
    service.set_location_permission(db, "bob", "carol", False)

    assert service.list_location_permissions(db, "bob") == [
        {"username": "alice", "is_approved": True},
        {"username": "carol", "is_approved": False},
    ]


def test_enabling_with_mode_off_uses_default_mode(db, make_user):
    make_user("carol")

    service.update_settings(db, "carol", True, SharingMode.off)

    assert service.get_settings(db, "carol") == (True, SharingMode.always)


def _fail(*args, **kwargs):
    raise RuntimeError("store down")


def test_failed_location_write_keeps_previous_sample(db, make_user, monkeypatch):
    make_user("carol")
    service.update_location(db, "carol", 1.0, 2.0, 3.0)
    service.update_settings(db, "carol", True, SharingMode.timed, duration_minutes=15)
    until = db.get(LocationSetting, "carol").sharing_until

    monkeypatch.setattr(service, "_ensure_self_permission", _fail)

    with pytest.raises(RuntimeError):
        service.update_location(db, "carol", 10.0, 20.0, 30.0)

    rows = db.query(LocationSample).filter_by(username="carol").all()
    assert len(rows) == 1
    assert (rows[0].latitude, rows[0].longitude, rows[0].accuracy) == (1.0, 2.0, 3.0)

    setting = db.get(LocationSetting, "carol")
    assert (setting.is_enabled, setting.sharing_mode, setting.sharing_until) == (True, "timed", until)


def test_failed_location_write_leaves_disabled_settings(db, make_user, monkeypatch):
    make_user("carol")
    service.update_settings(db, "carol", False, SharingMode.off)

    monkeypatch.setattr(service, "_ensure_self_permission", _fail)

    with pytest.raises(RuntimeError):
        service.update_location(db, "carol", 10.0, 20.0)

    assert db.query(LocationSample).count() == 0
    assert service.get_settings(db, "carol") == (False, SharingMode.off)
    assert db.query(LocationPermission).count() == 0
