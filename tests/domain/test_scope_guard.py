from __future__ import annotations

import pytest

from leasesync.domain.errors import ScopeViolationError
from leasesync.domain.model import ProcessingScope
from leasesync.domain.scope import assert_in_scope
from tests.helpers.lifecycle import RecordingObserver, make_lease


def test_unbounded_runs_accept_every_lease() -> None:
    observer = RecordingObserver()
    assert_in_scope(make_lease(unit_id="U2"), None, observer=observer)
    assert_in_scope(make_lease(unit_id="U2"), ProcessingScope(), observer=observer)
    assert observer.warnings == []


def test_lease_on_declared_unit_passes() -> None:
    scope = ProcessingScope.of(unit_ids=["U1"])
    assert_in_scope(make_lease(unit_id="U1"), scope, observer=RecordingObserver())


def test_lease_on_declared_property_passes() -> None:
    scope = ProcessingScope.of(property_ids=["P7"])
    assert_in_scope(make_lease(unit_id="U5", property_id="P7"), scope, observer=RecordingObserver())


def test_lease_outside_scope_raises() -> None:
    scope = ProcessingScope.of(unit_ids=["U1"])

    with pytest.raises(ScopeViolationError) as excinfo:
        assert_in_scope(
            make_lease("L9", unit_id="U2", property_id="P2"), scope, observer=RecordingObserver()
        )

    assert excinfo.value.lease_id == "L9"
    assert excinfo.value.unit_id == "U2"


def test_lease_without_unit_passes_with_warning() -> None:
    observer = RecordingObserver()
    scope = ProcessingScope.of(unit_ids=["U1"])

    assert_in_scope(make_lease("L3", unit_id=None), scope, observer=observer)

    assert observer.warning_names == ["lease.unit-missing"]

