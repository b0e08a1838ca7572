import pytest

from leadfinder.core.geo import annotate_distances, haversine_km
from leadfinder.core.models import Coordinates, Lead

PUNE = Coordinates(18.5204, 73.8567)
MUMBAI = Coordinates(19.0760, 72.8777)


def _lead(lat, lng, known=True):
    return Lead(
        id="lead-1",
        name="A",
        address="X",
        lat=lat,
        lng=lng,
        coordinates_known=known,
        maps_url="https://maps",
        last_updated="2024-01-01",
    )


def test_distance_to_self_is_zero():
    assert haversine_km(PUNE, PUNE) == 0


def test_distance_is_symmetric():
    assert haversine_km(PUNE, MUMBAI) == haversine_km(MUMBAI, PUNE)


def test_distance_pune_mumbai():
    assert haversine_km(PUNE, MUMBAI) == pytest.approx(120, abs=5)


def test_antipodal_points_do_not_blow_up():
    assert haversine_km(Coordinates(0, 0), Coordinates(0, 180)) == pytest.approx(20015, abs=1)


def test_annotate_distances_skips_unknown_locations():
    leads = [_lead(19.0760, 72.8777), _lead(0, 0, known=False)]

    annotated = annotate_distances(leads, PUNE)

    assert annotated[0].distance_km == pytest.approx(120, abs=5)
    assert annotated[1].distance_km is None
    assert leads[0].distance_km is None  # originals untouched


def test_annotate_distances_without_reference():
    leads = [_lead(19.0760, 72.8777)]
    assert annotate_distances(leads, None)[0].distance_km is None
