import numpy as np
import pytest
from common.types import GeoCoord
from lop_engine.models import RangeLOP, AzimuthLOP, MinErrConfig
from lop_engine.scoring import (
    OFF_GLOBE_COLOR,
    ScoreResult,
    lop_error,
    score,
    evaluate,
    evaluate_batch,
)
from lop_engine.parser import parse_input

ORIGIN = GeoCoord(0.0, 0.0)
EAST = GeoCoord(0.0, np.pi / 2)
NORTH_POLE = GeoCoord(np.pi / 2, 0.0)


def test_range_lop_error():
    lop = RangeLOP(anchor=ORIGIN, radius=np.pi / 2 + 0.1)
    assert np.isclose(lop_error(EAST, lop), 0.1)


def test_azimuth_lop_error():
    lop = AzimuthLOP(anchor=EAST, bearing=np.pi / 2 + 0.05)
    assert np.isclose(lop_error(ORIGIN, lop), 0.05)


def test_azimuth_lop_error_wraps():
    lop = AzimuthLOP(anchor=NORTH_POLE, bearing=2 * np.pi - 0.05)
    assert np.isclose(lop_error(ORIGIN, lop), 0.05)


def test_lop_error_rejects_unknown_type():
    with pytest.raises(TypeError):
        lop_error(ORIGIN, object())


def test_later_matching_lop_wins():
    lops = [
        RangeLOP(anchor=ORIGIN, radius=np.pi / 2, tolerance=0.1, color="#f00"),
        RangeLOP(anchor=ORIGIN, radius=np.pi / 2 + 0.05, tolerance=0.1, color="#0f0"),
    ]
    assert evaluate(EAST, lops, MinErrConfig(), "#123") == "#0f0"


def test_non_matching_later_lop_does_not_clear_match():
    lops = [
        RangeLOP(anchor=ORIGIN, radius=np.pi / 2, tolerance=0.1, color="#f00"),
        RangeLOP(anchor=ORIGIN, radius=0.2, tolerance=0.1, color="#0f0"),
    ]
    assert evaluate(EAST, lops, MinErrConfig(), "#123") == "#f00"


def test_min_err_overrides_lop_match():
    lops = [
        RangeLOP(anchor=ORIGIN, radius=np.pi / 2, tolerance=0.1, color="#f00"),
        RangeLOP(anchor=ORIGIN, radius=np.pi / 2 + 0.05, tolerance=0.1, color="#0f0"),
    ]
    min_err = MinErrConfig(tolerance=0.7, color="#00f")
    assert evaluate(EAST, lops, min_err, "#123") == "#00f"


def test_min_err_not_met_falls_back_to_match():
    lops = [
        RangeLOP(anchor=ORIGIN, radius=np.pi / 2, tolerance=0.1, color="#f00"),
        RangeLOP(anchor=ORIGIN, radius=np.pi / 2 + 0.05, tolerance=0.1, color="#0f0"),
    ]
    min_err = MinErrConfig(tolerance=0.01, color="#00f")
    assert evaluate(EAST, lops, min_err, "#123") == "#0f0"


def test_min_err_zero_tolerance_is_disabled():
    assert not MinErrConfig().enabled
    assert MinErrConfig(tolerance=0.1).enabled
    lops = [RangeLOP(anchor=ORIGIN, radius=np.pi / 2, tolerance=1e-9, color="#f00")]
    assert evaluate(EAST, lops, MinErrConfig(tolerance=0.0, color="#00f"), "#123") == "#f00"


def test_score_accumulates_squared_errors():
    lops = [
        RangeLOP(anchor=ORIGIN, radius=np.pi / 2 + 0.3),
        AzimuthLOP(anchor=EAST, bearing=np.pi / 2 + 0.4),
    ]
    result = score(ORIGIN, [lops[1]])
    assert result.count == 1
    result = score(EAST, lops[:1])
    assert np.isclose(result.sum_squared_error, 0.09)
    assert np.isclose(result.rms, 0.3)
    assert result.matched_color is None


def test_empty_score_rms_is_nan():
    assert np.isnan(ScoreResult().rms)


def test_background_used_when_nothing_matches():
    lops = [RangeLOP(anchor=ORIGIN, radius=0.1, tolerance=0.01, color="#f00")]
    assert evaluate(EAST, lops, MinErrConfig(), "#abc") == "#abc"
    assert evaluate(EAST, [], MinErrConfig(tolerance=0.5), "#abc") == "#abc"


def test_background_callable_invoked_lazily():
    calls = []

    def sampler(coord):
        calls.append(coord)
        return "#321"

    covering = [RangeLOP(anchor=ORIGIN, radius=np.pi / 2, tolerance=0.1, color="#f00")]
    assert evaluate(EAST, covering, MinErrConfig(), sampler) == "#f00"
    assert calls == []
    assert evaluate(ORIGIN, covering, MinErrConfig(), sampler) == "#321"
    assert len(calls) == 1


def test_invalid_coordinate_is_off_globe():
    calls = []
    color = evaluate(GeoCoord.invalid(), [], MinErrConfig(), lambda c: calls.append(c))
    assert color == OFF_GLOBE_COLOR
    assert calls == []


def test_evaluate_is_deterministic():
    lops = [
        RangeLOP(anchor=GeoCoord(0.79, -0.22), radius=1.25, tolerance=0.01, color="#07f"),
        AzimuthLOP(anchor=GeoCoord(-0.54, 1.1), bearing=3.2, tolerance=0.01, color="#f70"),
    ]
    min_err = MinErrConfig(tolerance=0.012, color="#fff")
    rng = np.random.default_rng(7)
    coords = [GeoCoord(lat, lon) for lat, lon in zip(rng.uniform(-1.5, 1.5, 30), rng.uniform(-3, 3, 30))]
    first = [evaluate(c, lops, min_err, "#000") for c in coords]
    second = [evaluate(c, lops, min_err, "#000") for c in reversed(coords)]
    assert first == second[::-1]


def test_out_of_range_bearing_scores_like_its_reduction():
    wrapped = parse_input("lat: 60 N, lon: 0 E, azm: 400, dif: 0.5, color: #f00").lops[0]
    plain = parse_input("lat: 60 N, lon: 0 E, azm: 40, dif: 0.5, color: #f00").lops[0]
    err = lop_error(ORIGIN, wrapped)
    assert err >= 0.0
    assert np.isclose(err, lop_error(ORIGIN, plain))
    assert np.isclose(err, np.radians(40))


def test_hand_built_bearing_outside_full_circle_never_negative():
    lop = AzimuthLOP(anchor=NORTH_POLE, bearing=np.radians(400))
    assert np.isclose(lop_error(ORIGIN, lop), np.radians(40))
    assert evaluate(ORIGIN, [lop], MinErrConfig(), background="#123") == "#123"


def test_evaluate_batch_matches_evaluate():
    parsed = parse_input(
        "lat: 10 N, lon: 5 E, rad: 20, dif: 6, color: #f00\n"
        "lat: 40 N, lon: 30 W, azm: 120, dif: 25, color: #0f0\n"
        "min-err dif: 8, color: #00f"
    )
    rng = np.random.default_rng(2)
    lat = np.concatenate([np.arcsin(rng.uniform(-0.95, 0.95, 300)), [np.nan]])
    lon = np.concatenate([rng.uniform(-np.pi, np.pi, 300), [np.nan]])
    colors = evaluate_batch(lat, lon, parsed.lops, parsed.min_err)
    assert colors.shape == lat.shape
    for la, lo, color in zip(lat, lon, colors):
        coord = GeoCoord(lat=la, lon=lo)
        expected = evaluate(coord, parsed.lops, parsed.min_err, background=None)
        assert color == expected
    assert colors[-1] == OFF_GLOBE_COLOR
