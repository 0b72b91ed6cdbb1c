import math

import pytest

from orbitwatch.visibility.scorer import (
    EXCELLENT,
    FAIR,
    GOOD,
    HIGH_PASS,
    LOW_PASS,
    MEDIUM_PASS,
    POOR,
    UNKNOWN,
    cloud_band,
    elevation_band,
    overall_rating,
    pass_rating,
    pass_score,
)

from conftest import NIGHT, make_pass


class TestOverallRating:
    def test_unknown_without_data(self):
        assert overall_rating(None) == UNKNOWN
        assert overall_rating(float("nan")) == UNKNOWN

    @pytest.mark.parametrize(
        "cloud, expected",
        [(0, EXCELLENT), (10, EXCELLENT), (24.9, EXCELLENT), (25, GOOD), (49, GOOD),
         (50, FAIR), (60, FAIR), (75, POOR), (90, POOR), (100, POOR)],
    )
    def test_cloud_bands(self, cloud, expected):
        assert overall_rating(cloud) == expected

    def test_labels_and_colors(self):
        assert overall_rating(10).label == "Excellent"
        assert overall_rating(10).color == "green"
        assert overall_rating(60).label == "Fair"
        assert overall_rating(90).label == "Poor"
        assert overall_rating(90).color == "red"
        assert overall_rating(None).label == "Unknown"


def test_bands():
    assert cloud_band(0) == 0
    assert cloud_band(74.9) == 2
    assert elevation_band(45) == 0
    assert elevation_band(44.9) == 1
    assert elevation_band(25) == 1
    assert elevation_band(24.9) == 2


def test_pass_score_is_additive():
    assert pass_score(60.0, 10.0) == 0.5
    assert pass_score(30.0, 40.0) == 2.5
    assert pass_score(15.0, 90.0) == 5.5


class TestPassRating:
    def test_elevation_only_without_clouds(self):
        assert pass_rating(make_pass(NIGHT, max_el=60.0), None) == HIGH_PASS
        assert pass_rating(make_pass(NIGHT, max_el=30.0), None) == MEDIUM_PASS
        assert pass_rating(make_pass(NIGHT, max_el=15.0), None) == LOW_PASS

    def test_nan_cloud_cover_treated_as_unknown(self):
        assert pass_rating(make_pass(NIGHT, max_el=60.0), math.nan) == HIGH_PASS

    @pytest.mark.parametrize(
        "max_el, cloud, label",
        [
            (60.0, 10.0, "Excellent"),
            (60.0, 55.0, "Good"),
            (30.0, 30.0, "Good"),
            (30.0, 60.0, "Fair"),
            (15.0, 60.0, "Poor"),
            (15.0, 90.0, "Poor"),
        ],
    )
    def test_combined_score(self, max_el, cloud, label):
        rating = pass_rating(make_pass(NIGHT, max_el=max_el), cloud)
        assert rating.label == label
        assert rating.icon == ""
