import unittest

import numpy as np
import pytest
from parameterized import parameterized

from tracequery.commons.conf import SearchConf
from tracequery.exceptions import VolumeReadError
from tracequery.volumes import LabelVolume, SpatialVolumeClassifier

STRUCTURES = {385: "r-visp", 512: "r-cb"}


def make_volume():
    labels = np.zeros((5, 5, 5), dtype=np.int32)
    labels[1, 1, 1] = 385
    labels[2, 3, 4] = 512
    labels[4, 4, 4] = 42  # not in the structure map
    return LabelVolume(labels, source="test")


class TestSpatialVolumeClassifier(unittest.TestCase):

    @classmethod
    def setUpClass(cls) -> None:
        cls.classifier = SpatialVolumeClassifier(make_volume(), STRUCTURES, voxel_scale=10)

    def test_dims(self):
        self.assertEqual(self.classifier.dims, (5, 5, 5))

    @parameterized.expand([
        # rounded up: 5/10 and 10/10 both land in voxel 1
        ((5, 5, 5), "r-visp"),
        ((10, 10, 10), "r-visp"),
        ((10.1, 10, 10), None),
        ((20, 30, 40), "r-cb"),
        ((15, 25, 35), "r-cb"),
        # voxel 0 is background
        ((0, 0, 0), None),
        ((40, 40, 40), None),
    ])
    def test_classify(self, point, expected):
        self.assertEqual(self.classifier.classify(*point), expected)

    @parameterized.expand([
        ((-1, 10, 10),),
        ((10, -0.5, 10),),
        ((10, 10, -100),),
    ])
    def test_negative_coordinates(self, point):
        self.assertIsNone(self.classifier.voxel_index(*point))
        self.assertIsNone(self.classifier.classify(*point))

    @parameterized.expand([
        ((41, 0, 0),),
        ((0, 50, 0),),
        ((0, 0, 1000),),
    ])
    def test_out_of_bounds(self, point):
        self.assertIsNone(self.classifier.voxel_index(*point))
        self.assertIsNone(self.classifier.label_at(*point))
        self.assertIsNone(self.classifier.classify(*point))

    @parameterized.expand([
        ((float("nan"), 10, 10),),
        ((10, float("nan"), 10),),
        ((10, 10, float("inf")),),
        ((float("-inf"), 10, 10),),
        ((np.nan, np.inf, 10),),
    ])
    def test_non_finite_coordinates(self, point):
        self.assertIsNone(self.classifier.voxel_index(*point))
        self.assertIsNone(self.classifier.label_at(*point))
        self.assertIsNone(self.classifier.classify(*point))

    def test_label_without_region(self):
        self.assertEqual(self.classifier.label_at(40, 40, 40), 42)
        self.assertIsNone(self.classifier.classify(40, 40, 40))

    def test_classify_many(self):
        self.assertEqual(
            self.classifier.classify_many([(10, 10, 10), (-1, 0, 0), (20, 30, 40)]),
            ["r-visp", None, "r-cb"],
        )

    def test_voxel_index(self):
        self.assertEqual(self.classifier.voxel_index(0, 10, 11), (0, 1, 2))


def test_callable_lookup():
    classifier = SpatialVolumeClassifier(make_volume(), lambda label: f"region-{label}", voxel_scale=10)
    assert classifier.classify(10, 10, 10) == "region-385"
    assert classifier.classify(0, 0, 0) is None


def test_voxel_scale_from_conf():
    with SearchConf.override_conf(voxel_scale=5):
        classifier = SpatialVolumeClassifier(make_volume(), STRUCTURES)
    assert classifier.voxel_scale == 5
    assert classifier.classify(5, 5, 5) == "r-visp"
    assert classifier.classify(10, 15, 20) == "r-cb"


def test_default_voxel_scale():
    classifier = SpatialVolumeClassifier(make_volume(), STRUCTURES)
    assert classifier.voxel_scale == SearchConf.VOXEL_SCALE


def test_volume_is_read_only():
    volume = make_volume()
    with pytest.raises(ValueError):
        volume.labels[0, 0, 0] = 1


def test_volume_must_be_3d():
    with pytest.raises(VolumeReadError):
        LabelVolume(np.zeros((4, 4), dtype=np.int32))


def test_classify_many_with_non_finite_points():
    classifier = SpatialVolumeClassifier(make_volume(), STRUCTURES, voxel_scale=10)
    assert classifier.classify_many([(float("nan"), 1, 1), (10, 10, 10)]) == [None, "r-visp"]
