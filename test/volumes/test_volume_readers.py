import unittest

import nibabel as nib
import nrrd
import numpy as np
import pytest

from tracequery.exceptions import VolumeReadError
from tracequery.volumes import LabelVolume, SpatialVolumeClassifier, read_volume
from tracequery.volumes.nifti import NiftiProvider
from tracequery.volumes.nrrdfile import NrrdProvider
from tracequery.volumes.volume import VolumeProvider


def labels():
    data = np.zeros((3, 4, 5), dtype=np.int32)
    data[1, 2, 3] = 385
    return data


class DummyVolumeProvider(VolumeProvider, srctype="foo-bar", suffixes=(".foobar",)):
    def fetch(self):
        raise IOError("cannot read")


class TestVolumeProvider(unittest.TestCase):

    def test_srctype(self):
        self.assertEqual(DummyVolumeProvider.srctype, "foo-bar")
        self.assertEqual(NrrdProvider.srctype, "nrrd")
        self.assertEqual(NiftiProvider.srctype, "nii")

    def test_for_path(self):
        self.assertIsInstance(VolumeProvider.for_path("a/b.nrrd"), NrrdProvider)
        self.assertIsInstance(VolumeProvider.for_path("a/b.NRRD"), NrrdProvider)
        self.assertIsInstance(VolumeProvider.for_path("a/b.nii.gz"), NiftiProvider)
        self.assertIsInstance(VolumeProvider.for_path("a/b.foobar"), DummyVolumeProvider)

    def test_for_unknown_suffix(self):
        with self.assertRaises(VolumeReadError):
            VolumeProvider.for_path("a/b.tiff")


def test_read_nrrd(tmp_path):
    path = str(tmp_path / "labels.nrrd")
    nrrd.write(path, labels())
    volume = read_volume(path)
    assert isinstance(volume, LabelVolume)
    assert volume.dims == (3, 4, 5)
    assert volume.labels[1, 2, 3] == 385
    assert volume.source == path


def test_read_nifti(tmp_path):
    path = str(tmp_path / "labels.nii.gz")
    nib.save(nib.Nifti1Image(labels(), np.eye(4)), path)
    volume = read_volume(path)
    assert volume.dims == (3, 4, 5)
    assert volume.labels[1, 2, 3] == 385


def test_read_nifti_drops_singleton_fourth_dimension(tmp_path):
    path = str(tmp_path / "labels.nii")
    nib.save(nib.Nifti1Image(labels()[..., np.newaxis], np.eye(4)), path)
    assert read_volume(path).dims == (3, 4, 5)


def test_classifier_from_file(tmp_path):
    path = str(tmp_path / "labels.nrrd")
    nrrd.write(path, labels())
    classifier = SpatialVolumeClassifier.from_file(path, {385: "r-visp"}, voxel_scale=10)
    assert classifier.classify(10, 20, 30) == "r-visp"
    assert classifier.classify(10, 20, 20) is None


def test_read_missing_file(tmp_path):
    with pytest.raises(VolumeReadError):
        read_volume(str(tmp_path / "missing.nrrd"))


def test_read_unsupported_format(tmp_path):
    path = tmp_path / "labels.tiff"
    path.write_bytes(b"")
    with pytest.raises(VolumeReadError):
        read_volume(str(path))


def test_read_corrupt_file(tmp_path):
    path = tmp_path / "labels.nrrd"
    path.write_text("this is not a nrrd file")
    with pytest.raises(VolumeReadError):
        read_volume(str(path))


def test_provider_errors_are_wrapped(tmp_path):
    path = tmp_path / "labels.foobar"
    path.write_text("")
    with pytest.raises(VolumeReadError) as e:
        read_volume(str(path))
    assert isinstance(e.value.__cause__, IOError)


def test_read_2d_volume(tmp_path):
    path = str(tmp_path / "labels.nrrd")
    nrrd.write(path, np.zeros((3, 4), dtype=np.int32))
    with pytest.raises(VolumeReadError):
        read_volume(path)
