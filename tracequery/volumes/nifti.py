# Copyright 2018-2024
# Institute of Neuroscience and Medicine (INM-1), Forschungszentrum Jülich GmbH

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at

#     http://www.apache.org/licenses/LICENSE-2.0

# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Handles reading NIfTI label volumes."""

import nibabel as nib
import numpy as np

from . import volume
from ..commons.logger import logger


class NiftiProvider(volume.VolumeProvider, srctype="nii", suffixes=(".nii", ".nii.gz")):

    def fetch(self) -> np.ndarray:
        img = nib.load(self.path)
        arr = np.asanyarray(img.dataobj)
        if arr.ndim == 4 and arr.shape[3] == 1:
            logger.warning(
                f"NIfTI volume {self.path} has shape {arr.shape}, using the first 3D frame"
            )
            arr = arr[..., 0]
        return arr
