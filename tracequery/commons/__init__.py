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
"""Constants read from the environment, shared across tracequery."""

import os

TRACEQUERY_LOG_LEVEL = os.getenv("TRACEQUERY_LOG_LEVEL", "INFO")
TRACEQUERY_VOXEL_SCALE = float(os.getenv("TRACEQUERY_VOXEL_SCALE", 10))
TRACEQUERY_QUERY_TIMEOUT = os.getenv("TRACEQUERY_QUERY_TIMEOUT")
TRACEQUERY_MAX_WORKERS = int(os.getenv("TRACEQUERY_MAX_WORKERS", 4))
