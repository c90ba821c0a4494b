from contextlib import contextmanager

from . import (
    TRACEQUERY_VOXEL_SCALE,
    TRACEQUERY_QUERY_TIMEOUT,
    TRACEQUERY_MAX_WORKERS,
)

"""
int/float values imported by value cannot be patched at runtime, so the
values a search reads on every call are kept on a class. Internal modules do

```python
from tracequery.commons.conf import SearchConf

if SearchConf.QUERY_TIMEOUT:
    ...
```

and tests or long running services may temporarily change them with
`SearchConf.override_conf(...)`.
"""


class SearchConf:
    VOXEL_SCALE = TRACEQUERY_VOXEL_SCALE
    QUERY_TIMEOUT = (
        float(TRACEQUERY_QUERY_TIMEOUT) if TRACEQUERY_QUERY_TIMEOUT else None
    )
    MAX_WORKERS = TRACEQUERY_MAX_WORKERS

    @staticmethod
    @contextmanager
    def override_conf(voxel_scale=None, query_timeout=None, max_workers=None):
        old_voxel_scale, old_query_timeout, old_max_workers = (
            SearchConf.VOXEL_SCALE,
            SearchConf.QUERY_TIMEOUT,
            SearchConf.MAX_WORKERS,
        )
        if voxel_scale is not None:
            SearchConf.VOXEL_SCALE = voxel_scale
        if query_timeout is not None:
            SearchConf.QUERY_TIMEOUT = query_timeout
        if max_workers is not None:
            SearchConf.MAX_WORKERS = max_workers
        try:
            yield
        finally:
            (
                SearchConf.VOXEL_SCALE,
                SearchConf.QUERY_TIMEOUT,
                SearchConf.MAX_WORKERS,
            ) = (
                old_voxel_scale,
                old_query_timeout,
                old_max_workers,
            )
