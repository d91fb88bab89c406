import sys

import pytest
import pytest_asyncio

from repo_root import REPO_ROOT

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class FakeDecoder:
    """
    In-memory decoder keyed by path.

    A dict value is returned as the decoded fields (filtered to the requested
    ones); an exception value is raised. Unknown paths raise an ENOENT error.
    """

    name = "fake"

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.calls = []

    def decode(self, path, fields):
        self.calls.append((path, frozenset(fields)))
        if path not in self.files:
            raise RuntimeError(f"ENOENT: no such file or directory, open '{path}'")
        value = self.files[path]
        if isinstance(value, BaseException):
            raise value
        if not fields:
            return {}
        return {k: v for k, v in value.items() if k in fields}

    def full_reads(self):
        return [c for c in self.calls if c[1]]


@pytest.fixture
def fake_decoder():
    return FakeDecoder()


@pytest_asyncio.fixture
async def services(fake_decoder):
    from photo_exif_backend.deps import build_services

    svc_res = await build_services(decoder=fake_decoder)
    assert svc_res.ok, svc_res.error
    yield svc_res.data
