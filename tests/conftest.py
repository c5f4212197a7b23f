"""
conftest.py — shared fixtures for the CDP spec backend test suite.

No network access is needed: the Supabase client, the Gemini client and
capture devices are replaced by in-process fakes defined here.

Import-path bootstrapping:
    The repository root is inserted into sys.path so that ``cdpspec.*`` and
    ``cdpspec_backend`` resolve regardless of where pytest is invoked.
"""

import os
import sys
import threading
from types import SimpleNamespace

import pytest

_ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from cdpspec.config import Settings  # noqa: E402
from cdpspec.errors import IdentificationMiss, SpecificationMiss  # noqa: E402
from cdpspec.models import SpecPair  # noqa: E402

TEST_KEY = "test-gemini-key-0123456789"


# ---------------------------------------------------------------------------
# Supabase query-builder fake
# ---------------------------------------------------------------------------

class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.start = 0
        self.end = 0

    def select(self, columns):
        self.client.selects.append(columns)
        return self

    def order(self, column, desc=False):
        self.client.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.start, self.end = start, end
        return self

    def execute(self):
        self.client.range_calls.append((self.start, self.end))
        if self.client.fail_on_call == len(self.client.range_calls):
            raise RuntimeError("connection reset by peer")
        rows = sorted(self.client.rows, key=lambda r: r["model"])
        return SimpleNamespace(data=[dict(r) for r in rows[self.start:self.end + 1]])


class FakeSupabase:
    """Records every ranged read; optionally fails on the N-th request."""

    def __init__(self, rows, fail_on_call=None):
        self.rows = list(rows)
        self.fail_on_call = fail_on_call
        self.range_calls = []
        self.selects = []
        self.orders = []
        self.tables = []

    def table(self, name):
        self.tables.append(name)
        return FakeQuery(self, name)


def make_rows(n):
    # Reverse insertion order so sorting is actually exercised.
    return [
        {"id": i, "model": f"MODEL {i:05d}", "dac": "TDA1541A", "laser": "KSS-151A"}
        for i in reversed(range(n))
    ]


# ---------------------------------------------------------------------------
# Gemini client fake
# ---------------------------------------------------------------------------

class FakeAI:
    """Stand-in for GeminiClient; ``None`` answers become misses."""

    def __init__(self, label=None, specs=None, transcript=None):
        self.label = label
        self.specs = specs
        self.transcript = transcript
        self.identify_calls = []
        self.spec_calls = []
        self.transcribe_calls = []

    def identify_model(self, image):
        self.identify_calls.append(image)
        if self.label is None:
            raise IdentificationMiss("no model detected in image")
        return self.label

    def fetch_specs(self, label):
        self.spec_calls.append(label)
        if self.specs is None:
            raise SpecificationMiss(f"no specifications found for {label}")
        return self.specs

    def transcribe_query(self, audio, mime_type="audio/webm"):
        self.transcribe_calls.append((audio, mime_type))
        if self.transcript is None:
            raise IdentificationMiss("no model name heard")
        return self.transcript


class BlockingAI(FakeAI):
    """Identification blocks until the test releases it."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.started = threading.Event()
        self.proceed = threading.Event()

    def identify_model(self, image):
        self.started.set()
        self.proceed.wait(5)
        return super().identify_model(image)


# ---------------------------------------------------------------------------
# Capture device fake
# ---------------------------------------------------------------------------

class FakeDevice:
    def __init__(self, frame=b"\xff\xd8frame", open_error=None, read_error=None):
        self.frame = frame
        self.open_error = open_error
        self.read_error = read_error
        self.opened = False
        self.released = 0

    def open(self):
        if self.open_error:
            raise self.open_error
        self.opened = True

    def read_frame(self):
        if self.read_error:
            raise self.read_error
        return self.frame

    def release(self):
        self.released += 1


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    """AI available, bundled seed catalog, default match policy."""
    return Settings(gemini_api_key=TEST_KEY, catalog_backend="memory")


@pytest.fixture
def offline_settings():
    """Same catalog, no AI credential."""
    return Settings(gemini_api_key="", catalog_backend="memory")


@pytest.fixture
def rega_specs():
    return SpecPair(dac="CS4328", laser="Sony KSS-213")


@pytest.fixture
def fake_ai(rega_specs):
    return FakeAI(label="Rega Planet", specs=rega_specs, transcript="Denon DCD-1500")
