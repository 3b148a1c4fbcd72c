"""
Fixtures shared by every test tree: an in-memory stand-in for the GCS
bucket manager.

Blobs follow the generation semantics the document store relies on:
every write bumps the object's generation, ``if_generation_match=0``
means "must not exist", and a mismatched precondition raises
PreconditionFailed just as the real client does.
"""

import threading

import pytest
from google.api_core.exceptions import NotFound, PreconditionFailed


class FakeBlob:
    def __init__(self, bucket, name):
        self._bucket = bucket
        self.name = name
        self.generation = None

    def download_as_text(self, timeout=None):
        with self._bucket.lock:
            if self.name not in self._bucket.objects:
                raise NotFound(f"{self.name} not found")
            content, self.generation = self._bucket.objects[self.name]
            return content

    def upload_from_string(self, content, content_type=None, if_generation_match=None, timeout=None):
        with self._bucket.lock:
            self._check(if_generation_match)
            self._bucket.next_generation += 1
            self.generation = self._bucket.next_generation
            self._bucket.objects[self.name] = (content, self.generation)

    def delete(self, if_generation_match=None, timeout=None):
        with self._bucket.lock:
            if self.name not in self._bucket.objects:
                raise NotFound(f"{self.name} not found")
            self._check(if_generation_match)
            del self._bucket.objects[self.name]

    def _check(self, if_generation_match):
        if if_generation_match is None:
            return
        _, current = self._bucket.objects.get(self.name, (None, 0))
        if current != if_generation_match:
            raise PreconditionFailed(
                f"conditionNotMet: {self.name} is at generation {current}, "
                f"expected {if_generation_match}"
            )


class FakeBucket:
    def __init__(self):
        self.lock = threading.Lock()
        self.objects = {}  # name -> (content, generation)
        self.next_generation = 0

    def blob(self, name):
        return FakeBlob(self, name)

    def list_blobs(self, prefix="", timeout=None):
        with self.lock:
            names = sorted(n for n in self.objects if n.startswith(prefix))
        return [FakeBlob(self, n) for n in names]


class FakeBucketManager:
    def __init__(self):
        self.bucket = FakeBucket()
        self.init_calls = 0

    def _ensure_initialized(self):
        self.init_calls += 1


@pytest.fixture
def gcs():
    return FakeBucketManager()
