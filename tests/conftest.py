import logging
import socket

import pytest
from docker.errors import APIError, ImageNotFound
from requests.exceptions import ConnectionError as RequestsConnectionError


class FakeContainer:
    def __init__(self, client, cid, name, status="created", **config):
        self.client = client
        self.id = cid
        self.name = name
        self.status = status
        self.config = config

    def start(self):
        self.client.calls.append(("start", self.id))
        self.status = "running"

    def stop(self):
        self.client.calls.append(("stop", self.id))
        self.status = "exited"

    def remove(self):
        self.client.calls.append(("remove", self.id))
        del self.client.containers.by_id[self.id]


class FakeContainerCollection:
    def __init__(self, client):
        self.client = client
        self.by_id = {}
        self.list_error = None
        self._seq = 0

    def add(self, name, status, cid=None):
        self._seq += 1
        cid = cid or f"{name}-{self._seq:04d}"
        self.by_id[cid] = FakeContainer(self.client, cid, name, status=status)
        return self.by_id[cid]

    def list(self, all=False, filters=None):
        if self.list_error is not None:
            raise self.list_error
        filters = filters or {}
        out = []
        for c in self.by_id.values():
            if "status" in filters and c.status != filters["status"]:
                continue
            # Engine name filters match substrings.
            if "name" in filters and filters["name"] not in c.name:
                continue
            out.append(c)
        return out

    def get(self, cid):
        return self.by_id[cid]

    def create(self, image, **kwargs):
        self.client.calls.append(("create", image, kwargs))
        c = self.add(kwargs["name"], "created")
        c.config = dict(kwargs, image=image)
        return c


class FakeImage:
    def __init__(self, ref):
        self.tags = [ref]


class FakeImageCollection:
    def __init__(self, client):
        self.client = client
        self.local = set()
        self.pull_adds = True
        self.pull_error = None

    def list(self, name=None):
        return [FakeImage(r) for r in self.local if name is None or r == name]

    def pull(self, repository, tag=None):
        self.client.calls.append(("pull", repository, tag))
        if self.pull_error is not None:
            raise self.pull_error
        if self.pull_adds:
            self.local.add(f"{repository}:{tag}")
        return FakeImage(f"{repository}:{tag}")


class FakeDockerClient:
    """In-memory stand-in for docker.DockerClient covering the calls the helper makes."""

    def __init__(self):
        self.calls = []
        self.containers = FakeContainerCollection(self)
        self.images = FakeImageCollection(self)
        self.closed = False

    def info(self):
        self.calls.append(("info",))
        return {"ServerVersion": "fake", "OperatingSystem": "test"}

    def close(self):
        self.closed = True

    def side_effects(self):
        return [c[0] for c in self.calls if c[0] in {"remove", "pull", "create", "start", "stop"}]


@pytest.fixture
def fake_client():
    return FakeDockerClient()


@pytest.fixture
def engine_down_error():
    return RequestsConnectionError("Connection aborted: /var/run/docker.sock")


@pytest.fixture
def image_not_found():
    return ImageNotFound("pull access denied")


@pytest.fixture
def api_error():
    return APIError("500 Server Error")


@pytest.fixture
def open_port():
    """A loopback listener; yields its port."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(8)
    try:
        yield srv.getsockname()[1]
    finally:
        srv.close()


@pytest.fixture
def closed_port():
    """A loopback port with nothing listening on it."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture(autouse=True)
def _reset_dbhelper_logger():
    logger = logging.getLogger("dbhelper")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
