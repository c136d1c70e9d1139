from __future__ import annotations

import docker

from . import docker_ops
from .docker_ops import ContainerRef
from .events import log_event
from .models import DDAC_PORT, ContainerSpec, ddac_spec
from .ports import wait_for_port
from .settings import Settings, settings as default_settings


class ContainerHelper:
    """Keeps one named container running for a test session.

    The engine client is created on first use unless one is passed in; either way the
    helper uses that single client for the whole session.
    """

    def __init__(self, client: docker.DockerClient | None = None, settings: Settings | None = None):
        self.settings = settings or default_settings
        self._client = client
        self._owns_client = client is None
        self._container: ContainerRef | None = None

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            self._client = docker_ops.make_client(self.settings)
        return self._client

    @property
    def container_id(self) -> str | None:
        return self._container.id if self._container else None

    def start(self, spec: ContainerSpec) -> str:
        """Make sure a container named `spec.name` is running and return its id."""
        c = self.client

        # A stopped container with the same name would block creating a new one.
        for stale in docker_ops.list_containers(c, spec.name, status="exited"):
            docker_ops.remove_container(stale)

        running_id = self.adopt(spec.name)
        if running_id is not None:
            log_event("INFO", f"The container {spec.name} is already running", container=spec.name)
            return running_id

        docker_ops.engine_info(c)
        docker_ops.ensure_image(c, spec.image, spec.tag)

        ref = docker_ops.create_container(c, spec)
        docker_ops.start_container(c, ref.id)
        log_event("INFO", f"Started container {ref.id}", container=spec.name, image=spec.image_ref)

        self._container = ref
        return ref.id

    def adopt(self, name: str) -> str | None:
        """Take the handle of an already running container (e.g. started by an earlier process)."""
        running = docker_ops.list_containers(self.client, name, status="running")
        if not running:
            return None
        self._container = ContainerRef(id=running[0].id, name=name)
        return self._container.id

    def stop(self) -> None:
        """Stop the held container, if any. Engine errors propagate."""
        if self._container is None:
            return
        docker_ops.stop_container(self.client, self._container.id)
        log_event("INFO", f"Stopped container {self._container.id}", container=self._container.name)
        self._container = None

    def start_dse(self, wait: bool = True, hostname: str = "localhost") -> tuple[str, bool]:
        """Start the DDAC container and (optionally) wait for CQL to listen.

        Returns (container_id, port_open). `port_open` is True when not waiting.
        """
        container_id = self.start(ddac_spec())
        if not wait:
            return container_id, True
        ok = wait_for_port(
            hostname,
            DDAC_PORT,
            self.settings.wait_timeout_s,
            quiet=True,
            interval_s=self.settings.poll_interval_s,
        )
        return container_id, ok

    def stop_dse(self) -> None:
        self.stop()

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ContainerHelper":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
