from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

import docker
from docker.errors import APIError, DockerException, ImageNotFound
from requests.exceptions import RequestException

from .events import log_event
from .models import ContainerSpec
from .settings import Settings, settings as default_settings


ENGINE_HINTS = (
    "Unable to contact docker, make sure docker is up and try again.",
    "If docker is installed make sure this user has access to the docker group.",
    "$ sudo gpasswd -a ${USER} docker && newgrp docker",
)


class DockerHelperError(RuntimeError):
    """Fatal for the session: the caller should abort its test run."""


class EngineUnavailableError(DockerHelperError):
    pass


class ImageUnavailableError(DockerHelperError):
    pass


@dataclass(frozen=True)
class ContainerRef:
    id: str
    name: str


def _report_engine_failure(exc: Exception) -> None:
    log_event("ERROR", f"Docker engine call failed: {type(exc).__name__}: {exc}")
    for line in ENGINE_HINTS:
        log_event("ERROR", line)


@contextmanager
def engine_call() -> Iterator[None]:
    """Turn any engine communication failure into EngineUnavailableError (hint logged)."""
    try:
        yield
    except (DockerException, RequestException) as e:
        _report_engine_failure(e)
        raise EngineUnavailableError(" ".join(ENGINE_HINTS)) from e


def make_client(cfg: Settings | None = None) -> docker.DockerClient:
    cfg = cfg or default_settings
    with engine_call():
        return docker.from_env(timeout=int(cfg.engine_timeout_s))


def list_containers(client: docker.DockerClient, name: str, status: str) -> list[Any]:
    """Containers in `status` named exactly `name`.

    The engine's name filter matches substrings, so results are re-checked here.
    """
    with engine_call():
        found = client.containers.list(all=True, filters={"status": status, "name": name})
    return [c for c in found if c.name == name]


def remove_container(container: Any) -> None:
    log_event("INFO", f"Removing exited container: {container.id}", container=container.name)
    with engine_call():
        container.remove()


def engine_info(client: docker.DockerClient) -> dict[str, Any]:
    with engine_call():
        info = client.info()
    log_event("DEBUG", f"Docker engine {info.get('ServerVersion', '?')} on {info.get('OperatingSystem', '?')}")
    return info


def image_present(client: docker.DockerClient, ref: str) -> bool:
    with engine_call():
        return len(client.images.list(name=ref)) > 0


def ensure_image(client: docker.DockerClient, image: str, tag: str) -> None:
    """Pull `image:tag` if it is not available locally; blocks until the pull finishes."""
    ref = f"{image}:{tag}"
    if image_present(client, ref):
        log_event("DEBUG", "Image found locally", image=ref)
        return

    log_event("INFO", "Pulling image", image=ref)
    msg = f"Image {ref} not found, unable to automatically pull image. Check `docker images`"
    # Registry refusals mean the image is unavailable; anything else is the engine itself.
    with engine_call():
        try:
            client.images.pull(image, tag=tag)
        except (ImageNotFound, APIError) as e:
            log_event("ERROR", f"Pull failed: {e}", image=ref)
            raise ImageUnavailableError(msg) from e

    if not image_present(client, ref):
        log_event("ERROR", msg, image=ref)
        raise ImageUnavailableError(msg)


def create_container(client: docker.DockerClient, spec: ContainerSpec) -> ContainerRef:
    kwargs: dict[str, Any] = {
        "name": spec.name,
        "ports": spec.port_bindings(),
        "volumes": spec.volume_binds(),
        "publish_all_ports": True,
        "detach": True,
    }
    if spec.env:
        kwargs["environment"] = list(spec.env)
    if spec.command:
        kwargs["command"] = list(spec.command)

    with engine_call():
        container = client.containers.create(spec.image_ref, **kwargs)
    log_event("INFO", f"Created container {container.id}", container=spec.name, image=spec.image_ref)
    return ContainerRef(id=container.id, name=spec.name)


def start_container(client: docker.DockerClient, container_id: str) -> None:
    with engine_call():
        client.containers.get(container_id).start()


def stop_container(client: docker.DockerClient, container_id: str) -> None:
    # Stop errors propagate untouched.
    client.containers.get(container_id).stop()
