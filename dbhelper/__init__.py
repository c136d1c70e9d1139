"""Database container helper (dbhelper).

Small test-support helper that:
 - reconciles one named database container (reuse, clean up, pull, create, start)
 - waits for the container's TCP port to accept connections
 - stops the container at the end of the session

The implementation is intentionally small so it can be audited and explained.
"""
from .docker_ops import ContainerRef, DockerHelperError, EngineUnavailableError, ImageUnavailableError
from .models import ContainerSpec, ddac_spec
from .ports import wait_for_port
from .reconciler import ContainerHelper

__all__ = [
    "ContainerHelper",
    "ContainerRef",
    "ContainerSpec",
    "DockerHelperError",
    "EngineUnavailableError",
    "ImageUnavailableError",
    "ddac_spec",
    "wait_for_port",
]
