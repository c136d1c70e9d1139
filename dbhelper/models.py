from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

CONTAINER_NAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.\-]{0,127}$")
ENV_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")

DDAC_IMAGE = "datastax/ddac"
DDAC_PORT = 9042


class ContainerSpec(BaseModel):
    """What to run: one named container from one image."""

    image: str = Field(..., min_length=1, description="Image repository, e.g. datastax/ddac")
    tag: str = Field("latest", min_length=1)
    name: str = Field(..., description="Container name; the only key used to find an existing container")
    ports: list[int] = Field(default_factory=list, description="TCP ports, bound to the same port on the host")
    volumes: list[str] = Field(default_factory=list, description="hostPath:containerPath bind mounts")
    env: list[str] = Field(default_factory=list, description="KEY=value assignments")
    command: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not CONTAINER_NAME_RE.match(v):
            raise ValueError("Invalid container name. Use letters, digits and _.- starting with a letter or digit.")
        return v

    @field_validator("ports")
    @classmethod
    def _check_ports(cls, v: list[int]) -> list[int]:
        for p in v:
            if not 1 <= p <= 65535:
                raise ValueError(f"Port out of range: {p}")
        return v

    @field_validator("volumes")
    @classmethod
    def _check_volumes(cls, v: list[str]) -> list[str]:
        for desc in v:
            host, sep, target = desc.partition(":")
            if not sep or not host or not target:
                raise ValueError(f"Volume must look like hostPath:containerPath, got {desc!r}")
        return v

    @field_validator("env")
    @classmethod
    def _check_env(cls, v: list[str]) -> list[str]:
        for item in v:
            if not ENV_RE.match(item):
                raise ValueError(f"Environment entry must look like KEY=value, got {item!r}")
        return v

    @property
    def image_ref(self) -> str:
        return f"{self.image}:{self.tag}"

    def port_bindings(self) -> dict[str, tuple[str, int]]:
        # Every exposed port is published on the same host port, all interfaces.
        return {f"{p}/tcp": ("0.0.0.0", p) for p in self.ports}

    def volume_binds(self) -> dict[str, dict[str, str]]:
        binds: dict[str, dict[str, str]] = {}
        for desc in self.volumes:
            host, _, target = desc.partition(":")
            binds[host] = {"bind": target, "mode": "rw"}
        return binds


def ddac_spec() -> ContainerSpec:
    """DataStax Distribution of Apache Cassandra, CQL on 9042."""
    return ContainerSpec(
        image=DDAC_IMAGE,
        tag="latest",
        name="ddac",
        ports=[DDAC_PORT],
        env=["DS_LICENSE=accept"],
    )
