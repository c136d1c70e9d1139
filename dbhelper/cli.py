from __future__ import annotations

import argparse
import sys

from pydantic import ValidationError

from .docker_ops import DockerHelperError
from .events import configure_logging, log_event
from .models import DDAC_IMAGE, DDAC_PORT, ContainerSpec
from .ports import wait_for_port
from .reconciler import ContainerHelper
from .settings import settings


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dbhelper", description="Start/stop a database container for integration tests")
    p.add_argument("--log-level", default=settings.log_level)
    sub = p.add_subparsers(dest="cmd", required=True)

    s_up = sub.add_parser("up", help="Start (or reuse) a container and wait for its port")
    s_up.add_argument("--image", default=DDAC_IMAGE)
    s_up.add_argument("--tag", default="latest")
    s_up.add_argument("--name", default="ddac")
    s_up.add_argument("--port", type=int, action="append", dest="ports", help="TCP port to publish (repeatable)")
    s_up.add_argument("--volume", action="append", dest="volumes", default=[], help="hostPath:containerPath")
    s_up.add_argument("--env", action="append", default=None, help="KEY=value (repeatable)")
    s_up.add_argument("--timeout", type=float, default=settings.wait_timeout_s, help="Seconds to wait for the first port")
    s_up.add_argument("--host", default="localhost", help="Host used for the port check")
    s_up.add_argument("--no-wait", action="store_true", help="Do not wait for the port to open")
    s_up.add_argument("command", nargs=argparse.REMAINDER, help="Container command (rest of the line)")

    s_down = sub.add_parser("down", help="Stop the running container with this name")
    s_down.add_argument("--name", default="ddac")

    s_wait = sub.add_parser("wait", help="Wait for a TCP port to accept connections")
    s_wait.add_argument("--host", default="localhost")
    s_wait.add_argument("--port", type=int, required=True)
    s_wait.add_argument("--timeout", type=float, default=settings.wait_timeout_s)
    s_wait.add_argument("--quiet", action="store_true", default=settings.wait_quiet)

    return p


def _spec_from_args(args: argparse.Namespace) -> ContainerSpec:
    ports = args.ports if args.ports is not None else ([DDAC_PORT] if args.image == DDAC_IMAGE else [])
    if args.env is not None:
        env = args.env
    else:
        env = ["DS_LICENSE=accept"] if args.image == DDAC_IMAGE else []
    command = list(args.command or [])
    if command and command[0] == "--":
        command = command[1:]
    return ContainerSpec(
        image=args.image,
        tag=args.tag,
        name=args.name,
        ports=ports,
        volumes=args.volumes,
        env=env,
        command=command,
    )


def _up(args: argparse.Namespace, helper: ContainerHelper) -> int:
    spec = _spec_from_args(args)
    container_id = helper.start(spec)
    print(container_id)
    if args.no_wait or not spec.ports:
        return 0
    ok = wait_for_port(args.host, spec.ports[0], args.timeout, interval_s=settings.poll_interval_s)
    return 0 if ok else 1


def _down(args: argparse.Namespace, helper: ContainerHelper) -> int:
    if helper.adopt(args.name) is None:
        log_event("INFO", "No running container to stop", container=args.name)
        return 0
    helper.stop()
    return 0


def main(argv: list[str] | None = None, helper: ContainerHelper | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.cmd == "wait":
        ok = wait_for_port(args.host, args.port, args.timeout, quiet=args.quiet, interval_s=settings.poll_interval_s)
        return 0 if ok else 1

    helper = helper or ContainerHelper()
    try:
        if args.cmd == "up":
            return _up(args, helper)
        if args.cmd == "down":
            return _down(args, helper)
    except ValidationError as e:
        log_event("ERROR", f"Invalid container spec: {e}")
        return 2
    except DockerHelperError as e:
        log_event("ERROR", str(e))
        return 1
    finally:
        helper.close()

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
