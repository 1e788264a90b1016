# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Container runtime interface and its Docker CLI implementation.

Every effectful operation ovbox performs goes through ContainerRuntime.
"""
import json
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from ..MODELS.runtime_objects import ContainerSummary, ImageDetails
from ..REGISTRY.image_reference import ImageReference
from ..exceptions import CommandFailedError, RuntimeUnreachableError
from .command_runner import CommandRunner


class ContainerRuntime(ABC):
    """
    The operations ovbox needs from a Docker-compatible engine.
    """

    @abstractmethod
    def ensure_available(self) -> None:
        """Raises RuntimeUnreachableError unless the runtime can be used."""

    @abstractmethod
    def version(self) -> str:
        """Returns the runtime's version string."""

    @abstractmethod
    def inspect_image(self, ref: ImageReference) -> Optional[ImageDetails]:
        """Returns details of a local image, or None when it does not exist."""

    def image_exists(self, ref: ImageReference) -> bool:
        return self.inspect_image(ref) is not None

    @abstractmethod
    def list_containers(self,
                        ancestor: Optional[ImageReference] = None,
                        all_states: bool = False) -> List[ContainerSummary]:
        """Lists containers, optionally only those created from an image."""

    @abstractmethod
    def build_image(self,
                    ref: ImageReference,
                    dockerfile: str,
                    context_dir: str,
                    no_cache: bool = False) -> None:
        """Builds and tags an image. Raises CommandFailedError on failure."""

    @abstractmethod
    def create_volume(self, name: str) -> None:
        """Creates a named volume. Succeeds if it already exists."""

    @abstractmethod
    def run_interactive(self,
                        ref: ImageReference,
                        ports: Dict[int, int],
                        volumes: Dict[str, str],
                        devices: Sequence[str],
                        environment: Dict[str, str]) -> int:
        """
        Starts a self-removing container attached to the terminal and waits for it.

        :param ports: {host_port: container_port}
        :param volumes: {volume_name: mount_path}
        :return: The container session's exit status.
        """

    @abstractmethod
    def exec(self,
             container: str,
             command: Sequence[str],
             interactive: bool = False,
             tty: bool = False) -> None:
        """Runs a command inside a running container. Raises CommandFailedError on failure."""

    @abstractmethod
    def copy_to(self, container: str, source: str, dest: str) -> None:
        """Copies a host file into a container path."""


class DockerCliRuntime(ContainerRuntime):
    """
    ContainerRuntime backed by the `docker` command line client.
    """

    def __init__(self, runner: Optional[CommandRunner] = None, executable: str = "docker"):
        self.runner = runner or CommandRunner()
        self.executable = executable

    def _cmd(self, *args: str) -> List[str]:
        return [self.executable, *args]

    def ensure_available(self) -> None:
        if not self.runner.which(self.executable):
            raise RuntimeUnreachableError("Docker not found in PATH. Please install Docker.")
        result = self.runner.run(self._cmd("info"), check=False)
        if result.returncode != 0:
            raise RuntimeUnreachableError(
                "Docker daemon not reachable. Ensure Docker Desktop/daemon is running "
                "and you have permission."
            )

    def version(self) -> str:
        result = self.runner.run(self._cmd("--version"), check=False)
        return (result.stdout or "").strip() or "unknown"

    def inspect_image(self, ref: ImageReference) -> Optional[ImageDetails]:
        result = self.runner.run(
            self._cmd("image", "inspect", "--format", "{{json .}}", str(ref)),
            check=False,
        )
        if result.returncode != 0:
            return None
        data = json.loads(result.stdout.strip().splitlines()[0])
        return ImageDetails(
            id=data.get("Id", ""),
            size=int(data.get("Size", 0)),
            created=data.get("Created", ""),
        )

    def list_containers(self,
                        ancestor: Optional[ImageReference] = None,
                        all_states: bool = False) -> List[ContainerSummary]:
        args = ["ps"]
        if all_states:
            args.append("-a")
        if ancestor is not None:
            args.extend(["--filter", f"ancestor={ancestor}"])
        args.extend(["--format", "{{json .}}"])

        result = self.runner.run(self._cmd(*args))
        containers = []
        for line in result.stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            row = json.loads(line)
            containers.append(ContainerSummary(
                id=row.get("ID", ""),
                image=row.get("Image", ""),
                status=row.get("Status", ""),
                names=row.get("Names", ""),
                ports=row.get("Ports", ""),
            ))
        return containers

    def build_image(self,
                    ref: ImageReference,
                    dockerfile: str,
                    context_dir: str,
                    no_cache: bool = False) -> None:
        args = ["build"]
        if no_cache:
            args.append("--no-cache")
        args.extend(["-t", str(ref), "-f", dockerfile, context_dir])
        self.runner.run(self._cmd(*args), capture=False)

    def create_volume(self, name: str) -> None:
        command = self._cmd("volume", "create", name)
        result = self.runner.run(command, check=False)
        if result.returncode != 0 and "already exists" not in (result.stderr or ""):
            raise CommandFailedError(command, result.returncode, output=result.stderr or "")

    def run_interactive(self,
                        ref: ImageReference,
                        ports: Dict[int, int],
                        volumes: Dict[str, str],
                        devices: Sequence[str],
                        environment: Dict[str, str]) -> int:
        args = ["run", "-it", "--rm"]
        for host_port, container_port in ports.items():
            args.extend(["-p", f"{host_port}:{container_port}"])
        for volume, mount_path in volumes.items():
            args.extend(["-v", f"{volume}:{mount_path}"])
        for device in devices:
            args.append(f"--device={device}")
        for key, value in environment.items():
            args.extend(["-e", f"{key}={value}"])
        args.append(str(ref))
        return self.runner.call(self._cmd(*args))

    def exec(self,
             container: str,
             command: Sequence[str],
             interactive: bool = False,
             tty: bool = False) -> None:
        args = ["exec"]
        if tty:
            args.append("-it")
        elif interactive:
            args.append("-i")
        args.append(container)
        args.extend(command)
        self.runner.run(self._cmd(*args), capture=False)

    def copy_to(self, container: str, source: str, dest: str) -> None:
        self.runner.run(self._cmd("cp", source, f"{container}:{dest}"), capture=False)
