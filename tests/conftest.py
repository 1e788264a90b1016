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
Shared fixtures: in-memory doubles for the container runtime and the model hub.
"""
import os
from typing import Dict, List, Optional, Sequence

import pytest

from ovbox.MODELS.runtime_objects import ContainerSummary, ImageDetails
from ovbox.REGISTRY.image_reference import ImageReference
from ovbox.RUNNERS.container_runtime import ContainerRuntime
from ovbox.exceptions import CommandFailedError, PreconditionError, RuntimeUnreachableError

MUTATING_CALLS = {"build_image", "create_volume", "run_interactive", "exec", "copy_to"}


class FakeRuntime(ContainerRuntime):
    """Records calls and keeps images, containers and volumes in memory."""

    def __init__(self):
        self.reachable = True
        self.build_exit_code = 0
        self.run_exit_code = 0
        self.list_exit_code = 0
        self.images: Dict[str, ImageDetails] = {}
        self.containers: List[ContainerSummary] = []
        self.stopped: List[str] = []
        self.volumes = set()
        self.calls = []

    def add_image(self, reference: str, size: int = 1610612736):
        self.images[reference] = ImageDetails(
            id="sha256:" + "ab" * 32, size=size, created="2026-10-18T09:30:00Z"
        )

    def add_container(self, summary: ContainerSummary, running: bool = True):
        self.containers.append(summary)
        if not running:
            self.stopped.append(summary.id)

    def mutations(self):
        return [call for call in self.calls if call[0] in MUTATING_CALLS]

    def called(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def ensure_available(self) -> None:
        self.calls.append(("ensure_available",))
        if not self.reachable:
            raise RuntimeUnreachableError(
                "Docker daemon not reachable. Ensure Docker Desktop/daemon is running "
                "and you have permission."
            )

    def version(self) -> str:
        self.calls.append(("version",))
        return "Docker version 27.3.1, build ce12230"

    def inspect_image(self, ref: ImageReference) -> Optional[ImageDetails]:
        self.calls.append(("inspect_image", str(ref)))
        return self.images.get(str(ref))

    def list_containers(self, ancestor=None, all_states=False) -> List[ContainerSummary]:
        self.calls.append(("list_containers", str(ancestor) if ancestor else None, all_states))
        if self.list_exit_code:
            raise CommandFailedError(["docker", "ps", "--format", "{{json .}}"], self.list_exit_code)
        result = []
        for c in self.containers:
            if ancestor is not None and c.image != str(ancestor):
                continue
            if not all_states and c.id in self.stopped:
                continue
            result.append(c)
        return result

    def build_image(self, ref, dockerfile, context_dir, no_cache=False) -> None:
        self.calls.append(("build_image", str(ref), dockerfile, context_dir, no_cache))
        if self.build_exit_code:
            raise CommandFailedError(
                ["docker", "build", "-t", str(ref), "-f", dockerfile, context_dir],
                self.build_exit_code,
            )
        self.add_image(str(ref))

    def create_volume(self, name: str) -> None:
        self.calls.append(("create_volume", name))
        self.volumes.add(name)

    def run_interactive(self, ref, ports, volumes, devices, environment) -> int:
        self.calls.append(("run_interactive", str(ref), dict(ports), dict(volumes),
                           tuple(devices), dict(environment)))
        return self.run_exit_code

    def exec(self, container: str, command: Sequence[str], interactive=False, tty=False) -> None:
        self.calls.append(("exec", container, list(command), interactive, tty))

    def copy_to(self, container: str, source: str, dest: str) -> None:
        self.calls.append(("copy_to", container, source, dest))


class FakeHub:
    """Model hub double that writes a tiny model directory on download."""

    def __init__(self):
        self.available = True
        self.downloads = []

    def ensure_available(self) -> None:
        if not self.available:
            raise PreconditionError("Missing required command: modelscope.")

    def download(self, model_id: str, local_dir: str) -> None:
        self.downloads.append((model_id, local_dir))
        os.makedirs(local_dir, exist_ok=True)
        with open(os.path.join(local_dir, "openvino_model.xml"), "w") as f:
            f.write("<net/>")


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def fake_hub():
    return FakeHub()
