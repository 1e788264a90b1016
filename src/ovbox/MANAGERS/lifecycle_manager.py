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
Lifecycle management for the Ollama/OpenVINO image and its containers:
status reporting, idempotent builds and interactive runs.
"""
import os
from datetime import datetime
from typing import List

import click

from ..MODELS.lifecycle_config import LifecycleConfig
from ..MODELS.runtime_objects import ContainerSummary
from ..RUNNERS.container_runtime import ContainerRuntime
from ..UTILS import console
from ..UTILS.size_format import human_size
from ..exceptions import CommandFailedError, ContainerExitError, PreconditionError


class LifecycleManager:
    """
    Dispatches status/build/run for one resolved configuration.
    All side effects go through the container runtime.
    """
    def __init__(self, config: LifecycleConfig, runtime: ContainerRuntime):
        """
        Initializes the lifecycle manager.

        :param config: The resolved configuration.
        :param runtime: The container runtime that performs every effect.
        """
        self.config = config
        self.runtime = runtime

    @property
    def image_ref(self):
        return self.config.image_ref

    def dockerfile_exists(self) -> bool:
        return os.path.isfile(self.config.dockerfile_path)

    def status(self):
        """
        Prints runtime, configuration, image and container information.
        Never changes runtime state.
        """
        self.runtime.ensure_available()
        ref = self.image_ref

        console.info("Docker version:")
        click.echo(self.runtime.version())
        console.blank()

        console.info("Configuration:")
        console.detail("Image", ref)
        console.detail("Dockerfile", self.config.dockerfile_path)
        console.detail("Context", self.config.context_dir)
        console.blank()

        if self.dockerfile_exists():
            modified = datetime.fromtimestamp(os.path.getmtime(self.config.dockerfile_path))
            console.info(
                f"Dockerfile found: {self.config.dockerfile_path} "
                f"(modified: {modified:%Y-%m-%d %H:%M:%S})"
            )
        else:
            console.warn(f"Dockerfile not found at path: {self.config.dockerfile_path}")
        console.blank()

        details = self.runtime.inspect_image(ref)
        if details is not None:
            console.info(f"Local image present: {ref}")
            console.detail("Image ID", details.id)
            console.detail("Size", human_size(details.size))
            console.detail("Created", details.created)
        else:
            console.warn(f"Local image NOT present: {ref}")
        console.blank()

        console.info("Containers using image (running):")
        self._print_containers(self._containers_using_image(all_states=False))
        console.blank()
        console.info("Containers using image (all states):")
        self._print_containers(self._containers_using_image(all_states=True))

    def _containers_using_image(self, all_states: bool) -> List[ContainerSummary]:
        # A failed listing is reported but does not fail status
        try:
            return self.runtime.list_containers(ancestor=self.image_ref, all_states=all_states)
        except CommandFailedError as e:
            console.warn(e.message)
            return []

    @staticmethod
    def _print_containers(containers: List[ContainerSummary]):
        if not containers:
            click.echo("  (none)")
            return
        click.echo(f"{'CONTAINER ID':15} {'IMAGE':35} {'STATUS':25} NAMES")
        for c in containers:
            click.echo(f"{c.id:15} {c.image:35} {c.status:25} {c.names}")

    def build(self, force: bool = False, no_cache: bool = False) -> bool:
        """
        Builds the image unless it already exists.

        :param force: Rebuild even if the image exists.
        :param no_cache: Build without the layer cache.
        :return: True if a build ran, False if it was skipped.
        """
        self.runtime.ensure_available()
        ref = self.image_ref

        if not force and self.runtime.image_exists(ref):
            console.info(f"Image already exists: {ref}")
            console.info("Nothing to do. Use '--force' to rebuild.")
            return False

        if not self.dockerfile_exists():
            raise PreconditionError(f"Dockerfile not found: {self.config.dockerfile_path}")

        console.info(f"Building image: {ref}")
        console.info(f"Dockerfile: {self.config.dockerfile_path}")
        console.info(f"Context:    {self.config.context_dir}")

        self.runtime.build_image(
            ref,
            dockerfile=self.config.dockerfile_path,
            context_dir=self.config.context_dir,
            no_cache=no_cache,
        )
        console.info(f"Build completed: {ref}")
        return True

    def run_shell(self):
        """
        Starts an interactive, self-removing container from the image with the
        model volume, Ollama port, accelerator devices and backend environment.

        :raises ContainerExitError: If the session ends with a non-zero status.
        """
        self.runtime.ensure_available()
        ref = self.image_ref

        if not self.runtime.image_exists(ref):
            raise PreconditionError(
                f"Image not found locally: {ref}\nPlease build it first:  ovbox build"
            )

        console.info(f"Starting interactive shell in container from image: {ref}")
        self.runtime.create_volume(self.config.volume_name)
        exit_code = self.runtime.run_interactive(
            ref,
            ports={self.config.port: self.config.port},
            volumes={self.config.volume_name: self.config.mount_path},
            devices=self.config.devices,
            environment=dict(self.config.container_env),
        )
        if exit_code != 0:
            raise ContainerExitError(exit_code)
