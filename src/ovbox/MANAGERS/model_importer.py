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
Import of packed models into a running Ollama container.
"""
import os
import posixpath
import shlex
from typing import List

import click
from jinja2 import Environment

from ..MODELS.lifecycle_config import OLLAMA_PORT
from ..MODELS.model_package import MODELFILE_NAME, ImportOptions, alias_from_tarball
from ..MODELS.runtime_objects import ContainerSummary
from ..RUNNERS.container_runtime import ContainerRuntime
from ..UTILS import console
from ..exceptions import PreconditionError

OLLAMA_HOST = f"127.0.0.1:{OLLAMA_PORT}"

# Every interpolated value goes through the shell-quoting filter `q`
CREATE_SCRIPT = """\
set -Eeuo pipefail
if [ -f /opt/intel/openvino/setupvars.sh ]; then source /opt/intel/openvino/setupvars.sh || true; fi
export OLLAMA_HOST={{ host | q }}
cd {{ model_dir | q }}
echo Running: ollama create {{ alias | q }} -f {{ modelfile | q }}
ollama create {{ alias | q }} -f {{ modelfile | q }}
echo "Model created."
ollama list | awk -v name={{ alias | q }} 'NR == 1 || index($1, name) == 1' || true
"""

TEST_SCRIPT = """\
set -Eeuo pipefail
export OLLAMA_HOST={{ host | q }}
echo "Quick test prompt..."
ollama run {{ alias | q }} -p "Hello! Answer briefly in one sentence."
"""


class ModelImporter:
    """
    Copies a model tarball and its Modelfile into a container and registers it
    with the Ollama server running there.
    """
    def __init__(self, runtime: ContainerRuntime):
        """
        Initializes the importer.

        :param runtime: The container runtime used for exec and copy.
        """
        self.runtime = runtime
        env = Environment()
        env.filters["q"] = shlex.quote
        self.create_template = env.from_string(CREATE_SCRIPT)
        self.test_template = env.from_string(TEST_SCRIPT)

    @staticmethod
    def find_candidates(containers: List[ContainerSummary]) -> List[ContainerSummary]:
        """Running containers that look like an Ollama server."""
        return [
            c for c in containers
            if c.matches("ollama") or str(OLLAMA_PORT) in c.ports
        ]

    def detect_container(self) -> str:
        running = self.runtime.list_containers()
        candidates = self.find_candidates(running)
        if len(candidates) == 1:
            return candidates[0].id

        if not candidates:
            lines = ["No suitable running container found. Pass --container NAME_OR_ID."]
            shown = running
        else:
            lines = ["Multiple possible containers found. Please specify one with --container:"]
            shown = candidates
        lines.extend(f"  {c.id}  {c.names}  {c.image}  {c.ports}" for c in shown)
        raise PreconditionError("\n".join(lines))

    def import_model(self, options: ImportOptions) -> str:
        """
        Imports a packed model.

        :param options: Import options.
        :return: The Ollama model name the package was registered as.
        """
        self.runtime.ensure_available()

        tar_path = os.path.realpath(options.tar_path)
        if not os.path.isfile(tar_path):
            raise PreconditionError(f"Tar not found: {tar_path}")
        modelfile_path = os.path.join(os.path.dirname(tar_path), MODELFILE_NAME)
        if not os.path.isfile(modelfile_path):
            raise PreconditionError(f"Modelfile not found next to tar: {modelfile_path}")

        alias = options.alias or alias_from_tarball(os.path.basename(tar_path))
        if not alias:
            raise PreconditionError(f"Cannot derive a model name from {tar_path}; pass --alias.")
        container = options.container or self.detect_container()
        model_dir = posixpath.join(options.dest, alias)

        console.info(f"Using container: {container}")
        console.info(f"Alias (ollama model name): {alias}")
        console.info(f"Destination in container:  {options.dest}")

        self.runtime.exec(container, ["mkdir", "-p", model_dir])
        self.runtime.copy_to(container, tar_path, model_dir + "/")
        self.runtime.copy_to(container, modelfile_path, model_dir + "/")

        script = self.create_template.render(
            host=OLLAMA_HOST, model_dir=model_dir, alias=alias, modelfile=MODELFILE_NAME
        )
        self.runtime.exec(container, ["bash", "-lc", script], interactive=True)

        if options.run:
            script = self.test_template.render(host=OLLAMA_HOST, alias=alias)
            self.runtime.exec(container, ["bash", "-lc", script], tty=True)

        console.blank()
        console.info("Done. You can now use the model from your host, e.g.:")
        click.echo(
            f"  curl http://localhost:{OLLAMA_PORT}/api/generate "
            f"-d '{{\"model\":\"{alias}\",\"prompt\":\"Hello\"}}'"
        )
        return alias
