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
Builders for turning a ModelScope model into an Ollama model package:
a gzipped tarball of the model directory plus a Modelfile.
"""
import os
import shutil
import tarfile
from typing import Optional

import click
from jinja2 import Template

from ..MODELS.model_package import MODELFILE_NAME, PackOptions
from ..REGISTRY.model_hub_client import ModelHubClient
from ..UTILS import console
from ..exceptions import PreconditionError

MODELFILE_TEMPLATE = """\
FROM {{ tarball }}
ModelType "OpenVINO"
InferDevice "{{ device }}"

# Common generation parameters
PARAMETER num_ctx {{ num_ctx }}
PARAMETER temperature 0.7
PARAMETER top_p 0.95
PARAMETER top_k 50
"""


class ModelPackager:
    """
    Downloads a model from the hub and packs it for `ollama create`.
    """

    def __init__(self, hub: Optional[ModelHubClient] = None, base_dir: str = "."):
        """
        Initializes the packager.

        :param hub: Client used to download models.
        :param base_dir: Directory the tarball, Modelfile and download directory live in.
        """
        self.hub = hub or ModelHubClient()
        self.base_dir = base_dir
        self.template = Template(MODELFILE_TEMPLATE, keep_trailing_newline=True)

    def _path(self, *parts: str) -> str:
        return os.path.join(self.base_dir, *parts)

    def render_modelfile(self, options: PackOptions) -> str:
        return self.template.render(
            tarball=options.tarball_name,
            device=options.device,
            num_ctx=options.num_ctx,
        )

    def pack(self, options: PackOptions) -> str:
        """
        Downloads, tars and describes a model.

        :param options: Packing options.
        :return: Path of the created tarball.
        """
        self.hub.ensure_available()

        safe_base = options.safe_base
        out_dir = self._path(options.out_dir)
        model_dir = os.path.join(out_dir, safe_base)
        tar_path = self._path(options.tarball_name)
        modelfile_path = self._path(MODELFILE_NAME)

        if os.path.exists(model_dir) and not options.force:
            raise PreconditionError(
                f"Model directory already exists: {model_dir}\nUse --force to re-download."
            )
        if os.path.exists(tar_path) and not options.force:
            raise PreconditionError(f"Tar already exists: {tar_path}  (use --force to overwrite)")
        if os.path.exists(modelfile_path) and not options.force:
            raise PreconditionError("Modelfile already exists (use --force to overwrite).")

        os.makedirs(out_dir, exist_ok=True)
        if os.path.exists(model_dir):
            console.info(f"Removing existing model dir: {model_dir}")
            shutil.rmtree(model_dir)

        console.info(f"Downloading ModelScope model: {options.model_id}")
        self.hub.download(options.model_id, model_dir)

        console.info(f"Creating tarball: {tar_path}")
        with tarfile.open(tar_path, "w:gz") as tar:
            tar.add(model_dir, arcname=safe_base)

        with open(modelfile_path, "w") as f:
            f.write(self.render_modelfile(options))

        alias = options.resolved_alias
        console.blank()
        console.info("Done.")
        console.detail("Downloaded", model_dir)
        console.detail("Tarball", tar_path)
        console.detail("Modelfile", modelfile_path)
        console.blank()
        click.echo("Next steps (inside your OpenVINO-Ollama container):")
        click.echo(f"  ollama create {alias} -f {MODELFILE_NAME}")
        click.echo(f"  ollama run {alias} -p 'Hello, OpenVINO!'")
        click.echo(f"Or from the host:  ovbox import {tar_path} --alias {alias}")
        return tar_path
