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
Models describing how a hub model is packed and imported into a container.
"""
import re
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_INFER_DEVICE = "AUTO:NPU,CPU"
DEFAULT_NUM_CTX = 8192
DEFAULT_OUT_DIR = "ov_models"
DEFAULT_IMPORT_DEST = "/root/modelpack"
MODELFILE_NAME = "Modelfile"


class PackOptions(BaseModel):
    """
    Options for downloading a model and packing it for Ollama.
    """
    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(min_length=1)
    alias: Optional[str] = None
    device: str = DEFAULT_INFER_DEVICE
    num_ctx: int = Field(default=DEFAULT_NUM_CTX, gt=0)
    out_dir: str = DEFAULT_OUT_DIR
    force: bool = False

    @model_validator(mode="after")
    def check_model_name(self) -> "PackOptions":
        # The name becomes a directory under out_dir that --force removes
        if self.safe_base in ("", ".", ".."):
            raise ValueError(f"model id {self.model_id!r} does not end in a model name")
        return self

    @property
    def safe_base(self) -> str:
        """Last path segment of the model id with '/', ':', '@' and spaces replaced."""
        base = self.model_id.rstrip("/").rsplit("/", 1)[-1]
        return re.sub(r"[/:@ ]", "_", base)

    @property
    def resolved_alias(self) -> str:
        return self.alias or self.safe_base.lower()

    @property
    def tarball_name(self) -> str:
        return f"{self.safe_base}.tar.gz"


class ImportOptions(BaseModel):
    """
    Options for copying a packed model into a container and registering it.
    """
    tar_path: str
    container: Optional[str] = None
    alias: Optional[str] = None
    dest: str = DEFAULT_IMPORT_DEST
    run: bool = False


def alias_from_tarball(filename: str) -> str:
    """
    Derives an Ollama model name from a tarball file name.

    'Qwen3-8B int4.tar.gz' -> 'qwen3-8b-int4'
    """
    name = filename
    for suffix in (".tar.gz", ".tgz"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    name = name.lower()
    name = re.sub(r"[ /:@]+", "-", name)
    return re.sub(r"[^a-z0-9._-]+", "", name)
