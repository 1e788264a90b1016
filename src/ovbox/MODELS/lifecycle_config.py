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
Configuration for the image/container lifecycle.
"""
from typing import Dict, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict

from ..REGISTRY.image_reference import ImageReference

DEFAULT_IMAGE_NAME = "ollama_openvino_ubuntu24"
DEFAULT_IMAGE_TAG = "v1"
DEFAULT_DOCKERFILE = "Dockerfile"
DEFAULT_CONTEXT_DIR = "."
DEFAULT_VOLUME_NAME = "ollama-models"

OLLAMA_PORT = 11434
OLLAMA_MOUNT_PATH = "/root/.ollama"
DEFAULT_DEVICES = ("/dev/dri:/dev/dri", "/dev/accel/accel0")
DEFAULT_CONTAINER_ENV = {"OLLAMA_INTEL_GPU": "1", "OLLAMA_DEBUG": "1"}

# Environment variable -> field
ENV_OVERRIDES = {
    "IMAGE_NAME": "image_name",
    "IMAGE_TAG": "image_tag",
    "DOCKERFILE": "dockerfile_path",
    "CONTEXT_DIR": "context_dir",
}


def parse_device_list(value: str) -> Tuple[str, ...]:
    """Split a comma separated DEVICES value. An empty value means no devices."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


class LifecycleConfig(BaseModel):
    """
    Resolved settings for one invocation. Immutable once built.
    """
    model_config = ConfigDict(frozen=True)

    image_name: str = DEFAULT_IMAGE_NAME
    image_tag: str = DEFAULT_IMAGE_TAG
    dockerfile_path: str = DEFAULT_DOCKERFILE
    context_dir: str = DEFAULT_CONTEXT_DIR
    volume_name: str = DEFAULT_VOLUME_NAME

    # Run options
    port: int = OLLAMA_PORT
    mount_path: str = OLLAMA_MOUNT_PATH
    devices: Tuple[str, ...] = DEFAULT_DEVICES
    container_env: Dict[str, str] = dict(DEFAULT_CONTAINER_ENV)

    @classmethod
    def from_environment(cls,
                         environ: Mapping[str, str],
                         volume_name: Optional[str] = None) -> "LifecycleConfig":
        """
        Builds a configuration from defaults overlaid with environment values.
        Unset or empty variables keep the default.

        :param environ: Merged environment mapping.
        :param volume_name: Volume name given on the command line, if any.
        :return: The resolved configuration.
        """
        values = {}
        for env_key, field_name in ENV_OVERRIDES.items():
            if environ.get(env_key):
                values[field_name] = environ[env_key]
        if "DEVICES" in environ:
            values["devices"] = parse_device_list(environ["DEVICES"])
        if volume_name:
            values["volume_name"] = volume_name
        return cls(**values)

    @property
    def image_ref(self) -> ImageReference:
        return ImageReference(name=self.image_name, tag=self.image_tag)
