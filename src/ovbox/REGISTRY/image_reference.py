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
Image reference handling.
A reference is the 'name:tag' pair the container runtime resolves to one image,
e.g. 'ollama_openvino_ubuntu24:v1' or 'localhost:5000/ollama_openvino:v1'.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageReference:
    """
    A local image reference.

    Examples:
        - ImageReference("ollama_openvino_ubuntu24") -> ollama_openvino_ubuntu24:latest
        - ImageReference("localhost:5000/ollama", "v2") -> localhost:5000/ollama:v2
    """

    name: str
    tag: str = "latest"

    def __post_init__(self):
        if not self.name:
            raise ValueError("Empty image name")
        if not self.tag:
            raise ValueError("Empty image tag")

    def __str__(self) -> str:
        return f"{self.name}:{self.tag}"
