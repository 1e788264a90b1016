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
Read models for objects owned by the container runtime.
"""
from pydantic import BaseModel


class ImageDetails(BaseModel):
    """
    Facts about a local image as reported by the runtime.
    """
    id: str
    size: int
    created: str


class ContainerSummary(BaseModel):
    """
    One row of a container listing.
    """
    id: str
    image: str
    status: str = ""
    names: str = ""
    ports: str = ""

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match over id, names, image and ports."""
        needle = needle.lower()
        return any(needle in value.lower() for value in (self.id, self.names, self.image, self.ports))
