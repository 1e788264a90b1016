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
Exceptions raised by ovbox operations.

Operations raise; the CLI turns these into diagnostics and exit statuses.
"""
from typing import Optional, Sequence


class OvboxError(Exception):
    """Base class for all fatal ovbox errors."""

    exit_code = 1

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class PreconditionError(OvboxError):
    """A required file, image, tool or container is missing."""


class RuntimeUnreachableError(PreconditionError):
    """The container runtime is not installed or its daemon does not answer."""


class CommandFailedError(OvboxError):
    """An external command returned a non-zero exit status."""

    def __init__(self, command: Sequence[str], exit_code: int, output: str = ""):
        self.command = list(command)
        self.output = output
        super().__init__(
            f"Command failed (exit {exit_code}) running: {self.command_line}",
            exit_code=exit_code,
        )

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


class ContainerExitError(OvboxError):
    """An interactive container session ended with a non-zero status."""

    def __init__(self, exit_code: int):
        super().__init__(f"docker run exited with status {exit_code}", exit_code=exit_code)
