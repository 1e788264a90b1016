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
ModelScope hub client.
Downloads model repositories through the `modelscope` command line tool.
"""

from typing import Optional

from ..RUNNERS.command_runner import CommandRunner
from ..exceptions import PreconditionError


class ModelHubClient:
    """
    Client for the ModelScope model hub.
    """

    INSTALL_HINT = 'pip install "modelscope>=1.9.0"'

    def __init__(self, runner: Optional[CommandRunner] = None, executable: str = "modelscope"):
        """
        Initialize the hub client.

        Args:
            runner: Command runner used for the download. A default runner is created if omitted.
            executable: Name or path of the modelscope CLI.
        """
        self.runner = runner or CommandRunner()
        self.executable = executable

    def ensure_available(self) -> None:
        """Raise PreconditionError when the modelscope CLI is not installed."""
        if not self.runner.which(self.executable):
            raise PreconditionError(
                f"Missing required command: {self.executable}. Install it with: {self.INSTALL_HINT}"
            )

    def download(self, model_id: str, local_dir: str) -> None:
        """
        Download a full model repository.

        Args:
            model_id: Hub model id, e.g. 'zhaohb/Qwen3-8B-int4-sym-ov-npu'
            local_dir: Directory the files are written to.
        """
        self.runner.run(
            [self.executable, "download", "--model", model_id, "--local_dir", local_dir],
            capture=False,
        )
