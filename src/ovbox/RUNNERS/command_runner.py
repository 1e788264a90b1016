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
Execution of external commands as explicit argument lists.
"""
import shutil
import subprocess
from typing import Dict, List, Optional, Sequence

from ..exceptions import CommandFailedError, PreconditionError


class CommandRunner:
    """
    Runs external programs and blocks until they exit.
    """
    def __init__(self,
                 env: Optional[Dict[str, str]] = None,
                 working_dir: Optional[str] = None):
        """
        Initializes the command runner.

        Args:
            env (Optional[Dict[str, str]]): Environment for child processes. Inherited when None.
            working_dir (Optional[str]): Directory to start child processes in.
        """
        self.env = env
        self.working_dir = working_dir

    def which(self, program: str) -> Optional[str]:
        """
        Locates a program on PATH.

        Returns:
            Optional[str]: Absolute path of the program, or None if it is not installed.
        """
        path = None
        if self.env is not None:
            path = self.env.get("PATH")
        return shutil.which(program, path=path)

    def run(self,
            command: Sequence[str],
            capture: bool = True,
            check: bool = True) -> subprocess.CompletedProcess:
        """
        Runs a command to completion.

        Args:
            command (Sequence[str]): Command and arguments, one token per element.
            capture (bool): Collect stdout/stderr instead of sharing the terminal.
            check (bool): Raise CommandFailedError on a non-zero exit status.

        Returns:
            subprocess.CompletedProcess: The finished process.
        """
        argv: List[str] = [str(token) for token in command]
        pipe = subprocess.PIPE if capture else None
        try:
            result = subprocess.run(
                argv,
                env=self.env,
                cwd=self.working_dir,
                stdout=pipe,
                stderr=pipe,
                text=True,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
            )
        except FileNotFoundError:
            raise PreconditionError(f"{argv[0]} not found in PATH.")

        if check and result.returncode != 0:
            raise CommandFailedError(argv, result.returncode, output=result.stderr or "")
        return result

    def call(self, command: Sequence[str]) -> int:
        """
        Runs a command attached to the current terminal and returns its exit status
        without raising on failure.
        """
        return self.run(command, capture=False, check=False).returncode
