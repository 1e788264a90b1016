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
Resolution of startup settings from .env files and the process environment.
"""
import os
from typing import Dict, List, Mapping, Optional
from dotenv import dotenv_values


class EnvironmentManager:
    """
    Merges environment variables from .env files and the current process.
    """
    def __init__(self, base_dir: str = "."):
        """
        Initializes the environment manager.

        :param base_dir: The base directory for resolving relative paths to .env files.
        """
        self.base_dir = base_dir

    def get_merged_environment(self,
                               env_files: List[str],
                               process_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """
        Loads the given .env files (later files override earlier ones) and
        overlays the process environment, which always wins.

        :param env_files: A list of paths to .env files. Missing files are skipped.
        :param process_env: The process environment; os.environ when omitted.
        :return: A dictionary containing the merged environment variables.
        """
        merged_env: Dict[str, str] = {}

        for env_file in env_files:
            file_path = os.path.join(self.base_dir, env_file)
            if os.path.isfile(file_path):
                for key, value in dotenv_values(file_path).items():
                    if value is not None:
                        merged_env[key] = value

        merged_env.update(os.environ if process_env is None else process_env)
        return merged_env
