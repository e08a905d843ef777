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
Execution of docker CLI commands.

Nothing here retries or translates engine failures: the exit code and the
engine's own error text are handed back to the caller unchanged.
"""
import shutil
import subprocess
from typing import List


class DockerError(Exception):
    """
    Raised when a docker command exits with a non-zero status.
    """
    def __init__(self, command: List[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"'{' '.join(command)}' exited with status {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)


class DockerNotFoundError(DockerError):
    """
    Raised when the docker executable is not on PATH.
    """
    def __init__(self, executable: str):
        super().__init__([executable], 127, f"{executable} executable not found")


class DockerRunner:
    """
    Runs docker subcommands, either attached to the caller's terminal or
    with captured output.
    """
    def __init__(self, executable: str = "docker"):
        """
        Initializes the runner.

        Args:
            executable (str): Name or path of the docker CLI.
        """
        self.executable = executable

    def command(self, *args: str) -> List[str]:
        return [self.executable, *args]

    def _resolve(self) -> str:
        path = shutil.which(self.executable)
        if path is None:
            raise DockerNotFoundError(self.executable)
        return path

    def attach(self, args: List[str]) -> int:
        """
        Runs a docker subcommand with the caller's stdin/stdout/stderr and
        blocks until it exits.

        Args:
            args (List[str]): Arguments after the docker executable.

        Returns:
            int: The docker exit code.
        """
        command = [self._resolve(), *args]
        print(f"[docker] {' '.join(self.command(*args))}")
        # Avoid shell=True for security reasons (CWE-78)
        completed = subprocess.run(command, shell=False)
        return completed.returncode

    def capture(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """
        Runs a docker subcommand and captures its output.

        Args:
            args (List[str]): Arguments after the docker executable.
            check (bool): Raise DockerError on a non-zero exit.

        Returns:
            subprocess.CompletedProcess: The finished process.
        """
        command = [self._resolve(), *args]
        completed = subprocess.run(command, shell=False, capture_output=True, text=True)
        if check and completed.returncode != 0:
            raise DockerError(self.command(*args), completed.returncode, completed.stderr)
        return completed

    def succeeds(self, args: List[str]) -> bool:
        """
        True when the docker subcommand exits with status 0.
        """
        return self.capture(args, check=False).returncode == 0

    def output(self, args: List[str]) -> str:
        return self.capture(args).stdout.strip()
