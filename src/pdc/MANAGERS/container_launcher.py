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
Launches the interactive development container.
"""
import os
from typing import List, Optional
from ..MODELS.container_spec import ContainerSpec
from ..RUNNERS.docker_runner import DockerRunner


class ContainerLauncher:
    """
    Starts one container from the dev image with a bind-mounted project
    directory, a fixed hostname and a static address on the dev network.

    Launching is not idempotent: a second launch under the same container
    name fails in the engine and that failure is returned as is.
    """
    def __init__(self, spec: Optional[ContainerSpec] = None,
                 runner: Optional[DockerRunner] = None):
        """
        Initializes the launcher.

        :param spec: Fixed container settings; host_path is supplied per launch.
        :param runner: Runner for docker commands.
        """
        self.spec = spec or ContainerSpec()
        self.runner = runner or DockerRunner()

    def spec_for(self, host_path: str) -> ContainerSpec:
        """
        The container spec for a host directory. The directory is made
        absolute but its contents are not checked.
        """
        return self.spec.model_copy(update={"host_path": os.path.abspath(host_path)})

    @staticmethod
    def run_command(spec: ContainerSpec) -> List[str]:
        """
        Arguments for `docker run`.

        :param spec: The container spec, with host_path set.
        :return: The argument list after the docker executable.
        """
        if not spec.host_path:
            raise ValueError("host_path is required to launch the dev container")

        args = ["run"]
        if spec.interactive:
            args.append("-i")
        if spec.tty:
            args.append("-t")
        args += [
            "--name", spec.name,
            "-v", spec.volume,
            "--hostname", spec.hostname,
            "--network", spec.network,
            "--ip", spec.ip_address,
            "-w", spec.working_dir,
            spec.image,
        ]
        return args

    def launch(self, host_path: str) -> int:
        """
        Starts the container and blocks for the interactive session.

        :param host_path: Host directory holding the project checkouts.
        :return: The engine's exit code.
        """
        spec = self.spec_for(host_path)
        print(f"[launcher] Starting {spec.name} from {spec.image} on {spec.network} ({spec.ip_address})")
        return self.runner.attach(self.run_command(spec))
