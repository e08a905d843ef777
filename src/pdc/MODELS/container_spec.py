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
Models for the development container instance and the host project layout
it mounts.
"""
import os
from typing import List, Optional
from pydantic import BaseModel, model_validator

DEFAULT_PROJECTS = ["patoka", "patoka-x", "patoka-app"]


class ProjectLayout(BaseModel):
    """
    The host directory mounted into the container. It is expected to hold the
    sibling project checkouts, but nothing enforces that.
    """
    host_path: str
    projects: List[str] = list(DEFAULT_PROJECTS)

    def project_paths(self) -> List[str]:
        return [os.path.join(self.host_path, name) for name in self.projects]

    def missing(self) -> List[str]:
        """
        Names of expected project directories absent from the host path.
        """
        return [name for name, path in zip(self.projects, self.project_paths())
                if not os.path.isdir(path)]


class ContainerSpec(BaseModel):
    """
    Everything the launcher passes to `docker run`.
    """
    name: str = "patoka-dev"
    image: str = "patoka-dev:latest"
    host_path: Optional[str] = None
    mount_target: str = "/patoka"
    hostname: str = "patoka-dev"
    network: str = "patoka-net"
    ip_address: str = "172.18.0.10"
    working_dir: Optional[str] = None
    interactive: bool = True
    tty: bool = True

    @model_validator(mode="after")
    def default_working_dir(self) -> "ContainerSpec":
        if self.working_dir is None:
            self.working_dir = self.mount_target
        return self

    @property
    def volume(self) -> str:
        return f"{self.host_path}:{self.mount_target}"
