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
Settings for the dev container tooling: built-in defaults, optionally
overridden from a YAML file.
"""
import os
from typing import Any, Dict, List, Optional
import yaml
from pydantic import BaseModel, Field, model_validator
from ..MODELS.container_spec import DEFAULT_PROJECTS, ContainerSpec
from ..MODELS.image_definition import ImageDefinition
from ..MANAGERS.network_manager import DevNetwork, NetworkManager

SECTIONS = ("image", "container", "network", "projects")


class Settings(BaseModel):
    """
    Everything the CLI needs: the image to build, the container to launch,
    the network it joins and the projects expected under the mount.
    """
    image: ImageDefinition = Field(default_factory=ImageDefinition)
    container: ContainerSpec = Field(default_factory=ContainerSpec)
    network: DevNetwork = Field(default_factory=DevNetwork)
    projects: List[str] = list(DEFAULT_PROJECTS)

    @model_validator(mode="after")
    def check_address(self) -> "Settings":
        if self.container.network != self.network.name:
            raise ValueError(
                f"Container network {self.container.network!r} does not match "
                f"network section {self.network.name!r}"
            )
        NetworkManager.validate_address(self.network, self.container.ip_address)
        return self

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Settings":
        """
        Loads settings, applying overrides from a YAML file if given.

        :param path: Path to a YAML settings file.
        :return: The settings.
        :raises FileNotFoundError: If the file does not exist.
        :raises ValueError: If the file has unknown sections or invalid values.
        """
        if path is None:
            return cls()

        if not os.path.exists(path):
            raise FileNotFoundError(f"Settings file not found: {path}")

        with open(path, 'r') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")

        unknown = set(data) - set(SECTIONS)
        if unknown:
            raise ValueError(f"Unknown settings sections in {path}: {', '.join(sorted(unknown))}")

        return cls.from_overrides(data)

    @classmethod
    def from_overrides(cls, data: Dict[str, Any]) -> "Settings":
        """
        Merges section overrides into the defaults, field by field.
        """
        defaults = cls().model_dump()
        for section, value in data.items():
            if isinstance(value, dict) and isinstance(defaults.get(section), dict):
                defaults[section] = _deep_merge(defaults[section], value)
            else:
                defaults[section] = value

        # Keep the image reference in step with a renamed image
        container = data.get("container") or {}
        if "image" in data and "image" not in container:
            image = ImageDefinition(**defaults["image"])
            defaults["container"]["image"] = image.reference

        # Working directory follows the mount point unless set explicitly
        if "mount_target" in container and "working_dir" not in container:
            defaults["container"]["working_dir"] = None

        # A renamed network carries the container along
        network = data.get("network") or {}
        if "name" in network and "network" not in container:
            defaults["container"]["network"] = network["name"]

        return cls(**defaults)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
