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
Converters for generating the standalone launch script.
"""
import os
import shlex
import stat
from jinja2 import Template
from ..MODELS.container_spec import ContainerSpec
from ..MANAGERS.container_launcher import ContainerLauncher

SCRIPT_NAME = "run-dev.sh"

LAUNCH_SCRIPT_TEMPLATE = """\
#!/usr/bin/env bash
# Starts the {{ spec.name }} development container.
# Usage: {{ script_name }} <host-dir>
# <host-dir> is expected to contain: {{ projects | join(', ') }}
set -e

if [ "$#" -ne 1 ]; then
    echo "Usage: $0 <host-dir>" >&2
    exit 1
fi

exec docker {{ args | join(' ') }}
"""


class LaunchScriptConverter:
    """
    Writes a bash equivalent of `pdc launch` that needs nothing but docker.
    """
    def __init__(self, spec: ContainerSpec, projects=None):
        """
        Initializes the converter.

        :param spec: The container spec; host_path is taken from $1 at run time.
        :param projects: Project directories expected under the host path.
        """
        self.spec = spec
        self.projects = projects or []
        self.template = Template(LAUNCH_SCRIPT_TEMPLATE, keep_trailing_newline=True)

    def render(self) -> str:
        spec = self.spec.model_copy(update={"host_path": "__HOST_PATH__"})
        args = [shlex.quote(a) for a in ContainerLauncher.run_command(spec)]
        # Bind the first positional argument, resolved to an absolute path
        args = [a.replace("__HOST_PATH__", '"$(realpath "$1")"') for a in args]
        return self.template.render(
            spec=self.spec,
            script_name=SCRIPT_NAME,
            projects=self.projects,
            args=args,
        )

    def convert(self, output_dir: str = "."):
        """
        Generates the launch script.

        :param output_dir: The directory where the script will be created.
        :return: The path to the script.
        """
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, SCRIPT_NAME)
        with open(path, "w") as f:
            f.write(self.render())
        os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

        print(f"Launch script generated at {path}")
        return path
