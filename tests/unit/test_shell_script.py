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
Unit tests for the launch script converter.
"""
import os
import stat
from pdc.CONVERTERS.to_shell_script import LaunchScriptConverter
from pdc.MODELS.container_spec import ContainerSpec


def test_render():
    content = LaunchScriptConverter(ContainerSpec(), projects=["patoka", "patoka-x"]).render()
    lines = content.splitlines()

    assert lines[0] == "#!/usr/bin/env bash"
    assert "set -e" in lines
    assert "# <host-dir> is expected to contain: patoka, patoka-x" in lines
    assert lines[-1] == (
        'exec docker run -i -t --name patoka-dev -v "$(realpath "$1")":/patoka '
        '--hostname patoka-dev --network patoka-net --ip 172.18.0.10 -w /patoka patoka-dev:latest'
    )


def test_usage_guard():
    content = LaunchScriptConverter(ContainerSpec()).render()
    assert 'if [ "$#" -ne 1 ]; then' in content
    assert "exit 1" in content


def test_convert(tmp_path):
    path = LaunchScriptConverter(ContainerSpec(name="other")).convert(str(tmp_path / "out"))
    assert os.path.basename(path) == "run-dev.sh"
    assert os.stat(path).st_mode & stat.S_IXUSR
    assert "--name other" in open(path).read()
