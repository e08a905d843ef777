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
Unit tests for the Dockerfile renderer.
"""
import os
from pdc.BUILDERS.dockerfile_renderer import DockerfileRenderer
from pdc.MODELS.image_definition import ImageDefinition, MessagingLibrary
from pdc.PARSERS.dockerfile_parser import DockerfileParser


def _render(image=None):
    content = DockerfileRenderer().render(image or ImageDefinition())
    return content, DockerfileParser().parse_from_string(content)


def test_starts_from_base_image():
    _, ast = _render(ImageDefinition(base_image="debian:bookworm"))
    assert ast.instructions[0].instruction == "FROM"
    assert ast.base_image() == "debian:bookworm"


def test_shell_is_fail_fast():
    _, ast = _render()
    shell = ast.find("SHELL")[0]
    assert shell.arguments == ["/bin/bash", "-o", "pipefail", "-c"]


def test_steps_in_order():
    _, ast = _render()
    steps = ast.run_steps()
    assert len(steps) == 4
    assert "apt-get install" in steps[0]
    assert "rustup-init.sh" in steps[1]
    assert "nvm install" in steps[2]
    assert "./configure" in steps[3]


def test_every_run_step_chained():
    _, ast = _render()
    for step in ast.run_steps():
        assert ";" not in step
        assert " && " in step


def test_system_packages_listed():
    image = ImageDefinition(system_packages=["curl", "libgtk-3-0", "iproute2"])
    _, ast = _render(image)
    apt = ast.run_steps()[0]
    assert "--no-install-recommends curl libgtk-3-0 iproute2 &&" in apt
    assert apt.endswith("rm -rf /var/lib/apt/lists/*")


def test_rust_installer_removed():
    _, ast = _render()
    rust = ast.run_steps()[1]
    assert "-y --profile minimal --default-toolchain stable" in rust
    assert rust.endswith("rm /tmp/rustup-init.sh")


def test_node_build_arg_and_environment():
    _, ast = _render()
    assert ast.build_args() == {"NODE_VERSION": "20.18.1"}
    env = ast.env()
    assert env["NODE_VERSION"] == "$NODE_VERSION"
    assert env["NVM_DIR"] == "/root/.nvm"
    assert env["PATH"].startswith("/root/.nvm/versions/node/v$NODE_VERSION/bin:")


def test_cargo_on_path():
    content, _ = _render()
    assert "ENV PATH=/root/.cargo/bin:$PATH" in content


def test_messaging_library_from_source():
    _, ast = _render()
    zmq = ast.run_steps()[3]
    assert "wget -q https://github.com/zeromq/libzmq/releases/download/v4.3.5/zeromq-4.3.5.tar.gz" in zmq
    assert "make install" in zmq
    assert "ldconfig" in zmq
    assert "sha256sum" not in zmq


def test_checksum_verified_when_set():
    image = ImageDefinition(messaging=MessagingLibrary(sha256="abc123"))
    _, ast = _render(image)
    zmq = ast.run_steps()[3]
    assert 'echo "abc123  zeromq-4.3.5.tar.gz" | sha256sum -c -' in zmq
    assert zmq.index("sha256sum") < zmq.index("tar -xzf")


def test_cmd_exec_form():
    _, ast = _render()
    assert ast.find("CMD")[0].arguments == ["/bin/bash"]


def test_cmd_with_quotes_stays_exec_form():
    image = ImageDefinition(cmd=["/bin/bash", "-c", 'echo "ready" \\ done'])
    _, ast = _render(image)
    assert ast.find("CMD")[0].arguments == ["/bin/bash", "-c", 'echo "ready" \\ done']


def test_write(tmp_path):
    path = DockerfileRenderer().write(ImageDefinition(), str(tmp_path / "ctx"))
    assert path == os.path.join(str(tmp_path / "ctx"), "Dockerfile")
    ast = DockerfileParser().parse(path)
    assert ast.base_image() == "ubuntu:22.04"
