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
Builds the development image with the container engine and verifies the
toolchains inside it.
"""
import re
import tempfile
from typing import Dict, List, Optional
from pydantic import BaseModel
from .dockerfile_renderer import DockerfileRenderer
from ..MODELS.image_definition import ImageDefinition, NodeToolchain
from ..RUNNERS.docker_runner import DockerError, DockerRunner


class BuildError(DockerError):
    """
    Raised when `docker build` fails. No partial image is kept or reused.
    """


class VerificationError(DockerError):
    """
    Raised when a toolchain inside the image is missing or reports an
    unexpected version.
    """


class VerificationReport(BaseModel):
    """
    Versions reported by the toolchains inside a built image.
    """
    image: str
    versions: Dict[str, str] = {}

    def node_version(self) -> Optional[str]:
        reported = self.versions.get("node")
        if reported is None:
            return None
        match = re.search(r'v?(\d+\.\d+\.\d+)', reported)
        return match.group(1) if match else None


TOOL_COMMANDS: Dict[str, List[str]] = {
    "rustc": ["rustc", "--version"],
    "cargo": ["cargo", "--version"],
    "node": ["node", "--version"],
}


class ImageBuilder:
    """
    Drives `docker build` and post-build checks for an ImageDefinition.
    """
    def __init__(self, runner: Optional[DockerRunner] = None,
                 renderer: Optional[DockerfileRenderer] = None):
        """
        Initializes the ImageBuilder.

        :param runner: Runner for docker commands.
        :param renderer: Renderer producing the Dockerfile.
        """
        self.runner = runner or DockerRunner()
        self.renderer = renderer or DockerfileRenderer()

    def build_command(self, image: ImageDefinition, context_dir: str,
                      node_version: Optional[str] = None) -> List[str]:
        """
        Arguments for `docker build`. The Node build argument is only passed
        when overriding the default pinned in the Dockerfile.
        """
        args = ["build", "-t", image.reference]
        if node_version:
            # the Dockerfile adds the "v" itself when building the nvm bin path
            version = NodeToolchain(node_version=node_version).node_version
            args += ["--build-arg", f"{image.node.build_arg}={version}"]
        args.append(context_dir)
        return args

    def build(self, image: ImageDefinition, node_version: Optional[str] = None,
              context_dir: Optional[str] = None) -> str:
        """
        Renders the Dockerfile into a build context and builds the image.

        :param image: The image definition.
        :param node_version: Optional override for the Node.js build argument.
        :param context_dir: Build context; a temporary directory when omitted.
        :return: The image reference.
        :raises BuildError: If the engine reports a failure.
        """
        if context_dir is None:
            with tempfile.TemporaryDirectory(prefix="pdc-build-") as tmp:
                return self._build_in(image, tmp, node_version)
        return self._build_in(image, context_dir, node_version)

    def _build_in(self, image: ImageDefinition, context_dir: str,
                  node_version: Optional[str]) -> str:
        self.renderer.write(image, context_dir)
        args = self.build_command(image, context_dir, node_version)

        print(f"[builder] Building {image.reference}")
        returncode = self.runner.attach(args)
        if returncode != 0:
            raise BuildError(self.runner.command(*args), returncode)

        print(f"[builder] Built {image.reference}")
        return image.reference

    def exists(self, reference: str) -> bool:
        return self.runner.succeeds(["image", "inspect", reference])

    def verify(self, reference: str, expected_node_version: str) -> VerificationReport:
        """
        Runs the toolchain version commands in throwaway containers.

        :param reference: The image to check.
        :param expected_node_version: The Node.js version the image must report.
        :return: The collected versions.
        :raises VerificationError: If a tool fails or Node reports another version.
        """
        report = VerificationReport(image=reference)
        for tool, command in TOOL_COMMANDS.items():
            args = ["run", "--rm", reference, *command]
            try:
                report.versions[tool] = self.runner.output(args)
            except DockerError as e:
                raise VerificationError(e.command, e.returncode, e.stderr) from e
            print(f"[builder] {tool}: {report.versions[tool]}")

        expected = expected_node_version.lstrip("v")
        if report.node_version() != expected:
            raise VerificationError(
                self.runner.command("run", "--rm", reference, *TOOL_COMMANDS["node"]),
                1,
                f"expected node v{expected}, image reports {report.versions.get('node')}",
            )
        return report
