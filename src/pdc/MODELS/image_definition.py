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
Models describing the development image: base OS, system packages and the
three toolchains installed on top of it.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

BUILD_TOOLING = [
    "build-essential",
    "pkg-config",
    "autoconf",
    "automake",
    "libtool",
    "libssl-dev",
    "ca-certificates",
    "curl",
    "wget",
    "git",
]

# Shared libraries needed by the headless browser plugin, unused by the build itself.
GUI_LIBRARIES = [
    "libasound2",
    "libatk1.0-0",
    "libatk-bridge2.0-0",
    "libcups2",
    "libdrm2",
    "libgbm1",
    "libgtk-3-0",
    "libnss3",
    "libx11-xcb1",
    "libxcomposite1",
    "libxdamage1",
    "libxrandr2",
    "libxss1",
    "libxtst6",
]

NETWORK_TOOLS = [
    "iputils-ping",
    "iproute2",
    "net-tools",
    "dnsutils",
    "netcat-openbsd",
]


class RustToolchain(BaseModel):
    """
    Rust toolchain installed through rustup.
    """
    installer_url: str = "https://sh.rustup.rs"
    installer_file: str = "rustup-init.sh"
    profile: str = "minimal"
    default_toolchain: str = "stable"
    cargo_home: str = "/root/.cargo"

    @property
    def bin_dir(self) -> str:
        return f"{self.cargo_home}/bin"


class NodeToolchain(BaseModel):
    """
    Node.js runtime installed through nvm. The runtime version is a build
    argument whose default is pinned here.
    """
    nvm_version: str = "v0.40.1"
    nvm_dir: str = "/root/.nvm"
    node_version: str = "20.18.1"
    build_arg: str = "NODE_VERSION"

    @field_validator("node_version")
    @classmethod
    def strip_prefix(cls, value: str) -> str:
        # nvm accepts both forms, the image layout only the bare one
        return value[1:] if value.startswith("v") else value

    @property
    def installer_url(self) -> str:
        return f"https://raw.githubusercontent.com/nvm-sh/nvm/{self.nvm_version}/install.sh"

    @property
    def bin_dir(self) -> str:
        return f"{self.nvm_dir}/versions/node/v${self.build_arg}/bin"


class MessagingLibrary(BaseModel):
    """
    ZeroMQ, compiled from a pinned release tarball.
    """
    name: str = "zeromq"
    version: str = "4.3.5"
    url_template: str = "https://github.com/zeromq/libzmq/releases/download/v{version}/{archive}"
    sha256: Optional[str] = None

    @property
    def source_dir(self) -> str:
        return f"{self.name}-{self.version}"

    @property
    def archive_name(self) -> str:
        return f"{self.source_dir}.tar.gz"

    @property
    def url(self) -> str:
        return self.url_template.format(version=self.version, archive=self.archive_name)


class ImageDefinition(BaseModel):
    """
    The complete definition of the development image.
    """
    name: str = "patoka-dev"
    tag: str = "latest"
    base_image: str = "ubuntu:22.04"

    system_packages: List[str] = Field(
        default_factory=lambda: BUILD_TOOLING + GUI_LIBRARIES + NETWORK_TOOLS
    )

    rust: RustToolchain = Field(default_factory=RustToolchain)
    node: NodeToolchain = Field(default_factory=NodeToolchain)
    messaging: MessagingLibrary = Field(default_factory=MessagingLibrary)

    cmd: List[str] = ["/bin/bash"]

    @field_validator("system_packages")
    @classmethod
    def dedupe_packages(cls, packages: List[str]) -> List[str]:
        seen = set()
        ordered = []
        for pkg in packages:
            if pkg not in seen:
                seen.add(pkg)
                ordered.append(pkg)
        return ordered

    @property
    def reference(self) -> str:
        return f"{self.name}:{self.tag}"

    def default_build_args(self) -> Dict[str, str]:
        """
        Build arguments together with the defaults baked into the Dockerfile.
        """
        return {self.node.build_arg: self.node.node_version}
