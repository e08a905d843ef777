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
Renders an ImageDefinition into a Dockerfile.
"""
import json
import os
from jinja2 import Template
from ..MODELS.image_definition import ImageDefinition

DOCKERFILE_TEMPLATE = """\
FROM {{ image.base_image }}

SHELL ["/bin/bash", "-o", "pipefail", "-c"]
ENV DEBIAN_FRONTEND=noninteractive

# System packages
RUN apt-get update \\
    && apt-get install -y --no-install-recommends \\
{%- for pkg in image.system_packages %}
        {{ pkg }} \\
{%- endfor %}
    && rm -rf /var/lib/apt/lists/*

# Rust toolchain
ENV CARGO_HOME={{ rust.cargo_home }}
RUN curl --proto '=https' --tlsv1.2 -sSf {{ rust.installer_url }} -o /tmp/{{ rust.installer_file }} \\
    && sh /tmp/{{ rust.installer_file }} -y --profile {{ rust.profile }} --default-toolchain {{ rust.default_toolchain }} \\
    && rm /tmp/{{ rust.installer_file }}
ENV PATH={{ rust.bin_dir }}:$PATH

# Node.js runtime
ARG {{ node.build_arg }}={{ node.node_version }}
ENV {{ node.build_arg }}=${{ node.build_arg }}
ENV NVM_DIR={{ node.nvm_dir }}
RUN curl -o- {{ node.installer_url }} | bash \\
    && . $NVM_DIR/nvm.sh \\
    && nvm install ${{ node.build_arg }} \\
    && nvm alias default ${{ node.build_arg }} \\
    && nvm use default
ENV PATH={{ node.bin_dir }}:$PATH

# {{ messaging.name }} {{ messaging.version }}
RUN cd /tmp \\
    && wget -q {{ messaging.url }} \\
{%- if messaging.sha256 %}
    && echo "{{ messaging.sha256 }}  {{ messaging.archive_name }}" | sha256sum -c - \\
{%- endif %}
    && tar -xzf {{ messaging.archive_name }} \\
    && cd {{ messaging.source_dir }} \\
    && ./configure \\
    && make -j"$(nproc)" \\
    && make install \\
    && ldconfig \\
    && cd /tmp \\
    && rm -rf {{ messaging.archive_name }} {{ messaging.source_dir }}

CMD {{ cmd }}
"""


class DockerfileRenderer:
    """
    Produces the Dockerfile for the development image. Every RUN step chains
    its commands with && under pipefail, so the first failing command aborts
    the build.
    """
    def __init__(self):
        self.template = Template(DOCKERFILE_TEMPLATE, keep_trailing_newline=True)

    def render(self, image: ImageDefinition) -> str:
        """
        Renders the Dockerfile content.

        :param image: The image definition.
        :return: Dockerfile text.
        """
        return self.template.render(
            image=image,
            rust=image.rust,
            node=image.node,
            messaging=image.messaging,
            cmd=_exec_form(image.cmd),
        )

    def write(self, image: ImageDefinition, output_dir: str = ".") -> str:
        """
        Writes the Dockerfile into a build context directory.

        :param image: The image definition.
        :param output_dir: The build context directory.
        :return: The path to the written Dockerfile.
        """
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, "Dockerfile")
        with open(path, "w") as f:
            f.write(self.render(image))

        print(f"[renderer] Dockerfile for {image.reference} written to {path}")
        return path


def _exec_form(args) -> str:
    return json.dumps(list(args))
