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
Parsers for Dockerfiles, extracting instructions and arguments.
"""
import json
import re
from typing import List
from ..MODELS.dockerfile_ast import DockerfileAST, Instruction


class DockerfileParser:
    """
    Parser for Dockerfile instructions.
    """
    def parse(self, dockerfile_path: str) -> DockerfileAST:
        """
        Parses a Dockerfile from a file path.

        Args:
            dockerfile_path (str): Path to the Dockerfile.

        Returns:
            DockerfileAST: The parsed instructions.
        """
        with open(dockerfile_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> DockerfileAST:
        """
        Parses a Dockerfile from a string content.

        Args:
            content (str): Content of the Dockerfile.

        Returns:
            DockerfileAST: The parsed instructions.
        """
        instructions: List[Instruction] = []

        # 1. Remove comments
        content = re.sub(r'^\s*#.*$', '', content, flags=re.MULTILINE)

        # 2. Join line continuations, dropping the indentation of the next line
        content = re.sub(r'\\[ \t]*\n[ \t]*', ' ', content)

        # 3. Instructions start a line, possibly indented
        pattern = re.compile(r'^\s*([A-Za-z]+)\s+(.*)$', re.MULTILINE)

        for match in pattern.finditer(content):
            inst = match.group(1).upper()
            args_str = match.group(2).strip()

            instructions.append(Instruction(
                instruction=inst,
                arguments=self._split_arguments(inst, args_str),
                raw=match.group(0).strip()
            ))

        return DockerfileAST(instructions=instructions)

    @staticmethod
    def _split_arguments(inst: str, args_str: str) -> List[str]:
        # Exec form
        if args_str.startswith('[') and args_str.endswith(']'):
            try:
                return [str(a) for a in json.loads(args_str)]
            except json.JSONDecodeError:
                return [args_str]

        if inst == "ENV":
            if re.match(r'^[^\s=]+=', args_str):
                # One or more KEY=VALUE pairs, values may be quoted
                pairs = re.findall(r'([^\s=]+)=("(?:[^"\\]|\\.)*"|\S*)', args_str)
                return [f"{k}={DockerfileParser._unquote(v)}" for k, v in pairs]
            return args_str.split(None, 1)

        if inst == "ARG":
            return args_str.split()

        return [args_str]

    @staticmethod
    def _unquote(value: str) -> str:
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            return value[1:-1].replace('\\"', '"')
        return value
