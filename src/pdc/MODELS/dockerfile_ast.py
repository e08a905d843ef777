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
Models for the Dockerfile Abstract Syntax Tree.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel


class Instruction(BaseModel):
    """
    Represents a single instruction in a Dockerfile.
    """
    instruction: str
    arguments: List[str]
    raw: str


class DockerfileAST(BaseModel):
    """
    Represents the complete Abstract Syntax Tree of a Dockerfile.
    """
    instructions: List[Instruction] = []

    def find(self, name: str) -> List[Instruction]:
        return [i for i in self.instructions if i.instruction == name]

    def base_image(self) -> Optional[str]:
        found = self.find("FROM")
        return found[0].arguments[0] if found else None

    def build_args(self) -> Dict[str, Optional[str]]:
        """
        ARG names mapped to their default, or None when declared without one.
        """
        args: Dict[str, Optional[str]] = {}
        for inst in self.find("ARG"):
            for arg in inst.arguments:
                if "=" in arg:
                    key, value = arg.split("=", 1)
                    args[key] = value
                else:
                    args[arg] = None
        return args

    def env(self) -> Dict[str, str]:
        """
        ENV values in declaration order, later declarations win.
        """
        env: Dict[str, str] = {}
        for inst in self.find("ENV"):
            args = inst.arguments
            if len(args) == 2 and "=" not in args[0]:
                env[args[0]] = args[1]
                continue
            for arg in args:
                if "=" in arg:
                    key, value = arg.split("=", 1)
                    env[key] = value
        return env

    def run_steps(self) -> List[str]:
        return [" ".join(i.arguments) for i in self.find("RUN")]
