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
Network management for the named virtual network the dev container joins.

The network is normally provisioned outside this tool; these helpers only
inspect or create it on request.
"""
import ipaddress
from enum import Enum
from typing import Optional
from pydantic import BaseModel
from ..RUNNERS.docker_runner import DockerRunner


class NetworkDriver(str, Enum):
    """
    Network drivers supporting user-assigned addresses.
    """
    BRIDGE = "bridge"
    MACVLAN = "macvlan"
    IPVLAN = "ipvlan"


class DevNetwork(BaseModel):
    """
    A named network with a subnet from which the static address is taken.
    """
    name: str = "patoka-net"
    subnet: str = "172.18.0.0/16"
    driver: NetworkDriver = NetworkDriver.BRIDGE


class NetworkManager:
    """
    Inspects and creates the dev network.
    """
    def __init__(self, runner: Optional[DockerRunner] = None):
        """
        Initializes the network manager.

        :param runner: Runner for docker commands.
        """
        self.runner = runner or DockerRunner()

    @staticmethod
    def validate_address(network: DevNetwork, ip_address: str) -> str:
        """
        Checks that a static address is a usable host address of the subnet.

        :param network: The network the address belongs to.
        :param ip_address: The address to check.
        :return: The normalized address.
        :raises ValueError: If the address is malformed or outside the subnet.
        """
        subnet = ipaddress.ip_network(network.subnet, strict=True)
        address = ipaddress.ip_address(ip_address)
        if address not in subnet:
            raise ValueError(f"Address {ip_address} is not in subnet {network.subnet} of {network.name}")
        if subnet.num_addresses > 2 and address in (subnet.network_address, subnet.broadcast_address):
            raise ValueError(f"Address {ip_address} is reserved in subnet {network.subnet}")
        return str(address)

    def exists(self, name: str) -> bool:
        return self.runner.succeeds(["network", "inspect", name])

    def create(self, network: DevNetwork) -> bool:
        """
        Creates the network unless it already exists.

        :param network: The network to create.
        :return: True if the network was created, False if it already existed.
        :raises DockerError: If the engine refuses the network.
        """
        if self.exists(network.name):
            print(f"[network] {network.name} already exists")
            return False

        self.runner.capture([
            "network", "create",
            "--driver", network.driver.value,
            "--subnet", network.subnet,
            network.name,
        ])
        print(f"[network] Created {network.name} ({network.subnet})")
        return True
