"""
Pydantic models for NetworkMap references and destinations.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Tuple

# Network destination types.
POD = "pod"
MULTUS = "multus"
IGNORED = "ignored"


class Ref(BaseModel):
    """Source network reference; precedence is id, type, then namespace/name."""
    id: str = ""
    type: str = ""
    namespace: str = ""
    name: str = ""


class DestinationNetwork(BaseModel):
    """Destination network on the target cluster."""
    type: str  # pod, multus, ignored
    namespace: str = ""
    name: str = ""


class NetworkPair(BaseModel):
    source: Ref
    destination: DestinationNetwork


class NetworkMapSpec(BaseModel):
    map: List[NetworkPair] = Field(default_factory=list)


class NetworkMap(BaseModel):
    """Declarative source-to-destination network mapping."""
    name: str = ""
    namespace: str = ""
    spec: NetworkMapSpec = Field(default_factory=NetworkMapSpec)

    def find_network(self, network_id: str) -> Tuple[Optional[NetworkPair], bool]:
        for pair in self.spec.map:
            if pair.source.id == network_id:
                return pair, True
        return None, False

    def find_network_by_type(self, network_type: str) -> Tuple[Optional[NetworkPair], bool]:
        for pair in self.spec.map:
            if pair.source.type == network_type:
                return pair, True
        return None, False

    def find_network_by_name_and_namespace(self, namespace: str, name: str) -> Tuple[Optional[NetworkPair], bool]:
        for pair in self.spec.map:
            if pair.source.namespace == namespace and pair.source.name == name:
                return pair, True
        return None, False
