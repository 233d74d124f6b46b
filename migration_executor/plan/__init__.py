"""Migration plan network validation"""

from .network import NetworkDuplicates, find_mapping_for_nic_ref, validate_network_duplicates
from .validator import network_concerns, nic_network_refs

__all__ = [
    'NetworkDuplicates',
    'find_mapping_for_nic_ref',
    'validate_network_duplicates',
    'network_concerns',
    'nic_network_refs',
]
