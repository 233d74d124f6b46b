"""
Plan network validation for KubeVirt source VMs.

Reads NIC network references from a VirtualMachine manifest and reports
duplicate-destination concerns against the plan's NetworkMap.
"""

import logging
from typing import Any, Dict, List, Optional

from migration_executor.errors import PlanValidationError
from migration_executor.models import POD, NetworkMap, Ref
from migration_executor.plan.network import validate_network_duplicates

logger = logging.getLogger(__name__)

# Concern definitions reported on the plan
NETWORK_CONCERNS: Dict[str, Dict[str, str]] = {
    'NicsSharePodNetwork': {
        'category': 'Critical',
        'message': 'More than one NIC is mapped to the pod network.',
    },
    'NicsShareNad': {
        'category': 'Critical',
        'message': 'More than one NIC is mapped to the same NetworkAttachmentDefinition.',
    },
}


def nic_network_refs(vm: Dict[str, Any]) -> List[Ref]:
    """
    Build one Ref per network of a VirtualMachine manifest.

    Pod networks become Ref(type="pod"); multus networks become
    Ref(namespace, name) from `networkName`, which is either "ns/name" or a
    bare name in the VM's namespace. Other network sources are skipped.

    Raises:
        PlanValidationError: the manifest has no spec.template
    """
    metadata = vm.get('metadata') or {}
    vm_name = metadata.get('name', '')
    vm_namespace = metadata.get('namespace', '')

    template = (vm.get('spec') or {}).get('template')
    if not template:
        raise PlanValidationError(f"VM {vm_namespace}/{vm_name} has no template spec")

    refs = []
    for network in (template.get('spec') or {}).get('networks') or []:
        if 'pod' in network:
            refs.append(Ref(type=POD))
        elif 'multus' in network:
            network_name = (network.get('multus') or {}).get('networkName', '')
            namespace, sep, name = network_name.partition('/')
            if not sep:
                namespace, name = vm_namespace, network_name
            refs.append(Ref(namespace=namespace, name=name))
        else:
            logger.debug(f"Skipping network {network.get('name')} of VM {vm_namespace}/{vm_name}: no pod or multus source")
    return refs


def network_concerns(vm: Dict[str, Any], network_map: Optional[NetworkMap]) -> List[Dict[str, str]]:
    """
    Duplicate-destination concerns for one VM.

    Returns:
        List of {'label', 'category', 'message'} dicts, empty when the VM's
        NICs map to distinct destinations
    """
    duplicates = validate_network_duplicates(nic_network_refs(vm), network_map)

    concerns = []
    if duplicates.pod_duplicate:
        concerns.append({'label': 'NicsSharePodNetwork', **NETWORK_CONCERNS['NicsSharePodNetwork']})
    if duplicates.nad_duplicate:
        concerns.append({'label': 'NicsShareNad', **NETWORK_CONCERNS['NicsShareNad']})
    return concerns
