"""NIC-to-NetworkMap resolution and duplicate destination detection"""

from collections import Counter
from typing import Iterable, NamedTuple, Optional, Tuple

from migration_executor.models import MULTUS, POD, NetworkMap, NetworkPair, Ref


class NetworkDuplicates(NamedTuple):
    nad_duplicate: bool
    pod_duplicate: bool


def find_mapping_for_nic_ref(nic_ref: Ref, network_map: Optional[NetworkMap]) -> Tuple[Optional[NetworkPair], bool]:
    """
    Return the NetworkPair whose source matches the NIC reference.

    Only the highest-precedence populated key is compared (id, then type,
    then namespace/name); there is no fallback to a lower tier.
    """
    if network_map is None:
        return None, False
    if nic_ref.id:
        return network_map.find_network(nic_ref.id)
    if nic_ref.type:
        return network_map.find_network_by_type(nic_ref.type)
    if nic_ref.name:
        return network_map.find_network_by_name_and_namespace(nic_ref.namespace, nic_ref.name)
    return None, False


def validate_network_duplicates(nic_refs: Iterable[Ref], network_map: Optional[NetworkMap]) -> NetworkDuplicates:
    """
    Check whether more than one NIC resolves to the pod network, or more
    than one NIC resolves to the same multus NAD.

    NICs without a mapping are ignored.
    """
    if network_map is None:
        return NetworkDuplicates(False, False)

    pod_count = 0
    nad_count = Counter()

    for nic_ref in nic_refs or []:
        pair, found = find_mapping_for_nic_ref(nic_ref, network_map)
        if not found:
            continue
        destination = pair.destination
        if destination.type == POD:
            pod_count += 1
        elif destination.type == MULTUS:
            nad_count[f"{destination.namespace}/{destination.name}"] += 1

    return NetworkDuplicates(
        nad_duplicate=any(count > 1 for count in nad_count.values()),
        pod_duplicate=pod_count > 1,
    )
