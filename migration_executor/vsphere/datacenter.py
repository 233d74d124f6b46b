"""
Datacenter resolution for ESXi hosts.

Walks the ManagedEntity parent chain of a HostSystem
(host -> ComputeResource/Cluster -> Folder(s) -> Datacenter).
"""

import http.client
import logging
from typing import Optional

from pyVmomi import vmodl

from migration_executor.config import DATACENTER_MAX_HOPS
from migration_executor.context import OperationContext
from migration_executor.errors import DatacenterNotFoundError, HierarchyLookupError

logger = logging.getLogger(__name__)

DATACENTER_TYPE = 'Datacenter'

# Failures a single property fetch can raise
REMOTE_FAULTS = (vmodl.MethodFault, http.client.HTTPException, OSError)


def entity_type(entity) -> str:
    """WSDL type tag of a managed entity, e.g. 'Datacenter' or 'Folder'"""
    return getattr(entity, '_wsdlName', type(entity).__name__)


def entity_label(entity) -> str:
    """Name of an entity for messages, falling back to its MoRef id"""
    try:
        return entity.name
    except REMOTE_FAULTS:
        return str(getattr(entity, '_moId', entity))


def _fetch_parent(entity, host_name: str):
    try:
        return entity.parent
    except REMOTE_FAULTS as e:
        raise HierarchyLookupError(
            f"failed to retrieve parent of {entity_type(entity)} "
            f"{getattr(entity, '_moId', '?')} for host '{host_name}': {e}",
            host=host_name
        ) from e


def resolve_host_datacenter(host, max_hops: int = DATACENTER_MAX_HOPS,
                            ctx: Optional[OperationContext] = None,
                            host_name: Optional[str] = None):
    """
    Find the Datacenter that owns a host.

    Args:
        host: vim.HostSystem
        max_hops: Upper bound on parent fetches after the host's own parent
        ctx: Operation context (cancellation, deadline, logger)
        host_name: Host name for messages; fetched from the host if omitted

    Returns:
        vim.Datacenter

    Raises:
        HierarchyLookupError: a parent fetch failed remotely
        DatacenterNotFoundError: the chain ended or the hop budget ran out
        OperationCancelled / OperationTimedOut: caller aborted the walk
    """
    ctx = ctx or OperationContext()
    host_name = host_name or entity_label(host)

    ctx.check()
    current = _fetch_parent(host, host_name)
    remaining = max_hops

    while current is not None:
        current_type = entity_type(current)
        ctx.log.debug(f"hierarchy hop: {current_type} {getattr(current, '_moId', '?')}")
        if current_type == DATACENTER_TYPE:
            return current
        if remaining <= 0:
            raise DatacenterNotFoundError(
                f"could not determine datacenter for host '{host_name}': "
                f"no Datacenter within {max_hops} hops",
                host=host_name
            )
        remaining -= 1
        ctx.check()
        current = _fetch_parent(current, host_name)

    raise DatacenterNotFoundError(
        f"could not determine datacenter for host '{host_name}'", host=host_name
    )
