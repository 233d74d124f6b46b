"""vCenter session, datastore and inventory hierarchy helpers"""

from .client import VSphereClient, datastore_path
from .datacenter import resolve_host_datacenter

__all__ = ['VSphereClient', 'datastore_path', 'resolve_host_datacenter']
