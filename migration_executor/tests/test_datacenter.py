import threading
import unittest

from migration_executor.context import OperationContext
from migration_executor.errors import (
    DatacenterNotFoundError,
    HierarchyLookupError,
    OperationCancelled,
)
from migration_executor.tests.fakes import FakeEntity, build_chain
from migration_executor.vsphere.datacenter import entity_type, resolve_host_datacenter


class ResolveHostDatacenterTests(unittest.TestCase):
    def test_host_directly_under_datacenter(self):
        fetches = []
        host = build_chain(["HostSystem", "Datacenter", "Folder"], fetches)

        dc = resolve_host_datacenter(host)

        self.assertEqual(entity_type(dc), "Datacenter")
        self.assertEqual(fetches, ["hostsystem-0"])

    def test_walks_cluster_and_folders_in_n_steps(self):
        fetches = []
        host = build_chain(
            ["HostSystem", "ClusterComputeResource", "Folder", "Folder", "Datacenter", "Folder"],
            fetches,
        )

        dc = resolve_host_datacenter(host)

        self.assertEqual(dc._moId, "datacenter-4")
        # one fetch per edge between the host and the datacenter
        self.assertEqual(len(fetches), 4)

    def test_chain_without_datacenter_fails(self):
        host = build_chain(["HostSystem", "ClusterComputeResource", "Folder"])

        with self.assertRaises(DatacenterNotFoundError) as cm:
            resolve_host_datacenter(host)

        self.assertIn("could not determine datacenter", str(cm.exception))
        self.assertEqual(cm.exception.host, "hostsystem-0")

    def test_host_without_parent_fails(self):
        host = FakeEntity("HostSystem", "host-1")

        with self.assertRaises(DatacenterNotFoundError):
            resolve_host_datacenter(host)

    def test_cyclic_hierarchy_stops_at_hop_budget(self):
        fetches = []
        folder_a = FakeEntity("Folder", "group-a", fetches=fetches)
        folder_b = FakeEntity("Folder", "group-b", parent=folder_a, fetches=fetches)
        folder_a._parent = folder_b
        host = FakeEntity("HostSystem", "host-1", parent=folder_a, fetches=fetches)

        with self.assertRaises(DatacenterNotFoundError):
            resolve_host_datacenter(host, max_hops=5)

        self.assertEqual(len(fetches), 6)

    def test_intermediate_fetch_failure_is_raised_not_fatal(self):
        broken = FakeEntity("Folder", "group-x", parent_error=ConnectionResetError("reset by peer"))
        cluster = FakeEntity("ClusterComputeResource", "domain-c1", parent=broken)
        host = FakeEntity("HostSystem", "host-1", name="esx01", parent=cluster)

        with self.assertRaises(HierarchyLookupError) as cm:
            resolve_host_datacenter(host)

        self.assertEqual(cm.exception.host, "esx01")
        self.assertIn("group-x", str(cm.exception))
        self.assertIsInstance(cm.exception.__cause__, ConnectionResetError)

    def test_cancelled_before_first_fetch(self):
        fetches = []
        host = build_chain(["HostSystem", "Datacenter"], fetches)
        cancel = threading.Event()
        cancel.set()

        with self.assertRaises(OperationCancelled):
            resolve_host_datacenter(host, ctx=OperationContext(cancel_event=cancel))

        self.assertEqual(fetches, [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
