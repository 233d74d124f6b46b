import unittest

from migration_executor.models import DestinationNetwork, NetworkMap, NetworkMapSpec, NetworkPair, Ref
from migration_executor.plan.network import find_mapping_for_nic_ref, validate_network_duplicates


def network_map(*pairs):
    return NetworkMap(spec=NetworkMapSpec(map=[
        NetworkPair(source=source, destination=destination) for source, destination in pairs
    ]))


def pod():
    return DestinationNetwork(type="pod")


def nad(name, namespace="ns"):
    return DestinationNetwork(type="multus", namespace=namespace, name=name)


class ValidateNetworkDuplicatesTests(unittest.TestCase):
    def test_nil_network_map(self):
        self.assertEqual(validate_network_duplicates([Ref(type="pod"), Ref(type="pod")], None), (False, False))

    def test_no_nics(self):
        self.assertEqual(validate_network_duplicates([], network_map()), (False, False))
        self.assertEqual(validate_network_duplicates(None, network_map()), (False, False))

    def test_single_pod(self):
        nm = network_map((Ref(type="pod"), pod()))

        result = validate_network_duplicates([Ref(type="pod")], nm)

        self.assertFalse(result.pod_duplicate)
        self.assertFalse(result.nad_duplicate)

    def test_duplicate_pod(self):
        nm = network_map(
            (Ref(type="pod"), pod()),
            (Ref(id="net-1"), pod()),
        )

        result = validate_network_duplicates([Ref(type="pod"), Ref(id="net-1")], nm)

        self.assertTrue(result.pod_duplicate)
        self.assertFalse(result.nad_duplicate)

    def test_duplicate_nad_by_id(self):
        nm = network_map((Ref(id="net-1"), nad("nad-a")))

        result = validate_network_duplicates([Ref(id="net-1"), Ref(id="net-1")], nm)

        self.assertTrue(result.nad_duplicate)
        self.assertFalse(result.pod_duplicate)

    def test_duplicate_nad_by_name_namespace(self):
        nm = network_map(
            (Ref(namespace="ns", name="net-1"), nad("nad-a")),
            (Ref(namespace="ns", name="net-2"), nad("nad-a")),
        )

        result = validate_network_duplicates(
            [Ref(namespace="ns", name="net-1"), Ref(namespace="ns", name="net-2")], nm
        )

        self.assertTrue(result.nad_duplicate)

    def test_distinct_nads(self):
        nm = network_map(
            (Ref(id="net-1"), nad("nad-a")),
            (Ref(id="net-2"), nad("nad-b")),
        )

        self.assertEqual(validate_network_duplicates([Ref(id="net-1"), Ref(id="net-2")], nm), (False, False))

    def test_same_nad_name_in_different_namespaces(self):
        nm = network_map(
            (Ref(id="net-1"), nad("nad-a", namespace="ns1")),
            (Ref(id="net-2"), nad("nad-a", namespace="ns2")),
        )

        self.assertFalse(validate_network_duplicates([Ref(id="net-1"), Ref(id="net-2")], nm).nad_duplicate)

    def test_unmapped_nic_ignored(self):
        nm = network_map((Ref(id="net-1"), nad("nad-a")))

        self.assertEqual(validate_network_duplicates([Ref(id="net-1"), Ref(id="net-999")], nm), (False, False))

    def test_unmapped_pod_shaped_nic_ignored(self):
        nm = network_map((Ref(id="net-1"), pod()))

        result = validate_network_duplicates([Ref(id="net-1"), Ref(type="pod")], nm)

        self.assertFalse(result.pod_duplicate)

    def test_ignored_destinations_never_conflict(self):
        nm = network_map((Ref(id="net-1"), DestinationNetwork(type="ignored")))

        self.assertEqual(validate_network_duplicates([Ref(id="net-1"), Ref(id="net-1")], nm), (False, False))


class FindMappingForNicRefTests(unittest.TestCase):
    def test_by_id(self):
        nm = network_map((Ref(id="net-1"), nad("nad-a")))

        pair, found = find_mapping_for_nic_ref(Ref(id="net-1"), nm)

        self.assertTrue(found)
        self.assertEqual(pair.destination.name, "nad-a")

    def test_by_type(self):
        nm = network_map((Ref(type="pod"), pod()))

        _, found = find_mapping_for_nic_ref(Ref(type="pod"), nm)

        self.assertTrue(found)

    def test_by_name_namespace(self):
        nm = network_map((Ref(namespace="ns", name="net-1"), nad("nad-a")))

        _, found = find_mapping_for_nic_ref(Ref(namespace="ns", name="net-1"), nm)

        self.assertTrue(found)

    def test_not_found(self):
        nm = network_map((Ref(id="net-1"), nad("nad-a")))

        pair, found = find_mapping_for_nic_ref(Ref(id="net-999"), nm)

        self.assertFalse(found)
        self.assertIsNone(pair)

    def test_nil_map(self):
        self.assertEqual(find_mapping_for_nic_ref(Ref(id="net-1"), None), (None, False))

    def test_empty_ref(self):
        nm = network_map((Ref(), nad("nad-a")))

        self.assertFalse(find_mapping_for_nic_ref(Ref(), nm)[1])

    def test_id_takes_precedence_over_name(self):
        nm = network_map(
            (Ref(namespace="ns", name="net-1"), nad("by-name")),
            (Ref(id="id-1"), nad("by-id")),
        )

        pair, found = find_mapping_for_nic_ref(Ref(id="id-1", namespace="ns", name="net-1"), nm)

        self.assertTrue(found)
        self.assertEqual(pair.destination.name, "by-id")

    def test_type_takes_precedence_over_name(self):
        nm = network_map(
            (Ref(namespace="ns", name="net-1"), nad("by-name")),
            (Ref(type="pod"), pod()),
        )

        pair, _ = find_mapping_for_nic_ref(Ref(type="pod", namespace="ns", name="net-1"), nm)

        self.assertEqual(pair.destination.type, "pod")

    def test_no_fallback_to_lower_tier(self):
        nm = network_map((Ref(namespace="ns", name="net-1"), nad("by-name")))

        _, found = find_mapping_for_nic_ref(Ref(id="unknown", namespace="ns", name="net-1"), nm)

        self.assertFalse(found)

    def test_first_matching_entry_wins(self):
        nm = network_map(
            (Ref(id="net-1"), nad("first")),
            (Ref(id="net-1"), nad("second")),
        )

        pair, _ = find_mapping_for_nic_ref(Ref(id="net-1"), nm)

        self.assertEqual(pair.destination.name, "first")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
