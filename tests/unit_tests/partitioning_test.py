import unittest
from unittest import mock

from diskprov.errors import AmbiguousPartitionError, GeometryError, PartitioningError
from diskprov.inspector import DeviceInspector
from diskprov.partitioning import PartitionMutator, identify_new_partition

from .diskprovtestcase import DiskprovTestCase, FakeDisk, FakePartition


class IdentifyNewPartitionTestCase(unittest.TestCase):

    def test_one_new(self):
        self.assertEqual(identify_new_partition(["sdb1", "sdb3"], ["sdb1", "sdb3", "sdb2"]), "sdb2")
        self.assertEqual(identify_new_partition(set(), set(["nvme0n1p1"])), "nvme0n1p1")

    def test_none_new(self):
        with self.assertRaises(AmbiguousPartitionError) as ctx:
            identify_new_partition(["sdb1"], ["sdb1"])
        self.assertEqual(ctx.exception.new_names, [])

    def test_two_new(self):
        with self.assertRaises(AmbiguousPartitionError) as ctx:
            identify_new_partition(["sdb1"], ["sdb1", "sdb2", "sdb3"])
        self.assertEqual(ctx.exception.new_names, ["sdb2", "sdb3"])

    def test_replaced(self):
        # a vanished name does not count, only additions do
        self.assertEqual(identify_new_partition(["sdb1", "sdb2"], ["sdb1", "sdb4"]), "sdb4")


class PartitionMutatorTestCase(DiskprovTestCase):

    def setUp(self):
        super(PartitionMutatorTestCase, self).setUp()
        self.disk = FakeDisk("sdb", 20480, partitions=[FakePartition(1, 1, 3, flags=["bios_grub"])])
        self.runner = self.make_runner(self.disk)
        self.inspector = DeviceInspector(self.runner, parted="parted")
        self.mutator = PartitionMutator(self.runner, self.inspector)

    def test_create_partition(self):
        self.mutator.create_partition("/dev/sdb", "ext4", 2048, 10239)
        self.assertIn(["parted", "--script", "/dev/sdb", "mkpart", "primary", "ext4", "2048MiB", "10239MiB"],
                      self.runner.calls)
        self.assertEqual(self.disk.layout(), [(1, 1, 3), (2, 2048, 10239)])

        # every mutation is followed by a reread and settle
        self.assertEqual(self.runner.calls[-2], ["partprobe", "/dev/sdb"])
        self.assertEqual(self.runner.calls[-1], ["udevadm", "settle", "--timeout=300"])

    def test_create_partition_no_fs_hint(self):
        self.mutator.create_partition("sdb", None, 3, 5)
        self.assertIn(["parted", "--script", "/dev/sdb", "mkpart", "primary", "3MiB", "5MiB"], self.runner.calls)

    def test_create_partition_empty(self):
        with self.assertRaises(GeometryError):
            self.mutator.create_partition("/dev/sdb", "ext4", 100, 100)
        self.assertFalse(self.runner.commands("parted"))

    def test_create_partition_failure(self):
        # overlaps the bios_grub partition
        with self.assertRaisesRegex(PartitioningError, "overlapping"):
            self.mutator.create_partition("/dev/sdb", "ext4", 2, 100)

    def test_create_and_identify(self):
        node = self.mutator.create_and_identify("/dev/sdb", "ext4", 100, 200)
        self.assertEqual(node, "/dev/sdb2")
        self.assertEqual(node.number, "2")

    def test_create_and_identify_ambiguous(self):
        with mock.patch.object(self.inspector, "child_partitions", side_effect=[["sdb1"], ["sdb1"]]):
            with self.assertRaises(AmbiguousPartitionError):
                self.mutator.create_and_identify("/dev/sdb", "ext4", 100, 200)

        # the table mutation itself went through
        self.assertEqual(self.disk.layout(), [(1, 1, 3), (2, 100, 200)])

    def test_flags_and_names(self):
        self.mutator.set_flag("/dev/sdb", 1, "esp")
        self.mutator.set_flag("/dev/sdb", "1", "bios_grub", on=False)
        self.mutator.set_name("/dev/sdb", 1, "ESP")
        self.assertIn(["parted", "--script", "/dev/sdb", "set", "1", "esp", "on"], self.runner.calls)
        self.assertIn(["parted", "--script", "/dev/sdb", "set", "1", "bios_grub", "off"], self.runner.calls)
        self.assertIn(["parted", "--script", "/dev/sdb", "name", "1", "ESP"], self.runner.calls)
        self.assertEqual(self.disk.partitions[1].flags, set(["esp"]))
        self.assertEqual(self.disk.partitions[1].name, "ESP")

    def test_delete_partition(self):
        self.mutator.delete_partition("/dev/sdb", "1")
        self.assertEqual(self.disk.layout(), [])

        with self.assertRaises(PartitioningError):
            self.mutator.delete_partition("/dev/sdb", "1")

    def test_create_gpt_label(self):
        self.mutator.create_gpt_label("/dev/sdb")
        self.assertIn(["parted", "--script", "/dev/sdb", "mklabel", "gpt"], self.runner.calls)
        self.assertEqual(self.disk.layout(), [])

    @mock.patch("diskprov.availability.SGDISK_APP")
    def test_wipe_signatures(self, sgdisk):
        sgdisk.available = True
        sgdisk.path = "/usr/sbin/sgdisk"
        self.mutator.wipe_signatures("/dev/sdb")
        self.assertIn(["wipefs", "-a", "/dev/sdb"], self.runner.calls)
        self.assertIn(["/usr/sbin/sgdisk", "--zap-all", "--clear", "/dev/sdb"], self.runner.calls)

        sgdisk.available = False
        self.runner.calls = []
        self.mutator.wipe_signatures("/dev/sdb")
        self.assertFalse(self.runner.commands("sgdisk"))

        self.runner.fail_on("wipefs")
        with self.assertRaises(PartitioningError):
            self.mutator.wipe_signatures("/dev/sdb")

    def test_refresh_tolerates_partprobe_failure(self):
        self.runner.fail_on("partprobe")
        self.mutator.refresh("/dev/sdb")
        self.assertTrue(self.runner.called("udevadm", "settle"))
