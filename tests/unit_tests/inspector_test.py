from decimal import Decimal
from unittest import mock

from diskprov.devices import FreeExtent
from diskprov.errors import AvailabilityError, DeviceError
from diskprov.inspector import DeviceInspector

from .diskprovtestcase import DiskprovTestCase, FakeDisk, FakePartition, FakeRunner, system_disk


def target_disk():
    return FakeDisk("sdb", 20480, partitions=[
        FakePartition(1, 1, 3, flags=["bios_grub"]),
        FakePartition(2, 3, 2048, fstype="ext4", name="data", mountpoint="/run/media/user/data"),
        FakePartition(3, "2048.5", 2560, fstype="vfat", name="EFI System Partition", flags=["boot", "esp"])])


class DeviceInspectorTestCase(DiskprovTestCase):

    def setUp(self):
        super(DeviceInspectorTestCase, self).setUp()
        self.runner = self.make_runner(target_disk())
        self.inspector = DeviceInspector(self.runner, parted="parted")

    def test_list_disks(self):
        self.runner.stacked.append(dict(NAME="loop0", KNAME="loop0", TYPE="loop", PKNAME=""))
        disks = self.inspector.list_disks()
        self.assertEqual([d.path for d in disks], ["/dev/sda", "/dev/sdb"])
        self.assertEqual(disks[1].size, Decimal(20480))
        self.assertEqual(disks[1].model, "Fake Disk")

    def test_disk_size(self):
        self.assertEqual(self.inspector.disk_size("/dev/sdb"), Decimal(20480))
        with self.assertRaises(DeviceError):
            self.inspector.disk_size("/dev/sdz")

    def test_child_partitions(self):
        self.assertEqual(self.inspector.child_partitions("/dev/sdb"), ["sdb1", "sdb2", "sdb3"])
        self.assertEqual(self.inspector.child_partitions("/dev/sdz"), [])

    def test_list_partitions(self):
        parts = self.inspector.list_partitions("sdb")
        self.assertEqual([p.path for p in parts], ["/dev/sdb1", "/dev/sdb2", "/dev/sdb3"])
        self.assertEqual([p.number for p in parts], [1, 2, 3])

        self.assertEqual(parts[0].flags, set(["bios_grub"]))
        self.assertIsNone(parts[0].fstype)
        self.assertEqual(parts[1].start, Decimal(3))
        self.assertEqual(parts[1].end, Decimal(2048))
        self.assertEqual(parts[1].mountpoint, "/run/media/user/data")
        self.assertEqual(parts[2].start, Decimal("2048.5"))
        self.assertEqual(parts[2].fstype, "vfat")
        self.assertEqual(parts[2].label, "EFI System Partition")

    def test_list_partitions_from_parted_only(self):
        # lsblk does not know the disk yet; the table alone is used
        with mock.patch.object(self.inspector, "_lsblk", return_value=[]):
            parts = self.inspector.list_partitions("sdb")

        self.assertEqual([p.path for p in parts], ["/dev/sdb1", "/dev/sdb2", "/dev/sdb3"])
        self.assertEqual(parts[2].flags, set(["boot", "esp"]))

    def test_partition_geometry(self):
        self.assertEqual(self.inspector.partition_geometry("/dev/sdb", "2"), (Decimal(3), Decimal(2048)))
        self.assertIsNone(self.inspector.partition_geometry("/dev/sdb", 9))

    def test_free_extents(self):
        extents = self.inspector.list_free_extents("/dev/sdb")
        # the 0.02 - 1 and 2048 - 2048.5 gaps are below 1 MiB
        self.assertEqual(extents, [FreeExtent(Decimal(2560), Decimal(20480))])
        self.assertEqual(self.inspector.largest_free_extent("/dev/sdb").size, Decimal(17920))

    def test_largest_free_extent(self):
        disk = FakeDisk("sdc", 10240, partitions=[FakePartition(1, 1, 1024), FakePartition(2, 4096, 5000)])
        runner = FakeRunner(disks=[disk])
        inspector = DeviceInspector(runner, parted="parted")
        self.assertEqual(inspector.largest_free_extent("/dev/sdc"), FreeExtent(Decimal(5000), Decimal(10240)))

        full = FakeDisk("sdd", 1024, partitions=[FakePartition(1, "0.02", 1024)])
        runner.disks["sdd"] = full
        self.assertIsNone(inspector.largest_free_extent("/dev/sdd"))

    def test_find_existing_esp(self):
        self.assertEqual(self.inspector.find_existing_esp("/dev/sdb").path, "/dev/sdb3")

    def test_find_existing_esp_by_type(self):
        disk = FakeDisk("sdc", 10240, partitions=[
            FakePartition(1, 1, 100, fstype="ext4"),
            FakePartition(2, 100, 612, parttype="C12A7328-F81F-11D2-BA4B-00A0C93EC93B")])
        inspector = DeviceInspector(FakeRunner(disks=[disk]), parted="parted")
        self.assertEqual(inspector.find_existing_esp("/dev/sdc").path, "/dev/sdc2")

    def test_find_existing_esp_by_flag(self):
        disk = FakeDisk("sdc", 10240, partitions=[
            FakePartition(1, 1, 100, fstype="ext4"),
            FakePartition(2, 100, 612, flags=["esp"], name="boot")])
        inspector = DeviceInspector(FakeRunner(disks=[disk]), parted="parted")
        self.assertEqual(inspector.find_existing_esp("/dev/sdc").path, "/dev/sdc2")

    def test_no_boot_partitions(self):
        disk = FakeDisk("sdc", 10240, partitions=[FakePartition(1, 1, 100, fstype="ext4")])
        inspector = DeviceInspector(FakeRunner(disks=[disk]), parted="parted")
        self.assertIsNone(inspector.find_existing_esp("/dev/sdc"))
        self.assertIsNone(inspector.find_existing_bios_grub("/dev/sdc"))

    def test_find_existing_bios_grub(self):
        self.assertEqual(self.inspector.find_existing_bios_grub("/dev/sdb").path, "/dev/sdb1")

    def test_is_partition_vfat(self):
        self.assertTrue(self.inspector.is_partition_vfat("/dev/sdb3"))
        self.assertFalse(self.inspector.is_partition_vfat("/dev/sdb2"))
        self.assertFalse(self.inspector.is_partition_vfat("/dev/sdb1"))
        self.assertFalse(self.inspector.is_partition_vfat("/dev/sdz1"))

    def test_mounted_partitions(self):
        self.assertEqual([p.path for p in self.inspector.mounted_partitions("/dev/sdb")], ["/dev/sdb2"])

    def test_parted_missing(self):
        with mock.patch("diskprov.availability.PARTED_APP") as app:
            app.path = None
            inspector = DeviceInspector(self.runner)
            with self.assertRaises(AvailabilityError):
                inspector.list_partitions("/dev/sdb")


class SystemDiskTestCase(DiskprovTestCase):

    def setUp(self):
        super(SystemDiskTestCase, self).setUp()
        self.runner = self.make_runner(target_disk())
        self.inspector = DeviceInspector(self.runner, parted="parted")

    def test_resolve_base_disk(self):
        self.assertEqual(self.inspector.resolve_base_disk("/dev/sdb2"), "/dev/sdb")
        self.assertEqual(self.inspector.resolve_base_disk("/dev/sdb"), "/dev/sdb")
        self.assertIsNone(self.inspector.resolve_base_disk("/dev/sdz"))

    def test_resolve_base_disk_stacked(self):
        self.runner.stacked.extend([
            dict(NAME="luks-root", KNAME="dm-0", TYPE="crypt", PKNAME="sdb2"),
            dict(NAME="vg-root", KNAME="dm-1", TYPE="lvm", PKNAME="dm-0")])
        self.assertEqual(self.inspector.resolve_base_disk("/dev/mapper/vg-root"), "/dev/sdb")

    def test_resolve_base_disk_cycle(self):
        self.runner.stacked.extend([
            dict(NAME="a", KNAME="dm-5", TYPE="dm", PKNAME="dm-6"),
            dict(NAME="b", KNAME="dm-6", TYPE="dm", PKNAME="dm-5")])
        self.assertIsNone(self.inspector.resolve_base_disk("/dev/dm-5"))
        self.assertEqual(len(self.runner.commands("lsblk")), 6)

    def test_root_source_device(self):
        self.assertEqual(self.inspector.root_source_device(), "/dev/sda2")

        self.runner.root_source = "/dev/sda2[/@]"
        self.assertEqual(self.inspector.root_source_device(), "/dev/sda2")

        self.runner.root_source = "UUID=1234-abcd"
        self.runner.uuids["1234-abcd"] = "/dev/sdb2"
        self.assertEqual(self.inspector.root_source_device(), "/dev/sdb2")

        self.runner.root_source = "LABEL=missing"
        self.assertIsNone(self.inspector.root_source_device())

    @mock.patch("diskprov.mounts.get_mount_device", return_value="/dev/sda2")
    def test_root_source_device_fallback(self, get_mount_device):
        self.runner.root_source = None
        self.assertEqual(self.inspector.root_source_device(), "/dev/sda2")
        get_mount_device.assert_called_once_with("/")

    def test_is_system_disk(self):
        self.assertTrue(self.inspector.is_system_disk("/dev/sda"))
        self.assertTrue(self.inspector.is_system_disk("sda"))
        self.assertFalse(self.inspector.is_system_disk("/dev/sdb"))

    def test_is_system_disk_nvme(self):
        nvme = FakeDisk("nvme0n1", 102400, partitions=[FakePartition(1, 1, 513), FakePartition(2, 513, 102399)])
        runner = FakeRunner(disks=[system_disk(), nvme], root_source="/dev/nvme0n1p2")
        inspector = DeviceInspector(runner, parted="parted")
        self.assertTrue(inspector.is_system_disk("/dev/nvme0n1"))
        self.assertFalse(inspector.is_system_disk("/dev/sda"))

    @mock.patch("diskprov.mounts.get_mount_device", return_value=None)
    def test_is_system_disk_unresolved(self, _get_mount_device):
        self.runner.root_source = None
        self.assertFalse(self.inspector.is_system_disk("/dev/sda"))

        self.runner.root_source = "/dev/sdq7"
        self.assertFalse(self.inspector.is_system_disk("/dev/sda"))
