# inspector.py
# Read-only queries of block device topology and partition tables.
#
# Copyright (C) 2026  diskprov developers
#
# This copyrighted material is made available to anyone wishing to use,
# modify, copy, or redistribute it subject to the terms and conditions of
# the GNU General Public License v.2, or (at your option) any later version.
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY expressed or implied, including the implied warranties of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General
# Public License for more details.  You should have received a copy of the
# GNU General Public License along with this program; if not, write to the
# Free Software Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA
# 02110-1301, USA.
#

import os
from decimal import Decimal

from .devicelibs import gpt, lsblk, parted
from .devices import Disk, DiskId, Partition, PartitionPath, FreeExtent
from .devices import normalize_device_path
from .errors import AvailabilityError, DeviceError
from .geometry import partition_node_for
from . import availability
from . import mounts

import logging
log = logging.getLogger("diskprov")

# bound on parent walks through stacked devices (crypt on lvm on part ...)
MAX_PARENT_HOPS = 6

PARTITION_COLUMNS = ["NAME", "KNAME", "TYPE", "PKNAME", "SIZE", "FSTYPE",
                     "PARTTYPE", "PARTLABEL", "LABEL", "MOUNTPOINT"]
DISK_COLUMNS = ["NAME", "TYPE", "SIZE", "MODEL", "RM", "TRAN"]
TOPOLOGY_COLUMNS = ["NAME", "KNAME", "TYPE", "PKNAME", "MOUNTPOINT"]

_MIB = Decimal(1024 * 1024)


def _bytes_to_mib(value):
    try:
        return Decimal(int(value)) / _MIB
    except (TypeError, ValueError):
        return None


class DeviceInspector(object):

    """ Derives disks, partitions and free extents from the live system.

        Nothing is cached: every call queries the system again, so the
        results always describe the current partition table.
    """

    def __init__(self, runner, parted=None):
        """
            :param runner: the command runner
            :keyword str parted: path of the parted binary, located on
                                 first use if not given
        """
        self.runner = runner
        self._parted = parted

    @property
    def parted(self):
        if self._parted is None:
            self._parted = availability.PARTED_APP.path

        if self._parted is None:
            raise AvailabilityError("parted was not found; install it to partition disks")

        return self._parted

    def _lsblk(self, columns, device=None, nodeps=False, in_bytes=False):
        argv = lsblk.lsblk_argv(columns, device=device, nodeps=nodeps, in_bytes=in_bytes)
        return lsblk.parse_pairs(self.runner.output(argv))

    def _parted_print(self, disk, free=False):
        return self.runner.output(parted.print_argv(self.parted, disk, free=free))

    #
    # disks
    #
    def list_disks(self):
        """ Return every whole disk on the system, loop devices excluded.

            :rtype: list of :class:`~.devices.Disk`
        """
        disks = []
        for row in self._lsblk(DISK_COLUMNS, nodeps=True, in_bytes=True):
            name = row.get("NAME")
            if not name or row.get("TYPE") != "disk" or name.startswith("loop"):
                continue

            disks.append(Disk(name,
                              size=_bytes_to_mib(row.get("SIZE")),
                              model=row.get("MODEL") or None,
                              removable=row.get("RM") == "1",
                              transport=row.get("TRAN") or None))

        return disks

    def disk_size(self, disk):
        """ Return the size of disk in MiB as reported by parted.

            :raises: :class:`~.errors.DeviceError` if it cannot be read
        """
        info = parted.parse_disk_info(self._parted_print(DiskId(disk)))
        if info is None:
            raise DeviceError("could not determine the size of %s" % disk)

        return info.size

    #
    # partitions
    #
    def child_partitions(self, disk):
        """ Return kernel names of the partitions of disk, in listing order. """
        disk = DiskId(disk)
        rows = self._lsblk(["NAME", "TYPE", "PKNAME"], device=disk)
        return [row["NAME"] for row in rows
                if row.get("NAME") and row.get("TYPE") == "part" and row.get("PKNAME") == disk.name]

    def list_partitions(self, disk):
        """ Return the partitions of disk.

            lsblk provides names, filesystems and mountpoints; parted
            provides offsets and flags. A partition parted does not
            describe keeps None geometry. When lsblk reports nothing the
            partitions are built from the parted rows alone.

            :rtype: list of :class:`~.devices.Partition`
        """
        disk = DiskId(disk)
        table = dict((row.number, row) for row in parted.parse_partitions(self._parted_print(disk)))

        partitions = []
        for row in self._lsblk(PARTITION_COLUMNS, device=disk, in_bytes=True):
            if row.get("TYPE") != "part" or row.get("PKNAME") != disk.name or not row.get("NAME"):
                continue

            path = PartitionPath(row["NAME"])
            number = int(path.number) if path.number else None
            geometry = table.pop(number, None)
            size = geometry.size if geometry is not None else None
            if size is None:
                size = _bytes_to_mib(row.get("SIZE"))

            partitions.append(Partition(path, disk,
                                        number=number,
                                        start=geometry.start if geometry else None,
                                        end=geometry.end if geometry else None,
                                        size=size,
                                        fstype=row.get("FSTYPE"),
                                        flags=geometry.flags if geometry else None,
                                        mountpoint=row.get("MOUNTPOINT"),
                                        parttype=row.get("PARTTYPE"),
                                        label=row.get("PARTLABEL") or (geometry.name if geometry else None)))

        if not partitions:
            for number in sorted(table):
                row = table[number]
                partitions.append(Partition(partition_node_for(disk, number), disk,
                                            number=number, start=row.start, end=row.end,
                                            size=row.size, flags=row.flags, label=row.name))

        return partitions

    def list_descendants(self, disk):
        """ Return lsblk rows for every device stacked on top of disk.

            Includes partitions and anything built on them, such as LUKS
            mappings and logical volumes.
        """
        disk = DiskId(disk)
        return [row for row in self._lsblk(TOPOLOGY_COLUMNS, device=disk)
                if row.get("NAME") and row.get("NAME") != disk.name]

    def partition_geometry(self, disk, number):
        """ Return (start, end) in MiB of partition number on disk, or None. """
        for row in parted.parse_partitions(self._parted_print(DiskId(disk))):
            if row.number == int(number):
                return (row.start, row.end)

        return None

    def list_free_extents(self, disk):
        """ Return the unallocated regions of disk of at least 1 MiB.

            :rtype: list of :class:`~.devices.FreeExtent`
        """
        extents = []
        for (start, end) in parted.parse_free(self._parted_print(DiskId(disk), free=True)):
            if end - start < 1:
                continue

            extents.append(FreeExtent(start, end))

        return extents

    def largest_free_extent(self, disk):
        extents = self.list_free_extents(disk)
        if not extents:
            return None

        return max(extents, key=lambda e: e.size)

    #
    # boot partitions
    #
    def find_existing_esp(self, disk):
        """ Return the EFI System Partition on disk, or None.

            Partition type, label and filesystem are checked first; the
            esp flag from the partition table is the fallback.
        """
        partitions = self.list_partitions(disk)
        for part in partitions:
            if gpt.is_esp_part_type(part.parttype) or gpt.is_esp_label(part.label):
                return part

            if part.fstype and part.fstype.lower() in gpt.ESP_FSTYPES:
                return part

        for part in partitions:
            if gpt.ESP_FLAG in part.flags:
                return part

        return None

    def find_existing_bios_grub(self, disk):
        for part in self.list_partitions(disk):
            if gpt.BIOS_GRUB_FLAG in part.flags:
                return part

        return None

    def is_partition_vfat(self, path):
        rows = self._lsblk(["FSTYPE"], device=normalize_device_path(path), nodeps=True)
        if not rows:
            return False

        return rows[0].get("FSTYPE", "").lower() in gpt.FAT_FSTYPES

    #
    # running system
    #
    def resolve_base_disk(self, device):
        """ Walk the parent chain of device up to its whole disk.

            :param str device: path or name of any block device
            :returns: the disk or None if the walk does not reach one
            :rtype: :class:`~.devices.DiskId` or NoneType
        """
        node = normalize_device_path(device)
        for _hop in range(MAX_PARENT_HOPS):
            rows = self._lsblk(["NAME", "KNAME", "TYPE", "PKNAME"], device=node, nodeps=True)
            if not rows:
                log.debug("lsblk does not know %s", node)
                return None

            row = rows[0]
            if row.get("TYPE") == "disk":
                return DiskId(row.get("KNAME") or row.get("NAME") or node)

            parent = row.get("PKNAME")
            if not parent:
                return None

            node = "/dev/" + parent

        log.warning("gave up resolving the disk under %s", device)
        return None

    def root_source_device(self):
        """ Return the device node backing the running root filesystem.

            UUID= and LABEL= references are resolved. btrfs subvolume
            suffixes such as "[/@]" are dropped.
        """
        source = mounts.mount_source(self.runner, "/")
        if not source:
            source = mounts.get_mount_device("/")

        if not source:
            return None

        source = source.split("[", 1)[0].strip()
        if source.startswith("UUID="):
            source = self.runner.output(["blkid", "-U", source[len("UUID="):]]).strip()
        elif source.startswith("LABEL="):
            source = self.runner.output(["blkid", "-L", source[len("LABEL="):]]).strip()

        if not source.startswith("/"):
            return None

        return source

    def is_system_disk(self, disk):
        """ Whether disk hosts the running root filesystem.

            Returns False when the root device cannot be resolved.
        """
        source = self.root_source_device()
        if source is None:
            log.warning("could not determine the device backing /")
            return False

        system_disk = self.resolve_base_disk(source)
        if system_disk is None:
            log.warning("could not resolve the disk backing / (%s)", source)
            return False

        target = self.resolve_base_disk(disk) or DiskId(disk)
        return os.path.realpath(system_disk) == os.path.realpath(target)

    def mounted_partitions(self, disk):
        return [part for part in self.list_partitions(disk)
                if part.mountpoint and part.mountpoint != "[SWAP]"]
