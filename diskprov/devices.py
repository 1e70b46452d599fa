# devices.py
# Value types for disks, partitions and free extents.
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
import re

from .geometry import partition_number_from_path

DEV_PREFIX = "/dev/"
DM_PREFIX = "/dev/mapper/"


def normalize_device_path(value):
    """ Return the canonical absolute path for a device name or path.

        Accepts kernel names ("sdb1"), absolute paths ("/dev/sdb1") and
        drive picker labels that carry extra text after the node
        ("/dev/sdb 20G", "/dev/sda2[/@]").
    """
    if value is None:
        return ""

    text = str(value).strip()
    text = re.split(r"[\s\[]", text, maxsplit=1)[0]
    if not text:
        return ""

    if not text.startswith("/"):
        text = DEV_PREFIX + text

    return os.path.normpath(text)


def device_path_to_name(device_path):
    """ Return a name based on the given path to a device node. """
    if not device_path:
        return None

    if device_path.startswith(DM_PREFIX):
        return device_path[len(DM_PREFIX):]
    elif device_path.startswith(DEV_PREFIX):
        return device_path[len(DEV_PREFIX):]

    return device_path


def same_device(a, b):
    """ Whether two device paths resolve to the same node. """
    if not a or not b:
        return False

    return os.path.realpath(normalize_device_path(a)) == os.path.realpath(normalize_device_path(b))


class DevicePath(str):

    """ A device node path, always normalized to an absolute path.

        Symlinks such as /dev/disk/by-id/* are resolved to the kernel node
        so that names match what lsblk and parted report.
    """

    def __new__(cls, value):
        path = normalize_device_path(value)
        if not path or path == DEV_PREFIX.rstrip("/"):
            raise ValueError("invalid device path: %r" % (value,))

        return super(DevicePath, cls).__new__(cls, os.path.realpath(path))

    @property
    def name(self):
        return device_path_to_name(str(self))


class DiskId(DevicePath):
    """ Path of a whole disk, e.g. /dev/sdb or /dev/nvme0n1. """


class PartitionPath(DevicePath):

    """ Path of a partition node, e.g. /dev/sdb3 or /dev/nvme0n1p2. """

    @property
    def number(self):
        """ The partition number as a string, or "" if there is none. """
        return partition_number_from_path(self)


class Disk(object):

    def __init__(self, path, size=None, label_type=None, model=None,
                 removable=False, transport=None):
        self.path = DiskId(path)
        self.size = size
        self.label_type = label_type
        self.model = model
        self.removable = removable
        self.transport = transport

    @property
    def name(self):
        return self.path.name

    def __repr__(self):
        return "<Disk %s size=%s label=%s>" % (self.path, self.size, self.label_type)


class Partition(object):

    """ A partition as reported by the live system.

        Offsets and sizes are in MiB as :class:`decimal.Decimal`, or None
        when the partition table print did not describe the partition.
    """

    def __init__(self, path, disk, number=None, start=None, end=None,
                 size=None, fstype=None, flags=None, mountpoint=None,
                 parttype=None, label=None):
        self.path = PartitionPath(path)
        self.disk = DiskId(disk)
        self.number = number
        self.start = start
        self.end = end
        self.size = size
        self.fstype = fstype or None
        self.flags = set(flags or [])
        self.mountpoint = mountpoint or None
        self.parttype = parttype or None
        self.label = label or None

    @property
    def name(self):
        return self.path.name

    def __repr__(self):
        return ("<Partition %s number=%s start=%s end=%s fstype=%s flags=%s>" %
                (self.path, self.number, self.start, self.end, self.fstype,
                 ",".join(sorted(self.flags))))


class FreeExtent(object):

    """ An unallocated region of a disk, in MiB. """

    def __init__(self, start, end):
        self.start = start
        self.end = end

    @property
    def size(self):
        return self.end - self.start

    def __eq__(self, other):
        if not isinstance(other, FreeExtent):
            return NotImplemented
        return (self.start, self.end) == (other.start, other.end)

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return "<FreeExtent %s-%s MiB>" % (self.start, self.end)
