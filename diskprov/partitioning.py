# partitioning.py
# Partition table mutations and identification of new partitions.
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

import time

from .devices import DiskId, PartitionPath
from .errors import AmbiguousPartitionError, GeometryError, PartitioningError
from .flags import flags
from .storage_log import log_method_call
from . import availability
from . import udev

import logging
log = logging.getLogger("diskprov")


def identify_new_partition(before, after):
    """ Return the one kernel name present in after but not in before.

        :param before: partition names before a mutation
        :param after: partition names after the mutation
        :raises: :class:`~.errors.AmbiguousPartitionError` unless exactly
                 one name is new
    """
    new = set(after) - set(before)
    if len(new) != 1:
        raise AmbiguousPartitionError("expected exactly one new partition, found %d (%s)"
                                      % (len(new), ", ".join(sorted(new)) or "none"),
                                      new_names=new)

    return new.pop()


class PartitionMutator(object):

    """ Issues partition table changes through parted.

        Every mutation is followed by a table reread and a settle delay
        so the kernel's view is current before anything reads it again.
        A failing command raises :class:`~.errors.PartitioningError`;
        nothing is rolled back.
    """

    def __init__(self, runner, inspector):
        self.runner = runner
        self.inspector = inspector

    def _check(self, argv, action):
        rc, _out, err = self.runner.run(argv)
        if rc:
            raise PartitioningError("%s failed: %s" % (action, err.strip() or "exit status %d" % rc))

    def _parted(self, disk, args, action):
        self._check([self.inspector.parted, "--script", str(disk)] + list(args), action)

    def refresh(self, disk):
        """ Make the kernel reread the table of disk and wait for udev. """
        rc, _out, err = self.runner.run(["partprobe", str(disk)])
        if rc:
            log.warning("partprobe %s failed: %s", disk, err.strip())
        udev.settle(self.runner)
        time.sleep(flags.settle_delay)

    def wipe_signatures(self, disk):
        """ Erase filesystem, RAID and partition table signatures on disk. """
        disk = DiskId(disk)
        log_method_call(self, disk)
        self._check(["wipefs", "-a", str(disk)], "wiping signatures on %s" % disk)
        if availability.SGDISK_APP.available:
            self._check([availability.SGDISK_APP.path, "--zap-all", "--clear", str(disk)],
                        "clearing GPT structures on %s" % disk)
        self.refresh(disk)

    def create_gpt_label(self, disk):
        disk = DiskId(disk)
        log_method_call(self, disk)
        self._parted(disk, ["mklabel", "gpt"], "creating a GPT partition table on %s" % disk)
        self.refresh(disk)

    def create_partition(self, disk, fs_hint, start, end):
        """ Create a partition spanning start to end MiB.

            :param disk: the disk
            :param fs_hint: filesystem type hint for parted, or None
            :param int start: first MiB
            :param int end: last MiB
        """
        disk = DiskId(disk)
        log_method_call(self, disk, fs_hint=fs_hint, start=start, end=end)
        if start >= end:
            raise GeometryError("cannot create partition %s - %s MiB on %s" % (start, end, disk))

        args = ["mkpart", "primary"]
        if fs_hint:
            args.append(fs_hint)
        args.extend(["%dMiB" % start, "%dMiB" % end])
        self._parted(disk, args, "creating partition %d - %d MiB on %s" % (start, end, disk))
        self.refresh(disk)

    def set_flag(self, disk, number, flag, on=True):
        disk = DiskId(disk)
        log_method_call(self, disk, number=number, flag=flag, on=on)
        self._parted(disk, ["set", str(number), flag, "on" if on else "off"],
                     "setting flag %s on partition %s of %s" % (flag, number, disk))
        self.refresh(disk)

    def set_name(self, disk, number, name):
        disk = DiskId(disk)
        log_method_call(self, disk, number=number, name=name)
        self._parted(disk, ["name", str(number), name],
                     "naming partition %s of %s" % (number, disk))
        self.refresh(disk)

    def delete_partition(self, disk, number):
        disk = DiskId(disk)
        log_method_call(self, disk, number=number)
        self._parted(disk, ["rm", str(number)],
                     "deleting partition %s of %s" % (number, disk))
        self.refresh(disk)

    def create_and_identify(self, disk, fs_hint, start, end):
        """ Create a partition and return the node it produced.

            :rtype: :class:`~.devices.PartitionPath`
            :raises: :class:`~.errors.AmbiguousPartitionError`
        """
        before = self.inspector.child_partitions(disk)
        self.create_partition(disk, fs_hint, start, end)
        after = self.inspector.child_partitions(disk)
        node = PartitionPath(identify_new_partition(before, after))
        log.info("new partition %d - %d MiB on %s is %s", start, end, disk, node)
        return node
