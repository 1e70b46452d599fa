# detach.py
# Releasing everything that holds a disk before it is repartitioned.
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

from .devicelibs import crypto, dm, lvm, swap
from .devices import DiskId, DEV_PREFIX, DM_PREFIX
from .errors import StorageError
from .flags import flags
from .storage_log import log_method_call, log_exception_info
from . import mounts
from . import udev

import logging
log = logging.getLogger("diskprov")


def _row_path(row):
    """ Device node path for an lsblk row. """
    if row.get("TYPE") in ("crypt", "lvm", "dm"):
        return DM_PREFIX + row["NAME"]
    return DEV_PREFIX + row["NAME"]


class DeviceDetacher(object):

    """ Unmounts and deactivates whatever holds a disk.

        Every step is best-effort: failures are logged and the next step
        runs. The one hard rule is that nothing beyond staging cleanup is
        ever done to the disk hosting the running system.
    """

    def __init__(self, runner, inspector):
        self.runner = runner
        self.inspector = inspector

    def _run(self, argv):
        rc, _out, err = self.runner.run(argv)
        if rc:
            log.debug("%s exited with %d: %s", " ".join(argv), rc, err.strip())
        return rc == 0

    def unmount_staging(self):
        """ Recursively lazy-unmount the staging tree, deepest first. """
        for path in mounts.staging_mountpoints():
            self._run(["umount", "-R", "-l", path])

    def unmount(self, device):
        """ Lazily unmount a single device. Returns True on success. """
        return self._run(["umount", "-l", str(device)])

    def settle(self):
        udev.settle(self.runner)

    def preflight(self, disk):
        """ Light cleanup done before any provisioning strategy.

            Releases the staging tree and, unless disk hosts the running
            system, partitions of disk the desktop session auto-mounted.
        """
        disk = DiskId(disk)
        log_method_call(self, disk)
        self.unmount_staging()
        if self.inspector.is_system_disk(disk):
            log.info("%s hosts the running system; leaving its mounts alone", disk)
            self.settle()
            return

        for part in self.inspector.mounted_partitions(disk):
            if mounts.is_external_mount(part.mountpoint):
                log.info("unmounting %s from %s", part.path, part.mountpoint)
                self.unmount(part.path)

        self.settle()

    def detach(self, disk):
        """ Release every holder of disk so it can be repartitioned.

            :returns: False if disk hosts the running system and only the
                      staging tree was touched, True otherwise
            :rtype: bool
        """
        disk = DiskId(disk)
        log_method_call(self, disk)
        self.unmount_staging()
        if self.inspector.is_system_disk(disk):
            log.warning("%s hosts the running system; refusing to tear down its holders", disk)
            self.settle()
            return False

        partitions = self.inspector.list_partitions(disk)
        part_names = set(part.name for part in partitions)
        stack = self.inspector.list_descendants(disk)

        self._unmount_all(stack)
        self._swapoff_all(stack)
        crypt_names = self._close_luks(stack, part_names)
        self._deactivate_vgs(stack, part_names | crypt_names)
        self._kill_holders(disk, partitions)
        self._remove_dm_holders(partitions)
        self._reread(disk)
        if flags.power_off_removable:
            self._power_off(disk)

        return True

    def _unmount_all(self, stack):
        # children first so stacked mounts come off before their parents
        for row in reversed(stack):
            mountpoint = row.get("MOUNTPOINT")
            if mountpoint and mountpoint != "[SWAP]":
                log.info("unmounting %s from %s", _row_path(row), mountpoint)
                self.unmount(_row_path(row))

    def _swapoff_all(self, stack):
        active = set(swap.get_active_swaps())
        for row in stack:
            paths = set([_row_path(row), DEV_PREFIX + row.get("KNAME", row["NAME"])])
            if row.get("MOUNTPOINT") != "[SWAP]" and not paths & active:
                continue

            try:
                swap.swapoff(self.runner, _row_path(row))
            except StorageError:
                log_exception_info(log.warning, "swapoff of %s failed", [_row_path(row)])

    def _close_luks(self, stack, part_names):
        closed = set()
        for row in stack:
            if row.get("TYPE") != "crypt" or row.get("PKNAME") not in part_names:
                continue

            closed.add(row.get("KNAME", row["NAME"]))
            try:
                crypto.luks_close(self.runner, row["NAME"])
            except StorageError:
                log_exception_info(log.warning, "closing %s failed", [row["NAME"]])

        return closed

    def _deactivate_vgs(self, stack, parent_names):
        vg_names = []
        for row in stack:
            if row.get("TYPE") != "lvm" or row.get("PKNAME") not in parent_names:
                continue

            vg_name = lvm.lv_vg_name(self.runner, _row_path(row))
            if vg_name and vg_name not in vg_names:
                vg_names.append(vg_name)

        for vg_name in vg_names:
            try:
                lvm.vgdeactivate(self.runner, vg_name)
            except StorageError:
                log_exception_info(log.warning, "deactivating %s failed", [vg_name])

    def _kill_holders(self, disk, partitions):
        self._run(["fuser", "-k", "-m", str(disk)] + [str(part.path) for part in partitions])

    def _remove_dm_holders(self, partitions):
        for part in partitions:
            for holder in udev.device_get_holders(part.path):
                try:
                    dm.dm_remove(self.runner, DEV_PREFIX + holder)
                except StorageError:
                    log_exception_info(log.warning, "removing holder %s of %s failed", [holder, part.path])

    def _reread(self, disk):
        self._run(["blockdev", "--rereadpt", str(disk)])
        self._run(["partprobe", str(disk)])
        self.settle()
        time.sleep(flags.settle_delay)

    def _power_off(self, disk):
        if udev.device_is_removable(disk):
            log.info("powering off removable disk %s", disk)
            self._run(["udisksctl", "power-off", "-b", str(disk)])
