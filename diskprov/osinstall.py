# osinstall.py
# Helpers for the OS bootstrap step that runs after provisioning.
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

from .devices import DiskId
from .devicelibs import gpt
from .errors import DeviceNotFoundError
from .flags import flags
from .formats import FormatExecutor
from .inspector import DeviceInspector
from .state import MountState
from .util import Runner
from . import mounts

import logging
log = logging.getLogger("diskprov")

# filesystems the root partition may carry when picking one by inspection
ROOT_FSTYPES = ("ext4", "ext3", "ext2", "btrfs", "xfs", "f2fs")


def _pick_root(partitions):
    candidates = [p for p in partitions
                  if p.fstype in ROOT_FSTYPES
                  and not p.flags & set([gpt.ESP_FLAG, gpt.BIOS_GRUB_FLAG])]
    if not candidates:
        return None

    return max(candidates, key=lambda p: p.size or 0).path


def ensure_target_mounts(disk, efi, runner=None, inspector=None, executor=None):
    """ Make sure the target root (and ESP) are mounted at the staging tree.

        The bootstrap step calls this before chrooting, in case something
        unmounted the tree after provisioning. The saved mount state is
        preferred; without it the largest Linux filesystem on disk is
        taken as root and the ESP is located as during provisioning.

        :param disk: the provisioned disk
        :param bool efi: whether the ESP must be mounted too
        :returns: the mounted devices
        :rtype: :class:`~.state.MountState`
        :raises: :class:`~.errors.StorageError`
    """
    disk = DiskId(disk)
    runner = runner or Runner()
    inspector = inspector or DeviceInspector(runner)
    executor = executor or FormatExecutor(runner)

    root_path = flags.target_root
    esp_path = mounts.esp_mountpoint()
    saved = MountState.read()
    partitions = inspector.list_partitions(disk)
    paths = [str(p.path) for p in partitions]

    if mounts.is_mountpoint(runner, root_path):
        root = mounts.mount_source(runner, root_path)
    else:
        if saved is not None and saved.root in paths:
            root = saved.root
        else:
            root = _pick_root(partitions)

        if root is None:
            raise DeviceNotFoundError("no root filesystem found on %s" % disk)

        log.info("mounting root %s at %s", root, root_path)
        executor.mount(root, root_path)

    esp = None
    if efi:
        if mounts.is_mountpoint(runner, esp_path):
            esp = mounts.mount_source(runner, esp_path)
        else:
            if saved is not None and saved.esp in paths:
                esp = saved.esp
            else:
                part = inspector.find_existing_esp(disk)
                esp = part.path if part is not None else None

            if esp is None:
                raise DeviceNotFoundError("no EFI System Partition found on %s" % disk)

            log.info("mounting ESP %s at %s", esp, esp_path)
            executor.mount_esp(esp)

    return MountState(root, esp)
