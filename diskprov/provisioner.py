# provisioner.py
# Drives one provisioning run from plan to mounted target tree.
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

from decimal import ROUND_FLOOR
from enum import Enum

from .callbacks import ProvisionCallbacks
from .detach import DeviceDetacher
from .devicelibs import gpt
from .devices import same_device
from .errors import (AmbiguousPartitionError, DeviceError, GeometryError, PartitionNotOnDiskError,
                     StorageError, UnusableConfigurationError)
from .flags import flags
from .formats import FormatExecutor
from .geometry import layout_region, to_bounds
from .inspector import DeviceInspector
from .partitioning import PartitionMutator
from .plan import Strategy
from .state import MountState, remove_mount_state
from .util import Runner
from . import mounts
from . import threads

import logging
log = logging.getLogger("diskprov")


class ProvisionState(Enum):
    idle = 1
    detaching = 2
    partitioning = 3
    formatting = 4
    mounting = 5
    complete = 6
    failed = 7


class Provisioner(object):

    """ Runs one :class:`~.plan.InstallPlan` to completion.

        A provisioner is single-use. :meth:`run` blocks until the plan
        has either completed or failed; run it on a worker thread (see
        :func:`~.threads.run_in_thread`) to keep a user interface
        responsive. Progress, errors and completion are reported through
        the callbacks.
    """

    def __init__(self, plan, runner=None, callbacks=None, inspector=None,
                 detacher=None, mutator=None, executor=None, parted=None):
        self.plan = plan
        self.runner = runner or Runner()
        self.callbacks = callbacks or ProvisionCallbacks()
        self.inspector = inspector or DeviceInspector(self.runner, parted=parted)
        self.detacher = detacher or DeviceDetacher(self.runner, self.inspector)
        self.mutator = mutator or PartitionMutator(self.runner, self.inspector)
        self.executor = executor or FormatExecutor(self.runner)

        self.state = ProvisionState.idle
        self.result = None
        self._modified = False

    def _log(self, msg, *args):
        msg = msg % args if args else msg
        log.info(msg)
        self.callbacks.on_log(msg)

    def _set_state(self, state):
        log.debug("%s: %s -> %s", self.plan.disk, self.state.name, state.name)
        self.state = state

    def _fail(self, e):
        msg = str(e)
        if isinstance(e, UnusableConfigurationError) and e.suggestion:
            msg = "%s %s" % (msg, e.suggestion)
        if self._modified:
            msg += (" The partition table of %s has been modified and is incomplete; "
                    "review the disk before planning again." % self.plan.disk)

        log.error("provisioning %s failed: %s", self.plan.disk, msg)
        self._set_state(ProvisionState.failed)
        self.callbacks.on_error(msg)

    def run(self):
        """ Execute the plan.

            :returns: the mounted devices, or None if the run failed
            :rtype: :class:`~.state.MountState` or NoneType
        """
        if self.state != ProvisionState.idle:
            raise RuntimeError("a provisioner can only run once")

        try:
            with threads.disk_lock(self.plan.disk):
                self.result = self._run()
        except StorageError as e:
            self._fail(e)
            return None
        except Exception:
            self._set_state(ProvisionState.failed)
            raise

        self._set_state(ProvisionState.complete)
        self.callbacks.on_complete()
        return self.result

    def _run(self):
        remove_mount_state()
        self._log("Preparing %s for a %s installation (%s).", self.plan.disk,
                  "UEFI" if self.plan.efi else "BIOS", self.plan.strategy.value.replace("_", " "))

        # raises AvailabilityError before anything is touched
        log.debug("using parted at %s", self.inspector.parted)

        self._set_state(ProvisionState.detaching)
        self.detacher.preflight(self.plan.disk)

        handlers = {Strategy.wipe_disk: self._wipe_disk,
                    Strategy.use_partition: self._use_partition,
                    Strategy.use_free_space: self._use_free_space}
        return handlers[self.plan.strategy]()

    #
    # strategies
    #
    def _wipe_disk(self):
        disk = self.plan.disk
        if self.inspector.is_system_disk(disk):
            raise UnusableConfigurationError("%s hosts the running system and cannot be erased." % disk)

        self._log("Releasing everything that holds %s.", disk)
        self.detacher.detach(disk)

        self._set_state(ProvisionState.partitioning)
        self._modified = True
        self._log("Erasing %s and creating a GPT partition table.", disk)
        self.mutator.wipe_signatures(disk)
        self.mutator.create_gpt_label(disk)

        size = self.inspector.disk_size(disk)
        end = int(size.to_integral_value(rounding=ROUND_FLOOR))
        boot_size = flags.esp_size if self.plan.efi else flags.bios_boot_size
        boot, root = layout_region(1, end, boot_size, flags.end_margin, flags.min_root_size)

        if self.plan.efi:
            self._log("Creating EFI System Partition at %d - %d MiB.", *boot)
            self.mutator.create_partition(disk, "fat32", *boot)
            self.mutator.set_name(disk, 1, gpt.ESP_PART_NAME)
            self.mutator.set_flag(disk, 1, gpt.ESP_FLAG)
        else:
            self._log("Creating BIOS boot partition at %d - %d MiB.", *boot)
            self.mutator.create_partition(disk, None, *boot)
            self.mutator.set_flag(disk, 1, gpt.BIOS_GRUB_FLAG)

        self._log("Creating root partition at %d - %d MiB.", *root)
        self.mutator.create_partition(disk, "ext4", *root)

        # the table started empty, so the listing holds exactly our two
        # partitions in creation order
        names = self.inspector.child_partitions(disk)
        if len(names) != 2:
            raise AmbiguousPartitionError("expected 2 partitions on %s after wiping it, found %d"
                                          % (disk, len(names)), new_names=names)

        boot_node = "/dev/" + names[0]
        root_node = "/dev/" + names[-1]

        self._set_state(ProvisionState.formatting)
        esp_node = None
        if self.plan.efi:
            esp_node = boot_node
            self._log("Formatting %s as FAT32.", esp_node)
            self.executor.format_fat32(esp_node)

        self._format_root(root_node)
        return self._mount(root_node, esp_node)

    def _use_partition(self):
        disk = self.plan.disk
        target = self.plan.partition
        number = target.number
        if not number:
            raise DeviceError("could not determine the partition number of %s" % target)

        base = self.inspector.resolve_base_disk(target)
        if base is None or not same_device(base, disk):
            raise PartitionNotOnDiskError("%s is not a partition of %s." % (target, disk))

        if same_device(self.inspector.root_source_device(), target):
            raise UnusableConfigurationError("%s holds the running system's root filesystem." % target)

        geometry = self.inspector.partition_geometry(disk, number)
        if geometry is None:
            raise GeometryError("could not read the geometry of %s" % target)

        start, end = to_bounds(*geometry)
        self._log("Selected partition %s spans %d - %d MiB.", target, start, end)

        boot_part = self._existing_boot_partition(target=target)
        boot_size = self._boot_size(boot_part)
        boot, root = layout_region(start, end, boot_size, flags.end_margin, flags.min_root_size)

        self._log("Unmounting and deleting %s.", target)
        self.detacher.unmount(target)

        self._set_state(ProvisionState.partitioning)
        self._modified = True
        self.mutator.delete_partition(disk, number)
        return self._provision_region(boot_part, boot, root)

    def _use_free_space(self):
        disk = self.plan.disk
        if self.plan.extent is not None:
            start, end = to_bounds(*self.plan.extent)
        else:
            extent = self.inspector.largest_free_extent(disk)
            if extent is None:
                raise UnusableConfigurationError("no free space was found on %s." % disk)
            start, end = to_bounds(extent.start, extent.end)

        if end <= start + flags.min_free_extent:
            raise UnusableConfigurationError("the free space at %d - %d MiB on %s is too small."
                                             % (start, end, disk))

        self._log("Using free space %d - %d MiB on %s.", start, end, disk)
        # under BIOS the extent holds root alone
        boot_part = None
        boot_size = 0
        if self.plan.efi:
            boot_part = self._existing_boot_partition()
            boot_size = self._boot_size(boot_part)

        boot, root = layout_region(start, end, boot_size, flags.end_margin, flags.min_root_size)

        self._set_state(ProvisionState.partitioning)
        return self._provision_region(boot_part, boot, root)

    #
    # shared steps
    #
    def _existing_boot_partition(self, target=None):
        """ Find a boot partition to reuse, or None if one must be created.

            :keyword target: partition about to be deleted; it may not be
                             the boot partition itself
        """
        disk = self.plan.disk
        if self.plan.efi:
            part = self.inspector.find_existing_esp(disk)
            kind = "EFI System Partition"
        else:
            part = self.inspector.find_existing_bios_grub(disk)
            kind = "BIOS boot partition"

        if part is None:
            self._log("No %s found on %s; one will be created.", kind, disk)
            return None

        if target is not None and same_device(part.path, target):
            raise UnusableConfigurationError("%s is the %s of %s and cannot be replaced."
                                             % (target, kind, disk))

        if self.plan.efi and not self.inspector.is_partition_vfat(part.path):
            raise UnusableConfigurationError("the existing EFI System Partition %s is not FAT "
                                             "formatted; refusing to modify it." % part.path)

        self._log("Reusing existing %s %s.", kind, part.path)
        return part

    def _boot_size(self, boot_part):
        if boot_part is not None:
            return 0
        return flags.esp_size if self.plan.efi else flags.bios_boot_size

    def _provision_region(self, boot_part, boot, root):
        """ Create boot (if needed) and root in a region, format and mount. """
        disk = self.plan.disk
        self._modified = True
        esp_node = boot_part.path if (boot_part is not None and self.plan.efi) else None
        new_esp = None

        if boot is not None:
            if self.plan.efi:
                self._log("Creating EFI System Partition at %d - %d MiB.", *boot)
                new_esp = self.mutator.create_and_identify(disk, "fat32", *boot)
                self.mutator.set_name(disk, new_esp.number, gpt.ESP_PART_NAME)
                self.mutator.set_flag(disk, new_esp.number, gpt.ESP_FLAG)
                esp_node = new_esp
            else:
                self._log("Creating BIOS boot partition at %d - %d MiB.", *boot)
                node = self.mutator.create_and_identify(disk, None, *boot)
                self.mutator.set_flag(disk, node.number, gpt.BIOS_GRUB_FLAG)

        self._log("Creating root partition at %d - %d MiB.", *root)
        root_node = self.mutator.create_and_identify(disk, "ext4", *root)

        self._set_state(ProvisionState.formatting)
        if new_esp is not None:
            self._log("Formatting %s as FAT32.", new_esp)
            self.executor.format_fat32(new_esp)

        self._format_root(root_node)
        return self._mount(root_node, esp_node)

    def _format_root(self, node):
        self._log("Formatting %s as ext4.", node)
        self.executor.format_ext4(node)
        if not self.executor.check_ext4(node):
            self._log("Filesystem check of %s reported problems; continuing.", node)

    def _mount(self, root_node, esp_node):
        self._set_state(ProvisionState.mounting)
        self._log("Mounting %s at %s.", root_node, flags.target_root)
        self.executor.mount(root_node, flags.target_root)
        if esp_node is not None:
            self._log("Mounting %s at %s.", esp_node, mounts.esp_mountpoint())
            self.executor.mount_esp(esp_node)

        state = MountState(root_node, esp_node)
        state.write()
        self._log("Target filesystem tree is ready.")
        return state
