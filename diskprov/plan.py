# plan.py
# Provisioning requests.
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

from enum import Enum

from .devices import DiskId, PartitionPath, same_device
from .errors import GeometryError
from .geometry import round_mib, to_bounds
from . import arch

FREE_SPACE_TOKEN = "__FREE__"


class Strategy(str, Enum):
    """How the target disk is laid out."""
    wipe_disk = 'wipe_disk'
    use_partition = 'use_partition'
    use_free_space = 'use_free_space'


class BootMode(str, Enum):
    """Firmware the installed system boots with."""
    efi = 'efi'
    bios = 'bios'

    @classmethod
    def detect(cls):
        return cls.efi if arch.is_efi() else cls.bios


def make_free_space_token(start, end):
    """ Encode a free extent as a selection token for drive pickers. """
    return "%s:%s:%s" % (FREE_SPACE_TOKEN, start, end)


def parse_free_space_token(token):
    """ Decode "__FREE__:<start>:<end>" into integer MiB bounds.

        :returns: (start, end) or None if token is not a free space token
        :raises: :class:`~.errors.GeometryError` if the bounds are invalid
    """
    if not token or not token.startswith(FREE_SPACE_TOKEN + ":"):
        return None

    fields = token.split(":")
    if len(fields) != 3:
        raise GeometryError("malformed free space selection %r" % token)

    return (round_mib(fields[1]), round_mib(fields[2]))


class InstallPlan(object):

    """ One provisioning request: a disk, a strategy and a boot mode.

        Use the classmethod constructors rather than building one by hand.
    """

    def __init__(self, disk, strategy, boot_mode, partition=None, extent=None):
        self.disk = DiskId(disk)
        self.strategy = Strategy(strategy)
        self.boot_mode = BootMode(boot_mode)
        self.partition = PartitionPath(partition) if partition else None
        self.extent = tuple(extent) if extent else None

        if self.strategy == Strategy.use_partition and self.partition is None:
            raise ValueError("a partition is required to reuse a partition")

        if self.extent is not None:
            if len(self.extent) != 2:
                raise GeometryError("invalid free space extent %r" % (extent,))
            # bounds may be numbers or MiB strings; raises on unusable ones
            to_bounds(*self.extent)

    @property
    def efi(self):
        return self.boot_mode == BootMode.efi

    def __repr__(self):
        return ("<InstallPlan %s disk=%s boot=%s partition=%s extent=%s>" %
                (self.strategy.value, self.disk, self.boot_mode.value, self.partition, self.extent))

    @classmethod
    def wipe_disk(cls, disk, boot_mode):
        return cls(disk, Strategy.wipe_disk, boot_mode)

    @classmethod
    def use_partition(cls, disk, partition, boot_mode):
        return cls(disk, Strategy.use_partition, boot_mode, partition=partition)

    @classmethod
    def use_free_space(cls, disk, boot_mode, extent=None):
        """
            :keyword extent: explicit (start, end) MiB bounds, or None to
                             use the largest free extent of the disk
        """
        return cls(disk, Strategy.use_free_space, boot_mode, extent=extent)

    @classmethod
    def from_selection(cls, disk, boot_mode, selection=None, wipe=False):
        """ Build a plan from a drive picker selection.

            :param disk: the target disk
            :param boot_mode: :class:`BootMode` or its value
            :keyword str selection: a partition path, a free space token or
                                    None for the largest free extent
            :keyword bool wipe: erase the whole disk, ignoring selection
        """
        if wipe:
            return cls.wipe_disk(disk, boot_mode)

        extent = parse_free_space_token(selection)
        if extent is not None or not selection:
            return cls.use_free_space(disk, boot_mode, extent=extent)

        if same_device(selection, disk):
            return cls.wipe_disk(disk, boot_mode)

        return cls.use_partition(disk, selection, boot_mode)
