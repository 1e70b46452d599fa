# errors.py
# Exception classes for disk provisioning.
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


class StorageError(Exception):
    pass

# Device


class DeviceError(StorageError):
    pass


class DeviceNotFoundError(StorageError):
    pass

# Geometry


class GeometryError(StorageError):
    pass

# Partitioning


class PartitioningError(StorageError):
    pass


class AmbiguousPartitionError(PartitioningError):

    """ A table mutation did not produce exactly one new partition node. """

    def __init__(self, msg, new_names=None):
        super(AmbiguousPartitionError, self).__init__(msg)
        self.new_names = sorted(new_names or [])


class UnusableConfigurationError(StorageError):

    """ User has an unusable initial storage configuration. """
    suggestion = ""


class NotEnoughFreeSpaceError(UnusableConfigurationError):
    suggestion = "Pick a larger partition or free-space region."


class PartitionNotOnDiskError(UnusableConfigurationError):
    suggestion = "Select a partition that belongs to the target disk."

# DeviceFormat


class DeviceFormatError(StorageError):
    pass


class FormatCreateError(DeviceFormatError):
    pass


class FSError(DeviceFormatError):
    pass


class FSMountError(FSError):
    pass

# external dependencies


class AvailabilityError(StorageError):
    """ Raised if problem determining availability of external resource. """


class ThreadError(StorageError):
    """ An error occurred in a non-main thread. """

# devicelibs


class SwapError(StorageError):
    pass


class CryptoError(StorageError):
    pass


class LVMError(StorageError):
    pass


class DMError(StorageError):
    pass
