# formats.py
# Filesystem creation, checking and mounting of new partitions.
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

import abc

from .errors import FormatCreateError, FSMountError
from .mounts import esp_mountpoint
from .storage_log import log_method_call
from .util import MISSING_COMMAND_RC

import logging
log = logging.getLogger("diskprov")


class FSMkfs(object, metaclass=abc.ABCMeta):

    """ Creation of one filesystem type. """

    @property
    @abc.abstractmethod
    def fstype(self):
        """ the filesystem type created """

    @property
    @abc.abstractmethod
    def ext(self):
        """ the mkfs program """

    @property
    @abc.abstractmethod
    def args(self):
        """ options for creating filesystem """

    def _mkfs_command(self, device):
        return [self.ext] + self.args + [str(device)]

    def do_task(self, runner, device):
        """ Create the filesystem on device.

            :raises: :class:`~.errors.FormatCreateError`
        """
        rc, _out, err = runner.run(self._mkfs_command(device))
        if rc:
            raise FormatCreateError("failed to create %s filesystem on %s: %s"
                                    % (self.fstype, device, err.strip() or "exit status %d" % rc))


class FATFSMkfs(FSMkfs):
    fstype = "vfat"
    ext = "mkfs.fat"
    args = ["-F32"]


class Ext4FSMkfs(FSMkfs):
    fstype = "ext4"
    ext = "mkfs.ext4"
    # no "contains a file system, proceed anyway?" prompt
    args = ["-F"]


class Ext4FSCK(object):
    _fsck_errors = {4: "File system errors left uncorrected.",
                    8: "Operational error.",
                    16: "Usage or syntax error.",
                    32: "e2fsck cancelled by user request.",
                    128: "Shared library error."}

    ext = "e2fsck"
    # "Force checking even if the file system seems clean." (we might get false results otherwise)
    # + "Automatically repair ("preen") the file system."
    options = ["-f", "-p"]

    def _error_message(self, rc):
        msgs = (self._fsck_errors[c] for c in sorted(self._fsck_errors.keys()) if rc & c)
        return "\n".join(msgs) or None

    def do_task(self, runner, device):
        """ Check the filesystem.

            :returns: None if the check passed, else a description
            :rtype: str or NoneType
        """
        rc, _out, _err = runner.run([self.ext] + self.options + [str(device)])
        if rc == MISSING_COMMAND_RC:
            return "%s could not be run" % self.ext

        return self._error_message(rc)


class FormatExecutor(object):

    """ Formats and mounts freshly created partitions. """

    def __init__(self, runner):
        self.runner = runner

    def format_fat32(self, node):
        log_method_call(self, node)
        FATFSMkfs().do_task(self.runner, node)

    def format_ext4(self, node):
        log_method_call(self, node)
        Ext4FSMkfs().do_task(self.runner, node)

    def check_ext4(self, node):
        """ Run a consistency check on a new ext4 filesystem.

            Problems are logged, never raised.

            :returns: whether the check passed
            :rtype: bool
        """
        log_method_call(self, node)
        error_msg = Ext4FSCK().do_task(self.runner, node)
        if error_msg is not None:
            log.warning("ext4 filesystem check failure on %s: %s", node, error_msg)
            return False

        return True

    def mount(self, node, path):
        """ Mount node at path.

            :raises: :class:`~.errors.FSMountError`
        """
        log_method_call(self, node, path)
        rc, _out, err = self.runner.run(["mount", str(node), path])
        if rc:
            raise FSMountError("failed to mount %s at %s: %s" % (node, path, err.strip() or "exit status %d" % rc))

    def mount_esp(self, node):
        """ Mount node at the staging boot/efi directory, creating it first. """
        path = esp_mountpoint()
        rc, _out, err = self.runner.run(["mkdir", "-p", path])
        if rc:
            raise FSMountError("failed to create %s: %s" % (path, err.strip()))

        self.mount(node, path)
