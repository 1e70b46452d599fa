# mounts.py
# Staging mount tree and mount table queries.
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

from .flags import flags

import logging
log = logging.getLogger("diskprov")


def esp_mountpoint():
    return os.path.join(flags.target_root, "boot", "efi")


def staging_mountpoints():
    """ The staging mountpoints, deepest first. """
    return [esp_mountpoint(),
            os.path.join(flags.target_root, "boot"),
            flags.target_root]


def is_external_mount(mountpoint):
    """ Whether mountpoint belongs to removable media auto-mounted by the session. """
    if not mountpoint or mountpoint == "[SWAP]":
        return False

    path = mountpoint.rstrip("/") + "/"
    return any(path.startswith(prefix) for prefix in flags.external_mount_prefixes)


def is_mountpoint(runner, path):
    rc, out, _err = runner.run(["findmnt", "-rn", path])
    return rc == 0 and bool(out.strip())


def mount_source(runner, path):
    """ Return the source of the filesystem mounted at path, or None. """
    source = runner.output(["findmnt", "-no", "SOURCE", path]).strip()
    return source or None


def get_mount_device(mountpoint, mounts_file="/proc/mounts"):
    """ Given a mountpoint, return the device node path mounted there. """
    mount_device = None
    try:
        with open(mounts_file) as f:
            for line in f:
                fields = line.split()
                if len(fields) > 1 and fields[1] == mountpoint:
                    mount_device = fields[0]
    except OSError as e:
        log.debug("could not read %s: %s", mounts_file, e)

    return mount_device
