# udev.py
# Thin udev helpers for device settling and holder lookup.
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

import pyudev

import logging
log = logging.getLogger("diskprov")

_udev_context = None


def _get_context():
    global _udev_context

    if _udev_context is None:
        _udev_context = pyudev.Context()

    return _udev_context


def get_device(device_node):
    """ Return the pyudev device for a device node, or None. """
    try:
        return pyudev.Devices.from_device_file(_get_context(), device_node)
    except (pyudev.DeviceNotFoundError, OSError, ValueError) as e:
        log.debug("udev lookup of %s failed: %s", device_node, e)
        return None


def settle(runner):
    """ Wait for the udev queue to settle.

        :param runner: the command runner
    """
    # wait maximal 300 seconds for udev to be done running blkid, lvm,
    # mdadm etc.
    runner.run(["udevadm", "settle", "--timeout=300"])


def device_get_holders(device_node):
    """ Return the kernel names of the devices holding device_node open. """
    device = get_device(device_node)
    if device is None:
        return []

    holders_dir = os.path.join(device.sys_path, "holders")
    if not os.path.isdir(holders_dir):
        return []

    return sorted(os.listdir(holders_dir))


def device_is_removable(device_node):
    """ Whether the disk is removable media or attached over USB. """
    device = get_device(device_node)
    if device is None:
        return False

    if device.properties.get("ID_BUS") == "usb":
        return True

    try:
        return device.attributes.asstring("removable") == "1"
    except KeyError:
        return False
