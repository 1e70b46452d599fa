# geometry.py
# MiB boundary arithmetic and partition node naming.
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
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP

from .errors import GeometryError, NotEnoughFreeSpaceError

# first usable MiB on a GPT disk; the primary header and entries live below it
GPT_FIRST_USABLE = 1

_MIB_SUFFIX = re.compile(r"\s*mib\s*$", re.IGNORECASE)
_TRAILING_DIGITS = re.compile(r"(\d+)$")


def parse_mib(value):
    """ Parse a MiB quantity as printed by partitioning tools.

        :param value: e.g. "1.00MiB", "513MiB", "2048,5", 42
        :returns: the value or None if it cannot be parsed
        :rtype: :class:`decimal.Decimal` or NoneType

        A comma is accepted as the decimal separator.
    """
    if value is None:
        return None

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    else:
        text = _MIB_SUFFIX.sub("", str(value).strip()).replace(",", ".")
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None

    if not result.is_finite():
        return None

    return result


def round_mib(value):
    """ Round a MiB quantity to the nearest integer, halves away from zero. """
    parsed = parse_mib(value)
    if parsed is None:
        raise GeometryError("invalid MiB value: %r" % (value,))

    return int(parsed.to_integral_value(rounding=ROUND_HALF_UP))


def to_bounds(start, end):
    """ Convert a raw extent into integer MiB bounds safe to partition.

        :param start: extent start as a string or number
        :param end: extent end as a string or number
        :returns: (start, end) with start rounded up and end rounded down
        :rtype: tuple of int
        :raises: :class:`~.errors.GeometryError`

        The start is never below the first usable MiB of a GPT disk.
    """
    start_mib = parse_mib(start)
    end_mib = parse_mib(end)
    if start_mib is None or end_mib is None:
        raise GeometryError("could not parse extent %r - %r" % (start, end))

    start_int = int(start_mib.to_integral_value(rounding=ROUND_CEILING))
    end_int = int(end_mib.to_integral_value(rounding=ROUND_FLOOR))
    start_int = max(start_int, GPT_FIRST_USABLE)
    if start_int >= end_int:
        raise GeometryError("extent %s - %s MiB is empty" % (start, end))

    return (start_int, end_int)


def layout_region(start, end, boot_size, end_margin, min_root_size):
    """ Split a region into an optional boot partition followed by root.

        :param int start: first MiB of the region
        :param int end: last MiB of the region
        :param int boot_size: size of the boot partition to carve, 0 for none
        :param int end_margin: MiB left unused at the end of the region
        :param int min_root_size: smallest acceptable root partition
        :returns: (boot bounds or None, root bounds)
        :raises: :class:`~.errors.NotEnoughFreeSpaceError`
    """
    boot = None
    root_start = start
    if boot_size:
        boot = (start, start + boot_size)
        root_start = start + boot_size

    root_end = end - end_margin
    if root_end - root_start < min_root_size:
        raise NotEnoughFreeSpaceError("region %d - %d MiB is too small for a %d MiB boot "
                                      "partition and a root partition" % (start, end, boot_size))

    return (boot, (root_start, root_end))


def partition_node_for(base, number):
    """ Return the device node of partition number on disk base.

        Disks whose name ends in a digit (nvme0n1, mmcblk0) use a "p"
        separator before the partition number.
    """
    name = os.path.basename(str(base).rstrip("/"))
    separator = "p" if name[-1:].isdigit() else ""
    return "/dev/%s%s%s" % (name, separator, number)


def partition_number_from_path(path):
    """ Return the trailing digits of the last path component, or "". """
    name = os.path.basename(str(path).rstrip("/"))
    match = _TRAILING_DIGITS.search(name)
    if match is None:
        return ""

    return match.group(1)
