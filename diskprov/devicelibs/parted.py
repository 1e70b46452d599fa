# parted.py
# Parsing of parted machine readable (-m) output.
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

from collections import namedtuple

from ..geometry import parse_mib

import logging
log = logging.getLogger("diskprov")

DiskInfo = namedtuple("DiskInfo", ["path", "size", "transport", "label_type", "model"])
PartitionRow = namedtuple("PartitionRow", ["number", "start", "end", "size", "fstype", "name", "flags"])

FREE_MARKER = "free"


def print_argv(parted, disk, free=False):
    argv = [parted, "-m", "-s", disk, "unit", "MiB", "print"]
    if free:
        argv.append("free")
    return argv


def _fields(output):
    for line in output.splitlines():
        line = line.strip()
        if not line or line == "BYT;":
            continue

        yield line.rstrip(";").split(":")


def _is_free_row(fields):
    return len(fields) == 5 and fields[4] == FREE_MARKER


def parse_disk_info(output):
    """ Return the disk description line of a parted print, or None.

        The line reads ``path:size:transport:lss:pss:label:model:flags``.
    """
    for fields in _fields(output):
        if not fields[0].startswith("/"):
            continue

        size = parse_mib(fields[1]) if len(fields) > 1 else None
        if size is None:
            log.debug("unparsable disk line in parted output: %s", ":".join(fields))
            return None

        return DiskInfo(path=fields[0],
                        size=size,
                        transport=fields[2] if len(fields) > 2 else None,
                        label_type=fields[5] if len(fields) > 5 else None,
                        model=fields[6] if len(fields) > 6 else None)

    return None


def parse_partitions(output):
    """ Return the partition rows of a parted print.

        Free space rows and rows that cannot be parsed are skipped.

        :rtype: list of :class:`PartitionRow`
    """
    rows = []
    for fields in _fields(output):
        if not fields[0].isdigit() or _is_free_row(fields) or len(fields) < 4:
            continue

        start = parse_mib(fields[1])
        end = parse_mib(fields[2])
        if start is None or end is None:
            log.debug("skipping malformed parted row: %s", ":".join(fields))
            continue

        flags = set()
        if len(fields) > 6:
            flags = set(f.strip() for f in fields[6].split(",") if f.strip())

        rows.append(PartitionRow(number=int(fields[0]),
                                 start=start,
                                 end=end,
                                 size=parse_mib(fields[3]),
                                 fstype=(fields[4] if len(fields) > 4 else "") or None,
                                 name=(fields[5] if len(fields) > 5 else "") or None,
                                 flags=flags))

    return rows


def parse_free(output):
    """ Return (start, end) of every row marked as free space.

        :rtype: list of tuple of :class:`decimal.Decimal`
    """
    extents = []
    for fields in _fields(output):
        if not _is_free_row(fields):
            continue

        start = parse_mib(fields[1])
        end = parse_mib(fields[2])
        if start is None or end is None:
            log.debug("skipping malformed free space row: %s", ":".join(fields))
            continue

        extents.append((start, end))

    return extents
