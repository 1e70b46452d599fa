# lsblk.py
# Parsing of lsblk key=value (-P) output.
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

import shlex

import logging
log = logging.getLogger("diskprov")


def lsblk_argv(columns, device=None, nodeps=False, in_bytes=False):
    argv = ["lsblk", "-P"]
    if in_bytes:
        argv.append("-b")
    if nodeps:
        argv.append("-d")
    argv.extend(["-o", ",".join(columns)])
    if device:
        argv.append(str(device))
    return argv


def parse_pairs(output):
    """ Parse lsblk -P output into one dict per device.

        Missing columns simply do not appear in the row. Lines that cannot
        be tokenized are skipped.

        :rtype: list of dict
    """
    rows = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        try:
            tokens = shlex.split(line)
        except ValueError:
            log.debug("skipping malformed lsblk line: %s", line)
            continue

        row = dict()
        for token in tokens:
            (key, sep, value) = token.partition("=")
            if sep:
                row[key] = value.strip()

        if row:
            rows.append(row)

    return rows
