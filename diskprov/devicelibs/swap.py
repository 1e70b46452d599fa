# swap.py
# Swap teardown.
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

from ..errors import SwapError

import logging
log = logging.getLogger("diskprov")


def get_active_swaps(swaps_file="/proc/swaps"):
    """ Return the device paths of all active swap areas. """
    try:
        with open(swaps_file) as f:
            lines = f.readlines()
    except OSError as e:
        log.debug("could not read %s: %s", swaps_file, e)
        return []

    # first line is the column header
    return [line.split()[0] for line in lines[1:] if line.strip()]


def swapoff(runner, device):
    rc, _out, err = runner.run(["swapoff", device])
    if rc:
        raise SwapError("swapoff failed for '%s': %s" % (device, err.strip()))
