# arch.py
# Firmware detection.
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


def is_efi():
    """
    :return: True if the hardware supports EFI, False otherwise.
    :rtype: boolean

    """
    if os.path.exists("/sys/firmware/efi"):
        return True
    else:
        return False
