# gpt.py
# GPT partition type and flag constants.
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

import uuid

GPT_VOL_ESP = "esp"

_gpt_common_uuid = {
    GPT_VOL_ESP: uuid.UUID("c12a7328-f81f-11d2-ba4b-00a0c93ec93b"),
}

# parted flag names
ESP_FLAG = "esp"
BIOS_GRUB_FLAG = "bios_grub"

# GPT partition name given to a newly created ESP
ESP_PART_NAME = "ESP"

# substrings of a partition label that mark an ESP
ESP_LABEL_HINTS = ("esp", "efi system")

ESP_FSTYPES = ("vfat", "fat32")
FAT_FSTYPES = ("vfat", "fat32", "msdos")


def _is_part_type(parttype, vol_type):
    if not parttype:
        return False

    try:
        return uuid.UUID(parttype.strip()) == _gpt_common_uuid[vol_type]
    except ValueError:
        return False


def is_esp_part_type(parttype):
    """ Whether the partition type GUID is the EFI System Partition type. """
    return _is_part_type(parttype, GPT_VOL_ESP)


def is_esp_label(label):
    if not label:
        return False

    label = label.lower()
    return any(hint in label for hint in ESP_LABEL_HINTS)
