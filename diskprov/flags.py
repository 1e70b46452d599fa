# flags.py
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

class Flags(object):

    def __init__(self):
        #
        # mode of operation
        #
        self.debug = False
        self.debug_threads = False

        #
        # staging layout
        #
        self.target_root = "/mnt"

        # written after a successful run, removed before the next one
        self.mount_state_file = "/tmp/diskprov-target.json"

        #
        # geometry, all values in MiB
        #
        self.esp_size = 512
        self.bios_boot_size = 2

        # free extents at or below this size are never used
        self.min_free_extent = 10

        # space left unallocated at the end of every root partition
        self.end_margin = 1

        self.min_root_size = 1

        #
        # device handling
        #

        # seconds to wait after a partition table reread
        self.settle_delay = 1

        # partitions mounted under these prefixes belong to the desktop
        # session and are released before provisioning
        self.external_mount_prefixes = ("/media/", "/run/media/", "/mnt/")

        # power off removable disks at the end of a full detach
        self.power_off_removable = True

        # prepended to $PATH for every external command
        self.path_prefix = "/usr/sbin:/usr/bin:/sbin:/bin"


flags = Flags()
