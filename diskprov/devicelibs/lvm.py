# lvm.py
# LVM volume group deactivation.
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

from ..errors import LVMError


def lv_vg_name(runner, lv_path):
    """ Return the name of the volume group lv_path belongs to, or None. """
    rc, out, _err = runner.run(["lvs", "--noheadings", "-o", "vg_name", lv_path])
    if rc:
        return None

    for line in out.splitlines():
        if line.strip():
            return line.strip()

    return None


def vgdeactivate(runner, vg_name):
    rc, _out, err = runner.run(["vgchange", "-an", vg_name])
    if rc:
        raise LVMError("vgdeactivate failed for %s: %s" % (vg_name, err.strip()))
