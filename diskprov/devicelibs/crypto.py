# crypto.py
# LUKS mapping teardown.
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

from ..errors import CryptoError


def luks_close(runner, name):
    """ Close an open LUKS mapping.

        :param runner: the command runner
        :param str name: the mapping name, as in /dev/mapper/<name>
    """
    rc, _out, err = runner.run(["cryptsetup", "close", name])
    if rc:
        raise CryptoError("failed to close LUKS mapping '%s': %s" % (name, err.strip()))
