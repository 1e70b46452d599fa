# state.py
# The mount state record handed to the OS bootstrap step.
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

import json
import os

from .flags import flags

import logging
log = logging.getLogger("diskprov")


class MountState(object):

    """ Which devices were mounted as root and ESP by the last run. """

    def __init__(self, root, esp=None):
        self.root = str(root)
        self.esp = str(esp) if esp else None

    def __eq__(self, other):
        if not isinstance(other, MountState):
            return NotImplemented
        return (self.root, self.esp) == (other.root, other.esp)

    def __repr__(self):
        return "<MountState root=%s esp=%s>" % (self.root, self.esp)

    def to_json(self):
        data = {"root": self.root}
        if self.esp:
            data["esp"] = self.esp
        return json.dumps(data, separators=(",", ":"))

    @classmethod
    def from_json(cls, text):
        data = json.loads(text)
        if not isinstance(data, dict) or not data.get("root"):
            raise ValueError("mount state has no root device")
        return cls(data["root"], data.get("esp"))

    def write(self, path=None):
        path = path or flags.mount_state_file
        with open(path, "w") as f:
            f.write(self.to_json() + "\n")
        log.info("wrote mount state %s to %s", self.to_json(), path)

    @classmethod
    def read(cls, path=None):
        """ Return the saved mount state, or None if there is none. """
        path = path or flags.mount_state_file
        try:
            with open(path) as f:
                text = f.read()
        except FileNotFoundError:
            return None

        try:
            return cls.from_json(text)
        except ValueError as e:
            log.warning("ignoring malformed mount state in %s: %s", path, e)
            return None


def remove_mount_state(path=None):
    path = path or flags.mount_state_file
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    else:
        log.debug("removed stale mount state %s", path)
