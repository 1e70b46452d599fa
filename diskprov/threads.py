# threads.py
# Serializing provisioning runs and running them off the UI thread.
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
import threading
from contextlib import contextmanager

from .errors import ThreadError
from .flags import flags

import logging
log = logging.getLogger("diskprov")

_registry_lock = threading.Lock()
_disk_locks = {}


@contextmanager
def disk_lock(disk):
    """ Hold the provisioning lock of disk for the duration of the block.

        :raises: :class:`~.errors.ThreadError` if another run already
                 holds it
    """
    key = os.path.realpath(str(disk))
    with _registry_lock:
        lock = _disk_locks.setdefault(key, threading.Lock())

    if not lock.acquire(blocking=False):
        raise ThreadError("a provisioning run is already in progress on %s" % disk)

    if flags.debug_threads:
        log.debug("%s acquired the lock for %s", threading.current_thread().name, key)

    try:
        yield
    finally:
        lock.release()


def run_in_thread(provisioner, name=None):
    """ Start provisioner.run() on a worker thread and return the thread.

        Results are reported through the provisioner's callbacks.
    """
    thread = threading.Thread(target=provisioner.run,
                              name=name or "diskprov-%s" % provisioner.plan.disk.name)
    thread.daemon = True
    thread.start()
    return thread
