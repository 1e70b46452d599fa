# callbacks.py
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

"""
Module providing the notification sink a provisioning run reports to.

"""

import logging
log = logging.getLogger("diskprov")


class ProvisionCallbacks(object):

    """ Receives progress, error and completion notifications.

        The base class only logs. User interfaces subclass it or build one
        from plain functions with :func:`create_new_callbacks_register`.
        Notifications arrive on the thread running the provisioner.
    """

    def on_log(self, msg):
        log.debug("progress: %s", msg)

    def on_error(self, msg):
        log.debug("error: %s", msg)

    def on_complete(self):
        log.debug("provisioning complete")


class _CallbacksRegister(ProvisionCallbacks):

    def __init__(self, on_log=None, on_error=None, on_complete=None):
        self._on_log = on_log
        self._on_error = on_error
        self._on_complete = on_complete

    def on_log(self, msg):
        super(_CallbacksRegister, self).on_log(msg)
        if self._on_log is not None:
            self._on_log(msg)

    def on_error(self, msg):
        super(_CallbacksRegister, self).on_error(msg)
        if self._on_error is not None:
            self._on_error(msg)

    def on_complete(self):
        super(_CallbacksRegister, self).on_complete()
        if self._on_complete is not None:
            self._on_complete()


def create_new_callbacks_register(on_log=None, on_error=None, on_complete=None):
    """
    A function for creating a new opaque object holding the references to
    callbacks. Callbacks not given are simply not called.

    :type on_log: str -> NoneType
    :type on_error: str -> NoneType
    :type on_complete: NoneType -> NoneType

    """
    return _CallbacksRegister(on_log, on_error, on_complete)
