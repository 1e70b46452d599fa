# availability.py
# Locating the external utilities diskprov depends on.
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

import abc
import os
import shutil

from .flags import flags

import logging
log = logging.getLogger("diskprov")

CACHE_AVAILABILITY = True


class ExternalResource(object):

    """ An external resource. """

    def __init__(self, method, name):
        """ Initializes an instance of an external resource.

            :param method: A method object
            :type method: :class:`Method`
            :param str name: the name of the external resource
        """
        self._method = method
        self.name = name
        self._path = None

    def __str__(self):
        return self.name

    @property
    def path(self):
        """ Location of the resource, or None if it cannot be found. """
        if self._path is not None and CACHE_AVAILABILITY:
            return self._path

        self._path = self._method.locate(self)
        return self._path

    @property
    def availability_errors(self):
        """
            :returns: [] if the resource is available
            :rtype: list of str
        """
        if self.path is None:
            return ["application %s is not in $PATH" % self.name]
        return []

    @property
    def available(self):
        return self.availability_errors == []


class Method(object, metaclass=abc.ABCMeta):

    """ Method for locating an external resource. """

    @abc.abstractmethod
    def locate(self, resource):
        """ Returns the path of the resource or None. """
        raise NotImplementedError()


class PathMethod(Method):

    """ The application is found in $PATH or at a fixed fallback location. """

    def __init__(self, fallbacks=None):
        self.fallbacks = list(fallbacks or [])

    def locate(self, resource):
        search = flags.path_prefix
        if os.environ.get("PATH"):
            search += ":" + os.environ["PATH"]

        found = shutil.which(resource.name, path=search)
        if found:
            return found

        for candidate in self.fallbacks:
            if os.access(candidate, os.X_OK):
                return candidate

        log.debug("application %s not found", resource.name)
        return None


def application(name, fallbacks=None):
    """ Construct an external resource that is an application. """
    return ExternalResource(PathMethod(fallbacks), name)


PARTED_APP = application("parted", fallbacks=["/usr/sbin/parted", "/sbin/parted"])
SGDISK_APP = application("sgdisk")
