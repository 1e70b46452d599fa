# storage_log.py
# Call tracing helpers shared by the provisioning components.
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

import inspect
import logging
import sys
import traceback

log = logging.getLogger("diskprov")
log.addHandler(logging.NullHandler())

_IGNORED_FUNCS = ("_caller_and_depth",
                  "log_method_call",
                  "log_exception_info")


def _caller_and_depth():
    stack = inspect.stack()
    for i, frame in enumerate(stack):
        if frame[3] not in _IGNORED_FUNCS:
            return (frame[3], len(stack) - i)

    return ("unknown function?", 0)


def log_method_call(obj, *args, **kwargs):
    """ Log entry into a method of obj along with its arguments.

        Entries are indented by stack depth so nested calls read as a tree
        in the debug log.
    """
    (methodname, depth) = _caller_and_depth()
    fmt = "%s%s.%s:"
    fmt_args = [depth * ' ', obj.__class__.__name__, methodname]

    for arg in args:
        fmt += " %s ;"
        fmt_args.append(arg)

    for k in sorted(kwargs):
        fmt += " %s: %s ;"
        fmt_args.extend([k, kwargs[k]])

    log.debug(fmt, *fmt_args)


def log_exception_info(log_func=log.debug, fmt_str=None, fmt_args=None):
    """Log detailed exception information.

       :param log_func: the desired logging function
       :param str fmt_str: a format string for any additional message
       :param fmt_args: arguments for the format string
       :type fmt_args: a list of str

       Used by best-effort steps that record a failure and keep going.
    """
    fmt_args = fmt_args or []
    spaces = _caller_and_depth()[1] * ' '
    log_func("%sCaught exception, continuing.", spaces)
    if fmt_str:
        log_func("%sProblem description: " + fmt_str, spaces, *fmt_args)

    tb = traceback.format_exception(*sys.exc_info())
    for line in (l.rstrip() for entry in tb for l in entry.split("\n") if l):
        log_func("%s    %s", spaces, line)
