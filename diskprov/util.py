# util.py
# External command execution and logging setup.
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
import subprocess
import sys
from threading import Lock

from .flags import flags

import logging
log = logging.getLogger("diskprov")
program_log = logging.getLogger("program")
console_log = logging.getLogger("diskprov.console")

program_log_lock = Lock()

# shell convention for "command not found"
MISSING_COMMAND_RC = 127


def _run_program(argv, env_update=None):
    with program_log_lock:  # pylint: disable=not-context-manager
        program_log.info("Running... %s", " ".join(argv))

        env = os.environ.copy()
        env.update({"LC_ALL": "C"})
        path = env.get("PATH")
        env["PATH"] = flags.path_prefix + (":" + path if path else "")
        if env_update:
            env.update(env_update)

        try:
            proc = subprocess.Popen(argv,
                                    stdin=subprocess.DEVNULL,
                                    stdout=subprocess.PIPE,
                                    stderr=subprocess.PIPE,
                                    close_fds=True,
                                    env=env)

            out, err = proc.communicate()
        except OSError as e:
            program_log.error("Error running %s: %s", argv[0], e.strerror)
            return (MISSING_COMMAND_RC, "", e.strerror or str(e))

        out = out.decode("utf-8", errors="replace")
        err = err.decode("utf-8", errors="replace")
        if out:
            program_log.info("stdout:")
            for line in out.splitlines():
                program_log.info("%s", line)

        if err:
            program_log.info("stderr:")
            for line in err.splitlines():
                program_log.info("%s", line)

        program_log.debug("Return code: %d", proc.returncode)

    return (proc.returncode, out, err)


class Runner(object):

    """ The execution context every external command is started from.

        diskprov assumes it already runs with enough privilege to modify
        block devices. Callers that need an escalation helper pass it as
        the prefix, e.g. ``Runner(prefix=["sudo", "-n"])``. Tests replace
        the runner with a scripted fake.
    """

    def __init__(self, prefix=None, env=None):
        """
            :keyword prefix: argv prepended to every command
            :type prefix: list of str
            :keyword dict env: extra environment for every command
        """
        self.prefix = list(prefix or [])
        self.env = dict(env or {})

    def __repr__(self):
        return "<%s prefix=%s>" % (self.__class__.__name__, self.prefix)

    def run(self, argv):
        """ Run a command and wait for it to finish.

            :param argv: the command and its arguments
            :type argv: list of str
            :returns: exit code, stdout and stderr
            :rtype: tuple of (int, str, str)
        """
        return _run_program(self.prefix + list(argv), env_update=self.env)

    def succeeds(self, argv):
        return self.run(argv)[0] == 0

    def output(self, argv):
        """ Return the stdout of a command, or "" if it failed. """
        rc, out, _err = self.run(argv)
        if rc != 0:
            return ""
        return out


def set_up_logging(log_dir="/tmp", log_prefix="diskprov", console_logs=None):
    """ Configure the diskprov logger to write out a log file.

        :keyword str log_dir: path to directory where log files are
        :keyword str log_prefix: prefix for log file names
        :keyword list console_logs: list of log names to output on the console
    """
    log.setLevel(logging.DEBUG)
    program_log.setLevel(logging.DEBUG)

    def make_handler(path, prefix, level):
        log_file = "%s/%s.log" % (path, prefix)
        log_file = os.path.realpath(log_file)
        handler = logging.FileHandler(log_file)
        handler.setLevel(level)
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s/%(threadName)s: %(message)s")
        handler.setFormatter(formatter)
        return handler

    handler = make_handler(log_dir, log_prefix, logging.DEBUG)
    log.addHandler(handler)
    program_log.addHandler(handler)

    # capture python warnings in our logs
    warning_log = logging.getLogger("py.warnings")
    warning_log.addHandler(handler)

    if console_logs:
        set_up_console_log(log_names=console_logs)

    log.info("sys.argv = %s", sys.argv)


def set_up_console_log(log_names=None):
    log_names = log_names or []
    handler = logging.StreamHandler()
    console_log.setLevel(logging.DEBUG)
    handler.setLevel(logging.DEBUG)
    formatter = logging.Formatter("%(threadName)s: %(message)s")
    handler.setFormatter(formatter)
    console_log.addHandler(handler)
    for name in log_names:
        logging.getLogger(name).addHandler(handler)
