import os
import shutil
import subprocess
import tempfile
import unittest
from unittest import mock

from diskprov import util
from diskprov.flags import flags


class RunProgramTestCase(unittest.TestCase):

    def _popen(self, returncode=0, out=b"", err=b""):
        proc = mock.Mock()
        proc.returncode = returncode
        proc.communicate.return_value = (out, err)
        return proc

    @mock.patch("subprocess.Popen")
    def test_run_program(self, popen):
        popen.return_value = self._popen(0, b"sdb\n", b"")
        self.assertEqual(util._run_program(["lsblk", "-d"]), (0, "sdb\n", ""))

        args, kwargs = popen.call_args
        self.assertEqual(args[0], ["lsblk", "-d"])
        self.assertEqual(kwargs["env"]["LC_ALL"], "C")
        self.assertTrue(kwargs["env"]["PATH"].startswith(flags.path_prefix))
        self.assertEqual(kwargs["stdin"], subprocess.DEVNULL)

    @mock.patch("subprocess.Popen")
    def test_env_update(self, popen):
        popen.return_value = self._popen()
        util._run_program(["true"], env_update={"LANG": "C"})
        self.assertEqual(popen.call_args[1]["env"]["LANG"], "C")

    @mock.patch("subprocess.Popen")
    def test_failure_output(self, popen):
        popen.return_value = self._popen(1, b"", b"Error: \xff bad label\n")
        rc, out, err = util._run_program(["parted", "/dev/sdb"])
        self.assertEqual(rc, 1)
        self.assertEqual(out, "")
        self.assertIn("bad label", err)

    @mock.patch("subprocess.Popen", side_effect=FileNotFoundError(2, "No such file or directory"))
    def test_missing_command(self, _popen):
        self.assertEqual(util._run_program(["mkfs.fat", "/dev/sdb1"]),
                         (util.MISSING_COMMAND_RC, "", "No such file or directory"))


class RunnerTestCase(unittest.TestCase):

    @mock.patch("diskprov.util._run_program")
    def test_runner(self, run_program):
        runner = util.Runner(prefix=["sudo", "-n"], env={"LANG": "C"})

        run_program.return_value = (0, "out\n", "")
        self.assertEqual(runner.run(["wipefs", "-a", "/dev/sdb"]), (0, "out\n", ""))
        run_program.assert_called_with(["sudo", "-n", "wipefs", "-a", "/dev/sdb"], env_update={"LANG": "C"})
        self.assertTrue(runner.succeeds(["true"]))
        self.assertEqual(runner.output(["echo"]), "out\n")

        run_program.return_value = (1, "partial\n", "failed")
        self.assertFalse(runner.succeeds(["false"]))
        self.assertEqual(runner.output(["false"]), "")

    @mock.patch("diskprov.util._run_program", return_value=(0, "", ""))
    def test_no_prefix(self, run_program):
        util.Runner().run(["partprobe"])
        run_program.assert_called_with(["partprobe"], env_update={})


class SetUpLoggingTestCase(unittest.TestCase):

    def test_set_up_logging(self):
        tmpdir = tempfile.mkdtemp(prefix="diskprov-log-")
        self.addCleanup(shutil.rmtree, tmpdir, True)
        handlers = list(util.log.handlers)
        self.addCleanup(setattr, util.log, "handlers", handlers)
        self.addCleanup(setattr, util.program_log, "handlers", list(util.program_log.handlers))
        warnings_log = util.logging.getLogger("py.warnings")
        self.addCleanup(setattr, warnings_log, "handlers", list(warnings_log.handlers))

        util.set_up_logging(log_dir=tmpdir, log_prefix="test")
        util.log.info("provisioning /dev/sdb")
        for handler in util.log.handlers:
            handler.flush()

        with open(os.path.join(tmpdir, "test.log")) as f:
            self.assertIn("provisioning /dev/sdb", f.read())
