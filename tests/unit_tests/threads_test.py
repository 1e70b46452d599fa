import threading
import unittest
from unittest import mock

from diskprov.errors import ThreadError
from diskprov.threads import disk_lock, run_in_thread


class DiskLockTestCase(unittest.TestCase):

    def test_exclusive(self):
        with disk_lock("/dev/sdx"):
            with self.assertRaises(ThreadError):
                with disk_lock("/dev/sdx"):
                    pass

            # other disks are independent
            with disk_lock("/dev/sdy"):
                pass

        # released on exit
        with disk_lock("/dev/sdx"):
            pass

    def test_released_on_error(self):
        with self.assertRaises(KeyError):
            with disk_lock("/dev/sdx"):
                raise KeyError("boom")

        with disk_lock("/dev/sdx"):
            pass

    def test_other_thread(self):
        errors = []

        def worker():
            try:
                with disk_lock("/dev/sdz"):
                    pass
            except ThreadError as e:
                errors.append(e)

        with disk_lock("/dev/sdz"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        self.assertEqual(len(errors), 1)


class RunInThreadTestCase(unittest.TestCase):

    def test_run_in_thread(self):
        done = threading.Event()
        provisioner = mock.Mock()
        provisioner.plan.disk.name = "sdb"
        provisioner.run.side_effect = done.set

        thread = run_in_thread(provisioner)
        thread.join(5)

        self.assertTrue(done.is_set())
        self.assertTrue(thread.daemon)
        self.assertEqual(thread.name, "diskprov-sdb")

        thread = run_in_thread(provisioner, name="worker")
        thread.join(5)
        self.assertEqual(thread.name, "worker")
