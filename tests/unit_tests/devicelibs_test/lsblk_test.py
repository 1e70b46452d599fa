import unittest

from diskprov.devicelibs import lsblk


class LsblkTestCase(unittest.TestCase):

    def test_argv(self):
        self.assertEqual(lsblk.lsblk_argv(["NAME", "TYPE"]),
                         ["lsblk", "-P", "-o", "NAME,TYPE"])
        self.assertEqual(lsblk.lsblk_argv(["NAME"], device="/dev/sdb", nodeps=True, in_bytes=True),
                         ["lsblk", "-P", "-b", "-d", "-o", "NAME", "/dev/sdb"])

    def test_parse_pairs(self):
        output = ('NAME="sdb" TYPE="disk" PKNAME="" MOUNTPOINT=""\n'
                  'NAME="sdb1" TYPE="part" PKNAME="sdb" MOUNTPOINT="/run/media/user/My Stick"\n'
                  '\n'
                  'NAME="sdb2" TYPE="part" PKNAME="sdb" MOUNTPOINT="[SWAP]"\n')
        rows = lsblk.parse_pairs(output)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0]["TYPE"], "disk")
        self.assertEqual(rows[0]["PKNAME"], "")
        self.assertEqual(rows[1]["MOUNTPOINT"], "/run/media/user/My Stick")
        self.assertEqual(rows[2]["MOUNTPOINT"], "[SWAP]")

    def test_malformed(self):
        output = ('NAME="sdb1" TYPE="part\n'
                  'NAME="sdc" TYPE="disk" junk\n')
        rows = lsblk.parse_pairs(output)
        # the unterminated quote is dropped, stray tokens are ignored
        self.assertEqual(rows, [{"NAME": "sdc", "TYPE": "disk"}])
