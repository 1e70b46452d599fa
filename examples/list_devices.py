from diskprov import Runner
from diskprov.inspector import DeviceInspector
from diskprov.plan import make_free_space_token
from diskprov.util import set_up_logging

set_up_logging()
inspector = DeviceInspector(Runner())

for disk in inspector.list_disks():
    print("%s  %s MiB  %s" % (disk.path, disk.size, disk.model or ""))
    for part in inspector.list_partitions(disk.path):
        print("\t%s  %s - %s MiB  %s  %s" % (part.path, part.start, part.end,
                                            part.fstype or "-", ",".join(sorted(part.flags))))
    for extent in inspector.list_free_extents(disk.path):
        print("\tfree  %s" % make_free_space_token(extent.start, extent.end))
    if inspector.is_system_disk(disk.path):
        print("\t(hosts the running system)")
