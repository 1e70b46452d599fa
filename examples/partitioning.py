import sys

import diskprov
from diskprov.callbacks import create_new_callbacks_register
from diskprov.flags import flags
from diskprov.util import set_up_logging

# usage: partitioning.py DISK [PARTITION | __FREE__:START:END | wipe]
set_up_logging(console_logs=["diskprov"])
flags.debug = True

disk = sys.argv[1]
selection = sys.argv[2] if len(sys.argv) > 2 else None

plan = diskprov.InstallPlan.from_selection(disk, diskprov.BootMode.detect(),
                                           selection=selection,
                                           wipe=(selection == "wipe"))

callbacks = create_new_callbacks_register(on_log=print,
                                          on_error=lambda msg: print("ERROR: %s" % msg),
                                          on_complete=lambda: print("done"))

provisioner = diskprov.Provisioner(plan, callbacks=callbacks)
state = provisioner.run()
if state is None:
    sys.exit(1)

print("root: %s" % state.root)
if state.esp:
    print("esp: %s" % state.esp)
