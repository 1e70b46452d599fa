# __init__.py
# Entry point for the diskprov partition provisioning library.
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

__version__ = '0.4.0'

import logging
log = logging.getLogger("diskprov")
program_log = logging.getLogger("program")

from .plan import InstallPlan, Strategy, BootMode
from .provisioner import Provisioner, ProvisionState
from .callbacks import ProvisionCallbacks
from .util import Runner
