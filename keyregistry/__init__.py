#
# Python-keyregistry -- Wallet Key Material and Identity Registry
#
# Copyright (c) 2022, Dominion Research & Development Corp.
#
# Python-keyregistry is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation, either version 3 of the License, or (at your option) any later
# version.  It is also available under alternative (eg. Commercial) licenses, at
# your option.  See the LICENSE file at the top of the source tree.
#
# Python-keyregistry is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE. See the GNU General Public License for more details.
#
from __future__		import annotations

from .version		import __version__			# noqa F401
from .hashing		import hash256, hash160, uint160, uint256	# noqa F401
from .types		import KeyID, ScriptID, PubKey, Key, HDSeed, path_edit  # noqa F401
from .identity		import (  # noqa F401
    IdentityID, Identity, IdentityState, IdentityWithHistory, SubNames, parse_subnames, clean_name, name_id,
)
from .shielded		import (  # noqa F401
    NoteDecryption,
    SaplingExtendedSpendingKey, SaplingExpandedSpendingKey, SaplingFullViewingKey,
    SaplingIncomingViewingKey, SaplingPaymentAddress,
    SproutSpendingKey, SproutViewingKey, SproutPaymentAddress,
)
from .keystore		import (  # noqa F401
    KeyStore, BasicKeyStore, ScriptConditionDecoder, NullConditionDecoder, script_or_identity_id,
)

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"
