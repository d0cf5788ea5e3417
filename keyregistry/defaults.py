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

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

#
# Identity Names
#
#     An identity name is a '.' or '@' separated sequence of labels, leaf first, eg.
#
#         alice.bob@
#
# Each label is limited to NAME_MAXLEN - 1 characters; characters invalid in a filesystem path
# are replaced with NAME_INVALID_REPLACE.
#
NAME_MAXLEN			= 65
NAME_INVALID_CHARS		= '\\/:*?"<>|'
NAME_INVALID_REPLACE		= '_'
NAME_SEPARATORS			= '.@'

# Identity records, and the number of (most recent) confirmed versions retained for each
IDENTITY_VERSION_INVALID	= 0
IDENTITY_VERSION_CURRENT	= 1
IDENTITY_VERSION_LAST		= IDENTITY_VERSION_CURRENT
IDENTITY_HISTORY_MAX		= 2
IDENTITY_HISTORY_VERSION	= 1

#
# Redeem Scripts
#
#     Any script larger than the maximum script element size could never be pushed as a
# redeemScript, and is refused by the key store.
#
MAX_SCRIPT_ELEMENT_SIZE		= 520

#
# Transparent Keys
#
#     HD Wallet seeds produce transparent secp256k1 keys via BIP-32 derivation, by default at
# the standard BIP-44 Bitcoin path.  Addresses and WIF keys use the Bitcoin mainnet prefixes.
#
HD_CRYPTO			= 'BTC'
HD_PATH_DEFAULT			= "m/44'/0'/0'/0/0"
HD_SEED_BITS			= (128, 512)  # BIP-32 seed length limits, in bits
HD_SEED_BITS_DEFAULT		= 256

PUBKEY_ADDRESS_PREFIX		= 0x00
SCRIPT_ADDRESS_PREFIX		= 0x05
WIF_SECRET_PREFIX		= 0x80

#
# Shielded Keys
#
SAPLING_DIVERSIFIER_SIZE	= 11
