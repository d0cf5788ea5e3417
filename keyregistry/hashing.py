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

import hashlib
import logging

from typing		import Optional, Union

from Crypto.Hash	import RIPEMD160

from .util		import into_bytes

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
Hash primitives and fixed-width hash values.

The 256-bit "Hash" is the Bitcoin double SHA-256 of the concatenated data; the 160-bit "Hash160"
is the RIPEMD-160 of the SHA-256 of the data.  RIPEMD-160 comes from pycryptodome, since
hashlib's support depends on the platform's OpenSSL build.

Fixed-width values are held in their natural (serialized, little-endian) byte order, and
displayed as hex in reverse order, as Bitcoin's uint160/uint256 GetHex does.
"""

log				= logging.getLogger( __package__ )


def hash256( *chunks: bytes ) -> bytes:
    """SHA-256 of the SHA-256 of all the supplied chunks, concatenated"""
    sha				= hashlib.sha256()
    for chunk in chunks:
        sha.update( chunk )
    return hashlib.sha256( sha.digest() ).digest()


def hash160( *chunks: bytes ) -> bytes:
    """RIPEMD-160 of the SHA-256 of all the supplied chunks, concatenated"""
    sha				= hashlib.sha256()
    for chunk in chunks:
        sha.update( chunk )
    return RIPEMD160.new( sha.digest() ).digest()


class uint_base( bytes ):
    """An immutable, fixed-width opaque hash value.  Constructed from raw bytes (in serialized
    order), from reversed-hex text (as displayed), or from nothing (the null value).

    """
    SIZE			= 0

    def __new__( cls, value: Optional[Union[bytes,str]] = None ):
        if value is None:
            value		= bytes( cls.SIZE )
        elif isinstance( value, str ):
            value		= into_bytes( value )[::-1]
        if len( value ) != cls.SIZE:
            raise ValueError( f"{cls.__name__} requires {cls.SIZE} bytes, not {len( value )}" )
        return super().__new__( cls, value )

    def is_null( self ) -> bool:
        return not any( self )

    def hex_reversed( self ) -> str:
        return bytes( self[::-1] ).hex()

    def __str__( self ):
        return self.hex_reversed()

    def __repr__( self ):
        return f"{self.__class__.__name__}({self.hex_reversed()!r})"


class uint160( uint_base ):
    SIZE			= 20


class uint256( uint_base ):
    SIZE			= 32
