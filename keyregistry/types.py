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
import secrets

from typing		import Optional, Union

import base58
import hdwallet

from .defaults		import (
    HD_CRYPTO, HD_PATH_DEFAULT, HD_SEED_BITS, HD_SEED_BITS_DEFAULT,
    PUBKEY_ADDRESS_PREFIX, SCRIPT_ADDRESS_PREFIX, WIF_SECRET_PREFIX,
)
from .hashing		import hash160, uint160, uint256
from .util		import commas, into_bytes

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

__all__				= ( "KeyID", "ScriptID", "PubKey", "Key", "HDSeed", "path_edit" )

log				= logging.getLogger( __package__ )

# The order of the secp256k1 group; valid secret keys are in [1,N)
SECP256K1_N			= 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


def path_edit(
    path: str,
    edit: str,
):
    """Replace the current path w/ the new path, either entirely, or if only partially if a
    continuation of dot(s) followed by some new path segment(s) is provided.  For example, from the
    default path:

        m/44'/0'/0'/0/0

    you can provide "../1/9" to produce "m/44'/0'/0'/1/9", or "...3" to produce "m/44'/0'/0'/0/3".

    """
    if edit.startswith( '.' ):
        if ( new_edit := edit.lstrip( '.' )).startswith( '/' ):
            new_edit	= new_edit[1:]
        new_segs	= new_edit.split( '/' )
        cur_segs	= path.split( '/' )
        log.debug( f"Using {edit} to replace last {len(new_segs)} of {path} with {'/'.join(new_segs)}" )
        if len( new_segs ) >= len( cur_segs ):
            raise ValueError( f"Cannot use {edit} to replace last {len(new_segs)} of {path} with {'/'.join(new_segs)}" )
        res_segs	= cur_segs[:len(cur_segs)-len(new_segs)] + list(filter(None, new_segs))
        return '/'.join( res_segs )
    else:
        return edit


class KeyID( uint160 ):
    """The Hash160 of a serialized public key; the key store's index for transparent keys."""

    def address( self, prefix: int = PUBKEY_ADDRESS_PREFIX ) -> str:
        return base58.b58encode_check( bytes( [prefix] ) + self ).decode( 'ascii' )


class ScriptID( uint160 ):
    """The Hash160 of a serialized redeem script, or an identity's name ID standing in for one."""

    @classmethod
    def from_script( cls, script: bytes ) -> ScriptID:
        return cls( hash160( script ))

    def address( self, prefix: int = SCRIPT_ADDRESS_PREFIX ) -> str:
        return base58.b58encode_check( bytes( [prefix] ) + self ).decode( 'ascii' )


class PubKey( bytes ):
    """A serialized secp256k1 public key; 33 bytes compressed (02/03...), or 65 uncompressed (04...)."""

    def __new__( cls, data: Union[bytes,str] ):
        data			= into_bytes( data )
        if len( data ) == 64:
            data		= b'\x04' + data		# Raw X||Y coordinates
        if not (( len( data ) == 33 and data[0] in (2, 3) )
                or ( len( data ) == 65 and data[0] == 4 )):
            raise ValueError( f"Invalid {len( data )}-byte public key: {data.hex()}" )
        return super().__new__( cls, data )

    @property
    def compressed( self ) -> bool:
        return len( self ) == 33

    @property
    def id( self ) -> KeyID:
        return KeyID( hash160( self ))

    def __repr__( self ):
        return f"{self.__class__.__name__}({self.hex()!r})"


class Key:
    """A transparent secp256k1 private key.  The elliptic curve operations are performed by
    python-hdwallet; we only retain the 32-byte secret, and whether its public key is to be
    serialized compressed.

    Instances are treated as immutable values; equality and hashing are by secret and compression.

    """
    def __init__( self, secret: Union[bytes,str], compressed: bool = True ):
        secret			= into_bytes( secret )
        if len( secret ) != 32 or not 0 < int.from_bytes( secret, 'big' ) < SECP256K1_N:
            raise ValueError( "Private keys must be 32-byte secp256k1 secrets in the range [1,N)" )
        self._secret		= secret
        self._compressed	= bool( compressed )
        self._pubkey		= None

    @classmethod
    def random( cls, compressed: bool = True ) -> Key:
        while True:
            secret		= secrets.token_bytes( 32 )
            if 0 < int.from_bytes( secret, 'big' ) < SECP256K1_N:
                return cls( secret, compressed=compressed )

    @classmethod
    def from_wif( cls, wif: str, prefix: int = WIF_SECRET_PREFIX ) -> Key:
        data			= base58.b58decode_check( wif )
        if data[0] != prefix or len( data ) not in (33, 34) or ( len( data ) == 34 and data[33] != 1 ):
            raise ValueError( f"Unrecognized WIF private key encoding w/ prefix {data[0]:#04x}" )
        return cls( data[1:33], compressed=len( data ) == 34 )

    def wif( self, prefix: int = WIF_SECRET_PREFIX ) -> str:
        data			= bytes( [prefix] ) + self._secret + ( b'\x01' if self._compressed else b'' )
        return base58.b58encode_check( data ).decode( 'ascii' )

    @property
    def secret( self ) -> bytes:
        return self._secret

    @property
    def compressed( self ) -> bool:
        return self._compressed

    @property
    def pubkey( self ) -> PubKey:
        """Derive (once) the serialized public key, via python-hdwallet"""
        if self._pubkey is None:
            wallet		= hdwallet.HDWallet( symbol=HD_CRYPTO )
            wallet.from_private_key( self._secret.hex() )
            self._pubkey	= PubKey( wallet.public_key( compressed=self._compressed ))
        return self._pubkey

    @property
    def id( self ) -> KeyID:
        return self.pubkey.id

    def __eq__( self, other ):
        if not isinstance( other, Key ):
            return NotImplemented
        return self._secret == other._secret and self._compressed == other._compressed

    def __hash__( self ):
        return hash( (self._secret, self._compressed) )

    def __repr__( self ):
        return f"{self.__class__.__name__}({self.id.address()})"


class HDSeed:
    """The root secret from which transparent (BIP-32) and shielded (ZIP-32) keys are derived.  An
    empty seed is the "null" seed, ie. no seed at all.

    """
    def __init__( self, seed: Optional[Union[bytes,str]] = None ):
        seed			= into_bytes( seed or b'' )
        if seed and not HD_SEED_BITS[0] <= len( seed ) * 8 <= HD_SEED_BITS[-1]:
            raise ValueError(
                f"HD seeds must be between {commas( HD_SEED_BITS, final='and' )} bits, not {len( seed ) * 8}" )
        self._seed		= seed

    @classmethod
    def random( cls, bits: int = HD_SEED_BITS_DEFAULT ) -> HDSeed:
        return cls( secrets.token_bytes( bits // 8 ))

    @property
    def raw( self ) -> bytes:
        return self._seed

    def is_null( self ) -> bool:
        return not self._seed

    def fingerprint( self ) -> uint256:
        """Identify a seed without revealing it"""
        return uint256( hashlib.blake2b( self._seed, digest_size=32, person=b"Zcash_HD_Seed_FP" ).digest() )

    def derive_key( self, path: Optional[str] = None ) -> Key:
        """Derive the transparent Key at the BIP-32 path (default: HD_PATH_DEFAULT).  A partial
        path (eg. "../1/3") edits the trailing segments of the default path.

        """
        if self.is_null():
            raise ValueError( "Cannot derive keys from a null HD seed" )
        path			= path_edit( HD_PATH_DEFAULT, path ) if path else HD_PATH_DEFAULT
        if not path.startswith( "m/" ):
            raise ValueError( f"Unrecognized HD wallet derivation path: {path!r}" )
        wallet			= hdwallet.HDWallet( symbol=HD_CRYPTO )
        wallet.from_seed( self._seed.hex() )
        if len( path ) > 2:
            wallet.from_path( path )
        log.debug( f"Derived key at {path} from HD seed {self.fingerprint()}" )
        return Key( wallet.private_key() )

    def __eq__( self, other ):
        if not isinstance( other, HDSeed ):
            return NotImplemented
        return self._seed == other._seed

    def __hash__( self ):
        return hash( self._seed )

    def __repr__( self ):
        return f"{self.__class__.__name__}({'null' if self.is_null() else self.fingerprint()})"
