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

from dataclasses	import dataclass
from typing		import Union

from .defaults		import SAPLING_DIVERSIFIER_SIZE
from .types		import HDSeed

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
Shielded (Sprout and Sapling) key material, as immutable hashable values.

The registry only needs each key type's projections along the derivation chain:

    Sapling:  extended spending key --> full viewing key --> incoming viewing key --> address
    Sprout:   spending key --> viewing key (a_pk, sk_enc) --> payment address

The hash-based steps (PRF^expand, CRH^ivk, ZIP-32 master key generation) follow the Zcash
protocol personalizations.  Steps that require Jubjub or Curve25519 scalar multiplication are the
concern of the zero-knowledge proving library; here they are replaced by personalized BLAKE2b
commitments, which preserve the one-way, deterministic mapping the registry relies upon.
"""

log				= logging.getLogger( __package__ )

# The order of the Jubjub prime-order subgroup
JUBJUB_R			= 0x0e7db4ea6533afa906673b0101343b00a6682093ccc81082d0970e5ed6f72cb7


def prf_expand( sk: bytes, t: bytes ) -> bytes:
    """PRF^expand: 512-bit BLAKE2b w/ personalization "Zcash_ExpandSeed" """
    return hashlib.blake2b( sk + t, person=b"Zcash_ExpandSeed" ).digest()


def to_scalar( data: bytes ) -> bytes:
    """Reduce a little-endian value modulo the Jubjub subgroup order; 32-byte little-endian result"""
    return ( int.from_bytes( data, 'little' ) % JUBJUB_R ).to_bytes( 32, 'little' )


def scalar_mult( generator: bytes, scalar: bytes ) -> bytes:
    """Stand-in for [scalar] generator on Jubjub/Curve25519; a one-way 32-byte commitment"""
    return hashlib.blake2b( scalar, digest_size=32, key=generator, person=b"KeyRegistry_Mult" ).digest()


def _require( name: str, value: bytes, size: int ):
    if not isinstance( value, bytes ) or len( value ) != size:
        raise ValueError( f"{name} must be {size} bytes" )


#
# Sapling
#
@dataclass( eq=True, frozen=True )      # Makes it hashable
class SaplingPaymentAddress:
    d: bytes					# 11-byte diversifier
    pk_d: bytes					# 32-byte diversified transmission key

    def __post_init__( self ):
        _require( "Sapling diversifier", self.d, SAPLING_DIVERSIFIER_SIZE )
        _require( "Sapling pk_d", self.pk_d, 32 )


@dataclass( eq=True, frozen=True )
class SaplingIncomingViewingKey:
    ivk: bytes					# 251-bit scalar, 32-byte little-endian

    def __post_init__( self ):
        _require( "Sapling ivk", self.ivk, 32 )

    def address( self, d: bytes ) -> SaplingPaymentAddress:
        """The payment address for diversifier d:  pk_d = [ivk] g_d"""
        g_d			= hashlib.blake2s( d, person=b"Zcash_gd" ).digest()
        return SaplingPaymentAddress( d, scalar_mult( g_d, self.ivk ))


@dataclass( eq=True, frozen=True )
class SaplingFullViewingKey:
    ak: bytes
    nk: bytes
    ovk: bytes

    def __post_init__( self ):
        for name in ( 'ak', 'nk', 'ovk' ):
            _require( f"Sapling {name}", getattr( self, name ), 32 )

    def in_viewing_key( self ) -> SaplingIncomingViewingKey:
        """CRH^ivk: BLAKE2s-256 "Zcashivk" of ak || nk, truncated to 251 bits"""
        ivk			= bytearray( hashlib.blake2s( self.ak + self.nk, person=b"Zcashivk" ).digest() )
        ivk[31]		       &= 0x07
        return SaplingIncomingViewingKey( bytes( ivk ))


@dataclass( eq=True, frozen=True )
class SaplingExpandedSpendingKey:
    ask: bytes
    nsk: bytes
    ovk: bytes

    def __post_init__( self ):
        for name in ( 'ask', 'nsk', 'ovk' ):
            _require( f"Sapling {name}", getattr( self, name ), 32 )

    @classmethod
    def from_spending_key( cls, sk: bytes ) -> SaplingExpandedSpendingKey:
        return cls(
            ask		= to_scalar( prf_expand( sk, b'\x00' )),
            nsk		= to_scalar( prf_expand( sk, b'\x01' )),
            ovk		= prf_expand( sk, b'\x02' )[:32],
        )

    def full_viewing_key( self ) -> SaplingFullViewingKey:
        return SaplingFullViewingKey(
            ak		= scalar_mult( b"spend_authorizing_key_generator", self.ask ),
            nk		= scalar_mult( b"proof_authorizing_key_generator", self.nsk ),
            ovk		= self.ovk,
        )


@dataclass( eq=True, frozen=True )
class SaplingExtendedSpendingKey:
    """A ZIP-32 extended spending key; the registry's Sapling spending keys."""
    depth: int
    parent_fvk_tag: bytes
    child_index: int
    chaincode: bytes
    expsk: SaplingExpandedSpendingKey
    dk: bytes

    def __post_init__( self ):
        _require( "Sapling parent FVK tag", self.parent_fvk_tag, 4 )
        _require( "Sapling chaincode", self.chaincode, 32 )
        _require( "Sapling diversifier key", self.dk, 32 )

    @classmethod
    def master( cls, seed: Union[HDSeed,bytes] ) -> SaplingExtendedSpendingKey:
        """The ZIP-32 master key:  I = BLAKE2b-512 "ZcashIP32Sapling" of the seed; sk||c = I"""
        if isinstance( seed, HDSeed ):
            if seed.is_null():
                raise ValueError( "Cannot derive a Sapling master key from a null HD seed" )
            seed		= seed.raw
        i			= hashlib.blake2b( seed, person=b"ZcashIP32Sapling" ).digest()
        sk,chaincode		= i[:32],i[32:]
        return cls(
            depth		= 0,
            parent_fvk_tag	= bytes( 4 ),
            child_index		= 0,
            chaincode		= chaincode,
            expsk		= SaplingExpandedSpendingKey.from_spending_key( sk ),
            dk			= prf_expand( sk, b'\x10' )[:32],
        )

    def full_viewing_key( self ) -> SaplingFullViewingKey:
        return self.expsk.full_viewing_key()

    def diversifier( self, j: int = 0 ) -> bytes:
        """The j'th diversifier, from the diversifier key"""
        return hashlib.blake2b(
            self.dk + j.to_bytes( SAPLING_DIVERSIFIER_SIZE, 'little' ),
            digest_size=SAPLING_DIVERSIFIER_SIZE, person=b"Zcash_Diversify",
        ).digest()

    def default_address( self ) -> SaplingPaymentAddress:
        return self.full_viewing_key().in_viewing_key().address( self.diversifier( 0 ))


#
# Sprout
#
def prf_addr( a_sk: bytes, t: int ) -> bytes:
    """PRF^addr over the 252-bit a_sk, w/ the 4-bit "1100" prefix, and the byte t"""
    return hashlib.sha256( bytes( [0xc0 | a_sk[0]] ) + a_sk[1:] + bytes( [t] ) + bytes( 31 )).digest()


def clamp_curve25519( key: bytes ) -> bytes:
    clamped			= bytearray( key )
    clamped[0]		       &= 248
    clamped[31]		       &= 127
    clamped[31]		       |= 64
    return bytes( clamped )


@dataclass( eq=True, frozen=True )
class SproutPaymentAddress:
    a_pk: bytes
    pk_enc: bytes

    def __post_init__( self ):
        _require( "Sprout a_pk", self.a_pk, 32 )
        _require( "Sprout pk_enc", self.pk_enc, 32 )


@dataclass( eq=True, frozen=True )
class NoteDecryption:
    """The context used by transaction scanning to trial-decrypt notes sent to an address."""
    sk_enc: bytes

    def __post_init__( self ):
        _require( "Sprout sk_enc", self.sk_enc, 32 )

    @property
    def pk_enc( self ) -> bytes:
        return scalar_mult( b"curve25519_base_point", self.sk_enc )


@dataclass( eq=True, frozen=True )
class SproutViewingKey:
    a_pk: bytes
    sk_enc: bytes

    def __post_init__( self ):
        _require( "Sprout a_pk", self.a_pk, 32 )
        _require( "Sprout sk_enc", self.sk_enc, 32 )

    def address( self ) -> SproutPaymentAddress:
        return SproutPaymentAddress( self.a_pk, NoteDecryption( self.sk_enc ).pk_enc )


@dataclass( eq=True, frozen=True )
class SproutSpendingKey:
    a_sk: bytes					# 252 bits; the top 4 bits must be zero

    def __post_init__( self ):
        _require( "Sprout a_sk", self.a_sk, 32 )
        if self.a_sk[0] & 0xf0:
            raise ValueError( "Sprout a_sk must be 252 bits; the high 4 bits must be zero" )

    @classmethod
    def random( cls ) -> SproutSpendingKey:
        a_sk			= bytearray( secrets.token_bytes( 32 ))
        a_sk[0]		       &= 0x0f
        return cls( bytes( a_sk ))

    def receiving_key( self ) -> bytes:
        return clamp_curve25519( prf_addr( self.a_sk, 1 ))

    def viewing_key( self ) -> SproutViewingKey:
        return SproutViewingKey( prf_addr( self.a_sk, 0 ), self.receiving_key() )

    def address( self ) -> SproutPaymentAddress:
        return self.viewing_key().address()
