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

import logging
import re

from dataclasses	import dataclass
from enum		import Enum
from typing		import Iterator, List, Optional, Tuple, Union

from .defaults		import (
    NAME_MAXLEN, NAME_INVALID_CHARS, NAME_INVALID_REPLACE, NAME_SEPARATORS,
    IDENTITY_VERSION_INVALID, IDENTITY_VERSION_CURRENT, IDENTITY_VERSION_LAST,
    IDENTITY_HISTORY_MAX, IDENTITY_HISTORY_VERSION,
)
from .hashing		import hash256, hash160, uint160, uint256
from .types		import KeyID
from .util		import into_text

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

log				= logging.getLogger( __package__ )


class IdentityID( uint160 ):
    """The 160-bit ID of an identity, derived from its name and its parent's IdentityID."""


#
# Identity Names
#
#     A name such as "Alice.Bob" is a leaf label "Alice", contained by the "Bob" identity.  Each
# containing label is folded (right to left; outermost ancestor first) into a parent ID:
#
#     parent = Hash160( Hash( label ))				# outermost, w/ no parent
#     parent = Hash160( Hash( parent || Hash( label )))		# each subsequent container
#
# Labels are lower-cased (ASCII only, on the UTF-8 encoding) for hashing, so the IDs of "Alice.Bob"
# and "alice.bob" are identical, but those of "ÉLAN" and "élan" are not.
#
class SubNames:
    """The sanitized labels of a name, leaf first.  Each iteration re-parses the name lazily, so
    the sequence may be traversed any number of times.

    """
    INVALID			= re.compile( '[' + re.escape( NAME_INVALID_CHARS ) + ']' )
    SEPARATORS			= re.compile( '[' + re.escape( NAME_SEPARATORS ) + ']' )

    def __init__( self, name: Union[str,bytes] ):
        self.name		= into_text( name )

    def __iter__( self ) -> Iterator[str]:
        if not self.name:
            return
        cleaned			= self.INVALID.sub( NAME_INVALID_REPLACE, self.name )
        beg			= 0
        for sep in self.SEPARATORS.finditer( cleaned ):
            yield cleaned[beg:sep.start()][:NAME_MAXLEN - 1]
            beg			= sep.end()
        yield cleaned[beg:][:NAME_MAXLEN - 1]

    def __repr__( self ):
        return f"{self.__class__.__name__}({self.name!r})"


def parse_subnames( name: Union[str,bytes] ) -> SubNames:
    """Replace invalid characters, split on '.' and '@', and truncate each label."""
    return SubNames( name )


def clean_name(
    name: Union[str,bytes],
    parent: Optional[Union[uint160,str]] = None,
) -> Tuple[str, IdentityID]:
    """Fold all but the leaf label of a (perhaps multi-part) name into the supplied parent ID.
    Returns the cleaned leaf label (with its original case) and the ID of its immediate container.
    An empty name returns ("", parent) unchanged.

    """
    parent			= IdentityID( parent )
    labels			= list( parse_subnames( name ))
    if not labels:
        return "", parent
    for label in reversed( labels[1:] ):
        digest			= hash256( label.encode( 'UTF-8' ).lower())
        if parent.is_null():
            id_hash		= digest
        else:
            id_hash		= hash256( parent, digest )
        parent			= IdentityID( hash160( id_hash ))
    return labels[0], parent


def name_id(
    name: Union[str,bytes],
    parent: Optional[Union[uint160,str]] = None,
) -> IdentityID:
    """Compute the IdentityID of name, under the supplied parent (default: none).

    The final ID hashes the entire original (ASCII lower-cased, but otherwise uncleaned) name,
    under the supplied parent; not the cleaned leaf under the parent accumulated by clean_name.
    This must be retained bit-for-bit, for compatibility with the IDs of existing identities.

    """
    name			= into_text( name )
    parent			= IdentityID( parent )
    clean_name( name, parent )					# Validates structure only
    digest			= hash256( name.encode( 'UTF-8' ).lower())
    if parent.is_null():
        id_hash			= digest
    else:
        id_hash			= hash256( parent, digest )
    return IdentityID( hash160( id_hash ))


@dataclass( eq=True, frozen=True )      # Makes it hashable
class Identity:
    """One version of an on-chain identity."""
    name: str
    parent: IdentityID			= IdentityID()
    primary_addresses: Tuple[KeyID, ...] = ()
    min_sigs: int			= 1
    revocation_authority: Optional[IdentityID] = None   # Default: the identity itself
    recovery_authority: Optional[IdentityID] = None     # Default: the identity itself
    version: int			= IDENTITY_VERSION_CURRENT
    flags: int				= 0

    def __post_init__( self ):
        # Normalize supplied bytes/hex into their fixed-width ID types
        object.__setattr__( self, 'parent', IdentityID( self.parent ))
        object.__setattr__( self, 'primary_addresses', tuple( KeyID( a ) for a in self.primary_addresses ))
        for authority in ( 'revocation_authority', 'recovery_authority' ):
            if getattr( self, authority ) is not None:
                object.__setattr__( self, authority, IdentityID( getattr( self, authority )))

    def name_id( self, name: Optional[Union[str,bytes]] = None ) -> IdentityID:
        """The ID of name (default: this identity's own name) under this identity's parent."""
        return name_id( self.name if name is None else name, self.parent )

    @property
    def revocation_id( self ) -> IdentityID:
        return self.revocation_authority or self.name_id()

    @property
    def recovery_id( self ) -> IdentityID:
        return self.recovery_authority or self.name_id()

    def is_valid( self ) -> bool:
        leaf,_			= clean_name( self.name, self.parent )
        return (
            IDENTITY_VERSION_CURRENT <= self.version <= IDENTITY_VERSION_LAST
            and 0 < len( leaf ) <= NAME_MAXLEN - 1
            and len( self.primary_addresses ) > 0
            and 0 < self.min_sigs <= len( self.primary_addresses )
        )


class IdentityState( Enum ):
    INVALID			= 0
    VALID			= 1


class IdentityWithHistory:
    """The most recent confirmed versions of one identity, by (unique) block height.

    At most two versions are retained, in strictly increasing height order, so that the prior
    version survives a reorganization of the block containing the latest one.  Updates follow:

    - empty:       the version is inserted
    - one entry:   inserted, unless at the same height (an ignored duplicate)
    - two entries: a height above the lowest evicts the lowest and is inserted, unless it equals
                   the highest (an ignored duplicate); a height at or below the lowest is refused

    Duplicates return True without changing the history; only refusals return False.

    """
    VERSION_INVALID		= IDENTITY_VERSION_INVALID
    VERSION_CURRENT		= IDENTITY_HISTORY_VERSION
    CAPACITY			= IDENTITY_HISTORY_MAX

    def __init__(
        self,
        version: int				= VERSION_CURRENT,
        state: IdentityState			= IdentityState.VALID,
        ids: Optional[List[Tuple[int, Identity]]] = None,
    ):
        ids			= sorted( ids or [], key=lambda hi: hi[0] )
        heights			= [ h for h,_ in ids ]
        if len( set( heights )) != len( heights ):
            raise ValueError( f"Identity history heights must be unique: {heights!r}" )
        if len( ids ) > self.CAPACITY:
            raise ValueError( f"Identity history holds at most {self.CAPACITY} versions, not {len( ids )}" )
        self.version		= version
        self.state		= state
        self._ids		= ids

    def is_valid( self ) -> bool:
        return self.version != self.VERSION_INVALID and self.state is IdentityState.VALID

    @property
    def ids( self ) -> Tuple[Tuple[int, Identity], ...]:
        return tuple( self._ids )

    @property
    def heights( self ) -> Tuple[int, ...]:
        return tuple( h for h,_ in self._ids )

    @property
    def earliest( self ) -> Optional[Tuple[int, Identity]]:
        return self._ids[0] if self._ids else None

    @property
    def latest( self ) -> Optional[Tuple[int, Identity]]:
        return self._ids[-1] if self._ids else None

    def __len__( self ):
        return len( self._ids )

    def __iter__( self ):
        return iter( self.ids )

    def _insert( self, height: int, identity: Identity ):
        self._ids		= sorted( self._ids + [(height, identity)], key=lambda hi: hi[0] )

    def update_identity( self, identity: Identity, txid: Optional[uint256], height: int ) -> bool:
        if not self._ids:
            self._insert( height, identity )
        elif len( self._ids ) == 1:
            if height != self._ids[0][0]:
                self._insert( height, identity )
        elif height > self._ids[0][0]:
            if height != self._ids[-1][0]:
                self._ids	= self._ids[1:]
                self._insert( height, identity )
        else:
            log.info( f"Refusing {identity.name!r} at height {height} (txid {txid}); history is at heights {self.heights}" )
            return False
        return True

    def identity_at( self, height: Optional[int] = None ) -> Optional[Identity]:
        """The latest version confirmed at or below height (default: the latest version)."""
        for h,identity in reversed( self._ids ):
            if height is None or h <= height:
                return identity
        return None

    def copy( self ) -> IdentityWithHistory:
        return IdentityWithHistory( self.version, self.state, list( self._ids ))

    def __eq__( self, other ):
        if not isinstance( other, IdentityWithHistory ):
            return NotImplemented
        return ( self.version, self.state, self._ids ) == ( other.version, other.state, other._ids )

    def __repr__( self ):
        return f"{self.__class__.__name__}({self.state.name}, {', '.join( f'{h}: {i.name}' for h,i in self._ids )})"
