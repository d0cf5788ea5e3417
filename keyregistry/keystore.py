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
import threading

from typing		import Dict, Optional, Set

from .defaults		import MAX_SCRIPT_ELEMENT_SIZE
from .hashing		import uint256
from .identity		import Identity, IdentityID, IdentityWithHistory
from .shielded		import (
    NoteDecryption,
    SaplingExtendedSpendingKey, SaplingFullViewingKey, SaplingIncomingViewingKey, SaplingPaymentAddress,
    SproutPaymentAddress, SproutSpendingKey, SproutViewingKey,
)
from .types		import HDSeed, Key, KeyID, PubKey, ScriptID

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

log				= logging.getLogger( __package__ )


class ScriptConditionDecoder:
    """Recognizes scripts that pay to an identity-primary crypto-condition.  Implementations
    return the Identity embedded in the condition, or None if the script is not such a payment
    (or cannot be decoded).

    """
    def identity_primary( self, script: bytes ) -> Optional[Identity]:
        raise NotImplementedError( f"{self.__class__.__name__} must implement identity_primary" )


class NullConditionDecoder( ScriptConditionDecoder ):
    """Recognizes no crypto-conditions; every script is indexed by its own hash."""
    def identity_primary( self, script: bytes ) -> Optional[Identity]:
        return None


def script_or_identity_id(
    script: bytes,
    decoder: Optional[ScriptConditionDecoder] = None,
) -> ScriptID:
    """The ScriptID under which a redeem script is stored.  A script paying to a valid identity's
    primary condition is indexed by that identity's ID, so that identity-controlled outputs can be
    found by identity; any other script by the Hash160 of the script.

    """
    identity			= decoder.identity_primary( script ) if decoder else None
    if identity is not None and identity.is_valid():
        return ScriptID( identity.name_id() )
    return ScriptID.from_script( script )


class KeyStore:
    """The key store interface used by signing and script evaluation.

    Every operation reports expected failures (missing keys, duplicate seeds, oversized scripts)
    via a False/None result.  The few operations composed of others are implemented here, without
    holding any lock; concrete stores implement the rest.

    """
    #
    # Transparent keys
    #
    def add_key_pubkey( self, key: Key, pubkey: PubKey ) -> bool:
        raise NotImplementedError()

    def add_key( self, key: Key ) -> bool:
        return self.add_key_pubkey( key, key.pubkey )

    def have_key( self, keyid: KeyID ) -> bool:
        raise NotImplementedError()

    def get_key( self, keyid: KeyID ) -> Optional[Key]:
        raise NotImplementedError()

    def get_keys( self ) -> Set[KeyID]:
        raise NotImplementedError()

    def get_pubkey( self, keyid: KeyID ) -> Optional[PubKey]:
        key			= self.get_key( keyid )
        return key.pubkey if key is not None else None

    #
    # Redeem scripts and watch-only scripts
    #
    def add_cscript( self, script: bytes ) -> bool:
        raise NotImplementedError()

    def have_cscript( self, scriptid: ScriptID ) -> bool:
        raise NotImplementedError()

    def get_cscript( self, scriptid: ScriptID ) -> Optional[bytes]:
        raise NotImplementedError()

    def add_watch_only( self, script: bytes ) -> bool:
        raise NotImplementedError()

    def remove_watch_only( self, script: bytes ) -> bool:
        raise NotImplementedError()

    def have_watch_only( self, script: Optional[bytes] = None ) -> bool:
        raise NotImplementedError()

    #
    # HD seed
    #
    def set_hd_seed( self, seed: HDSeed ) -> bool:
        raise NotImplementedError()

    def have_hd_seed( self ) -> bool:
        raise NotImplementedError()

    def get_hd_seed( self ) -> Optional[HDSeed]:
        raise NotImplementedError()

    #
    # Sapling
    #
    def add_sapling_spending_key( self, sk: SaplingExtendedSpendingKey, default_addr: SaplingPaymentAddress ) -> bool:
        raise NotImplementedError()

    def add_sapling_full_viewing_key( self, fvk: SaplingFullViewingKey, default_addr: SaplingPaymentAddress ) -> bool:
        raise NotImplementedError()

    def add_sapling_incoming_viewing_key( self, ivk: SaplingIncomingViewingKey, addr: SaplingPaymentAddress ) -> bool:
        raise NotImplementedError()

    def get_sapling_spending_key( self, fvk: SaplingFullViewingKey ) -> Optional[SaplingExtendedSpendingKey]:
        raise NotImplementedError()

    def get_sapling_full_viewing_key( self, ivk: SaplingIncomingViewingKey ) -> Optional[SaplingFullViewingKey]:
        raise NotImplementedError()

    def get_sapling_incoming_viewing_key( self, addr: SaplingPaymentAddress ) -> Optional[SaplingIncomingViewingKey]:
        raise NotImplementedError()

    def get_sapling_extended_spending_key( self, addr: SaplingPaymentAddress ) -> Optional[SaplingExtendedSpendingKey]:
        """Follow the chain addr --> ivk --> fvk --> spending key; None if any link is missing"""
        ivk			= self.get_sapling_incoming_viewing_key( addr )
        if ivk is None:
            return None
        fvk			= self.get_sapling_full_viewing_key( ivk )
        if fvk is None:
            return None
        return self.get_sapling_spending_key( fvk )

    #
    # Sprout
    #
    def add_sprout_spending_key( self, sk: SproutSpendingKey ) -> bool:
        raise NotImplementedError()

    def add_sprout_viewing_key( self, vk: SproutViewingKey ) -> bool:
        raise NotImplementedError()

    #
    # Identities
    #
    def add_identity( self, identity: Identity, txid: Optional[uint256], height: int ) -> bool:
        raise NotImplementedError()

    def update_identity( self, identity: Identity, txid: Optional[uint256], height: int ) -> bool:
        raise NotImplementedError()

    def remove_identity( self, idid: IdentityID ) -> bool:
        raise NotImplementedError()

    def get_identity_and_history( self, idid: IdentityID ) -> Optional[IdentityWithHistory]:
        raise NotImplementedError()

    def add_update_identity_and_history( self, history: IdentityWithHistory ) -> bool:
        raise NotImplementedError()

    def get_identity( self, idid: IdentityID, height: Optional[int] = None ) -> Optional[Identity]:
        history			= self.get_identity_and_history( idid )
        return history.identity_at( height ) if history is not None else None


class BasicKeyStore( KeyStore ):
    """An in-memory KeyStore, safe for use by multiple threads.

    State is guarded by two locks: the general lock (transparent keys, redeem scripts, watch-only
    scripts and identities), and the shielded lock (the HD seed and all shielded key material).
    No operation invokes another operation while holding a lock; composite operations (eg. adding
    a Sapling spending key) are atomic only step by step, so concurrent readers may observe a full
    viewing key before its spending key.

    All stored values are immutable, or are copied out; callers never hold live state.

    """
    def __init__(
        self,
        decoder: Optional[ScriptConditionDecoder] = None,
        max_script_size: int		= MAX_SCRIPT_ELEMENT_SIZE,
    ):
        self.decoder		= decoder or NullConditionDecoder()
        self.max_script_size	= max_script_size

        self._lock_general	= threading.Lock()
        self._keys: Dict[KeyID, Key] = {}
        self._scripts: Dict[ScriptID, bytes] = {}
        self._watch_only: Set[bytes] = set()
        self._identities: Dict[IdentityID, IdentityWithHistory] = {}

        self._lock_shielded	= threading.Lock()
        self._hd_seed		= HDSeed()
        self._sprout_spending_keys: Dict[SproutPaymentAddress, SproutSpendingKey] = {}
        self._sprout_viewing_keys: Dict[SproutPaymentAddress, SproutViewingKey] = {}
        self._note_decryptors: Dict[SproutPaymentAddress, NoteDecryption] = {}
        self._sapling_spending_keys: Dict[SaplingFullViewingKey, SaplingExtendedSpendingKey] = {}
        self._sapling_full_viewing_keys: Dict[SaplingIncomingViewingKey, SaplingFullViewingKey] = {}
        self._sapling_incoming_viewing_keys: Dict[SaplingPaymentAddress, SaplingIncomingViewingKey] = {}

    #
    # Transparent keys
    #
    def add_key_pubkey( self, key: Key, pubkey: PubKey ) -> bool:
        with self._lock_general:
            self._keys[pubkey.id] = key
        log.debug( f"Added key {pubkey.id.address()}" )
        return True

    def have_key( self, keyid: KeyID ) -> bool:
        with self._lock_general:
            return keyid in self._keys

    def get_key( self, keyid: KeyID ) -> Optional[Key]:
        with self._lock_general:
            return self._keys.get( keyid )

    def get_keys( self ) -> Set[KeyID]:
        with self._lock_general:
            return set( self._keys )

    #
    # Redeem scripts and watch-only scripts
    #
    def add_cscript( self, script: bytes ) -> bool:
        if len( script ) > self.max_script_size:
            log.error( f"add_cscript: redeemScripts > {self.max_script_size} bytes are invalid" )
            return False
        scriptid		= script_or_identity_id( script, self.decoder )
        with self._lock_general:
            self._scripts[scriptid] = bytes( script )
        log.debug( f"Added {len( script )}-byte script {scriptid}" )
        return True

    def have_cscript( self, scriptid: ScriptID ) -> bool:
        with self._lock_general:
            return scriptid in self._scripts

    def get_cscript( self, scriptid: ScriptID ) -> Optional[bytes]:
        with self._lock_general:
            return self._scripts.get( scriptid )

    def get_cscripts( self ) -> Set[ScriptID]:
        with self._lock_general:
            return set( self._scripts )

    def add_watch_only( self, script: bytes ) -> bool:
        with self._lock_general:
            self._watch_only.add( bytes( script ))
        return True

    def remove_watch_only( self, script: bytes ) -> bool:
        with self._lock_general:
            self._watch_only.discard( bytes( script ))
        return True

    def have_watch_only( self, script: Optional[bytes] = None ) -> bool:
        """Is the script watched, or (if no script supplied) are any scripts watched?"""
        with self._lock_general:
            if script is None:
                return bool( self._watch_only )
            return bytes( script ) in self._watch_only

    #
    # HD seed
    #
    def set_hd_seed( self, seed: HDSeed ) -> bool:
        with self._lock_shielded:
            if not self._hd_seed.is_null():
                # Don't allow an existing seed to be changed
                return False
            self._hd_seed	= seed
        if seed.is_null():
            log.debug( "Null HD seed ignored" )
        else:
            log.info( f"HD seed {seed.fingerprint()} set" )
        return True

    def have_hd_seed( self ) -> bool:
        with self._lock_shielded:
            return not self._hd_seed.is_null()

    def get_hd_seed( self ) -> Optional[HDSeed]:
        with self._lock_shielded:
            return None if self._hd_seed.is_null() else self._hd_seed

    #
    # Sapling
    #
    def add_sapling_spending_key( self, sk: SaplingExtendedSpendingKey, default_addr: SaplingPaymentAddress ) -> bool:
        fvk			= sk.expsk.full_viewing_key()
        if not self.add_sapling_full_viewing_key( fvk, default_addr ):
            return False
        with self._lock_shielded:
            self._sapling_spending_keys[fvk] = sk
        log.debug( f"Added Sapling spending key w/ default address {default_addr.pk_d.hex()}" )
        return True

    def add_sapling_full_viewing_key( self, fvk: SaplingFullViewingKey, default_addr: SaplingPaymentAddress ) -> bool:
        ivk			= fvk.in_viewing_key()
        with self._lock_shielded:
            self._sapling_full_viewing_keys[ivk] = fvk
            self._sapling_incoming_viewing_keys[default_addr] = ivk
        return True

    def add_sapling_incoming_viewing_key( self, ivk: SaplingIncomingViewingKey, addr: SaplingPaymentAddress ) -> bool:
        """Each address has only one ivk, so re-adding an address leaves the map unchanged"""
        with self._lock_shielded:
            self._sapling_incoming_viewing_keys[addr] = ivk
        return True

    def have_sapling_spending_key( self, fvk: SaplingFullViewingKey ) -> bool:
        with self._lock_shielded:
            return fvk in self._sapling_spending_keys

    def get_sapling_spending_key( self, fvk: SaplingFullViewingKey ) -> Optional[SaplingExtendedSpendingKey]:
        with self._lock_shielded:
            return self._sapling_spending_keys.get( fvk )

    def have_sapling_full_viewing_key( self, ivk: SaplingIncomingViewingKey ) -> bool:
        with self._lock_shielded:
            return ivk in self._sapling_full_viewing_keys

    def get_sapling_full_viewing_key( self, ivk: SaplingIncomingViewingKey ) -> Optional[SaplingFullViewingKey]:
        with self._lock_shielded:
            return self._sapling_full_viewing_keys.get( ivk )

    def have_sapling_incoming_viewing_key( self, addr: SaplingPaymentAddress ) -> bool:
        with self._lock_shielded:
            return addr in self._sapling_incoming_viewing_keys

    def get_sapling_incoming_viewing_key( self, addr: SaplingPaymentAddress ) -> Optional[SaplingIncomingViewingKey]:
        with self._lock_shielded:
            return self._sapling_incoming_viewing_keys.get( addr )

    def get_sapling_payment_addresses( self ) -> Set[SaplingPaymentAddress]:
        with self._lock_shielded:
            return set( self._sapling_incoming_viewing_keys )

    #
    # Sprout
    #
    def add_sprout_spending_key( self, sk: SproutSpendingKey ) -> bool:
        address			= sk.address()
        with self._lock_shielded:
            self._sprout_spending_keys[address] = sk
            self._note_decryptors.setdefault( address, NoteDecryption( sk.receiving_key() ))
        return True

    def have_sprout_spending_key( self, address: SproutPaymentAddress ) -> bool:
        with self._lock_shielded:
            return address in self._sprout_spending_keys

    def get_sprout_spending_key( self, address: SproutPaymentAddress ) -> Optional[SproutSpendingKey]:
        with self._lock_shielded:
            return self._sprout_spending_keys.get( address )

    def add_sprout_viewing_key( self, vk: SproutViewingKey ) -> bool:
        address			= vk.address()
        with self._lock_shielded:
            self._sprout_viewing_keys[address] = vk
            self._note_decryptors.setdefault( address, NoteDecryption( vk.sk_enc ))
        return True

    def remove_sprout_viewing_key( self, vk: SproutViewingKey ) -> bool:
        with self._lock_shielded:
            self._sprout_viewing_keys.pop( vk.address(), None )
        return True

    def have_sprout_viewing_key( self, address: SproutPaymentAddress ) -> bool:
        with self._lock_shielded:
            return address in self._sprout_viewing_keys

    def get_sprout_viewing_key( self, address: SproutPaymentAddress ) -> Optional[SproutViewingKey]:
        with self._lock_shielded:
            return self._sprout_viewing_keys.get( address )

    def get_note_decryptor( self, address: SproutPaymentAddress ) -> Optional[NoteDecryption]:
        with self._lock_shielded:
            return self._note_decryptors.get( address )

    def get_sprout_payment_addresses( self ) -> Set[SproutPaymentAddress]:
        with self._lock_shielded:
            return set( self._sprout_spending_keys ) | set( self._sprout_viewing_keys )

    #
    # Identities
    #
    def have_identity( self, idid: IdentityID ) -> bool:
        with self._lock_general:
            return idid in self._identities

    def add_identity( self, identity: Identity, txid: Optional[uint256], height: int ) -> bool:
        idid			= identity.name_id()
        with self._lock_general:
            if idid in self._identities:
                return False
            self._identities[idid] = IdentityWithHistory( ids=[(height, identity)] )
        log.debug( f"Added identity {identity.name!r} ({idid}) at height {height}" )
        return True

    def update_identity( self, identity: Identity, txid: Optional[uint256], height: int ) -> bool:
        idid			= identity.name_id()
        with self._lock_general:
            history		= self._identities.get( idid )
            if history is None:
                return False
            return history.update_identity( identity, txid, height )

    def remove_identity( self, idid: IdentityID ) -> bool:
        with self._lock_general:
            self._identities.pop( idid, None )
        return True

    def get_identity_and_history( self, idid: IdentityID ) -> Optional[IdentityWithHistory]:
        with self._lock_general:
            history		= self._identities.get( idid )
            return history.copy() if history is not None else None

    def add_update_identity_and_history( self, history: IdentityWithHistory ) -> bool:
        """Replace the whole history, filed under the ID of its *earliest* version.  If a name were
        to change between versions, this files the history under the stale (earlier) name's ID.

        """
        if history.is_valid() and len( history ):
            _,earliest		= history.earliest
            with self._lock_general:
                self._identities[earliest.name_id()] = history.copy()
        return True
