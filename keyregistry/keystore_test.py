import logging
import threading

from .defaults		import MAX_SCRIPT_ELEMENT_SIZE
from .hashing		import uint256
from .identity		import Identity, IdentityID, IdentityWithHistory, name_id
from .keystore		import BasicKeyStore, KeyStore, NullConditionDecoder, ScriptConditionDecoder, script_or_identity_id
from .shielded		import NoteDecryption, SaplingExtendedSpendingKey, SproutSpendingKey
from .types		import HDSeed, Key, KeyID, ScriptID

KEY_ONE				= "00" * 31 + "01"
PRIMARY				= ( KeyID( bytes( range( 20 ))), )
TXID				= uint256( bytes( [0xaa] * 32 ))

# A toy identity-primary condition:  OP_CHECKCRYPTOCONDITION-like marker, followed by the name
CONDITION_MARKER		= b'\xcc'


class MarkerConditionDecoder( ScriptConditionDecoder ):
    def identity_primary( self, script ):
        if not script.startswith( CONDITION_MARKER ):
            return None
        return Identity( script[1:].decode( 'UTF-8' ), primary_addresses=PRIMARY )


def test_transparent_keys():
    store			= BasicKeyStore()
    key				= Key( KEY_ONE )
    assert not store.have_key( key.id )
    assert store.get_key( key.id ) is None
    assert store.get_pubkey( key.id ) is None

    assert store.add_key( key )
    assert store.have_key( key.id )
    assert store.get_key( key.id ) == key
    assert store.get_pubkey( key.id ) == key.pubkey
    assert store.get_keys() == { key.id }

    # The returned set is a copy
    store.get_keys().clear()
    assert store.have_key( key.id )


def test_cscript( caplog ):
    store			= BasicKeyStore()
    script			= b'\x51' * 10
    assert store.add_cscript( script )
    assert store.have_cscript( ScriptID.from_script( script ))
    assert store.get_cscript( ScriptID.from_script( script )) == script

    oversized			= b'\x00' * ( MAX_SCRIPT_ELEMENT_SIZE + 1 )
    with caplog.at_level( logging.ERROR ):
        assert not store.add_cscript( oversized )
    assert "redeemScripts" in caplog.text
    assert store.get_cscripts() == { ScriptID.from_script( script ) }

    # Exactly the maximum is permitted
    assert store.add_cscript( b'\x00' * MAX_SCRIPT_ELEMENT_SIZE )
    assert len( store.get_cscripts() ) == 2


def test_cscript_identity():
    store			= BasicKeyStore( decoder=MarkerConditionDecoder() )
    script			= CONDITION_MARKER + b"Alice"
    alice			= Identity( "Alice", primary_addresses=PRIMARY )

    assert script_or_identity_id( script, store.decoder ) == ScriptID( alice.name_id() )
    assert store.add_cscript( script )
    assert store.have_cscript( ScriptID( name_id( "Alice" )))
    assert not store.have_cscript( ScriptID.from_script( script ))
    assert store.get_cscript( ScriptID( name_id( "alice" ))) == script

    # An invalid embedded identity (empty name) falls back to the script's hash
    empty			= CONDITION_MARKER
    assert script_or_identity_id( empty, store.decoder ) == ScriptID.from_script( empty )

    # Without a decoder, every script is indexed by its hash
    assert script_or_identity_id( script ) == ScriptID.from_script( script )
    assert script_or_identity_id( script, NullConditionDecoder() ) == ScriptID.from_script( script )


def test_watch_only():
    store			= BasicKeyStore()
    script			= b'\x76\xa9\x14' + bytes( 20 ) + b'\x88\xac'
    assert not store.have_watch_only()
    assert store.add_watch_only( script )
    assert store.have_watch_only()
    assert store.have_watch_only( script )
    assert not store.have_watch_only( script[:-1] )
    assert store.remove_watch_only( script )
    assert store.remove_watch_only( script )			# idempotent
    assert not store.have_watch_only()


def test_hd_seed():
    store			= BasicKeyStore()
    seed1			= HDSeed( bytes( range( 32 )))
    seed2			= HDSeed( bytes( range( 1, 33 )))
    assert not store.have_hd_seed()
    assert store.get_hd_seed() is None

    assert store.set_hd_seed( seed1 )
    assert not store.set_hd_seed( seed2 )
    assert store.have_hd_seed()
    assert store.get_hd_seed() == seed1


def test_hd_seed_null( caplog ):
    store			= BasicKeyStore()
    with caplog.at_level( logging.DEBUG ):
        assert store.set_hd_seed( HDSeed() )
    assert "Null HD seed ignored" in caplog.text
    assert not any( r.getMessage().endswith( " set" ) for r in caplog.records )
    assert not store.have_hd_seed()

    # A real seed may still be set afterwards
    seed			= HDSeed( bytes( range( 32 )))
    with caplog.at_level( logging.INFO ):
        assert store.set_hd_seed( seed )
    assert f"HD seed {seed.fingerprint()} set" in caplog.text
    assert store.get_hd_seed() == seed


def test_sapling_spending_key():
    store			= BasicKeyStore()
    sk				= SaplingExtendedSpendingKey.master( HDSeed( bytes( range( 32 ))))
    addr			= sk.default_address()
    fvk				= sk.full_viewing_key()
    ivk				= fvk.in_viewing_key()

    assert store.get_sapling_extended_spending_key( addr ) is None
    assert store.add_sapling_spending_key( sk, addr )
    assert store.get_sapling_extended_spending_key( addr ) == sk

    assert store.have_sapling_spending_key( fvk )
    assert store.have_sapling_full_viewing_key( ivk )
    assert store.have_sapling_incoming_viewing_key( addr )
    assert store.get_sapling_full_viewing_key( ivk ) == fvk
    assert store.get_sapling_incoming_viewing_key( addr ) == ivk
    assert store.get_sapling_payment_addresses() == { addr }

    # Another of the key's addresses may be added, and also leads to the spending key
    addr1			= ivk.address( sk.diversifier( 1 ))
    assert store.add_sapling_incoming_viewing_key( ivk, addr1 )
    assert store.get_sapling_extended_spending_key( addr1 ) == sk


def test_sapling_viewing_only():
    """A viewing key alone provides the address --> ivk --> fvk links, but no spending key"""
    store			= BasicKeyStore()
    sk				= SaplingExtendedSpendingKey.master( HDSeed( bytes( 32 )))
    addr			= sk.default_address()
    assert store.add_sapling_full_viewing_key( sk.full_viewing_key(), addr )
    assert store.get_sapling_incoming_viewing_key( addr ) == sk.full_viewing_key().in_viewing_key()
    assert not store.have_sapling_spending_key( sk.full_viewing_key() )
    assert store.get_sapling_extended_spending_key( addr ) is None


def test_sprout_keys():
    store			= BasicKeyStore()
    sk				= SproutSpendingKey( bytes( 31 ) + b'\x01' )
    addr			= sk.address()
    assert store.get_note_decryptor( addr ) is None

    assert store.add_sprout_spending_key( sk )
    assert store.have_sprout_spending_key( addr )
    assert store.get_sprout_spending_key( addr ) == sk
    assert store.get_note_decryptor( addr ) == NoteDecryption( sk.receiving_key() )

    vk				= SproutSpendingKey( bytes( 31 ) + b'\x02' ).viewing_key()
    assert not store.have_sprout_viewing_key( vk.address() )
    assert store.add_sprout_viewing_key( vk )
    assert store.have_sprout_viewing_key( vk.address() )
    assert store.get_sprout_viewing_key( vk.address() ) == vk
    assert store.get_note_decryptor( vk.address() ) == NoteDecryption( vk.sk_enc )
    assert store.get_sprout_payment_addresses() == { addr, vk.address() }

    assert store.remove_sprout_viewing_key( vk )
    assert not store.have_sprout_viewing_key( vk.address() )
    assert store.get_sprout_viewing_key( vk.address() ) is None


def test_identities():
    store			= BasicKeyStore()
    alice_a			= Identity( "Alice", primary_addresses=PRIMARY )
    alice_b			= Identity( "Alice", primary_addresses=PRIMARY, flags=1 )
    alice_c			= Identity( "Alice", primary_addresses=PRIMARY, flags=2 )
    idid			= alice_a.name_id()

    assert not store.update_identity( alice_a, TXID, 100 )	# Not yet added
    assert store.add_identity( alice_a, TXID, 100 )
    assert not store.add_identity( alice_b, TXID, 105 )		# Already added
    assert store.have_identity( idid )

    assert store.update_identity( alice_b, TXID, 105 )
    history			= store.get_identity_and_history( idid )
    assert history.ids == ( (100, alice_a), (105, alice_b) )

    assert store.update_identity( alice_c, TXID, 110 )
    assert store.get_identity_and_history( idid ).ids == ( (105, alice_b), (110, alice_c) )
    assert not store.update_identity( alice_a, TXID, 103 )
    assert store.get_identity_and_history( idid ).heights == ( 105, 110 )

    assert store.get_identity( idid ) == alice_c
    assert store.get_identity( idid, 107 ) == alice_b
    assert store.get_identity( IdentityID() ) is None

    # Returned histories are copies
    history.update_identity( alice_c, TXID, 200 )
    assert store.get_identity_and_history( idid ).heights == ( 105, 110 )

    assert store.remove_identity( idid )
    assert store.remove_identity( idid )
    assert not store.have_identity( idid )
    assert store.get_identity_and_history( idid ) is None


def test_add_update_identity_and_history():
    store			= BasicKeyStore()
    old				= Identity( "Alice", primary_addresses=PRIMARY )
    renamed			= Identity( "Alicia", primary_addresses=PRIMARY )
    history			= IdentityWithHistory( ids=[ (100, old), (105, renamed) ] )

    # Filed under the earliest version's ID, even though the latest version's name differs
    assert store.add_update_identity_and_history( history )
    assert store.get_identity_and_history( old.name_id() ) == history
    assert not store.have_identity( renamed.name_id() )

    # Wholesale replacement
    replacement			= IdentityWithHistory( ids=[ (120, old) ] )
    assert store.add_update_identity_and_history( replacement )
    assert store.get_identity_and_history( old.name_id() ).heights == ( 120, )

    # Empty or invalid histories are ignored, but still "succeed"
    assert store.add_update_identity_and_history( IdentityWithHistory() )
    assert store.add_update_identity_and_history( IdentityWithHistory(
        version=IdentityWithHistory.VERSION_INVALID, ids=[ (130, old) ] ))
    assert store.get_identity_and_history( old.name_id() ).heights == ( 120, )


def test_keystore_interface():
    """The composite operations are available to any KeyStore implementation"""
    class OneKey( KeyStore ):
        def get_key( self, keyid ):
            key			= Key( KEY_ONE )
            return key if keyid == key.id else None

    store			= OneKey()
    assert store.get_pubkey( Key( KEY_ONE ).id ) == Key( KEY_ONE ).pubkey
    assert store.get_pubkey( KeyID() ) is None


def test_concurrent_access():
    store			= BasicKeyStore()
    seeds			= [ HDSeed( bytes( [i] * 32 )) for i in range( 1, 9 ) ]
    results			= []

    def worker( i ):
        key			= Key( bytes( 31 ) + bytes( [i + 1] ))
        store.add_key( key )
        store.add_cscript( bytes( [i] ) * 20 )
        results.append( store.set_hd_seed( seeds[i] ))
        sk			= SaplingExtendedSpendingKey.master( seeds[i] )
        store.add_sapling_spending_key( sk, sk.default_address() )

    threads			= [ threading.Thread( target=worker, args=(i,) ) for i in range( len( seeds )) ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count( True ) == 1
    assert store.get_hd_seed() == seeds[results.index( True )]
    assert len( store.get_keys() ) == len( seeds )
    assert len( store.get_cscripts() ) == len( seeds )
    assert len( store.get_sapling_payment_addresses() ) == len( seeds )
