import pytest

from .types		import HDSeed, Key, KeyID, PubKey, ScriptID, path_edit
from .hashing		import hash160

# The secp256k1 generator; the public key of the private key 1
KEY_ONE				= "00" * 31 + "01"
PUBKEY_ONE			= "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"

# BIP-32 Test Vector 1
SEED_BIP32			= "000102030405060708090a0b0c0d0e0f"
SEED_BIP32_MASTER		= "e8f32e723decf4051aefac8e2c93c9c5b214313817cdb01a1494b917c8436b35"


def test_key_smoke():
    key				= Key( KEY_ONE )
    assert key.pubkey == PubKey( PUBKEY_ONE )
    assert key.pubkey.compressed
    assert key.id == KeyID( bytes.fromhex( '751e76e8199196d454941c45d1b3a323f1433bd6' ))
    assert key.id.address() == '1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH'
    assert key.wif() == 'KwDiBf89QgGbjEhKnhXJuH7LrciVrZi3qYjgd9M7rFU73sVHnoWn'
    assert Key.from_wif( key.wif() ) == key
    assert hash( Key.from_wif( key.wif() )) == hash( key )

    uncompressed		= Key( KEY_ONE, compressed=False )
    assert uncompressed != key
    assert len( uncompressed.pubkey ) == 65 and uncompressed.pubkey[0] == 4
    assert uncompressed.pubkey[1:33] == key.pubkey[1:]
    assert Key.from_wif( uncompressed.wif() ) == uncompressed


@pytest.mark.parametrize( "secret", [
    "00" * 32,
    "ff" * 32,
    "01" * 31,
] )
def test_key_invalid( secret ):
    with pytest.raises( ValueError ):
        Key( secret )


def test_pubkey_invalid():
    with pytest.raises( ValueError ):
        PubKey( "05" + PUBKEY_ONE[2:] )
    with pytest.raises( ValueError ):
        PubKey( PUBKEY_ONE[:-2] )


def test_script_id():
    script			= bytes.fromhex( "5121" + PUBKEY_ONE + "51ae" )
    assert ScriptID.from_script( script ) == hash160( script )
    assert ScriptID.from_script( script ).address().startswith( '3' )


def test_path_edit():
    assert path_edit( "m/44'/0'/0'/0/0", "../1/3" ) == "m/44'/0'/0'/1/3"
    assert path_edit( "m/44'/0'/0'/0/0", "...7" ) == "m/44'/0'/0'/0/7"
    assert path_edit( "m/44'/0'/0'/0/0", "m/0" ) == "m/0"
    with pytest.raises( ValueError ):
        path_edit( "m/0", "../1/2/3" )


def test_hd_seed():
    null			= HDSeed()
    assert null.is_null()
    with pytest.raises( ValueError ):
        null.derive_key()

    seed			= HDSeed( SEED_BIP32 )
    assert not seed.is_null()
    assert seed.raw == bytes.fromhex( SEED_BIP32 )
    assert seed == HDSeed( bytes.fromhex( SEED_BIP32 ))
    assert seed.fingerprint() != HDSeed( "ff" * 16 ).fingerprint()

    assert seed.derive_key( "m/" ).secret.hex() == SEED_BIP32_MASTER
    assert seed.derive_key() == seed.derive_key( "m/44'/0'/0'/0/0" )
    assert seed.derive_key( "../1" ) == seed.derive_key( "m/44'/0'/0'/0/1" )
    assert seed.derive_key( "../1" ) != seed.derive_key()

    with pytest.raises( ValueError ):
        HDSeed( "00" * 8 )			# Too short
    with pytest.raises( ValueError ):
        HDSeed( "00" * 65 )			# Too long
    assert len( HDSeed.random().raw ) == 32
