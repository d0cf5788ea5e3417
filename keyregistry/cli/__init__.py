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

from __future__          import annotations

import click
import json
import logging

from ..			import HDSeed, clean_name, name_id, parse_subnames
from ..util		import log_cfg, log_level, input_secure

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
Provide basic CLI access to the keyregistry identity name hashing and HD seed derivation.

Output generally defaults to JSON.  Use -v for more details, and --no-json to emit standard text output instead.
"""

log				= logging.getLogger( __package__ )


def emit( record, order ):
    """Emit the record as JSON, or as text in the given key order (all keys if verbose)"""
    if cli.json:
        click.echo( json.dumps( record if cli.verbosity > 0 else { k: record[k] for k in order[:1] }, indent=4 ))
    elif cli.verbosity > 0:
        for k in order:
            click.echo( f"{k:10} {record[k]}" )
    else:
        click.echo( f"{record[order[0]]}" )


@click.group()
@click.option('-v', '--verbose', count=True)
@click.option('-q', '--quiet', count=True)
@click.option( '--json/--no-json', default=True, help="Output JSON (the default)")
def cli( verbose, quiet, json ):
    cli.verbosity		= verbose - quiet
    log_cfg['level']		= log_level( cli.verbosity )
    logging.basicConfig( **log_cfg )
    if verbose or quiet:
        logging.getLogger().setLevel( log_cfg['level'] )
    cli.json			= json
cli.verbosity			= 0  # noqa: E305
cli.json			= False


@click.command()
@click.argument( "name" )
@click.option( "--parent", default=None, help="The parent identity ID, as hex (default: none)" )
def nameid( name, parent ):
    """Compute the identity ID of a (perhaps multi-part) NAME"""
    try:
        idid			= name_id( name, parent )
        leaf,container		= clean_name( name, parent )
    except ValueError as exc:
        raise click.BadParameter( str( exc ), param_hint="--parent" )
    log.info( f"{name!r} w/ parent {parent or 'none'}: {idid}" )
    emit( dict( id=str( idid ), name=leaf, parent=str( container )), ( 'id', 'name', 'parent' ))


@click.command()
@click.argument( "name" )
def subnames( name ):
    """List the sanitized labels of NAME, leaf first"""
    labels			= list( parse_subnames( name ))
    if cli.json:
        click.echo( json.dumps( labels ))
    else:
        for label in labels:
            click.echo( label )


@click.command()
@click.option( "--seed", required=True, help="A hex HD seed; '-' reads it from stdin" )
@click.option( "--path", help="The BIP-32 derivation path, or a partial path eg. '../1/3' (default: m/44'/0'/0'/0/0)" )
def derive( seed, path ):
    """Derive a transparent key's ID, public key and address from an HD seed"""
    if seed == '-':
        seed			= input_secure( 'HD seed hex: ', secret=True )
    else:
        log.warning( "It is recommended to not use '--seed <hex>'; specify '-' to read from input" )
    try:
        key			= HDSeed( seed.strip() ).derive_key( path )
    except ValueError as exc:
        raise click.BadParameter( str( exc ))
    emit( dict( address=key.id.address(), id=key.id.hex(), pubkey=key.pubkey.hex() ), ( 'address', 'id', 'pubkey' ))


cli.add_command( nameid )
cli.add_command( subnames )
cli.add_command( derive )
