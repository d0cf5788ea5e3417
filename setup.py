import os

from setuptools import setup

#
# All platforms
#
HERE				= os.path.dirname( os.path.abspath( __file__ ))

install_requires		= open( os.path.join( HERE, "requirements.txt" )).readlines()
tests_require			= open( os.path.join( HERE, "requirements-tests.txt" )).readlines()

extras_require			= {}

# Since setuptools is retiring tests_require, add it as another option
extras_require['tests']		= tests_require

# Must work if setup.py is run in the source distribution context, or from
# within the packaged distribution directory.
__version__			= None
try:
    exec( open( os.path.join( HERE, 'keyregistry', 'version.py' ), 'r' ).read() )
except FileNotFoundError:
    exec( open( 'version.py', 'r' ).read() )

console_scripts			= [
    'keyregistry-cli	= keyregistry.cli:cli',
]

entry_points			= {
    'console_scripts': 		console_scripts,
}

package_dir			= {
    "keyregistry":		"./keyregistry",
    "keyregistry.cli":		"./keyregistry/cli",
}

long_description_content_type	= 'text/markdown'
long_description		= """\
An in-memory registry of a cryptocurrency wallet node's key material: transparent secp256k1 keys,
redeem scripts, watch-only scripts, a write-once HD seed, Sprout and Sapling shielded keys, and the
recent version history of on-chain identities.

Identity IDs are derived from hierarchical names (eg. "Alice.Bob@") by folding each containing
label into a parent ID:

    $ keyregistry-cli -v nameid Alice.Bob
    {
        "id": "...",
        "name": "Alice",
        "parent": "..."
    }

The registry is safe for concurrent use by signing, chain-connection and RPC threads.
"""

classifiers			= [
    "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
    "License :: Other/Proprietary License",
    "Programming Language :: Python :: 3",
    "Development Status :: 5 - Production/Stable",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Environment :: Console",
    "Topic :: Security :: Cryptography",
    "Topic :: Office/Business :: Financial",
]

setup(
    name			= "keyregistry",
    version			= __version__,
    install_requires		= install_requires,
    extras_require		= extras_require,
    packages			= list( package_dir.keys() ),
    package_dir			= package_dir,
    include_package_data	= True,
    zip_safe			= True,
    entry_points		= entry_points,
    author			= "Perry Kundert",
    author_email		= "perry@dominionrnd.com",
    description			= "Wallet key material, HD seed and identity history registry",
    long_description		= long_description,
    long_description_content_type = long_description_content_type,
    license			= "Dual License; GPLv3 and Proprietary",
    keywords			= "Bitcoin cryptocurrency wallet keystore identity HD seed Sapling Sprout",
    classifiers			= classifiers,
    python_requires		= ">=3.9",
)
