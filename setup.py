import os.path
import re
import setuptools


def find_version(filename):
    with open(filename) as f:
        text = f.read()
    match = re.search(r"^_version_str = '(.*)'$", text, re.MULTILINE)
    if not match:
        raise RuntimeError('cannot find version')
    return match.group(1)


tld = os.path.abspath(os.path.dirname(__file__))
version = find_version(os.path.join(tld, 'scriptx', '__init__.py'))


setuptools.setup(
    name='scriptx',
    version=version,
    packages=['scriptx'],
    python_requires='>=3.8',
    install_requires=['attrs'],
    extras_require={
        'test': ['pytest'],
    },
    long_description=(
        'Decoding of Bitcoin scripts into operations, and classification of output '
        'scripts into the standard types.'
    ),
)
