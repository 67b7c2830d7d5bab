from setuptools import setup

torch = ['torch>=1.0.0']
all = torch
test = ['pytest>=6.0'] + torch

extras_require = {
    'all': all,
    'torch': torch,
    'test': test
}

setup(
    name='pyrawarray',
    version='0.1.0',
    packages=['rawarray', 'rawarray._hl', 'rawarray.utils'],
    license='GNU General Public License v3 (GPLv3)',
    description='Simple single array file format',
    install_requires=[
        'ml_dtypes>=0.2.0',
        'numpy>=1.17.0'
    ],
    extras_require=extras_require
)
