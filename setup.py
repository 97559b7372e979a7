""" installation script of pomdp_protocols """

from setuptools import find_packages, setup

requirements = [
    "numpy",
    "typing_extensions",
]

setup(
    name='pomdp_protocols',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    test_suite='tests',
    install_requires=requirements,
    extras_require={
        'test': ['pytest'],
    },
)
