# randfeat/setup.py
#
# Copyright (c) 2023, Giacomo Petrillo
#
# This file is part of randfeat.
#
# randfeat is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# randfeat is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with randfeat.  If not, see <http://www.gnu.org/licenses/>.

import re

import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

# read the version without importing the package, which needs jax
with open("randfeat/__init__.py", "r") as fh:
    version = re.search(r"^__version__ = '(.+)'$", fh.read(), re.MULTILINE).group(1)

setuptools.setup(
    name="randfeat",
    version=version,
    author="Giacomo Petrillo",
    author_email="info@giacomopetrillo.com",
    description="Approximate kernel regression with random features",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=['randfeat'],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Development Status :: 3 - Alpha",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.9',
    install_requires=[
        'numpy>=1.20',
        'scipy>=1.5',
        'jax>=0.4.1',
        'jaxlib>=0.4.1',
        'gvar>=1.10',
    ],
    extras_require={
        'tests': ['pytest'],
    },
)
