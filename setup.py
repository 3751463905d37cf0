#!/usr/bin/python

import codecs
import os
import re

from setuptools import setup


here = os.path.abspath(os.path.dirname(__file__))


def read(*parts):
    with codecs.open(os.path.join(here, *parts), 'r') as f:
        return f.read()


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                              version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


if __name__ == '__main__':
    setup(
        name="dsmltor",
        version=find_version("dsmltor", "__init__.py"),
        description="A Pure-Python library for DSMLv2 requests",
        long_description=read("README.rst"),
        license="MIT",
        author="The dsmltor developers",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Framework :: Twisted",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: MIT License",
            "Programming Language :: Python :: 3",
            "Topic :: Software Development :: Libraries :: Python Modules",
            "Topic :: System :: Systems Administration :: "
            "Authentication/Directory :: LDAP",
            "Topic :: Text Processing :: Markup :: XML",
        ],
        packages=[
            "dsmltor",
            "dsmltor._scripts",
            "dsmltor.protocols",
            "dsmltor.protocols.dsml",
            "dsmltor.protocols.ldap",
            "dsmltor.test",
        ],
        python_requires=">=3.8",
        install_requires=[
            "Twisted>=16.0",
            "zope.interface",
            "pyparsing>=3.0",
            "lxml>=3.5",
        ],
        extras_require={
            "test": [
                "Twisted>=16.0",
            ],
        },
        entry_points={
            "console_scripts": [
                "dsmlcat = dsmltor._scripts.dsmlcat:console_script",
            ],
        },
    )
