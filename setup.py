#!/usr/bin/python3

from setuptools import setup


with open("README.md", "r") as f:
    long_description = f.read()


setup(name='diskprov',
      version='0.4.0',
      description='Python module for provisioning installation target disks',
      long_description=long_description,
      long_description_content_type="text/markdown",
      author='diskprov developers',
      packages=['diskprov', 'diskprov.devicelibs'],
      install_requires=['pyudev'],
      extras_require={'tests': ['pytest']},
      python_requires='>=3.6',
      classifiers=["Development Status :: 4 - Beta",
                   "Intended Audience :: Developers",
                   "License :: OSI Approved :: GNU General Public License v2 or later (GPLv2+)",
                   "Programming Language :: Python :: 3",
                   "Operating System :: POSIX :: Linux"]
     )
