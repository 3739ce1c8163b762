#!/usr/bin/env python

import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(name='ndsplit',
      version='0.1.0',
      description='Splittable parallel iterators over numpy arrays',
      long_description=long_description,
      long_description_content_type="text/markdown",
      packages=setuptools.find_packages(include=['ndsplit', 'ndsplit.*']),
      install_requires=[
          'numpy',
          'sharedmem',
          ],
      extras_require={
          'test': ['pytest'],
          },
      classifiers=[
          "Programming Language :: Python :: 3",
          "License :: OSI Approved :: BSD License",
          "Operating System :: POSIX",
          ],
      python_requires='>=3.6',
      )
