#!/usr/bin/env python

import os
from setuptools import setup

setup(name='webhdfs3',
      version='0.1.0',
      description='Python client for the WebHDFS REST protocol',
      license='BSD',
      keywords='hdfs webhdfs',
      packages=['webhdfs3'],
      install_requires=['requests'],
      extras_require={'test': ['pytest', 'responses']},
      entry_points={'console_scripts': ['webhdfs3 = webhdfs3.cli:main']},
      python_requires='>=3.6',
      long_description=(open('README.rst').read() if os.path.exists('README.rst')
                        else ''),
      zip_safe=False)
